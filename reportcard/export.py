"""Collect the per-stream CSVs into one Excel workbook, one sheet per stream."""
from __future__ import annotations

from pathlib import Path

import pandas as pd
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from reportcard.pipeline import STREAM_FILES

HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
HEADER_FONT = Font(bold=True, color="FFFFFF")
MAX_COLUMN_WIDTH = 60


def export_results_workbook(results_dir: Path, out_path: Path) -> Path:
    """Write every existing stream CSV under results_dir to out_path (.xlsx)."""
    results_dir = results_dir.expanduser().resolve()
    out_path = out_path.expanduser().resolve()

    frames = {}
    for stem in STREAM_FILES.values():
        csv_path = results_dir / f"{stem}.csv"
        if csv_path.exists():
            frames[stem] = pd.read_csv(csv_path, dtype=str, keep_default_na=False)
    if not frames:
        raise FileNotFoundError(f"No result CSVs found in: {results_dir}")

    out_path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(out_path, engine="openpyxl") as writer:
        for sheet, df in frames.items():
            df.to_excel(writer, sheet_name=sheet, index=False)
            worksheet = writer.sheets[sheet]

            for idx, col in enumerate(df.columns, 1):
                longest = df[col].astype(str).map(len).max() if len(df) else 0
                width = min(max(longest, len(col)) + 2, MAX_COLUMN_WIDTH)
                worksheet.column_dimensions[get_column_letter(idx)].width = width

            for cell in worksheet[1]:
                cell.fill = HEADER_FILL
                cell.font = HEADER_FONT
                cell.alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)

    return out_path
