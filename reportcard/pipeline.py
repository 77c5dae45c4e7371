from __future__ import annotations

import csv
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from bs4 import Tag

from reportcard.ade_site import DEFAULT_SCHOOL_YEAR, ReportCardClient
from reportcard.extraction import (
    ACHIEVEMENT,
    NAEP,
    SPECIAL,
    VARIANTS,
    RecordBatch,
    TableExtractionError,
    extract_batch,
    get_layout,
)
from reportcard.overview import parse_overview

OVERVIEW = "school"

# variant -> CSV file stem
STREAM_FILES: Dict[str, str] = {
    OVERVIEW: "school",
    ACHIEVEMENT: "achievement",
    SPECIAL: "special",
    NAEP: "NAEP",
}


def _value_columns(variant: str) -> List[str]:
    return [f"value_{i}" for i in range(1, get_layout(variant).n_values + 1)]


STREAM_HEADERS: Dict[str, List[str]] = {
    OVERVIEW: ["school", "address", "attribute", "value"],
    **{
        v: ["school", "lea", "metric", "category", "year"] + _value_columns(v)
        for v in VARIANTS
    },
}


def default_results_dir() -> Path:
    env = os.getenv("REPORTCARD_RESULTS_DIR")
    if env:
        return Path(env)
    return Path.home() / "results"


def page_variant(index: int) -> Optional[str]:
    """Which extractor reads page `index` of a report card (None = not extracted)."""
    if index == 0:
        return OVERVIEW
    if 0 < index < 14:
        return ACHIEVEMENT
    if index in (15, 16):
        return NAEP
    if index > 16:
        return SPECIAL
    return None


def report_pages(doc: Tag) -> List[Tag]:
    return doc.find_all(class_="page-wrapper")


def school_name(doc: Tag) -> str:
    title = doc.select_one("head > title")
    if title is None:
        raise TableExtractionError("Report card has no <title>")
    return title.get_text().strip()


def prepend_school(name: str, lea: str, records: Iterable[List[str]]) -> List[List[str]]:
    return [[name, lea] + r for r in records]


def extract_report(lea: str, doc: Tag) -> List[RecordBatch]:
    """
    Extract every page of one report card into variant-tagged batches.

    Overview records carry the school name and address themselves; all other
    records get [school name, lea] prepended. Any table failure propagates so
    the caller can discard the whole report.
    """
    name = school_name(doc)
    batches: List[RecordBatch] = []
    for i, page in enumerate(report_pages(doc)):
        variant = page_variant(i)
        if variant is None:
            continue
        if variant == OVERVIEW:
            batches.append(RecordBatch(variant=OVERVIEW, records=parse_overview(page)))
            continue
        try:
            batch = extract_batch(page, variant)
        except TableExtractionError as e:
            raise TableExtractionError(f"LEA {lea} page {i} ({variant}): {e}") from e
        batch.records = prepend_school(name, lea, batch.records)
        batches.append(batch)
    return batches


def write_batches(batches: Iterable[RecordBatch], results_dir: Path) -> Dict[str, int]:
    """Append each batch to its stream CSV; returns rows written per stream."""
    results_dir.mkdir(parents=True, exist_ok=True)
    written: Dict[str, int] = {}
    for batch in batches:
        path = results_dir / f"{STREAM_FILES[batch.variant]}.csv"
        is_new = not path.exists()
        with path.open("a", encoding="utf-8", newline="") as f:
            w = csv.writer(f)
            if is_new:
                w.writerow(STREAM_HEADERS[batch.variant])
            w.writerows(batch.records)
        written[batch.variant] = written.get(batch.variant, 0) + len(batch.records)
    return written


def run_pipeline(
    *,
    leas: Optional[List[str]] = None,
    school_year: str = DEFAULT_SCHOOL_YEAR,
    cooldown_ms: int = 15000,
    out_dir: Optional[Path] = None,
    xlsx: Optional[Path] = None,
    client: Optional[ReportCardClient] = None,
) -> Dict[str, Any]:
    out_dir = (out_dir or default_results_dir()).expanduser().resolve()
    client = client or ReportCardClient(min_interval_s=cooldown_ms / 1000.0)

    report: Dict[str, Any] = {"out_dir": str(out_dir), "ok": True, "leas": {}}

    if leas is None:
        print("Fetching LEA codes...", flush=True)
        try:
            leas = client.fetch_lea_codes()
        except Exception as e:
            print(f"Could not fetch LEA codes: {type(e).__name__}: {e}", flush=True)
            report["ok"] = False
            report["error"] = f"{type(e).__name__}: {e}"
            return report
        print(f"Found {len(leas)} LEA codes", flush=True)

    total = len(leas)
    for idx, lea in enumerate(leas, 1):
        print(f"[{idx}/{total}] fetching {lea}...", flush=True)
        try:
            doc = client.fetch_report_card(lea, school_year)
            batches = extract_report(lea, doc)
            written = write_batches(batches, out_dir)
            report["leas"][lea] = {"ok": True, "rows": written}
            summary = ", ".join(f"{k}={v}" for k, v in sorted(written.items()))
            print(f"[{idx}/{total}] ✓ {lea}: {summary or 'no records'}", flush=True)
        except Exception as e:
            print(f"[{idx}/{total}] ✗ Could not fetch & extract {lea}: {type(e).__name__}: {e}", flush=True)
            report["leas"][lea] = {"ok": False, "error": f"{type(e).__name__}: {e}"}

    failed = sorted(k for k, v in report["leas"].items() if not v["ok"])
    report["ok"] = not failed

    if xlsx is not None:
        from reportcard.export import export_results_workbook

        path = export_results_workbook(out_dir, xlsx)
        report["xlsx"] = str(path)
        print(f"✓ Workbook: {path}", flush=True)

    print(f"\n{'='*60}", flush=True)
    print("SUMMARY", flush=True)
    print(f"{'='*60}", flush=True)
    print(f"Extracted: {total - len(failed)}/{total}", flush=True)
    for lea in failed:
        print(f"  ✗ {lea}: {report['leas'][lea]['error']}", flush=True)

    return report


def _parse_args(argv: Optional[List[str]] = None) -> Dict[str, Any]:
    import argparse

    p = argparse.ArgumentParser(description="Scrape Arkansas school report cards into CSV streams.")
    p.add_argument("--leas", default="", help="Comma-separated LEA codes (default: all listed on the site)")
    p.add_argument("--school-year", default=DEFAULT_SCHOOL_YEAR)
    p.add_argument("--cooldown-ms", type=int, default=15000, help="Minimum gap between report-card requests")
    p.add_argument("--out-dir", default=None, help="Output directory (default: $REPORTCARD_RESULTS_DIR or ~/results)")
    p.add_argument("--xlsx", default=None, help="Also export all streams to this .xlsx workbook")
    args = p.parse_args(argv)
    leas = [c.strip() for c in args.leas.split(",") if c.strip()]
    return {
        "leas": leas or None,
        "school_year": str(args.school_year),
        "cooldown_ms": int(args.cooldown_ms),
        "out_dir": Path(args.out_dir) if args.out_dir else None,
        "xlsx": Path(args.xlsx) if args.xlsx else None,
    }


def main(argv: Optional[List[str]] = None) -> int:
    report = run_pipeline(**_parse_args(argv))
    return 0 if report["ok"] else 1


if __name__ == "__main__":
    raise SystemExit(main())
