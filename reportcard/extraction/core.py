"""Variant extractors: one report-card page in, flat string records out."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from bs4 import Tag

from reportcard.extraction.layouts import (
    ACHIEVEMENT,
    DEEP,
    EXACT,
    NAEP,
    PAD,
    SECTION_TABLE_ROWS,
    SPECIAL,
    STRICT,
    TableLayout,
    get_layout,
    slice_row,
)
from reportcard.extraction.rows import (
    RowWidthError,
    YearLabelError,
    extract_year_labels,
    fold_rows,
    normalize_row,
)


@dataclass
class RecordBatch:
    """Records extracted from one page, tagged with the stream they belong to."""
    variant: str
    records: List[List[str]] = field(default_factory=list)


def _table_rows(page: Tag, layout: TableLayout) -> List[Tag]:
    if layout.row_source == DEEP:
        return page.find_all("tr")[layout.row_skip:]
    return page.select(SECTION_TABLE_ROWS)


def _fit_row(layout: TableLayout, cells: List[str], category: str) -> Optional[List[str]]:
    """Cells ready for slicing, or None when the layout drops the row."""
    if layout.width_policy == PAD:
        return normalize_row(cells, layout.min_width)
    if layout.width_policy == EXACT:
        return cells if len(cells) == layout.min_width else None
    if layout.width_policy == STRICT and len(cells) < layout.min_width:
        raise RowWidthError(
            f"{layout.variant} row {category!r} has {len(cells)} cells, "
            f"layout needs at least {layout.min_width}"
        )
    return cells


def extract_table(page: Tag, variant: str) -> List[List[str]]:
    """
    Extract every data row of a report-card page with the given variant's layout.

    Year labels are read once before any row. Returns [] when the table has no
    data rows, even if the header is short; raises TableExtractionError when
    the header cannot be read, a data row needs a year the header lacks, or a
    row violates a strict layout.
    """
    layout = get_layout(variant)
    years = extract_year_labels(page)

    def emit(metric: str, category: str, cells: List[str]) -> List[List[str]]:
        fitted = _fit_row(layout, cells, category)
        if fitted is None:
            return []
        if len(years) < layout.n_years:
            raise YearLabelError(
                f"{variant} table needs {layout.n_years} year labels, header has {years!r}"
            )
        return slice_row(layout, fitted, years, metric=metric, category=category)

    return fold_rows(_table_rows(page, layout), emit)


def extract_achievement(page: Tag) -> List[List[str]]:
    """Pages 1-13: three years, four values each; short rows padded to 17 cells."""
    return extract_table(page, ACHIEVEMENT)


def extract_naep(page: Tag) -> List[List[str]]:
    """NAEP pages: two years, four values each."""
    return extract_table(page, NAEP)


def extract_special(page: Tag) -> List[List[str]]:
    """Special-population pages: three years, three values; rows not exactly 10 wide are dropped."""
    return extract_table(page, SPECIAL)


def extract_batch(page: Tag, variant: str) -> RecordBatch:
    return RecordBatch(variant=variant, records=extract_table(page, variant))
