from __future__ import annotations

import re
from functools import reduce
from typing import Callable, Iterable, List, Tuple

from bs4 import Tag

WS_RE = re.compile(r"\s+")

DEFAULT_METRIC = "default"
SECTION_MARKER_CLASS = "data-section"

SECTION_TABLE_HEADER = "table.report-card-section-table > thead > tr"

# The thead selector comes back empty on some pages (the table sits a few
# wrappers deeper than usual). On those pages the first two <tr> at any depth
# belong to the outer layout table and the third is the year header.
HEADER_FALLBACK_SKIP_ROWS = 2


class TableExtractionError(ValueError):
    pass


class YearLabelError(TableExtractionError):
    pass


class RowWidthError(TableExtractionError):
    pass


def _clean_text(s: str) -> str:
    return WS_RE.sub(" ", s or "").strip()


def node_text(node: Tag) -> str:
    return _clean_text(node.get_text(" ", strip=True))


def row_cells(row: Tag) -> List[str]:
    """Texts of the row's child elements, in order."""
    return [node_text(c) for c in row.children if isinstance(c, Tag)]


def is_section_marker(row: Tag) -> bool:
    return SECTION_MARKER_CLASS in (row.get("class") or [])


def normalize_row(cells: List[str], min_width: int) -> List[str]:
    """Pad `cells` with empty strings to at least `min_width`; never truncates."""
    if len(cells) >= min_width:
        return list(cells)
    return list(cells) + [""] * (min_width - len(cells))


def extract_year_labels(page: Tag) -> List[str]:
    """
    Year labels governing a report table's column groups.

    Reads the first header row under the section table, falling back to the
    third <tr> anywhere on the page when that selector finds nothing. The
    first cell of the header row is the row-label column and is dropped.

    The fallback is positional and only known to hold for the current site
    layout. Raises YearLabelError when neither path yields a label.
    """
    headers = page.select(SECTION_TABLE_HEADER)
    if headers:
        header = headers[0]
    else:
        rows = page.find_all("tr")
        if len(rows) <= HEADER_FALLBACK_SKIP_ROWS:
            raise YearLabelError(
                f"No header row found: thead query empty and only {len(rows)} <tr> on page"
            )
        header = rows[HEADER_FALLBACK_SKIP_ROWS]

    years = row_cells(header)[1:]
    if not years:
        raise YearLabelError("Header row has no year columns")
    return years


Emit = Callable[[str, str, List[str]], List[List[str]]]


def fold_rows(rows: Iterable[Tag], emit: Emit) -> List[List[str]]:
    """
    Left-to-right fold over table rows carrying the current metric.

    A section-marker row replaces the metric with its own text. Every other
    row is passed to `emit(metric, category, cells)` and the records it
    returns are appended in order. Rows without any cells are skipped.
    """

    def step(acc: Tuple[str, List[List[str]]], row: Tag) -> Tuple[str, List[List[str]]]:
        metric, records = acc
        if is_section_marker(row):
            return node_text(row), records
        cells = row_cells(row)
        if not cells:
            return metric, records
        records.extend(emit(metric, cells[0], cells))
        return metric, records

    _, records = reduce(step, rows, (DEFAULT_METRIC, []))
    return records
