"""Per-variant column layouts for report-card tables.

Every report-card table repeats a block of columns per year. The offsets below
match the rendered layout of the state report-card site.
Columns that fall outside every year window (state averages, sums of two other
columns) are never emitted.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

ACHIEVEMENT = "achievement"
NAEP = "naep"
SPECIAL = "special"

VARIANTS = (ACHIEVEMENT, NAEP, SPECIAL)

# Row width policies
PAD = "pad"          # append empty cells up to min_width
STRICT = "strict"    # raise if narrower than min_width
EXACT = "exact"      # drop the row unless it is exactly min_width wide

# Row sources
DIRECT = "direct"    # rows directly under table.report-card-section-table
DEEP = "deep"        # every <tr> at any depth, after a fixed skip

SECTION_TABLE_ROWS = "table.report-card-section-table > tr"

# The special-population pages nest their body rows so that the direct
# selector finds nothing; the first four <tr> at any depth are title and
# header rows.
SPECIAL_ROW_SKIP = 4


@dataclass(frozen=True)
class YearWindow:
    first: int                                # inclusive column index
    last: int                                 # inclusive column index
    merge: Optional[Tuple[int, int]] = None   # offsets within the window summed into one value

    @property
    def columns(self) -> range:
        return range(self.first, self.last + 1)


@dataclass(frozen=True)
class TableLayout:
    variant: str
    windows: Tuple[YearWindow, ...]
    min_width: int
    width_policy: str
    row_source: str = DIRECT
    row_skip: int = 0

    @property
    def n_years(self) -> int:
        return len(self.windows)

    @property
    def n_values(self) -> int:
        w = self.windows[0]
        n = len(w.columns)
        return n - 1 if w.merge else n

    @property
    def arity(self) -> int:
        """Fields per output record: metric, category, year, values."""
        return 3 + self.n_values


LAYOUTS: Dict[str, TableLayout] = {
    # category | state avg | y1: 5 cells (cols 3+4 summed) | sum | y2: 4 | sum | y3: 4
    ACHIEVEMENT: TableLayout(
        variant=ACHIEVEMENT,
        windows=(
            YearWindow(2, 6, merge=(1, 2)),
            YearWindow(8, 11),
            YearWindow(13, 16),
        ),
        min_width=17,
        width_policy=PAD,
    ),
    NAEP: TableLayout(
        variant=NAEP,
        windows=(YearWindow(1, 4), YearWindow(6, 9)),
        min_width=10,
        width_policy=STRICT,
    ),
    SPECIAL: TableLayout(
        variant=SPECIAL,
        windows=(YearWindow(1, 3), YearWindow(4, 6), YearWindow(7, 9)),
        min_width=10,
        width_policy=EXACT,
        row_source=DEEP,
        row_skip=SPECIAL_ROW_SKIP,
    ),
}


def get_layout(variant: str) -> TableLayout:
    try:
        return LAYOUTS[variant]
    except KeyError:
        raise ValueError(f"Unknown table variant: {variant!r} (expected one of {VARIANTS})") from None


def ignored_columns(layout: TableLayout, width: Optional[int] = None) -> List[int]:
    """Columns of a row (after the category column) that no year window reads."""
    width = width if width is not None else layout.min_width
    used = {c for w in layout.windows for c in w.columns}
    return [c for c in range(1, width) if c not in used]


def _parse_number(s: str) -> Optional[float]:
    t = (s or "").strip().replace(",", "")
    if not t or "_" in t:
        return None
    try:
        v = float(t)
    except ValueError:
        return None
    if not math.isfinite(v):
        return None
    return v


def _format_number(v: float) -> str:
    if v.is_integer():
        return str(int(v))
    return repr(v)


def try_add(a: str, b: str) -> str:
    """
    Sum two cell texts when both are numbers, else return `a` unchanged.

    Suppressed cells ("N/A", "*", "") leave the first cell as is:

      try_add("5", "3")   -> "8"
      try_add("5", "N/A") -> "5"
    """
    x = _parse_number(a)
    y = _parse_number(b)
    if x is None or y is None:
        return a
    return _format_number(x + y)


def window_values(window: YearWindow, cells: List[str]) -> List[str]:
    vals = [cells[c] for c in window.columns]
    if window.merge is None:
        return vals
    i, j = window.merge
    merged = try_add(vals[i], vals[j])
    return vals[:i] + [merged] + vals[j + 1:]


def slice_row(
    layout: TableLayout,
    cells: List[str],
    years: List[str],
    *,
    metric: str,
    category: str,
) -> List[List[str]]:
    """One record per year window: [metric, category, year, values...]."""
    return [
        [metric, category, years[i]] + window_values(w, cells)
        for i, w in enumerate(layout.windows)
    ]
