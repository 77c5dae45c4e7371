"""Table extraction for report-card pages."""

from reportcard.extraction.core import (
    RecordBatch,
    extract_achievement,
    extract_batch,
    extract_naep,
    extract_special,
    extract_table,
)
from reportcard.extraction.layouts import (
    ACHIEVEMENT,
    LAYOUTS,
    NAEP,
    SPECIAL,
    VARIANTS,
    TableLayout,
    YearWindow,
    get_layout,
    ignored_columns,
    try_add,
)
from reportcard.extraction.rows import (
    DEFAULT_METRIC,
    RowWidthError,
    TableExtractionError,
    YearLabelError,
    extract_year_labels,
    fold_rows,
    normalize_row,
)

__all__ = [
    "RecordBatch",
    "extract_achievement",
    "extract_batch",
    "extract_naep",
    "extract_special",
    "extract_table",
    "ACHIEVEMENT",
    "LAYOUTS",
    "NAEP",
    "SPECIAL",
    "VARIANTS",
    "TableLayout",
    "YearWindow",
    "get_layout",
    "ignored_columns",
    "try_add",
    "DEFAULT_METRIC",
    "RowWidthError",
    "TableExtractionError",
    "YearLabelError",
    "extract_year_labels",
    "fold_rows",
    "normalize_row",
]
