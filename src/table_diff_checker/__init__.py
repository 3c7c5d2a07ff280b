"""Table Diff Checker - first-difference comparison of tabular data files."""

from .comparator import EquivalenceComparator, compare, compare_files
from .config import CompareConfig, ReadConfig
from .errors import (
    TableDiffError,
    TableLoadError,
    UnsupportedColumnTypeError,
    UnsupportedFormatError,
)
from .loader import FileFormat, TableLoader, file_format, write_table
from .outcome import (
    CellMismatch,
    ComparisonOutcome,
    CountMismatch,
    Match,
    RowShapeMismatch,
)
from .row_stream import RowStream, count_rows
from .values import Row, ScalarKind, ScalarValue

__all__ = [
    "EquivalenceComparator",
    "compare",
    "compare_files",
    "CompareConfig",
    "ReadConfig",
    "TableDiffError",
    "TableLoadError",
    "UnsupportedColumnTypeError",
    "UnsupportedFormatError",
    "FileFormat",
    "TableLoader",
    "file_format",
    "write_table",
    "CellMismatch",
    "ComparisonOutcome",
    "CountMismatch",
    "Match",
    "RowShapeMismatch",
    "RowStream",
    "count_rows",
    "Row",
    "ScalarKind",
    "ScalarValue",
]
