"""
Comparison outcomes.

Every successful comparison returns exactly one of these immutable values.
They describe data-level agreement or disagreement only; engine faults are
raised as exceptions (see ``errors.py``) and never appear here.
"""

from dataclasses import dataclass
from typing import Any, Dict

from .values import Row, format_row


class ComparisonOutcome:
    """Base class of the closed outcome type."""

    status: str = ""

    @property
    def is_match(self) -> bool:
        return False

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status}


@dataclass(frozen=True)
class Match(ComparisonOutcome):
    """Both datasets are equivalent row for row and cell for cell."""

    status = "match"

    @property
    def is_match(self) -> bool:
        return True

    def __str__(self) -> str:
        return "Files match"


@dataclass(frozen=True)
class CountMismatch(ComparisonOutcome):
    """Total row counts differ. Detected before any row is read."""

    count_left: int
    count_right: int

    status = "count_mismatch"

    @property
    def explanation(self) -> str:
        return f"row counts do not match: {self.count_left} != {self.count_right}"

    def __str__(self) -> str:
        return f"Files are different: {self.explanation}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "count_left": self.count_left,
            "count_right": self.count_right,
            "message": self.explanation,
        }


@dataclass(frozen=True)
class RowMismatch(ComparisonOutcome):
    """Shared shape of the two row-level outcomes."""

    row_index: int
    left_row: Row
    right_row: Row
    explanation: str

    def __str__(self) -> str:
        return (
            f"Row mismatch: {self.explanation}\n"
            f" left: {format_row(self.left_row)}\n"
            f"right: {format_row(self.right_row)}"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "row_index": self.row_index,
            "left": [value.to_json() for value in self.left_row],
            "right": [value.to_json() for value in self.right_row],
            "message": self.explanation,
        }


@dataclass(frozen=True)
class RowShapeMismatch(RowMismatch):
    """Rows at the same index have different lengths."""

    status = "row_shape_mismatch"


@dataclass(frozen=True)
class CellMismatch(RowMismatch):
    """The first cell whose values are not equivalent."""

    column_index: int

    status = "cell_mismatch"

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["column_index"] = self.column_index
        return result
