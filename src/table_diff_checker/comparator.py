"""
First-difference comparison of two tabular datasets.

This module provides an equivalence check that:
- Short-circuits on differing row counts without reading any row
- Walks both datasets row by row, then cell by cell, in lockstep
- Tolerates floating point rounding when an epsilon is configured
- Stops at the first discrepancy and reports where it is
"""

import logging
import math
import struct
from typing import Callable, Optional, Sequence

import pyarrow as pa

from .config import CompareConfig, validate_epsilon
from .loader import TableLoader
from .outcome import (
    CellMismatch,
    ComparisonOutcome,
    CountMismatch,
    Match,
    RowShapeMismatch,
)
from .row_stream import RowStream, count_rows
from .values import ScalarKind, ScalarValue


StreamFactory = Callable[[Sequence[pa.RecordBatch]], RowStream]


def _to_float32(value: float) -> float:
    """Round a double to the nearest single precision value."""
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def float_difference(left: ScalarValue, right: ScalarValue) -> float:
    """
    Signed ``left - right`` for two floats of the same width.

    Float32 operands are subtracted in single precision and the result is
    widened, so the difference matches what a 32-bit column would produce.
    """
    difference = left.value - right.value
    if left.kind is ScalarKind.FLOAT32:
        return _to_float32(difference)
    return difference


class EquivalenceComparator:
    """
    Row-for-row, cell-for-cell comparison of two datasets.

    Columns are compared by position. Only the first divergence is
    reported; the comparison never produces an exhaustive diff.

    Example:
        >>> comparator = EquivalenceComparator(epsilon=0.01)
        >>> outcome = comparator.compare(left_batches, right_batches)
        >>> print(outcome)
        Files match

    Args:
        epsilon: Tolerance for float cells of the same width (None = exact)
        signed_tolerance: Accept when ``left - right < epsilon`` instead of
            ``abs(left - right) < epsilon``. A left value far below the right
            one always passes under this rule.
        stream_factory: Builds the row stream for each side
    """

    def __init__(
        self,
        epsilon: Optional[float] = None,
        signed_tolerance: bool = False,
        stream_factory: StreamFactory = RowStream,
    ):
        self.epsilon = validate_epsilon(epsilon)
        self.signed_tolerance = signed_tolerance
        self.stream_factory = stream_factory

    @classmethod
    def from_config(cls, config: CompareConfig, **kwargs) -> "EquivalenceComparator":
        return cls(
            epsilon=config.epsilon,
            signed_tolerance=config.signed_tolerance,
            **kwargs,
        )

    def values_equivalent(self, left: ScalarValue, right: ScalarValue) -> bool:
        """
        Decide whether two cells agree.

        Exact value-and-kind equality always agrees. Beyond that, only two
        non-null floats of the same width can agree, and only within epsilon.
        """
        if left == right:
            return True
        if self.epsilon is None:
            return False
        if left.kind is not right.kind or not left.kind.is_float:
            return False

        difference = float_difference(left, right)
        if not self.signed_tolerance:
            difference = abs(difference)
        return difference < self.epsilon

    def compare(
        self,
        left_batches: Sequence[pa.RecordBatch],
        right_batches: Sequence[pa.RecordBatch],
    ) -> ComparisonOutcome:
        """
        Compare two datasets given as ordered record batches.

        Args:
            left_batches: Batches of the left dataset
            right_batches: Batches of the right dataset

        Returns:
            Match, CountMismatch, RowShapeMismatch or CellMismatch

        Raises:
            UnsupportedColumnTypeError: If a row cannot be extracted
        """
        count_left = count_rows(left_batches)
        count_right = count_rows(right_batches)
        logging.debug(
            f"    Row counts: left={count_left} ({len(left_batches)} batches), "
            f"right={count_right} ({len(right_batches)} batches)"
        )
        if count_left != count_right:
            return CountMismatch(count_left, count_right)

        left_stream = self.stream_factory(left_batches)
        right_stream = self.stream_factory(right_batches)

        for row_index, (left_row, right_row) in enumerate(zip(left_stream, right_stream)):
            if len(left_row) != len(right_row):
                logging.debug(f"    Row shape differs at row {row_index}")
                return RowShapeMismatch(
                    row_index=row_index,
                    left_row=left_row,
                    right_row=right_row,
                    explanation=(
                        f"row lengths do not match at index {row_index}: "
                        f"{len(left_row)} != {len(right_row)}"
                    ),
                )

            for column_index, (left_value, right_value) in enumerate(zip(left_row, right_row)):
                if not self.values_equivalent(left_value, right_value):
                    logging.debug(
                        f"    First difference at row {row_index}, column {column_index}"
                    )
                    return CellMismatch(
                        row_index=row_index,
                        column_index=column_index,
                        left_row=left_row,
                        right_row=right_row,
                        explanation=(
                            f"data does not match at row {row_index} column {column_index}: "
                            f"{left_value!r} != {right_value!r}"
                        ),
                    )

        logging.debug(f"    All {count_left} rows match")
        return Match()


def compare(
    left_batches: Sequence[pa.RecordBatch],
    right_batches: Sequence[pa.RecordBatch],
    config: Optional[CompareConfig] = None,
) -> ComparisonOutcome:
    """Compare two batch sequences with the given (or default) configuration."""
    config = config or CompareConfig()
    return EquivalenceComparator.from_config(config).compare(left_batches, right_batches)


def compare_files(
    path_left: str,
    path_right: str,
    config: Optional[CompareConfig] = None,
    loader: Optional[TableLoader] = None,
) -> ComparisonOutcome:
    """
    Load two files and compare their contents.

    The files may use different formats; each is read with the loader and
    the resulting batches are compared positionally.

    Args:
        path_left: First file (.csv, .json, .parquet, .parq or .avro)
        path_right: Second file
        config: Comparison settings, including how to read the files
        loader: Table loader to use (built from ``config.read`` when omitted)

    Returns:
        The comparison outcome

    Raises:
        TableDiffError: If either file cannot be loaded or extracted
    """
    config = config or CompareConfig()
    loader = loader or TableLoader(config.read)

    logging.info(f"Comparing files:\n  Left: {path_left}\n  Right: {path_right}")
    _, left_batches = loader.read_batches(path_left)
    _, right_batches = loader.read_batches(path_right)

    return EquivalenceComparator.from_config(config).compare(left_batches, right_batches)
