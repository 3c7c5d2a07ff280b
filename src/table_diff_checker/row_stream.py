"""
Row-at-a-time view over column-major record batches.

This module provides a row stream that:
- Presents an ordered list of batches as one sequence of rows
- Hides batch boundaries (empty batches are skipped transparently)
- Builds each row lazily, on demand, without a row-major copy of the data
- Extracts every cell into a typed ``ScalarValue`` through one dispatch table
"""

import logging
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence

import pyarrow as pa

from .errors import UnsupportedColumnTypeError
from .values import Row, ScalarKind, ScalarValue


# Arrow data type -> scalar kind. Anything not listed here is unsupported.
_KIND_BY_TYPE: Dict[pa.DataType, ScalarKind] = {
    pa.int8(): ScalarKind.INT8,
    pa.int16(): ScalarKind.INT16,
    pa.int32(): ScalarKind.INT32,
    pa.int64(): ScalarKind.INT64,
    pa.uint8(): ScalarKind.UINT8,
    pa.uint16(): ScalarKind.UINT16,
    pa.uint32(): ScalarKind.UINT32,
    pa.uint64(): ScalarKind.UINT64,
    pa.float32(): ScalarKind.FLOAT32,
    pa.float64(): ScalarKind.FLOAT64,
    pa.string(): ScalarKind.UTF8,
    pa.date32(): ScalarKind.DATE32,
    pa.date64(): ScalarKind.DATE64,
}


def _python_value(scalar: pa.Scalar) -> Any:
    return scalar.as_py()


def _epoch_value(scalar: pa.Scalar) -> int:
    # Date32Scalar.value is days, Date64Scalar.value is milliseconds
    return scalar.value


_EXTRACTORS: Dict[ScalarKind, Callable[[pa.Scalar], Any]] = {
    ScalarKind.INT8: _python_value,
    ScalarKind.INT16: _python_value,
    ScalarKind.INT32: _python_value,
    ScalarKind.INT64: _python_value,
    ScalarKind.UINT8: _python_value,
    ScalarKind.UINT16: _python_value,
    ScalarKind.UINT32: _python_value,
    ScalarKind.UINT64: _python_value,
    ScalarKind.FLOAT32: _python_value,
    ScalarKind.FLOAT64: _python_value,
    ScalarKind.UTF8: _python_value,
    ScalarKind.DATE32: _epoch_value,
    ScalarKind.DATE64: _epoch_value,
}

_missing_kinds = set(ScalarKind) - {ScalarKind.NULL} - set(_EXTRACTORS)
if _missing_kinds or set(_KIND_BY_TYPE.values()) - set(_EXTRACTORS):
    raise ImportError(
        f"scalar kinds without an extractor: {sorted(k.value for k in _missing_kinds)}"
    )


def column_kind(data_type: pa.DataType) -> Optional[ScalarKind]:
    """
    Map an Arrow data type to its scalar kind.

    Returns:
        The kind, or None if the type is not supported
    """
    return _KIND_BY_TYPE.get(data_type)


def count_rows(batches: Sequence[pa.RecordBatch]) -> int:
    """Total number of rows across all batches, without reading any of them."""
    return sum(batch.num_rows for batch in batches)


class RowStream:
    """
    Forward-only, single-pass sequence of rows over record batches.

    Row order is the concatenation of each batch's rows in batch order.
    The stream yields exactly ``count_rows(batches)`` rows and cannot be
    rewound; build a new stream to read the data again.

    Features:
        - ``next_row()`` returns the next row or None once exhausted
        - Standard iterator protocol (``for row in stream``)
        - ``rows_read`` counts the rows produced so far

    Example:
        >>> stream = RowStream(table.to_batches())
        >>> first = stream.next_row()
        >>> rest = list(stream)

    Args:
        batches: Ordered record batches sharing one schema. They are only read.
    """

    def __init__(self, batches: Sequence[pa.RecordBatch]):
        self._batches = batches
        self._batch_index = 0
        self._offset = 0
        # Resolved lazily per batch; None entries are unsupported types
        self._column_kinds: Optional[List[Optional[ScalarKind]]] = None
        self.rows_read = 0

    def __iter__(self) -> Iterator[Row]:
        return self

    def __next__(self) -> Row:
        row = self.next_row()
        if row is None:
            raise StopIteration
        return row

    def next_row(self) -> Optional[Row]:
        """
        Build and return the next row.

        Returns:
            The row, or None when every batch is exhausted

        Raises:
            UnsupportedColumnTypeError: If a non-null cell belongs to a column
                whose type has no scalar representation
        """
        while self._batch_index < len(self._batches):
            batch = self._batches[self._batch_index]
            if self._offset < batch.num_rows:
                row = self._build_row(batch, self._offset)
                self._offset += 1
                self.rows_read += 1
                return row

            self._batch_index += 1
            self._offset = 0
            self._column_kinds = None
            if self._batch_index < len(self._batches):
                logging.debug(f"    Row stream moved to batch {self._batch_index}")
        return None

    def _build_row(self, batch: pa.RecordBatch, offset: int) -> Row:
        if self._column_kinds is None:
            self._column_kinds = [column_kind(field.type) for field in batch.schema]

        row: Row = []
        for index, column in enumerate(batch.columns):
            scalar = column[offset]
            if not scalar.is_valid:
                row.append(ScalarValue.null())
                continue

            kind = self._column_kinds[index]
            if kind is None:
                raise UnsupportedColumnTypeError(batch.schema.field(index).name, column.type)
            row.append(ScalarValue(kind, _EXTRACTORS[kind](scalar)))
        return row
