"""
Typed scalar values extracted from column-major batches.

A ``ScalarValue`` is a closed sum type: its ``kind`` is one of the
``ScalarKind`` members and, except for ``NULL``, it carries exactly one
concrete Python value of that kind:

- integer kinds carry ``int``
- float kinds carry ``float``
- ``UTF8`` carries ``str``
- ``DATE32`` carries days since the epoch (``int``)
- ``DATE64`` carries milliseconds since the epoch (``int``)

Equality is exact value-and-kind equality. ``Int32(1)`` is not equal to
``Int64(1)``, and floats compare by bit pattern (``NaN`` equals ``NaN`` of
the same width, ``0.0`` does not equal ``-0.0``).
"""

import struct
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Tuple


class ScalarKind(Enum):
    """Supported primitive kinds, named after their Arrow data types."""

    INT8 = "Int8"
    INT16 = "Int16"
    INT32 = "Int32"
    INT64 = "Int64"
    UINT8 = "UInt8"
    UINT16 = "UInt16"
    UINT32 = "UInt32"
    UINT64 = "UInt64"
    FLOAT32 = "Float32"
    FLOAT64 = "Float64"
    UTF8 = "Utf8"
    DATE32 = "Date32"
    DATE64 = "Date64"
    NULL = "Null"

    @property
    def is_float(self) -> bool:
        return self in (ScalarKind.FLOAT32, ScalarKind.FLOAT64)


# struct format used to compare floats bit for bit
_FLOAT_FORMATS = {
    ScalarKind.FLOAT32: "<f",
    ScalarKind.FLOAT64: "<d",
}


@dataclass(frozen=True, eq=False)
class ScalarValue:
    """
    One cell of a row.

    Example:
        >>> ScalarValue(ScalarKind.INT64, 1)
        Int64(1)
        >>> ScalarValue.null()
        NULL

    Args:
        kind: The value's kind
        value: The payload; must be None for NULL and not None otherwise
    """

    kind: ScalarKind
    value: Any = None

    def __post_init__(self):
        if self.kind is ScalarKind.NULL:
            if self.value is not None:
                raise ValueError(f"NULL scalar cannot carry a value: {self.value!r}")
        elif self.value is None:
            raise ValueError(
                f"{self.kind.value} scalar requires a value; use ScalarValue.null()"
            )
        else:
            fmt = _FLOAT_FORMATS.get(self.kind)
            if fmt is not None:
                try:
                    struct.pack(fmt, self.value)
                except (OverflowError, struct.error) as e:
                    raise ValueError(
                        f"{self.kind.value} scalar cannot hold {self.value!r}: {e}"
                    ) from None

    @classmethod
    def null(cls) -> "ScalarValue":
        return cls(ScalarKind.NULL)

    @property
    def is_null(self) -> bool:
        return self.kind is ScalarKind.NULL

    def _identity(self) -> Tuple[ScalarKind, Any]:
        fmt = _FLOAT_FORMATS.get(self.kind)
        if fmt is not None:
            return (self.kind, struct.pack(fmt, self.value))
        return (self.kind, self.value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ScalarValue):
            return NotImplemented
        return self._identity() == other._identity()

    def __hash__(self) -> int:
        return hash(self._identity())

    def __repr__(self) -> str:
        if self.is_null:
            return "NULL"
        return f"{self.kind.value}({self.value!r})"

    def to_json(self) -> Any:
        """Plain JSON-friendly form used in outcome summaries."""
        if self.is_null:
            return None
        return {"kind": self.kind.value, "value": self.value}


Row = List[ScalarValue]


def format_row(row: Row) -> str:
    """Render a row the way diagnostics print it, e.g. ``[Int64(1), Utf8('x')]``."""
    return "[" + ", ".join(repr(value) for value in row) + "]"
