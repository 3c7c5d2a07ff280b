"""
Exception types for Table Diff Checker.

Everything raised here is an engine fault: the tool could not do its job.
A comparison that finds differing data is NOT an error and never raises;
see ``outcome.py`` for those results.
"""


class TableDiffError(Exception):
    """Base class for all engine faults."""


class UnsupportedColumnTypeError(TableDiffError):
    """
    A column's declared type has no typed scalar representation.

    Raised while extracting rows from a batch. The engine cannot approximate
    an unknown type, so extraction stops instead of producing a degraded value.
    """

    def __init__(self, column_name: str, data_type: object):
        self.column_name = column_name
        self.data_type = data_type
        super().__init__(
            f"unsupported data type {data_type} in column '{column_name}'"
        )


class UnsupportedFormatError(TableDiffError):
    """The file extension does not name a readable or writable format."""


class TableLoadError(TableDiffError):
    """A file could not be read into record batches."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load {path}: {reason}")
