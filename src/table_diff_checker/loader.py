"""
Loading and writing tables in their on-disk formats.

Format is chosen by file extension:
- ``.csv``            delimited text (header row optional)
- ``.json``           newline-delimited JSON objects
- ``.parquet``/``.parq``  Parquet
- ``.avro``           Avro object container files (read only)
"""

import datetime
import json
import logging
import math
import os
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional, Tuple, Union

import fastavro
import pyarrow as pa
import pyarrow.csv as pa_csv
import pyarrow.json as pa_json
import pyarrow.parquet as pq

from .config import ReadConfig, ZSTD_COMPRESSION_LEVEL
from .errors import TableLoadError, UnsupportedFormatError
from .row_stream import count_rows as count_batch_rows


PathLike = Union[str, os.PathLike]


class FileFormat(Enum):
    AVRO = "avro"
    CSV = "csv"
    JSON = "json"
    PARQUET = "parquet"


_FORMAT_BY_ENDING = {
    "avro": FileFormat.AVRO,
    "csv": FileFormat.CSV,
    "json": FileFormat.JSON,
    "parquet": FileFormat.PARQUET,
    "parq": FileFormat.PARQUET,
}


_AVRO_PRIMITIVES = {
    "null": pa.null(),
    "boolean": pa.bool_(),
    "int": pa.int32(),
    "long": pa.int64(),
    "float": pa.float32(),
    "double": pa.float64(),
    "bytes": pa.binary(),
    "string": pa.string(),
}

_AVRO_LOGICAL_TYPES = {
    "date": pa.date32(),
    "timestamp-millis": pa.timestamp("ms", tz="UTC"),
    "timestamp-micros": pa.timestamp("us", tz="UTC"),
}


def _avro_field_type(avro_type: Any) -> Tuple[Optional[pa.DataType], bool]:
    """Arrow type and nullability of an Avro field type (type is None if unmapped)."""
    if isinstance(avro_type, list):
        branches = [branch for branch in avro_type if branch != "null"]
        if len(branches) == 1:
            return _avro_field_type(branches[0])[0], True
        return None, True
    if isinstance(avro_type, dict):
        logical = _AVRO_LOGICAL_TYPES.get(avro_type.get("logicalType"))
        if logical is not None:
            return logical, False
        if avro_type.get("type") == "enum":
            return pa.string(), False
        return _avro_field_type(avro_type.get("type"))
    return _AVRO_PRIMITIVES.get(avro_type), avro_type == "null"


def avro_arrow_schema(avro_schema: Any) -> Optional[pa.Schema]:
    """
    Translate an Avro record schema into an Arrow schema.

    Returns:
        The schema, or None if some field has no flat Arrow equivalent
        (the column types are then inferred from the records)
    """
    if not isinstance(avro_schema, dict) or avro_schema.get("type") != "record":
        return None

    fields = []
    for avro_field in avro_schema.get("fields", []):
        data_type, nullable = _avro_field_type(avro_field["type"])
        if data_type is None:
            logging.debug(f"    No Arrow type for Avro field {avro_field['name']!r}, inferring")
            return None
        fields.append(pa.field(avro_field["name"], data_type, nullable=nullable))
    return pa.schema(fields)


def file_ending(path: PathLike) -> str:
    """
    Return the extension of a path without the leading dot.

    Raises:
        UnsupportedFormatError: If the path has no extension
    """
    suffix = Path(path).suffix
    if not suffix:
        raise UnsupportedFormatError("Could not determine file extension")
    return suffix[1:]


def file_format(path: PathLike) -> FileFormat:
    """
    Detect the format of a file from its extension.

    Raises:
        UnsupportedFormatError: If the extension is missing or unknown
    """
    ending = file_ending(path)
    try:
        return _FORMAT_BY_ENDING[ending.lower()]
    except KeyError:
        raise UnsupportedFormatError(f"unsupported file extension '{ending}'") from None


class TableLoader:
    """
    Reads files into ordered lists of record batches.

    A loader carries the reading conventions (header row, delimiter) so the
    same settings apply to both sides of a comparison. It holds no other
    state and can be reused for any number of files.

    Example:
        >>> loader = TableLoader(ReadConfig(has_header=False))
        >>> schema, batches = loader.read_batches("data.csv")

    Args:
        read_config: Reading conventions (defaults from config.py)
    """

    def __init__(self, read_config: Optional[ReadConfig] = None):
        self.read_config = read_config or ReadConfig()

    def read_batches(self, path: PathLike) -> Tuple[pa.Schema, List[pa.RecordBatch]]:
        """
        Read a file into its schema and record batches.

        Args:
            path: File to read

        Returns:
            Tuple of (schema, batches in file order)

        Raises:
            UnsupportedFormatError: If the extension is missing or unknown
            TableLoadError: If the file is missing or malformed
        """
        fmt = file_format(path)
        try:
            if fmt is FileFormat.AVRO:
                schema, batches = self._read_avro(path)
            elif fmt is FileFormat.CSV:
                schema, batches = self._read_csv(path)
            elif fmt is FileFormat.JSON:
                table = pa_json.read_json(str(path))
                schema, batches = table.schema, table.to_batches()
            else:
                parquet_file = pq.ParquetFile(str(path))
                schema, batches = parquet_file.schema_arrow, list(parquet_file.iter_batches())
        except (pa.ArrowException, OSError, ValueError, EOFError) as e:
            raise TableLoadError(str(path), str(e)) from e

        logging.debug(
            f"    Loaded {os.path.basename(str(path))}: {len(schema)} columns, "
            f"{len(batches)} batches, {count_batch_rows(batches)} rows"
        )
        return schema, batches

    def _read_avro(self, path: PathLike) -> Tuple[pa.Schema, List[pa.RecordBatch]]:
        with open(path, 'rb') as f:
            reader = fastavro.reader(f)
            schema = avro_arrow_schema(reader.writer_schema)
            records = list(reader)
        table = pa.Table.from_pylist(records, schema=schema)
        return table.schema, table.to_batches()

    def _read_csv(self, path: PathLike) -> Tuple[pa.Schema, List[pa.RecordBatch]]:
        has_header = self.read_config.has_header
        table = pa_csv.read_csv(
            str(path),
            read_options=pa_csv.ReadOptions(autogenerate_column_names=not has_header),
            parse_options=pa_csv.ParseOptions(delimiter=self.read_config.csv_delimiter),
        )
        if not has_header:
            table = table.rename_columns(
                [f"column_{i + 1}" for i in range(table.num_columns)]
            )
        return table.schema, table.to_batches()

    def read_table(self, path: PathLike) -> pa.Table:
        """Read a whole file as a single table."""
        schema, batches = self.read_batches(path)
        return pa.Table.from_batches(batches, schema=schema)

    def count_rows(self, path: PathLike) -> int:
        """
        Count the rows of a file.

        Parquet files are counted from the footer without reading data pages.
        """
        if file_format(path) is FileFormat.PARQUET:
            try:
                return pq.ParquetFile(str(path)).metadata.num_rows
            except (pa.ArrowException, OSError) as e:
                raise TableLoadError(str(path), str(e)) from e
        _, batches = self.read_batches(path)
        return count_batch_rows(batches)


def _json_value(value: Any) -> Any:
    """
    Convert a Python value read from Arrow into standard JSON.

    JSON has no date type, so dates and datetimes become ISO 8601 strings;
    they read back as timestamp columns, not as the original date type.
    NaN and infinities have no JSON form and become null.
    """
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: _json_value(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_json_value(item) for item in value]
    return value


def _count_non_finite(table: pa.Table) -> int:
    count = 0
    for column in table.columns:
        if pa.types.is_floating(column.type):
            count += sum(
                1 for value in column.to_pylist()
                if value is not None and not math.isfinite(value)
            )
    return count


def write_table(table: pa.Table, path: PathLike, zstd: bool = False) -> None:
    """
    Write a table to a single file in the format named by its extension.

    JSON output is newline-delimited and strictly standard: see
    ``_json_value`` for how dates and non-finite floats are written.

    Args:
        table: Data to write
        path: Output file (.csv, .json, .parquet or .parq)
        zstd: Compress Parquet output with zstd

    Raises:
        UnsupportedFormatError: For Avro output or an unknown extension
    """
    fmt = file_format(path)
    logging.debug(f"    Writing {table.num_rows} rows to {path} as {fmt.value}")

    if fmt is FileFormat.AVRO:
        raise UnsupportedFormatError("Conversion to Avro is not supported")
    if fmt is FileFormat.CSV:
        pa_csv.write_csv(table, str(path))
    elif fmt is FileFormat.JSON:
        non_finite = _count_non_finite(table)
        if non_finite:
            logging.warning(f"{non_finite} NaN or infinite float values written to {path} as null")
        with open(path, 'w', encoding='utf-8') as f:
            for batch in table.to_batches():
                for row in batch.to_pylist():
                    f.write(json.dumps(_json_value(row), allow_nan=False, default=str))
                    f.write("\n")
    else:
        pq.write_table(
            table,
            str(path),
            use_dictionary=False,
            column_encoding="PLAIN",
            compression="zstd" if zstd else "NONE",
            compression_level=ZSTD_COMPRESSION_LEVEL if zstd else None,
        )
