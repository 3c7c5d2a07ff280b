"""
Descriptive report of a Parquet file's footer metadata.

Read-only; no data pages are decoded. Used by the ``view-parquet-meta``
command and independent of the comparison path.
"""

import os
from typing import List, Tuple, Union

import pyarrow as pa
import pyarrow.parquet as pq

from .errors import TableLoadError
from .utils import NOT_AVAILABLE, render_table


COLUMN_HEADER = [
    "Column Name",
    "Logical Type",
    "Physical Type",
    "Distinct Values",
    "Nulls",
    "Min",
    "Max",
]

# Physical types whose min/max statistics can be displayed
_DISPLAYABLE_PHYSICAL_TYPES = {"BOOLEAN", "INT32", "INT64", "FLOAT", "DOUBLE", "BYTE_ARRAY"}


def read_metadata(path: Union[str, os.PathLike]) -> pq.FileMetaData:
    try:
        return pq.ParquetFile(str(path)).metadata
    except (pa.ArrowException, OSError) as e:
        raise TableLoadError(str(path), str(e)) from e


def file_summary(metadata: pq.FileMetaData) -> List[Tuple[str, str]]:
    return [
        ("Version", str(metadata.format_version)),
        ("Created By", metadata.created_by or NOT_AVAILABLE),
        ("Rows", str(metadata.num_rows)),
        ("Row Groups", str(metadata.num_row_groups)),
    ]


def _format_statistic(value) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def column_rows(metadata: pq.FileMetaData, row_group_index: int) -> List[List[str]]:
    """
    Describe every column chunk of one row group.

    Columns without statistics show N/A for everything after the logical
    type; statistics without min/max show N/A for those two cells.
    """
    row_group = metadata.row_group(row_group_index)
    rows = []
    for j in range(row_group.num_columns):
        chunk = row_group.column(j)
        logical_type = metadata.schema.column(j).logical_type
        row = [
            chunk.path_in_schema,
            NOT_AVAILABLE if logical_type.type == "NONE" else str(logical_type),
        ]

        stats = chunk.statistics if chunk.is_stats_set else None
        if stats is None:
            row.extend([NOT_AVAILABLE] * 5)
            rows.append(row)
            continue

        row.append(stats.physical_type)
        row.append(str(stats.distinct_count) if stats.has_distinct_count else NOT_AVAILABLE)
        row.append(str(stats.null_count) if stats.has_null_count else NOT_AVAILABLE)
        if not stats.has_min_max:
            row.extend([NOT_AVAILABLE, NOT_AVAILABLE])
        elif stats.physical_type in _DISPLAYABLE_PHYSICAL_TYPES:
            row.extend([_format_statistic(stats.min), _format_statistic(stats.max)])
        else:
            row.extend(["unsupported", "unsupported"])
        rows.append(row)
    return rows


def render_parquet_meta(path: Union[str, os.PathLike]) -> str:
    """Build the full text report: a file table, then one table per row group."""
    metadata = read_metadata(path)
    sections = [render_table(["Key", "Value"], file_summary(metadata))]
    for i in range(metadata.num_row_groups):
        row_group = metadata.row_group(i)
        sections.append(
            f"\nRow Group {i} of {metadata.num_row_groups} contains {row_group.num_rows} rows "
            f"and has {row_group.total_byte_size} bytes:\n"
        )
        sections.append(render_table(COLUMN_HEADER, column_rows(metadata, i)))
    return "\n".join(sections)
