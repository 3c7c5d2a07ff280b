"""
Utility functions for Table Diff Checker.

Includes plain-text table rendering and summary helpers used by the CLI.
"""

import json
import os
from collections import OrderedDict
from datetime import datetime
from typing import Any, List, Optional, Sequence

import pyarrow as pa

from .outcome import ComparisonOutcome


NOT_AVAILABLE = "N/A"


def render_table(header: Sequence[str], rows: Sequence[Sequence[Any]]) -> str:
    """
    Render rows as a bordered plain-text table.

    Example:
        >>> print(render_table(["Key", "Value"], [["Rows", 3]]))
        +------+-------+
        | Key  | Value |
        +------+-------+
        | Rows | 3     |
        +------+-------+

    Args:
        header: Column titles
        rows: Cell values; each is converted with ``str``

    Returns:
        The table as a multi-line string (no trailing newline)
    """
    text_rows = [[str(cell) for cell in row] for row in rows]
    widths = [len(title) for title in header]
    for row in text_rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))

    border = "+" + "+".join("-" * (width + 2) for width in widths) + "+"

    def line(cells: Sequence[str]) -> str:
        return "| " + " | ".join(cell.ljust(width) for cell, width in zip(cells, widths)) + " |"

    lines = [border, line(list(header)), border]
    lines.extend(line(row) for row in text_rows)
    lines.append(border)
    return "\n".join(lines)


def format_cell(value: Any) -> str:
    """Display form of a Python value read from Arrow (nulls are blank)."""
    if value is None:
        return ""
    return str(value)


def render_arrow_table(table: pa.Table) -> str:
    """Render an Arrow table's column names and rows as a text table."""
    rows = [
        [format_cell(value) for value in record.values()]
        for record in table.to_pylist()
    ]
    return render_table(table.column_names, rows)


def schema_rows(schema: pa.Schema) -> List[List[str]]:
    """One ``[column_name, data_type, is_nullable]`` row per field."""
    return [
        [field.name, str(field.type), "YES" if field.nullable else "NO"]
        for field in schema
    ]


def create_summary_structure(
    left_file: str,
    right_file: str,
    outcome: ComparisonOutcome,
    runtime_seconds: float = 0.0,
    epsilon: Optional[float] = None,
) -> OrderedDict:
    """
    Create the JSON summary written for a comparison.

    Args:
        left_file: Path of the left input
        right_file: Path of the right input
        outcome: Result of the comparison
        runtime_seconds: Total runtime
        epsilon: Tolerance that was in effect

    Returns:
        OrderedDict with the standard summary structure
    """
    summary = OrderedDict()
    summary["timestamp"] = datetime.now().isoformat()
    summary["left_file"] = os.path.abspath(left_file)
    summary["right_file"] = os.path.abspath(right_file)
    summary["epsilon"] = epsilon
    summary["files_match"] = outcome.is_match
    summary["outcome"] = outcome.to_dict()
    summary["total_runtime_seconds"] = round(runtime_seconds, 2)
    return summary


def save_summary(summary: OrderedDict, path: str) -> str:
    """Write a summary as indented JSON, creating parent folders as needed."""
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(summary, f, indent=2)
    return path


def strip_invalid_utf8(path: str, output: Optional[str] = None) -> int:
    """
    Remove byte sequences that are not valid UTF-8 from a text file.

    Args:
        path: File to clean
        output: Destination file; the input is rewritten when omitted

    Returns:
        Number of bytes removed
    """
    with open(path, 'rb') as f:
        raw = f.read()
    cleaned = raw.decode('utf-8', errors='ignore').encode('utf-8')
    with open(output or path, 'wb') as f:
        f.write(cleaned)
    return len(raw) - len(cleaned)
