"""
Main execution logic for Table Diff Checker.

This module contains the run functions behind each CLI command:
- Comparing two files
- Viewing contents, schema and row count of a file
- Converting between formats
- Reporting Parquet footer metadata
- Cleaning text files of invalid UTF-8

Every run function returns a process exit status. Engine faults are
reported here and turned into ``EXIT_FAULT``; a comparison that finds
differences is a normal run that returns ``EXIT_DIFFERENT``.
"""

import json
import logging
import sys
from datetime import datetime

import pyarrow as pa

from .comparator import compare_files
from .config import CompareConfig, ReadConfig
from .errors import TableDiffError
from .loader import TableLoader, write_table
from .parquet_meta import render_parquet_meta
from .utils import (
    create_summary_structure,
    render_arrow_table,
    render_table,
    save_summary,
    schema_rows,
    strip_invalid_utf8,
)


EXIT_MATCH = 0
EXIT_DIFFERENT = 1
EXIT_FAULT = 2


def _read_config(args) -> ReadConfig:
    return ReadConfig.from_local_config(
        has_header=getattr(args, 'has_header', None),
        csv_delimiter=getattr(args, 'delimiter', None),
    )


def run_compare(args) -> int:
    """
    Compare two files and print the outcome.

    Args:
        args: Parsed arguments with left, right, epsilon, signed_epsilon,
            has_header, delimiter, json and output_json. Options left
            unset (None) fall back to the local config file.

    Returns:
        EXIT_MATCH or EXIT_DIFFERENT
    """
    config = CompareConfig.from_local_config(
        read=_read_config(args),
        epsilon=args.epsilon,
        signed_tolerance=args.signed_epsilon,
    )

    if config.epsilon is not None:
        mode = "signed" if config.signed_tolerance else "absolute"
        logging.info(f"Float tolerance: {config.epsilon} ({mode})")

    start_time = datetime.now()
    outcome = compare_files(args.left, args.right, config)
    duration = (datetime.now() - start_time).total_seconds()

    summary = create_summary_structure(
        args.left, args.right, outcome, runtime_seconds=duration, epsilon=config.epsilon
    )
    if args.output_json:
        save_summary(summary, args.output_json)
        logging.info(f"Comparison summary written to {args.output_json}")

    if args.json:
        print(json.dumps(summary, indent=2))
    else:
        print(outcome)

    logging.info(f"Runtime: {duration:.2f}s")
    return EXIT_MATCH if outcome.is_match else EXIT_DIFFERENT


def run_view(args) -> int:
    """Print the first rows of a file (all rows when the limit is 0)."""
    table = TableLoader(_read_config(args)).read_table(args.filename)
    limit = args.limit
    if limit > 0:
        print(render_arrow_table(table.slice(0, limit)))
        print(f"Limiting to {limit} rows. Run with --limit 0 to remove limit.")
    else:
        print(render_arrow_table(table))
    return EXIT_MATCH


def run_schema(args) -> int:
    """Print column name, data type and nullability of a file."""
    schema, _ = TableLoader(_read_config(args)).read_batches(args.filename)
    print(render_table(["column_name", "data_type", "is_nullable"], schema_rows(schema)))
    return EXIT_MATCH


def run_count(args) -> int:
    """Print the row count of a file."""
    count = TableLoader(_read_config(args)).count_rows(args.filename)
    print(render_table(["COUNT(*)"], [[count]]))
    return EXIT_MATCH


def run_convert(args) -> int:
    """Convert a file to the format named by the output extension."""
    table = TableLoader(_read_config(args)).read_table(args.input)
    write_table(table, args.output, zstd=args.zstd)
    logging.info(f"Converted {table.num_rows} rows from {args.input} to {args.output}")
    return EXIT_MATCH


def run_remove_invalid_utf8(args) -> int:
    """Strip invalid UTF-8 byte sequences from a text file."""
    removed = strip_invalid_utf8(args.input, args.output)
    logging.info(f"Removed {removed} invalid bytes from {args.input}")
    return EXIT_MATCH


def run_parquet_meta(args) -> int:
    """Print the footer metadata report of a Parquet file."""
    print(render_parquet_meta(args.input))
    return EXIT_MATCH


COMMANDS = {
    'compare': run_compare,
    'view': run_view,
    'schema': run_schema,
    'count': run_count,
    'convert': run_convert,
    'view-parquet-meta': run_parquet_meta,
    'remove-invalid-utf8': run_remove_invalid_utf8,
}


def run_main(args) -> int:
    """
    Main entry point that dispatches to the requested command.

    Args:
        args: Parsed command line arguments

    Returns:
        Process exit status
    """
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s %(levelname)s: %(message)s'
    )

    try:
        return COMMANDS[args.command](args)
    except (TableDiffError, pa.ArrowException, OSError, ValueError) as e:
        logging.error(f"{args.command} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAULT
