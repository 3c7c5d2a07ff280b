"""
Command-line interface for Table Diff Checker.

Provides argument parsing and CLI entry point.
"""

import argparse
import sys
from typing import List, Optional

from .config import DEFAULT_VIEW_LIMIT, get_config_value


DESCRIPTION = """
  Compare, inspect and convert tabular data files.

┌─────────────────────────────────────────────────────────────────────────────┐
│  SUPPORTED FORMATS                                                          │
├─────────────────────────────────────────────────────────────────────────────┤
│                                                                             │
│  .csv              Delimited text, header row expected by default           │
│  .json             Newline-delimited JSON objects                           │
│  .parquet, .parq   Parquet                                                  │
│  .avro             Avro object container (input only)                       │
│                                                                             │
└─────────────────────────────────────────────────────────────────────────────┘
"""

EPILOG = """
┌─────────────────────────────────────────────────────────────────────────────┐
│  EXAMPLES                                                                   │
└─────────────────────────────────────────────────────────────────────────────┘

  Compare a CSV export with its Parquet copy:
  ────────────────────────────────────────────
    %(prog)s compare export.csv export.parquet

  Allow float differences below 0.001:
  ─────────────────────────────────────
    %(prog)s compare expected.parquet actual.parquet --epsilon 0.001

  Show the first 20 rows of a file:
  ──────────────────────────────────
    %(prog)s view data.parquet --limit 20

┌─────────────────────────────────────────────────────────────────────────────┐
│  EXIT STATUS                                                                │
└─────────────────────────────────────────────────────────────────────────────┘

  0  Success (for compare: files match)
  1  compare found a difference
  2  The tool failed (unreadable file, unsupported format or column type)

┌─────────────────────────────────────────────────────────────────────────────┐
│  NOTES                                                                      │
└─────────────────────────────────────────────────────────────────────────────┘

  • Columns are compared by position, rows in file order
  • Only the first difference is reported
  • --epsilon applies to float columns of the same width only
"""


class CustomHelpFormatter(argparse.RawDescriptionHelpFormatter):
    """Custom formatter for prettier help output."""

    def __init__(self, prog, indent_increment=2, max_help_position=40, width=100):
        super().__init__(prog, indent_increment, max_help_position, width)

    def _format_action_invocation(self, action):
        if not action.option_strings:
            return super()._format_action_invocation(action)
        return ', '.join(action.option_strings)


def _add_read_options(parser: argparse.ArgumentParser) -> None:
    group = parser.add_argument_group('📥 Input Options', 'How delimited text is read')
    group.add_argument(
        '--no-header-row', '-n',
        dest='has_header',
        action='store_const',
        const=False,
        default=None,
        help='CSV files have no header row.\n'
             'Columns are named column_1, column_2, ...'
    )
    group.add_argument(
        '--header-row',
        dest='has_header',
        action='store_const',
        const=True,
        help='CSV files start with a header row.\n'
             '(default: yes, unless the config file says otherwise)'
    )
    group.add_argument(
        '--delimiter', '-d',
        type=str,
        default=None,
        metavar='CHAR',
        help='CSV field delimiter.\n(default: ,)'
    )


def _add_debug_options(parser: argparse.ArgumentParser) -> None:
    group = parser.add_argument_group('🔍 Debugging', 'Options for troubleshooting')
    group.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose/debug output.'
    )


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog='table-diff',
        description=DESCRIPTION,
        epilog=EPILOG,
        formatter_class=CustomHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest='command', metavar='COMMAND')
    subparsers.required = True

    # compare
    compare_parser = subparsers.add_parser(
        'compare',
        help='Compare the contents of two files',
        formatter_class=CustomHelpFormatter,
    )
    compare_parser.add_argument('left', metavar='LEFT', help='First file')
    compare_parser.add_argument('right', metavar='RIGHT', help='Second file')
    tolerance_group = compare_parser.add_argument_group(
        '⚙️  Tolerance', 'Float comparison settings'
    )
    tolerance_group.add_argument(
        '--epsilon', '-e',
        type=float,
        default=None,
        metavar='EPS',
        help='Treat float cells of the same width as equal\n'
             'when they differ by less than EPS.\n'
             f'(default: {get_config_value("epsilon", "exact comparison")})'
    )
    tolerance_group.add_argument(
        '--signed-epsilon',
        dest='signed_epsilon',
        action='store_const',
        const=True,
        default=None,
        help='Accept when left - right < EPS instead of\n'
             '|left - right| < EPS.'
    )
    tolerance_group.add_argument(
        '--absolute-epsilon',
        dest='signed_epsilon',
        action='store_const',
        const=False,
        help='Accept only when |left - right| < EPS,\n'
             'overriding signed_tolerance in the config file.'
    )
    output_group = compare_parser.add_argument_group(
        '📤 Output Configuration', 'Control how the outcome is reported'
    )
    output_group.add_argument(
        '--json',
        action='store_true',
        help='Print the comparison summary as JSON.'
    )
    output_group.add_argument(
        '--output-json', '-o',
        type=str,
        default=None,
        metavar='FILE',
        help='Also write the JSON summary to FILE.'
    )
    _add_read_options(compare_parser)
    _add_debug_options(compare_parser)

    # view
    view_parser = subparsers.add_parser(
        'view', help='View contents of a file', formatter_class=CustomHelpFormatter
    )
    view_parser.add_argument('filename', metavar='FILE')
    view_parser.add_argument(
        '--limit', '-l',
        type=int,
        default=get_config_value('view_limit', DEFAULT_VIEW_LIMIT),
        metavar='NUM',
        help=f'Rows to show, 0 for all.\n(default: {DEFAULT_VIEW_LIMIT})'
    )
    _add_read_options(view_parser)
    _add_debug_options(view_parser)

    # schema
    schema_parser = subparsers.add_parser(
        'schema', help='View schema of a file', formatter_class=CustomHelpFormatter
    )
    schema_parser.add_argument('filename', metavar='FILE')
    _add_read_options(schema_parser)
    _add_debug_options(schema_parser)

    # count
    count_parser = subparsers.add_parser(
        'count', help='Show the row count of a file', formatter_class=CustomHelpFormatter
    )
    count_parser.add_argument('filename', metavar='FILE')
    _add_read_options(count_parser)
    _add_debug_options(count_parser)

    # convert
    convert_parser = subparsers.add_parser(
        'convert',
        help='Convert a file to a different format',
        formatter_class=CustomHelpFormatter,
    )
    convert_parser.add_argument('input', metavar='INPUT')
    convert_parser.add_argument('output', metavar='OUTPUT')
    convert_parser.add_argument(
        '--zstd', '-z',
        action='store_true',
        help='Use zstd compression for Parquet output.'
    )
    _add_read_options(convert_parser)
    _add_debug_options(convert_parser)

    # view-parquet-meta
    meta_parser = subparsers.add_parser(
        'view-parquet-meta',
        help='View Parquet metadata',
        formatter_class=CustomHelpFormatter,
    )
    meta_parser.add_argument('input', metavar='FILE')
    _add_debug_options(meta_parser)

    # remove-invalid-utf8
    utf8_parser = subparsers.add_parser(
        'remove-invalid-utf8',
        help='Remove invalid UTF-8 characters from a text file',
        formatter_class=CustomHelpFormatter,
    )
    utf8_parser.add_argument('input', metavar='FILE')
    utf8_parser.add_argument(
        'output',
        metavar='OUTPUT',
        nargs='?',
        default=None,
        help='Write the cleaned text here instead of rewriting FILE.'
    )
    _add_debug_options(utf8_parser)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    from .main import run_main

    parser = create_parser()
    args = parser.parse_args(argv)
    return run_main(args)


if __name__ == "__main__":
    sys.exit(main())
