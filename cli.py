#!/usr/bin/env python3
"""
CLI for GraphQL operation usage analysis

Reports, for every query, mutation and subscription in a GraphQL schema,
whether its name appears in the project's source files and where it was
first seen. Unused operations are a finding, not a failure: the exit code is
0 whenever the analysis completes.

Usage:
    python cli.py analyze --endpoint https://api.example.com/graphql
    python cli.py analyze --sdl ./schema.graphql --directory ./frontend
    python cli.py analyze --sdl ./schema.graphql --sort uncompleted-first --table
"""

import argparse
import os
import sys
from typing import List, Optional

# Add current directory to path for imports
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from analyzer import AnalyzeOptions, analyze_graphql_usage
from config import (
    DEFAULT_EXCLUDE,
    DEFAULT_INCLUDE,
    DEFAULT_OUTPUT,
    SORT_CHOICES,
    ConfigurationError,
    schema_source_from_options,
    split_patterns,
)
from loader import SchemaUnavailable
from reporter import UsageReporter, assemble, print_error, write_markdown_report


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="graphql-usage",
        description="Analyze GraphQL operation usage in your codebase",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  graphql-usage analyze --endpoint https://api.example.com/graphql
  graphql-usage analyze --sdl schema.graphql --include "src/**/*.ts"
  graphql-usage analyze --sdl introspection.json --sort completed-first
        """,
    )
    parser.add_argument("--version", action="version", version="%(prog)s 1.0.0")
    subparsers = parser.add_subparsers(dest="command")

    analyze = subparsers.add_parser(
        "analyze", help="Analyze GraphQL operations usage"
    )
    analyze.add_argument("-e", "--endpoint", type=str, help="GraphQL endpoint URL")
    analyze.add_argument(
        "-s",
        "--sdl",
        type=str,
        help="Path to GraphQL SDL file (or saved introspection .json)",
    )
    analyze.add_argument(
        "-i",
        "--include",
        type=str,
        default=DEFAULT_INCLUDE,
        help=f"File patterns to include (comma-separated, default: {DEFAULT_INCLUDE})",
    )
    analyze.add_argument(
        "-x",
        "--exclude",
        type=str,
        default=DEFAULT_EXCLUDE,
        help=f"File patterns to exclude (comma-separated, default: {DEFAULT_EXCLUDE})",
    )
    analyze.add_argument(
        "-o",
        "--output",
        type=str,
        default=DEFAULT_OUTPUT,
        help="Output markdown file path",
    )
    analyze.add_argument(
        "-d",
        "--directory",
        type=str,
        default=os.getcwd(),
        help="Project directory to analyze (default: current directory)",
    )
    analyze.add_argument(
        "--sort",
        choices=list(SORT_CHOICES),
        default="original",
        help="Report ordering",
    )
    analyze.add_argument(
        "--table", action="store_true", help="Print the detailed report table"
    )
    analyze.add_argument(
        "--verbose", action="store_true", help="Log every operation as it is found"
    )
    return parser


def run_analyze(args: argparse.Namespace) -> int:
    """Run the `analyze` command. Returns the process exit code."""
    try:
        schema_source = schema_source_from_options(args.endpoint, args.sdl)
    except ConfigurationError as e:
        print_error(str(e))
        return 1

    UsageReporter.print_analysis_start()
    try:
        catalog = analyze_graphql_usage(
            AnalyzeOptions(
                schema_source=schema_source,
                include=split_patterns(args.include),
                exclude=split_patterns(args.exclude),
                project_directory=args.directory,
                verbose=args.verbose,
            )
        )
        rows = assemble(catalog, SORT_CHOICES[args.sort])
        write_markdown_report(rows, args.output)
    except (SchemaUnavailable, ConfigurationError) as e:
        print_error(str(e))
        return 1
    except Exception as e:
        print_error(f"Unexpected failure: {e}")
        return 1

    if args.table:
        UsageReporter.print_table(rows)
    UsageReporter.print_summary(rows)
    UsageReporter.print_report_written(args.output)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "analyze":
        return run_analyze(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
