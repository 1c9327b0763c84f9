#!/usr/bin/env python3
"""
Reporter module for assembling and displaying usage results.

This module handles report assembly (projection + ordering of the catalog),
Markdown rendering and all console output, keeping the loader and scanner
focused on their own logic.
"""

import os
import sys
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from config import NOT_FOUND_MARKER, EndpointSource, SchemaSource
from models import OperationDescriptor, OperationKind, Ordering, ReportRow

KIND_ORDER: Dict[OperationKind, int] = {
    OperationKind.QUERY: 0,
    OperationKind.MUTATION: 1,
    OperationKind.SUBSCRIPTION: 2,
}


# ----------------------------
# Report assembly
# ----------------------------
def to_row(descriptor: OperationDescriptor) -> ReportRow:
    return ReportRow(
        name=descriptor.name,
        kind=descriptor.kind,
        found=descriptor.found,
        path=descriptor.located_path if descriptor.found else NOT_FOUND_MARKER,
        line=descriptor.located_line if descriptor.found else -1,
    )


def order_rows(rows: Sequence[ReportRow], ordering: Ordering) -> List[ReportRow]:
    """
    Reorder report rows.

    FOUND_FIRST and NOT_FOUND_FIRST are stable partitions on `found`: rows
    keep their relative order inside each group, only the group order flips.
    GROUPED puts found rows first and sorts each group by kind, then name.
    """
    if ordering == Ordering.ORIGINAL:
        return list(rows)
    if ordering == Ordering.NOT_FOUND_FIRST:
        return sorted(rows, key=lambda row: row.found)
    if ordering == Ordering.FOUND_FIRST:
        return sorted(rows, key=lambda row: not row.found)
    if ordering == Ordering.GROUPED:
        return sorted(
            rows, key=lambda row: (not row.found, KIND_ORDER[row.kind], row.name)
        )
    raise ValueError(f"Unknown ordering: {ordering!r}")


def assemble(
    catalog: Sequence[OperationDescriptor], ordering: Ordering = Ordering.ORIGINAL
) -> List[ReportRow]:
    """Project the catalog into report rows in the requested order."""
    return order_rows([to_row(d) for d in catalog], ordering)


def count_found(rows: Sequence[ReportRow]) -> int:
    return sum(1 for row in rows if row.found)


def shorten_path(path: str, limit: int = 20) -> str:
    """Keep the tail of long paths for the console table."""
    if len(path) > limit:
        return "..." + path[-limit:]
    return path


# ----------------------------
# Markdown
# ----------------------------
def _escape_cell(value: str) -> str:
    return value.replace("|", "\\|")


def render_markdown(
    rows: Sequence[ReportRow],
    title: str = "GraphQL Usage Report",
    generated_at: Optional[datetime] = None,
) -> str:
    """
    Render report rows as a Markdown document: a summary block followed by one
    table row per operation.
    """
    generated_at = generated_at or datetime.now()
    found = count_found(rows)
    lines = [
        f"# {title}",
        "",
        f"_Generated: {generated_at.strftime('%Y-%m-%d %H:%M:%S')}_",
        "",
        "## Summary",
        "",
        f"- ✅ Found: {found}",
        f"- ❌ Not found: {len(rows) - found}",
        f"- 📊 Total operations: {len(rows)}",
        "",
        "## Operations",
        "",
        "| # | Operation | Type | Status | Path | Line |",
        "|---|-----------|------|--------|------|------|",
    ]
    for i, row in enumerate(rows, 1):
        status = "✅ Found" if row.found else "❌ Not found"
        line = str(row.line) if row.found else "-"
        lines.append(
            f"| {i} | `{_escape_cell(row.name)}` | {row.kind.value} | {status} "
            f"| {_escape_cell(row.path)} | {line} |"
        )
    return "\n".join(lines) + "\n"


def write_markdown_report(
    rows: Sequence[ReportRow], output_path: str, title: str = "GraphQL Usage Report"
) -> str:
    """Write the Markdown report, creating parent directories. Returns the path."""
    parent = os.path.dirname(os.path.abspath(output_path))
    os.makedirs(parent, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(render_markdown(rows, title=title))
    return output_path


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    print(f"Error: {message}", file=sys.stderr)


def print_warning(message: str) -> None:
    """Print a warning message to stderr."""
    print(f"⚠️  {message}", file=sys.stderr)


class UsageReporter:
    """Handles all console output for the usage analyzer."""

    @staticmethod
    def print_analysis_start() -> None:
        print("🔍 Analyzing GraphQL usage...")

    @staticmethod
    def print_introspection_start() -> None:
        print("📡 Introspecting GraphQL schema...")

    @staticmethod
    def print_catalog_size(operation_count: int) -> None:
        print(f"📋 Found {operation_count} operations in schema")

    @staticmethod
    def print_file_count(file_count: int) -> None:
        print(f"📁 Analyzing {file_count} files...")

    @staticmethod
    def print_operation_found(
        descriptor: OperationDescriptor, looks_like_operation: bool = False
    ) -> None:
        hint = " (GraphQL selection)" if looks_like_operation else ""
        print(
            f"✅ Found {descriptor.kind.value}: {descriptor.name} in "
            f"{descriptor.located_path}:{descriptor.located_line}{hint}"
        )

    @staticmethod
    def print_unreadable_file(path: str) -> None:
        print_warning(f"Could not read file: {path}")

    @staticmethod
    def print_report_header() -> None:
        print("\n📊 GraphQL Operations Report:")

    @staticmethod
    def describe_schema_source(source: SchemaSource) -> str:
        if isinstance(source, EndpointSource):
            return f"🌐 Endpoint: {source.url}"
        return f"📄 SDL Path: {source.path}"

    @staticmethod
    def print_schema_source(source: SchemaSource) -> None:
        print(UsageReporter.describe_schema_source(source))

    @staticmethod
    def print_query_directory(directory: str) -> None:
        print(f"📁 Query Directory: {directory}")

    @staticmethod
    def print_table(rows: Sequence[ReportRow]) -> None:
        """Print rows as a rich table; long paths are shortened to their tail."""
        print("\nDetailed Report:")
        table = Table(box=box.SIMPLE, pad_edge=False, expand=False)
        table.add_column("#", justify="right", no_wrap=True)
        table.add_column("name", no_wrap=True)
        table.add_column("type", no_wrap=True)
        table.add_column("path", no_wrap=True)
        table.add_column("line", justify="right", no_wrap=True)
        table.add_column("status", no_wrap=True)
        for i, row in enumerate(rows):
            table.add_row(
                str(i),
                row.name,
                row.kind.value,
                shorten_path(row.path) if row.found else row.path,
                str(row.line),
                Text("✅ Found", style="green") if row.found else Text("❌ Not found", style="red"),
            )
        Console(file=sys.stdout, soft_wrap=True).print(table)

    @staticmethod
    def print_summary(rows: Sequence[ReportRow]) -> None:
        found = count_found(rows)
        print(f"\n✅ Found: {found}")
        print(f"❌ Not found: {len(rows) - found}")
        print(f"📊 Total operations: {len(rows)}")

    @staticmethod
    def print_report_written(output_path: str) -> None:
        print(f"📝 Report written to: {output_path}")
