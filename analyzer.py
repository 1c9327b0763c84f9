# analyzer.py
"""Whole-project analysis used by the CLI."""

from dataclasses import dataclass
from typing import List

from classifier import looks_like_operation
from config import SchemaSource
from loader import EmptyCatalogError, build_catalog
from models import OperationDescriptor
from reporter import UsageReporter
from scanner import FileReadFailure, find_files, scan_paths


@dataclass
class AnalyzeOptions:
    schema_source: SchemaSource
    include: List[str]
    exclude: List[str]
    project_directory: str
    verbose: bool = False


def analyze_graphql_usage(options: AnalyzeOptions) -> List[OperationDescriptor]:
    """
    Build the operation catalog, scan every matching file under the project
    directory and return the catalog with locations filled in.

    Raises:
        SchemaUnavailable: if the schema cannot be loaded
        EmptyCatalogError: if the schema exposes no operations
    """
    UsageReporter.print_introspection_start()
    catalog = build_catalog(options.schema_source)
    if not catalog:
        raise EmptyCatalogError("No GraphQL operations found in schema")
    UsageReporter.print_catalog_size(len(catalog))

    files = find_files(options.project_directory, options.include, options.exclude)
    UsageReporter.print_file_count(len(files))

    def on_match(descriptor: OperationDescriptor, line: str) -> None:
        if options.verbose:
            UsageReporter.print_operation_found(descriptor, looks_like_operation(line))

    def on_skip(path: str, error: FileReadFailure) -> None:
        UsageReporter.print_unreadable_file(path)

    scan_paths(catalog, files, on_match=on_match, on_skip=on_skip)
    return catalog

