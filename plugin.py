# plugin.py
"""
Build-tool plugin: piggybacks on the files a bundler already reads.

The host calls `transform(code, file_id)` for every module it loads and
`build_end()` once the build is done. The plugin never changes the source;
`transform` always returns None.

Hosts may call `transform` from several threads, so the session serializes
the one-time catalog build and the per-file scan.
"""

import os
import threading
from typing import List, Optional, Set

from config import PluginOptions
from loader import SchemaUnavailable, build_catalog
from models import OperationDescriptor
from reporter import UsageReporter, assemble, write_markdown_report
from scanner import is_included, scan


class ScanSession:
    """
    Catalog and processed-file state for one plugin instance.

    The catalog is built on the first file seen. Concurrent first callers wait
    for that build and reuse its result; if it fails, the failure is kept and
    re-raised to every later caller instead of retrying.
    """

    def __init__(self, options: PluginOptions):
        self.options = options
        self.processed_files: Set[str] = set()
        self._catalog: Optional[List[OperationDescriptor]] = None
        self._build_error: Optional[BaseException] = None
        self._build_lock = threading.Lock()
        self._scan_lock = threading.Lock()

    @property
    def catalog(self) -> List[OperationDescriptor]:
        return self._catalog or []

    def ensure_catalog(self) -> List[OperationDescriptor]:
        with self._build_lock:
            if self._build_error is not None:
                raise SchemaUnavailable(
                    f"Schema build failed earlier: {self._build_error}"
                ) from self._build_error
            if self._catalog is None:
                try:
                    self._catalog = build_catalog(self.options.schema_source)
                except Exception as e:
                    self._build_error = e
                    raise
            return self._catalog

    def relative_identity(self, file_id: str) -> str:
        """Path used for include/exclude matching, relative to the plugin root."""
        # bundlers append queries such as `?v=123` to module ids
        path = file_id.split("?", 1)[0]
        if os.path.isabs(path):
            root = os.path.abspath(self.options.root or os.getcwd())
            relative = os.path.relpath(path, root)
            if not relative.startswith(".."):
                path = relative
        return path.replace(os.sep, "/")

    def should_process(self, file_id: str) -> bool:
        return is_included(
            self.relative_identity(file_id), self.options.include, self.options.exclude
        )

    def process(self, code: str, file_id: str) -> bool:
        """
        Scan one file unless it is filtered out or was already processed.

        Returns:
            True if the file was scanned.
        """
        catalog = self.ensure_catalog()
        if not self.should_process(file_id):
            return False
        with self._scan_lock:
            if file_id in self.processed_files:
                return False
            self.processed_files.add(file_id)
            scan(catalog, file_id, code)
        return True


class GraphQLUsagePlugin:
    """Hook object handed to the build tool."""

    name = "graphql-usage-plugin"
    apply = "build"

    def __init__(self, options: PluginOptions):
        self.options = options
        self.session = ScanSession(options)

    def transform(self, code: str, file_id: str) -> None:
        self.session.process(code, file_id)
        return None

    def build_end(self) -> None:
        options = self.options
        UsageReporter.print_report_header()
        UsageReporter.print_schema_source(options.schema_source)
        if options.query_directory:
            UsageReporter.print_query_directory(options.query_directory)

        rows = assemble(self.session.catalog, options.ordering)
        if options.print_table:
            UsageReporter.print_table(rows)
        if options.save_report:
            write_markdown_report(rows, options.output_file_name)
            UsageReporter.print_report_written(options.output_file_name)
        UsageReporter.print_summary(rows)


def graphql_usage_plugin(options: PluginOptions) -> GraphQLUsagePlugin:
    return GraphQLUsagePlugin(options)
