# config.py
"""
Configuration for the GraphQL usage analyzer.

Holds the CLI/plugin defaults, the schema source types and the request
settings read from the environment. A `.env` file in the working directory is
loaded on import, so tokens for protected endpoints can live there:

    GRAPHQL_AUTH_HEADER=Authorization
    GRAPHQL_AUTH_TOKEN=Bearer abc123
    GRAPHQL_REQUEST_TIMEOUT=30
"""

import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from dotenv import load_dotenv

from models import Ordering

# Load environment variables from .env
load_dotenv()


DEFAULT_INCLUDE = "**/*.ts,**/*.tsx"
DEFAULT_EXCLUDE = "node_modules/**"
DEFAULT_OUTPUT = "./graphql-usage-report.md"
DEFAULT_PLUGIN_OUTPUT = "graphql-usage-report.md"
DEFAULT_REQUEST_TIMEOUT = 30.0

NOT_FOUND_MARKER = "Not found"

# CLI --sort values mapped onto report orderings
SORT_CHOICES: Dict[str, Ordering] = {
    "original": Ordering.ORIGINAL,
    "completed-first": Ordering.FOUND_FIRST,
    "uncompleted-first": Ordering.NOT_FOUND_FIRST,
    "grouped": Ordering.GROUPED,
}


class ConfigurationError(ValueError):
    """Raised when the analyzer is configured inconsistently (e.g. no schema source)."""


@dataclass(frozen=True)
class EndpointSource:
    """Schema retrieved by introspecting a live GraphQL endpoint."""

    url: str


@dataclass(frozen=True)
class SdlSource:
    """Schema read from a static schema-definition document (or saved introspection JSON)."""

    path: str


SchemaSource = Union[EndpointSource, SdlSource]


def schema_source_from_options(
    endpoint: Optional[str] = None, sdl_path: Optional[str] = None
) -> SchemaSource:
    """
    Build the schema source from the two mutually exclusive options.

    Raises:
        ConfigurationError: if neither or both options are given
    """
    if endpoint and sdl_path:
        raise ConfigurationError("Only one of --endpoint or --sdl may be provided")
    if endpoint:
        return EndpointSource(endpoint)
    if sdl_path:
        return SdlSource(sdl_path)
    raise ConfigurationError("Either --endpoint or --sdl must be provided")


def split_patterns(value: Union[str, List[str], None]) -> List[str]:
    """Split a comma-separated pattern option into a clean list."""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [p.strip() for p in value if p and p.strip()]


@dataclass(frozen=True)
class RequestSettings:
    timeout: float = DEFAULT_REQUEST_TIMEOUT
    headers: Dict[str, str] = field(default_factory=dict)


def get_request_settings() -> RequestSettings:
    """
    Read HTTP settings for endpoint introspection from the environment.

    GRAPHQL_AUTH_HEADER and GRAPHQL_AUTH_TOKEN must both be set for the auth
    header to be sent. An unparsable GRAPHQL_REQUEST_TIMEOUT is a configuration
    error rather than silently falling back to the default.
    """
    raw_timeout = os.getenv("GRAPHQL_REQUEST_TIMEOUT")
    timeout = DEFAULT_REQUEST_TIMEOUT
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError as e:
            raise ConfigurationError(
                f"GRAPHQL_REQUEST_TIMEOUT must be a number, got {raw_timeout!r}"
            ) from e

    headers: Dict[str, str] = {}
    token_header = os.getenv("GRAPHQL_AUTH_HEADER")
    token = os.getenv("GRAPHQL_AUTH_TOKEN")
    if token_header and token:
        headers[token_header] = token

    return RequestSettings(timeout=timeout, headers=headers)


@dataclass
class PluginOptions:
    """Options accepted by the build-tool plugin."""

    schema_source: SchemaSource
    include: List[str] = field(default_factory=lambda: split_patterns(DEFAULT_INCLUDE))
    exclude: List[str] = field(default_factory=lambda: split_patterns(DEFAULT_EXCLUDE))
    # Directory that include/exclude patterns are relative to (defaults to cwd)
    root: Optional[str] = None
    query_directory: Optional[str] = None
    output_file_name: str = DEFAULT_PLUGIN_OUTPUT
    save_report: bool = True
    print_table: bool = False
    ordering: Ordering = Ordering.ORIGINAL
