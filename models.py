# models.py
"""Data types shared by the loader, scanner and reporter."""

from dataclasses import dataclass
from enum import Enum


class OperationKind(str, Enum):
    QUERY = "Query"
    MUTATION = "Mutation"
    SUBSCRIPTION = "Subscription"


class Ordering(str, Enum):
    """Row orderings supported by the report."""

    ORIGINAL = "original"
    FOUND_FIRST = "found-first"
    NOT_FOUND_FIRST = "not-found-first"
    # Found first, then by kind, then by name
    GROUPED = "grouped"


@dataclass
class OperationDescriptor:
    """
    One schema operation and where (if anywhere) its name was first seen.

    `found`, `located_path` and `located_line` are written at most once by the
    scanner; a found descriptor is never re-examined.
    """

    name: str
    kind: OperationKind
    located_path: str = ""
    located_line: int = -1
    found: bool = False
    # Collected from the schema, not used for scanning or reporting yet
    is_deprecated: bool = False

    def mark_found(self, path: str, line: int) -> None:
        self.found = True
        self.located_path = path
        self.located_line = line


@dataclass(frozen=True)
class ReportRow:
    name: str
    kind: OperationKind
    found: bool
    path: str
    line: int
