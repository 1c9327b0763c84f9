# scanner.py
"""
Usage scanning: finds where each schema operation name first appears in
source text.

Matching is a plain, case-sensitive substring test on each line; there is no
word-boundary check, so `addEvent` also matches inside `addEventListener`.
Once a descriptor is found it is never looked at again, so the first match
recorded in a session is final.
"""

import os
import re
from functools import lru_cache
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from models import OperationDescriptor

# Called with (descriptor, matched line text) whenever a descriptor is located
MatchCallback = Callable[[OperationDescriptor, str], None]


class FileReadFailure(OSError):
    """A candidate source file could not be opened or decoded."""


def scan(
    catalog: Sequence[OperationDescriptor],
    file_identity: str,
    file_text: str,
    on_match: Optional[MatchCallback] = None,
) -> None:
    """
    Scan one file's text and record the first matching line for every
    descriptor in `catalog` that has not been found yet.

    Lines are numbered from 1. Descriptors are visited in catalog order.
    """
    lines = file_text.split("\n")
    for descriptor in catalog:
        if descriptor.found:
            continue
        for line_number, line in enumerate(lines, 1):
            if descriptor.name in line:
                descriptor.mark_found(file_identity, line_number)
                if on_match:
                    on_match(descriptor, line)
                break


def scan_all(
    catalog: Sequence[OperationDescriptor],
    files: Iterable[Tuple[str, str]],
    on_match: Optional[MatchCallback] = None,
) -> None:
    """Apply `scan` to each (identity, text) pair in the order given."""
    for file_identity, file_text in files:
        scan(catalog, file_identity, file_text, on_match=on_match)


def read_source_file(path: str) -> str:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise FileReadFailure(f"Could not read file: {path} ({e})") from e


def scan_paths(
    catalog: Sequence[OperationDescriptor],
    paths: Iterable[str],
    on_match: Optional[MatchCallback] = None,
    on_skip: Optional[Callable[[str, FileReadFailure], None]] = None,
) -> List[str]:
    """
    Read and scan each path in order. Unreadable files are skipped and
    reported through `on_skip`; the scan continues with the remaining files.

    Returns:
        The paths that were skipped.
    """
    skipped: List[str] = []
    for path in paths:
        try:
            text = read_source_file(path)
        except FileReadFailure as e:
            skipped.append(path)
            if on_skip:
                on_skip(path, e)
            continue
        scan(catalog, path, text, on_match=on_match)
    return skipped


# ----------------------------
# File enumeration
#
# Patterns are globs matched against the POSIX path relative to the project
# directory, one path segment at a time:
# - `*` and `?` never cross `/`
# - a `**` segment matches any number of directories, including none
#   (`**/*.ts` matches `a.ts`, `src/**/*.ts` matches `src/a.ts`)
# - `[abc]` / `[!abc]` character classes and `{ts,tsx}` alternatives
# ----------------------------
def _segment_regex(segment: str) -> str:
    out = []
    i = 0
    while i < len(segment):
        char = segment[i]
        if char == "*":
            out.append("[^/]*")
        elif char == "?":
            out.append("[^/]")
        elif char == "[" and "]" in segment[i + 2 :]:
            end = segment.index("]", i + 2)
            body = segment[i + 1 : end]
            if body.startswith("!"):
                body = "^" + body[1:]
            body = body.replace("\\", "\\\\")
            out.append(f"[{body}]")
            i = end
        elif char == "{" and "}" in segment[i:]:
            end = segment.index("}", i)
            options = segment[i + 1 : end].split(",")
            out.append("(?:" + "|".join(_segment_regex(o) for o in options) + ")")
            i = end
        else:
            out.append(re.escape(char))
        i += 1
    return "".join(out)


@lru_cache(maxsize=256)
def glob_to_regex(pattern: str) -> "re.Pattern[str]":
    """Compile a glob pattern into a regex over project-relative POSIX paths."""
    pattern = pattern.replace("\\", "/")
    if pattern.startswith("./"):
        pattern = pattern[2:]
    segments = pattern.split("/")
    out = []
    for index, segment in enumerate(segments):
        last = index == len(segments) - 1
        if segment == "**":
            out.append(".*" if last else "(?:[^/]+/)*")
        else:
            out.append(_segment_regex(segment) + ("" if last else "/"))
    return re.compile("".join(out))


def matches_patterns(relative_path: str, patterns: Iterable[str]) -> bool:
    relative_path = relative_path.replace(os.sep, "/")
    return any(glob_to_regex(p).fullmatch(relative_path) for p in patterns)


def is_included(relative_path: str, include: Sequence[str], exclude: Sequence[str]) -> bool:
    return matches_patterns(relative_path, include) and not matches_patterns(
        relative_path, exclude
    )


def find_files(
    directory: str, include: Sequence[str], exclude: Sequence[str]
) -> List[str]:
    """
    Find all files under `directory` matching an include pattern and no
    exclude pattern.

    Excluded directories are pruned during the walk (`node_modules/**`
    excludes the whole `node_modules` tree).

    Returns:
        Sorted absolute paths, so repeated runs report in the same order.
    """
    root = os.path.abspath(directory)
    # only `dir/**` style patterns exclude a whole subtree
    prune = [p for p in exclude if p.endswith("/**")]
    files: List[str] = []
    for dirpath, dirnames, filenames in os.walk(root):
        rel_dir = os.path.relpath(dirpath, root)
        rel_dir = "" if rel_dir == "." else rel_dir.replace(os.sep, "/") + "/"
        dirnames[:] = sorted(
            d for d in dirnames if not matches_patterns(f"{rel_dir}{d}/", prune)
        )
        for filename in filenames:
            if is_included(f"{rel_dir}{filename}", include, exclude):
                files.append(os.path.join(dirpath, filename))
    return sorted(files)
