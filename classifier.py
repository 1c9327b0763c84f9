# classifier.py
"""
Line classifier: does a single line of source text look like part of a
GraphQL operation?

This is a heuristic used for diagnostics only (the usage scan never depends on
it). Rules are evaluated in order on the trimmed line and the first rule that
decides wins. Each rule is a small independent predicate so it can be tested
on its own.

REGEX PATTERNS EXPLANATION:
1. NESTED_ARGUMENT_SELECTION:
   r'^IDENT\\s*(\\([^()]*:[^()]*\\))?\\s*\\{(?:[^:()]|\\([^()]*\\))*\\}$'
   - IDENT: a GraphQL name, [_A-Za-z][_0-9A-Za-z]*
   - (\\([^()]*:[^()]*\\))?: optional argument list containing a colon
     (a GraphQL argument such as `type: $type`)
   - \\{(?:[^:()]|\\([^()]*\\))*\\}: a brace body with no colon outside parens

2. MINIMAL_SELECTION_SET:
   r'^\\{\\s*IDENT(\\s*\\{[^:]*\\})?\\s*\\}$'
   - `{ hello }`, or `{ user { name } }` when the field carries its own
     colon-free nested selection

3. FIELD_WITH_BODY:
   r'^IDENT\\s*(\\([^()]*\\))?\\s*\\{.*\\}$'
   - a field, optional arguments, any brace body closed on the same line

4. FIELD_OPENER:
   r'^IDENT\\s*(\\([^()]*\\))?\\s*\\{$'
   - a field opening a selection set that continues on the next lines
"""

import re
from typing import Any, Callable, List, Optional, Tuple

IDENT = r"[_A-Za-z][_0-9A-Za-z]*"

DECLARATION_PREFIXES = ("const ", "let ", "var ")

NESTED_ARGUMENT_SELECTION = re.compile(
    rf"^{IDENT}\s*(\([^()]*:[^()]*\))?\s*\{{(?:[^:()]|\([^()]*\))*\}}$"
)
MINIMAL_SELECTION_SET = re.compile(rf"^\{{\s*{IDENT}(\s*\{{[^:]*\}})?\s*\}}$")
FIELD_WITH_BODY = re.compile(rf"^{IDENT}\s*(\([^()]*\))?\s*\{{.*\}}$")
FIELD_OPENER = re.compile(rf"^{IDENT}\s*(\([^()]*\))?\s*\{{$")

# `=` that is not part of ==, !=, <=, >= or =>
BARE_ASSIGNMENT = re.compile(r"(?<![=!<>])=(?![=>])")

# A rule returns True (accept), False (reject) or None (no decision).
Rule = Callable[[str], Optional[bool]]


def reject_javascript(line: str) -> Optional[bool]:
    """Rule 1: obvious JavaScript/TypeScript constructs are never operations."""
    if line.startswith(DECLARATION_PREFIXES):
        return False
    if "function" in line or "=>" in line:
        return False
    if "return " in line:
        return False
    if "[" in line or "]" in line:
        return False
    # object literal holding an arrow function
    if "{" in line and "=>" in line:
        return False
    if BARE_ASSIGNMENT.search(line):
        return False
    # object shorthand such as `{ hello:{`
    if ":{" in line:
        return False
    return None


def accept_nested_argument_selection(line: str) -> Optional[bool]:
    """Rule 2: `addEvent(type: $type) { id }`."""
    return True if NESTED_ARGUMENT_SELECTION.match(line) else None


def accept_minimal_selection_set(line: str) -> Optional[bool]:
    """Rule 3: `{ hello }`."""
    return True if MINIMAL_SELECTION_SET.match(line) else None


def accept_field_with_body(line: str) -> Optional[bool]:
    """Rule 4: `addEvent { ... }` / `addEvent(args) { ... }`."""
    return True if FIELD_WITH_BODY.match(line) else None


def accept_field_opener(line: str) -> Optional[bool]:
    """Rule 5: `customersByMonth {` with the selection continuing below."""
    return True if FIELD_OPENER.match(line) else None


RULES: List[Tuple[str, Rule]] = [
    ("javascript", reject_javascript),
    ("nested-argument-selection", accept_nested_argument_selection),
    ("minimal-selection-set", accept_minimal_selection_set),
    ("field-with-body", accept_field_with_body),
    ("field-opener", accept_field_opener),
]


def classify_line(line: Any) -> Tuple[bool, Optional[str]]:
    """
    Classify a line and report which rule decided.

    Returns:
        (verdict, rule name), where the rule name is None when no rule matched
        (or the input was not a non-empty string) and the verdict is False.
    """
    if not line or not isinstance(line, str):
        return False, None
    trimmed = line.strip()
    if not trimmed:
        return False, None
    for rule_name, rule in RULES:
        verdict = rule(trimmed)
        if verdict is not None:
            return verdict, rule_name
    return False, None


def looks_like_operation(line: Any) -> bool:
    """Return True if `line` plausibly contains a GraphQL operation fragment."""
    return classify_line(line)[0]
