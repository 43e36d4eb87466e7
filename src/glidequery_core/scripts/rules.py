"""Lint rules for GlideQuery syntax validation.

Each rule is an entry in RULES: a name, a severity, and a check function
that takes the raw script and yields Findings. Rules are shallow regex
scans over the text, not a parse, so each one can be tested on its own
and new rules are added by appending to the table.

Line numbers are 1-based: the count of newlines before the match offset,
plus one.
"""

import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import Enum

from glidequery_core.scripts.patterns import (
    TERMINAL_OPERATIONS,
    UNDEFINED_METHODS,
    VALID_FIELD_FLAGS,
    VALID_METHODS,
    VALID_OPERATORS,
)


class Severity(str, Enum):
    """How a finding affects validity."""

    ERROR = "error"
    """Invalidates the script."""

    WARNING = "warning"
    """Advisory only."""


@dataclass(frozen=True)
class Finding:
    """A single rule hit. line is None when the finding is script-wide."""

    message: str
    line: int | None = None


@dataclass(frozen=True)
class LintRule:
    """
    A named, independently testable validation check.

    Attributes:
        name: Stable identifier for the rule
        severity: ERROR findings invalidate the script, WARNING ones do not
        check: Function from script text to findings
        description: One-line summary of what the rule catches
    """

    name: str
    severity: Severity
    check: Callable[[str], Iterator[Finding]]
    description: str = ""

    def run(self, script: str) -> list[Finding]:
        return list(self.check(script))


def line_number(script: str, offset: int) -> int:
    """1-based line of the character at offset."""
    return script.count("\n", 0, offset) + 1


_QUOTE = "['\"`]"
_QUOTED = rf"{_QUOTE}([^'\"`]+){_QUOTE}"

_UNDEFINED_METHOD_PATTERNS = [
    (re.compile(rf"\.{name}\s*\("), name, suggestion)
    for name, suggestion in UNDEFINED_METHODS
]

# Any terminal call; alternation backtracks so `.select(` never eats `.selectOne(`
_TERMINAL_NAMES = "|".join(re.escape(name) for name in TERMINAL_OPERATIONS)
_TERMINAL_CALL = re.compile(rf"\.({_TERMINAL_NAMES})\s*\(")

_WHERE_PATTERN = re.compile(rf"\.(?:where|orWhere)\s*\(\s*{_QUOTED}\s*,\s*{_QUOTED}\s*,")
_HAVING_PATTERN = re.compile(
    rf"\.having\s*\(\s*{_QUOTED}\s*,\s*{_QUOTED}\s*,\s*{_QUOTED}\s*,"
)
_FIELD_FLAG_PATTERN = re.compile(rf"{_QUOTE}([a-zA-Z_][a-zA-Z0-9_]*\$[A-Z_]+){_QUOTE}")

_MISSING_PARENS_PATTERNS = [
    (re.compile(rf"\.{method}(?![A-Za-z0-9_])(?!\s*\()"), method)
    for method in VALID_METHODS
]

_OPTIONAL_GET = re.compile(r"\.get\s*\(\s*\)")
_IS_PRESENT = re.compile(r"\.isPresent\s*\(\s*\)")
_OR_ELSE = re.compile(r"\.orElse\s*\(")
_GLIDE_RECORD = re.compile(r"GlideRecord\s*\(", re.IGNORECASE)

_OPERATOR_LIST = ", ".join(VALID_OPERATORS)
_FLAG_LIST = ", ".join(VALID_FIELD_FLAGS)


def check_undefined_methods(script: str) -> Iterator[Finding]:
    for pattern, name, suggestion in _UNDEFINED_METHOD_PATTERNS:
        for match in pattern.finditer(script):
            yield Finding(
                f"Undefined method '.{name}()' - {suggestion}",
                line_number(script, match.start()),
            )


def check_terminal_chaining(script: str) -> Iterator[Finding]:
    # Each call is compared with the next one; a `;` after the first call's
    # closing paren ends the statement. Findings point at the second call.
    calls = list(_TERMINAL_CALL.finditer(script))
    for current, following in zip(calls, calls[1:]):
        close = script.find(")", current.end())
        if close == -1 or close >= following.start():
            continue
        if script.find(";", close, following.start()) != -1:
            continue
        yield Finding(
            f"Cannot chain terminal operations: .{current.group(1)}() "
            f"followed by .{following.group(1)}()",
            line_number(script, following.start()),
        )


def check_where_operators(script: str) -> Iterator[Finding]:
    # 3-argument form only; .where('field', value) has no operator
    for match in _WHERE_PATTERN.finditer(script):
        operator = match.group(2)
        if operator not in VALID_OPERATORS:
            yield Finding(
                f"Invalid operator '{operator}' - must be one of: {_OPERATOR_LIST}",
                line_number(script, match.start()),
            )


def check_having_operators(script: str) -> Iterator[Finding]:
    # .having('aggregate', 'field', 'OPERATOR', value)
    for match in _HAVING_PATTERN.finditer(script):
        operator = match.group(3)
        if operator not in VALID_OPERATORS:
            yield Finding(
                f"Invalid operator '{operator}' in having clause - "
                f"must be one of: {_OPERATOR_LIST}",
                line_number(script, match.start()),
            )


def check_field_flags(script: str) -> Iterator[Finding]:
    for match in _FIELD_FLAG_PATTERN.finditer(script):
        flag = "$" + match.group(1).split("$", 1)[1]
        if flag not in VALID_FIELD_FLAGS:
            line = line_number(script, match.start())
            yield Finding(
                f"Unknown field flag '{flag}' at line {line} - valid flags: {_FLAG_LIST}",
                line,
            )


def check_missing_parentheses(script: str) -> Iterator[Finding]:
    for pattern, method in _MISSING_PARENS_PATTERNS:
        for match in pattern.finditer(script):
            line = line_number(script, match.start())
            yield Finding(f"Method '.{method}' may be missing parentheses at line {line}", line)


def check_unguarded_optional(script: str) -> Iterator[Finding]:
    # Heuristic: any guard anywhere in the script counts
    if (
        _OPTIONAL_GET.search(script)
        and not _IS_PRESENT.search(script)
        and not _OR_ELSE.search(script)
    ):
        yield Finding(
            "Calling .get() on Optional without checking .isPresent() or using "
            ".orElse() may throw an error if empty"
        )


def check_legacy_glide_record(script: str) -> Iterator[Finding]:
    if _GLIDE_RECORD.search(script):
        yield Finding(
            "GlideRecord detected - consider using GlideQuery for better "
            "performance and type safety"
        )


RULES: list[LintRule] = [
    LintRule(
        "undefined-method",
        Severity.ERROR,
        check_undefined_methods,
        "Plausible method names that GlideQuery does not define",
    ),
    LintRule(
        "terminal-chaining",
        Severity.ERROR,
        check_terminal_chaining,
        "Two terminal operations in one statement",
    ),
    LintRule(
        "invalid-operator",
        Severity.ERROR,
        check_where_operators,
        "Unknown operator in a 3-argument where/orWhere clause",
    ),
    LintRule(
        "invalid-having-operator",
        Severity.ERROR,
        check_having_operators,
        "Unknown operator in a having clause",
    ),
    LintRule(
        "missing-parentheses",
        Severity.WARNING,
        check_missing_parentheses,
        "Known method referenced without a call",
    ),
    LintRule(
        "unknown-field-flag",
        Severity.WARNING,
        check_field_flags,
        "Field suffix modifier outside the allow-list",
    ),
    LintRule(
        "legacy-glide-record",
        Severity.WARNING,
        check_legacy_glide_record,
        "Legacy GlideRecord cursor API",
    ),
    LintRule(
        "unguarded-optional-get",
        Severity.WARNING,
        check_unguarded_optional,
        "Optional.get() with no presence check or fallback",
    ),
]
