"""Immutable pattern catalog shared by the screener and executor.

A PatternCatalog is configuration as a value: it is built once, handed to a
screener at construction, and never mutated. Overrides produce a new
catalog via merge().

Example:
    ```python
    catalog = PatternCatalog.default()
    strict = catalog.merge(max_script_length=2000)
    relaxed = catalog.merge(blacklisted_patterns=[r"gs\\.eval\\s*\\("])
    ```
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass, field, fields, replace
from typing import Any

from glidequery_core.scripts.patterns import (
    BLACKLISTED_PATTERNS,
    CONFIRMATION_OPERATIONS,
    DEFAULT_MAX_SCRIPT_LENGTH,
)


def compile_patterns(patterns: Iterable[str | re.Pattern]) -> tuple[re.Pattern, ...]:
    """
    Compile blacklist entries case-insensitively.

    Pre-compiled patterns are recompiled with IGNORECASE added so that
    matching is always case-insensitive, whatever the caller passed.

    Args:
        patterns: Regex sources or compiled patterns

    Returns:
        Tuple of compiled patterns
    """
    compiled = []
    for pattern in patterns:
        if isinstance(pattern, re.Pattern):
            compiled.append(re.compile(pattern.pattern, pattern.flags | re.IGNORECASE))
        else:
            compiled.append(re.compile(pattern, re.IGNORECASE))
    return tuple(compiled)


@dataclass(frozen=True)
class PatternCatalog:
    """
    Security configuration for script screening.

    Attributes:
        blacklisted_patterns: Compiled patterns that make a script unsafe
        require_confirmation: Operation names reported for confirmation
        max_script_length: Maximum script length in characters
    """

    blacklisted_patterns: tuple[re.Pattern, ...] = field(
        default_factory=lambda: compile_patterns(BLACKLISTED_PATTERNS)
    )
    require_confirmation: tuple[str, ...] = tuple(CONFIRMATION_OPERATIONS)
    max_script_length: int = DEFAULT_MAX_SCRIPT_LENGTH

    def __post_init__(self) -> None:
        # Normalize list inputs so equal catalogs compare and hash equal
        object.__setattr__(
            self, "blacklisted_patterns", compile_patterns(self.blacklisted_patterns)
        )
        object.__setattr__(self, "require_confirmation", tuple(self.require_confirmation))
        if self.max_script_length < 1:
            raise ValueError(
                f"max_script_length must be positive, got {self.max_script_length}"
            )

    @classmethod
    def default(cls) -> "PatternCatalog":
        """Catalog with the built-in blacklist and confirmation list."""
        return cls()

    def merge(self, **overrides: Any) -> "PatternCatalog":
        """
        Return a new catalog with the given fields replaced.

        Fields not named keep their current value. None values are ignored
        so that optional settings can be passed straight through.

        Args:
            **overrides: blacklisted_patterns, require_confirmation,
                and/or max_script_length

        Returns:
            New PatternCatalog

        Raises:
            TypeError: If an unknown field is named
        """
        known = {f.name for f in fields(self)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise TypeError(f"Unknown catalog field(s): {', '.join(unknown)}")
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)
