"""Security screening for GlideQuery scripts.

The ScriptSecurityScreener is the hard gate in front of remote execution:
  1. Length check - reject oversized scripts
  2. Blacklist scan - reject scripts reaching outside the query API
  3. Dangerous operation scan - report bulk writes and workflow bypasses

Layers 1 and 2 decide the verdict and never short-circuit, so every
violation is reported. Layer 3 is informational only. The screener only
accepts or rejects; it never rewrites a script to strip offending text.
"""

import logging
import re
from functools import lru_cache

from glidequery_core.scripts.catalog import PatternCatalog
from glidequery_core.scripts.types import SecurityVerdict

logger = logging.getLogger(__name__)


@lru_cache(maxsize=64)
def operation_call_pattern(name: str) -> re.Pattern:
    """Pattern for a `.name(` call, case-insensitive and whitespace-tolerant."""
    return re.compile(rf"\.{re.escape(name)}\s*\(", re.IGNORECASE)


def detect_operations(script: str, names: list[str] | tuple[str, ...]) -> list[str]:
    """
    Return the names called anywhere in the script, each once.

    Args:
        script: Script content to scan
        names: Operation names to look for

    Returns:
        Matching names in the order given
    """
    found: list[str] = []
    seen: set[str] = set()
    for name in names:
        key = name.lower()
        if key not in seen and operation_call_pattern(name).search(script):
            seen.add(key)
            found.append(name)
    return found


class ScriptSecurityScreener:
    """
    Blacklist and length screener for GlideQuery scripts.

    The catalog is fixed for the lifetime of the instance. Use
    with_overrides() to get a screener with a different configuration.

    Example:
        screener = ScriptSecurityScreener()
        verdict = screener.screen("new GlideQuery('incident').deleteMultiple()")
        # verdict.safe is True
        # verdict.dangerous_operations == ["deleteMultiple"]
    """

    def __init__(self, catalog: PatternCatalog | None = None) -> None:
        self._catalog = catalog or PatternCatalog.default()

    @property
    def catalog(self) -> PatternCatalog:
        """Configuration this screener was built with."""
        return self._catalog

    def with_overrides(self, **overrides) -> "ScriptSecurityScreener":
        """Return a new screener whose catalog merges the given fields."""
        return ScriptSecurityScreener(self._catalog.merge(**overrides))

    def screen(self, script: str) -> SecurityVerdict:
        """Screen a script against the catalog.

        Args:
            script: Script content to screen

        Returns:
            SecurityVerdict with violations and dangerous operations
        """
        violations: list[str] = []
        max_length = self._catalog.max_script_length

        if len(script) > max_length:
            violations.append(
                f"Script exceeds maximum length of {max_length} characters "
                f"(actual: {len(script)})"
            )

        for pattern in self._catalog.blacklisted_patterns:
            if pattern.search(script):
                violations.append(f"Blacklisted pattern detected: {pattern.pattern}")

        dangerous = detect_operations(script, self._catalog.require_confirmation)

        if violations:
            logger.debug(f"Script rejected with {len(violations)} violation(s)")
        if dangerous:
            logger.debug(f"Dangerous operations detected: {', '.join(dangerous)}")

        return SecurityVerdict(
            safe=not violations,
            violations=violations or None,
            dangerous_operations=dangerous or None,
        )
