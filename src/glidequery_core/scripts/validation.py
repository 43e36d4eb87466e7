"""Static syntax validation for GlideQuery scripts.

This module provides the GlideQueryValidator class, which gives fast local
feedback before any remote round-trip:
  1. Emptiness check - an empty script is the only finding
  2. Size check - oversized scripts are invalid
  3. Lint rules - every rule in the table runs over the raw text

All findings are collected; validation never stops at the first error
after the emptiness check. Validation never raises and performs no I/O.
"""

import logging

from glidequery_core.scripts.patterns import DEFAULT_MAX_SCRIPT_LENGTH
from glidequery_core.scripts.rules import RULES, LintRule, Severity
from glidequery_core.scripts.types import SyntaxIssue, ValidationResult

logger = logging.getLogger(__name__)


class GlideQueryValidator:
    """Rule-table validator for GlideQuery scripts.

    Example:
        validator = GlideQueryValidator()
        result = validator.validate("new GlideQuery('incident').selectAll()")
        # result.valid is False
        # result.errors[0].message starts with "Undefined method '.selectAll()'"
        # result.errors[0].line == 1
    """

    def __init__(
        self,
        max_script_length: int = DEFAULT_MAX_SCRIPT_LENGTH,
        rules: list[LintRule] | None = None,
    ) -> None:
        self.max_script_length = max_script_length
        self.rules = list(rules) if rules is not None else list(RULES)

    def validate(self, script: str) -> ValidationResult:
        """Validate script structure without executing it.

        Args:
            script: GlideQuery script to validate

        Returns:
            ValidationResult with all errors and warnings found
        """
        if not script or not script.strip():
            logger.warning("Validation failed: empty script")
            return ValidationResult(
                valid=False,
                errors=[SyntaxIssue(message="Script cannot be empty", line=1)],
            )

        errors: list[SyntaxIssue] = []
        warnings: list[str] = []

        if len(script) > self.max_script_length:
            errors.append(
                SyntaxIssue(
                    message=f"Script exceeds maximum length of {self.max_script_length} characters",
                    line=1,
                )
            )

        for rule in self.rules:
            for finding in rule.run(script):
                if rule.severity is Severity.ERROR:
                    errors.append(SyntaxIssue(message=finding.message, line=finding.line or 1))
                else:
                    warnings.append(finding.message)

        if errors:
            logger.warning(
                f"Validation completed with {len(errors)} error(s) and {len(warnings)} warning(s)"
            )
        else:
            logger.info(f"Validation completed successfully with {len(warnings)} warning(s)")

        return ValidationResult(
            valid=not errors,
            errors=errors or None,
            warnings=warnings or None,
        )
