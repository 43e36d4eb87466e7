"""Script validation, screening and execution for GlideQuery.

This package checks fluent GlideQuery scripts locally before they reach a
ServiceNow instance, runs them through a remote script runner, and
normalizes the results. Screening rejects blacklisted constructs and
oversized scripts; validation lints structure with line-accurate errors;
test mode caps returned records and warns about writes.

Public exports:
    ScriptSecurityScreener: Blacklist and length screener
    PatternCatalog: Immutable screener configuration
    GlideQueryValidator: Rule-table syntax validator
    GlideQueryExecutor: Async execution orchestrator
    ScriptRunner: Protocol for remote runners
    normalize: Raw result normalizer
    wrap_for_test_mode: Test-mode script wrapper
    RULES: Default lint rule table
"""

from glidequery_core.scripts.catalog import PatternCatalog
from glidequery_core.scripts.executor import GlideQueryExecutor, ScriptRunner
from glidequery_core.scripts.normalizer import NormalizedResult, normalize
from glidequery_core.scripts.rules import RULES, Finding, LintRule, Severity
from glidequery_core.scripts.security import ScriptSecurityScreener
from glidequery_core.scripts.types import (
    ExecutionOptions,
    ExecutionResult,
    ScriptError,
    ScriptExecutionRequest,
    ScriptExecutionResult,
    SecurityVerdict,
    SyntaxIssue,
    ValidationResult,
)
from glidequery_core.scripts.validation import GlideQueryValidator
from glidequery_core.scripts.wrapping import wrap_for_test_mode

__all__ = [
    "ScriptSecurityScreener",
    "PatternCatalog",
    "GlideQueryValidator",
    "GlideQueryExecutor",
    "ScriptRunner",
    "normalize",
    "NormalizedResult",
    "wrap_for_test_mode",
    "RULES",
    "Finding",
    "LintRule",
    "Severity",
    "ExecutionOptions",
    "ExecutionResult",
    "ScriptError",
    "ScriptExecutionRequest",
    "ScriptExecutionResult",
    "SecurityVerdict",
    "SyntaxIssue",
    "ValidationResult",
]
