"""
GlideQuery Core Library

Local checking and remote execution of ServiceNow GlideQuery scripts.
This package provides:

- Security screening: blacklist, length limit, dangerous operations
- Syntax validation: rule-table linting with line-accurate errors
- Execution: test-mode wrapping, remote runner, result normalization
- ServiceNow client: Script Execution API over httpx
- CLI infrastructure: Typer-based command structure
"""

__version__ = "0.1.0"

from glidequery_core.exceptions import ServiceNowAPIError, UnsupportedScriptError
from glidequery_core.scripts import (
    ExecutionOptions,
    ExecutionResult,
    GlideQueryExecutor,
    GlideQueryValidator,
    PatternCatalog,
    ScriptRunner,
    ScriptSecurityScreener,
    SecurityVerdict,
    ValidationResult,
)
from glidequery_core.servicenow import ServiceNowScriptClient, create_http_client

__all__ = [
    "__version__",
    # Pipeline
    "ScriptSecurityScreener",
    "PatternCatalog",
    "GlideQueryValidator",
    "GlideQueryExecutor",
    "ScriptRunner",
    # Types
    "ExecutionOptions",
    "ExecutionResult",
    "SecurityVerdict",
    "ValidationResult",
    # Remote runner
    "ServiceNowScriptClient",
    "create_http_client",
    # Errors
    "ServiceNowAPIError",
    "UnsupportedScriptError",
]
