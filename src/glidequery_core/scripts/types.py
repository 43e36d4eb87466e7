"""
Result and option types for the GlideQuery script pipeline.

This module defines the data passed between pipeline stages:
- SecurityVerdict: Outcome of blacklist and length screening
- SyntaxIssue / ValidationResult: Syntax validator findings
- ExecutionOptions: Caller options for execute()
- ExecutionResult: Normalized outcome of execute()
- ScriptExecutionRequest / ScriptExecutionResult: Remote runner contract

Per project patterns:
- Pydantic BaseModel for validation and serialization
- Field() with descriptions for documentation
- Optional members are None when empty so model_dump(exclude_none=True)
  gives the compact wire shape
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SecurityVerdict(BaseModel):
    """
    Result of security screening.

    Only violations make a script unsafe. Dangerous operations are
    informational, intended for confirmation workflows.
    """

    model_config = ConfigDict(frozen=True)

    safe: bool = Field(..., description="True if no length or blacklist violation")
    violations: list[str] | None = Field(
        default=None, description="Length and blacklist violations, if any"
    )
    dangerous_operations: list[str] | None = Field(
        default=None, description="Operations requiring explicit confirmation, if any"
    )


class SyntaxIssue(BaseModel):
    """A fatal syntax finding with its 1-based line."""

    model_config = ConfigDict(frozen=True)

    message: str
    line: int | None = None


class ValidationResult(BaseModel):
    """
    Result of static syntax validation.

    valid is exactly "no errors". Warnings never affect it.
    """

    valid: bool
    errors: list[SyntaxIssue] | None = None
    warnings: list[str] | None = None


class ExecutionOptions(BaseModel):
    """Options for a single execute() call."""

    timeout: int | None = Field(
        default=None, gt=0, description="Timeout in milliseconds, passed to the runner"
    )
    test_mode: bool = Field(
        default=False, description="Cap returned records and warn about writes"
    )
    max_results: int | None = Field(
        default=None,
        ge=1,
        le=1000,
        description="Record cap in test mode (default 100)",
    )


class ExecutionResult(BaseModel):
    """Normalized outcome of executing a script."""

    success: bool
    data: Any = None
    error: str | None = None
    logs: list[str] | None = None
    execution_time: float = Field(..., description="Local wall time in milliseconds")
    truncated: bool | None = None
    record_count: int | None = None


class ScriptExecutionRequest(BaseModel):
    """Request sent to the remote script runner."""

    script: str
    timeout: int | None = None


class ScriptError(BaseModel):
    """Error details reported by the remote script runner."""

    message: str
    line: int | None = None
    type: str | None = None


class ScriptExecutionResult(BaseModel):
    """
    Raw outcome from the remote script runner.

    Exactly one of result/error is meaningful depending on success.
    """

    success: bool
    result: Any = None
    logs: list[str] | None = None
    error: ScriptError | None = None
    execution_time: float | None = None
