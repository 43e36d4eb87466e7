"""GlideQuery script execution against a remote script runner.

Runs a script through the pipeline and returns a normalized result:
- Input checks (empty, oversized)
- Security screening (hard gate, the runner is never called on failure)
- Test-mode wrapping (record cap, write-operation warnings)
- Remote execution via an injected ScriptRunner
- Result normalization

Every failure is returned as an ExecutionResult with success=False.
Nothing is retried; a caller wishing to retry must resubmit.
"""

import logging
import time
from typing import Protocol

from glidequery_core.exceptions import UnsupportedScriptError
from glidequery_core.scripts.normalizer import normalize
from glidequery_core.scripts.patterns import WRITE_OPERATIONS
from glidequery_core.scripts.security import ScriptSecurityScreener, detect_operations
from glidequery_core.scripts.types import (
    ExecutionOptions,
    ExecutionResult,
    ScriptExecutionRequest,
    ScriptExecutionResult,
)
from glidequery_core.scripts.wrapping import wrap_for_test_mode

logger = logging.getLogger(__name__)


class ScriptRunner(Protocol):
    """Anything that can run a script remotely.

    Implementations honor request.timeout themselves; an expired timeout
    is reported as a failed ScriptExecutionResult or a raised exception.
    """

    async def execute_script(
        self, request: ScriptExecutionRequest
    ) -> ScriptExecutionResult: ...


def write_warning(operations: list[str]) -> str:
    """Log line warning that a test-mode run will still persist writes."""
    return (
        f"WARNING: This script contains write operations ({', '.join(operations)}) "
        f"that will persist changes to the database."
    )


class GlideQueryExecutor:
    """
    Orchestrates screening, wrapping, remote execution and normalization.

    Example:
        async with create_http_client(settings) as http:
            executor = GlideQueryExecutor(ServiceNowScriptClient(http=http))
            result = await executor.execute(
                "new GlideQuery('incident').select('number')",
                ExecutionOptions(test_mode=True, max_results=10),
            )
    """

    DEFAULT_TEST_MAX_RESULTS = 100

    def __init__(
        self,
        runner: ScriptRunner,
        screener: ScriptSecurityScreener | None = None,
        default_max_results: int = DEFAULT_TEST_MAX_RESULTS,
    ) -> None:
        """
        Initialize the executor.

        Args:
            runner: Remote script runner
            screener: Security screener (default catalog if omitted)
            default_max_results: Test-mode record cap when options omit one
        """
        self._runner = runner
        self._screener = screener or ScriptSecurityScreener()
        self.default_max_results = default_max_results

    @property
    def max_script_length(self) -> int:
        """Maximum script length, taken from the screener's catalog."""
        return self._screener.catalog.max_script_length

    async def execute(
        self,
        script: str,
        options: ExecutionOptions | None = None,
    ) -> ExecutionResult:
        """
        Execute a GlideQuery script.

        Args:
            script: GlideQuery script to execute
            options: Timeout, test mode and record cap

        Returns:
            ExecutionResult; failures are returned, never raised
        """
        options = options or ExecutionOptions()
        start = time.perf_counter()
        mode = "test" if options.test_mode else "execute"

        logger.info(
            f"Starting GlideQuery {mode} "
            f"(length={len(script) if script else 0}, timeout={options.timeout})"
        )

        if not script or not script.strip():
            return self._reject("Script cannot be empty", start)

        if len(script) > self.max_script_length:
            return self._reject(
                f"Script exceeds maximum length of {self.max_script_length} characters",
                start,
            )

        verdict = self._screener.screen(script)
        if not verdict.safe:
            return self._reject(
                f"Security violation: {', '.join(verdict.violations or [])}", start
            )

        write_operations: list[str] = []
        executable = script
        if options.test_mode:
            write_operations = detect_operations(script, WRITE_OPERATIONS)
            max_results = options.max_results or self.default_max_results
            try:
                executable = wrap_for_test_mode(script, max_results)
            except UnsupportedScriptError as e:
                return self._reject(str(e), start)

        request = ScriptExecutionRequest(script=executable, timeout=options.timeout)
        try:
            raw = await self._runner.execute_script(request)
        except Exception as e:
            logger.error(f"GlideQuery {mode} failed with exception: {e}")
            return ExecutionResult(
                success=False,
                error=str(e) or "Unknown error occurred",
                execution_time=_elapsed_ms(start),
            )

        result = self._format_result(raw, options.test_mode, write_operations, start)
        if result.success:
            logger.info(
                f"GlideQuery {mode} completed in {result.execution_time:.0f}ms "
                f"(records={result.record_count}, truncated={result.truncated})"
            )
        else:
            logger.error(f"GlideQuery {mode} completed with error: {result.error}")
        return result

    def _reject(self, message: str, start: float) -> ExecutionResult:
        """Build a failure result for a script refused before execution."""
        logger.warning(f"Script rejected: {message}")
        return ExecutionResult(
            success=False,
            error=message,
            execution_time=_elapsed_ms(start),
        )

    def _format_result(
        self,
        raw: ScriptExecutionResult,
        test_mode: bool,
        write_operations: list[str],
        start: float,
    ) -> ExecutionResult:
        """Convert a runner result into an ExecutionResult.

        The runner's own execution_time is reported when it has one;
        otherwise local wall time since start is used.
        """
        execution_time = (
            raw.execution_time if raw.execution_time is not None else _elapsed_ms(start)
        )
        if not raw.success:
            return ExecutionResult(
                success=False,
                error=raw.error.message if raw.error else "Script execution failed",
                logs=raw.logs,
                execution_time=execution_time,
            )

        normalized = normalize(raw.result, test_mode)

        logs = list(raw.logs or [])
        if test_mode and write_operations:
            logs.insert(0, write_warning(write_operations))
        logs.extend(normalized.logs)

        return ExecutionResult(
            success=True,
            data=normalized.data,
            logs=logs,
            execution_time=execution_time,
            truncated=normalized.truncated,
            record_count=normalized.record_count,
        )


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000
