"""
ServiceNow Script Execution API client.

This module provides ServiceNowScriptClient, the remote runner used by
GlideQueryExecutor. It posts a script to the instance's script execution
endpoint and converts the response into a ScriptExecutionResult.

ServiceNowScriptClient receives an injected httpx.AsyncClient with base_url
set to the instance URL and authentication configured. HTTP errors raise
ServiceNowAPIError; a timeout is reported as a failed result so callers see
it as an ordinary execution failure.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any

import httpx

from glidequery_core.config import Settings
from glidequery_core.exceptions import ServiceNowAPIError
from glidequery_core.scripts.types import (
    ScriptError,
    ScriptExecutionRequest,
    ScriptExecutionResult,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 30000
MAX_TIMEOUT_MS = 60000


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    """
    Build an httpx client for the configured instance.

    Args:
        settings: Loaded settings

    Returns:
        AsyncClient with base_url and basic auth set
    """
    servicenow = settings.servicenow
    return httpx.AsyncClient(
        base_url=servicenow.instance_url,
        auth=(servicenow.username, servicenow.password.get_secret_value()),
        headers={"Accept": "application/json"},
    )


@dataclass
class ServiceNowScriptClient:
    """
    Script runner backed by the ServiceNow Script Execution API.

    Attributes:
        http: Pre-configured httpx.AsyncClient with base_url set to the instance.
        endpoint: Script execution endpoint path.
        default_timeout: Timeout in ms when a request has none.
        max_timeout: Upper bound in ms for any request timeout.

    Example:
        async with create_http_client(settings) as http:
            client = ServiceNowScriptClient(http=http)
            result = await client.execute_script(
                ScriptExecutionRequest(script="new GlideQuery('incident').count()")
            )
    """

    http: httpx.AsyncClient
    endpoint: str = "/api/now/v1/script/execute"
    default_timeout: int = DEFAULT_TIMEOUT_MS
    max_timeout: int = MAX_TIMEOUT_MS

    def effective_timeout(self, requested: int | None) -> int:
        """Timeout in ms actually used for a request."""
        return min(requested or self.default_timeout, self.max_timeout)

    async def execute_script(self, request: ScriptExecutionRequest) -> ScriptExecutionResult:
        """
        Execute a script on the instance.

        Args:
            request: Script and optional timeout in milliseconds

        Returns:
            ScriptExecutionResult; timeouts are returned as failures

        Raises:
            ServiceNowAPIError: On empty scripts and HTTP error responses
        """
        if not request.script or not request.script.strip():
            raise ServiceNowAPIError("VALIDATION_ERROR", "Script cannot be empty")

        timeout_ms = self.effective_timeout(request.timeout)
        start = time.perf_counter()

        logger.debug(
            f"Executing script (length={len(request.script)}, timeout={timeout_ms}ms)"
        )

        try:
            response = await self.http.post(
                self.endpoint,
                json={"script": request.script},
                timeout=timeout_ms / 1000,
            )
        except httpx.TimeoutException:
            elapsed = _elapsed_ms(start)
            logger.error(f"Script execution timed out after {elapsed:.0f}ms")
            return ScriptExecutionResult(
                success=False,
                error=ScriptError(message="Script execution timed out", type="TIMEOUT"),
                execution_time=elapsed,
            )

        self._raise_for_status(response)

        result = self.parse_response(response.json(), _elapsed_ms(start))
        logger.debug(f"Script execution completed (success={result.success})")
        return result

    def _raise_for_status(self, response: httpx.Response) -> None:
        """Map HTTP error statuses to ServiceNowAPIError."""
        status = response.status_code
        if status == 200:
            return
        if status == 401:
            raise ServiceNowAPIError("AUTH_EXPIRED", "Session expired. Please re-authenticate.")
        if status == 403:
            raise ServiceNowAPIError(
                "FORBIDDEN",
                "Access forbidden. User does not have script execution permissions.",
            )
        if status == 404:
            raise ServiceNowAPIError(
                "ENDPOINT_NOT_FOUND",
                "Script execution endpoint not found. The Script Execution API may "
                "not be available on this instance.",
            )
        raise ServiceNowAPIError(
            "API_ERROR",
            f"ServiceNow API error: {status} {response.reason_phrase}",
            response.text,
        )

    @staticmethod
    def parse_response(data: Any, execution_time: float) -> ScriptExecutionResult:
        """
        Convert a script execution response body into a result.

        Bodies with a "result" member carry either an error (success false
        or an error field) or a value. Any other body is the value itself.

        Args:
            data: Decoded JSON body
            execution_time: Elapsed time in milliseconds

        Returns:
            ScriptExecutionResult
        """
        if not isinstance(data, dict) or "result" not in data:
            return ScriptExecutionResult(
                success=True, result=data, execution_time=execution_time
            )

        result_data = data["result"]
        if not isinstance(result_data, dict):
            return ScriptExecutionResult(
                success=True, result=result_data, execution_time=execution_time
            )

        logs = result_data.get("logs") or []
        if result_data.get("success") is False or result_data.get("error"):
            error = result_data.get("error")
            if not isinstance(error, dict):
                error = {"message": error} if isinstance(error, str) else {}
            return ScriptExecutionResult(
                success=False,
                error=ScriptError(
                    message=error.get("message")
                    or result_data.get("errorMessage")
                    or "Script execution failed",
                    line=error.get("line") or result_data.get("errorLine"),
                    type=error.get("type") or result_data.get("errorType") or "Error",
                ),
                logs=logs,
                execution_time=execution_time,
            )

        value = result_data["value"] if "value" in result_data else result_data
        return ScriptExecutionResult(
            success=True, result=value, logs=logs, execution_time=execution_time
        )


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000
