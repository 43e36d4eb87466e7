"""
Exception classes for the GlideQuery pipeline.

- ServiceNowAPIError: The Script Execution API refused or failed a request
- UnsupportedScriptError: A script cannot be wrapped for test mode

Per project patterns:
- Inherit from Exception for base exception type
- Store context data in attributes for error handling
- Include descriptive message with relevant details
"""


class ServiceNowAPIError(Exception):
    """
    Raised when the ServiceNow API returns an error response.

    Attributes:
        code: Short error code (AUTH_EXPIRED, FORBIDDEN, ENDPOINT_NOT_FOUND, API_ERROR)
        message: Human-readable message
        detail: Optional response body or extra context
    """

    def __init__(self, code: str, message: str, detail: str | None = None) -> None:
        self.code = code
        self.message = message
        self.detail = detail
        super().__init__(message)


class UnsupportedScriptError(Exception):
    """
    Raised when a script is not a single expression and cannot be
    embedded in the test-mode wrapper.

    Attributes:
        reason: Why the script was refused
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Test mode requires a single-expression script: {reason}")
