# =============================================================================
# app/exceptions.py - Custom Exceptions and Handlers
# =============================================================================
# Centralized exception handling for the API.
# Errors should tell HOW to fix, not just WHAT failed.
#
# Every failure that crosses the HTTP boundary is rendered as:
#   {"success": false, "error": "<message>", "code": "<CODE>"}
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException


class SQLPilotException(Exception):
    """
    Base exception for the SQLPilot API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "SQLPILOT_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "success": False,
            "error": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Input Exceptions
# =============================================================================

class InputValidationError(SQLPilotException):
    """Raised when a required input is missing or empty. No I/O happens first."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            status_code=400,
            details={"field": field} if field else None,
        )


# =============================================================================
# Upstream Exceptions
# =============================================================================

class UpstreamServiceError(SQLPilotException):
    """Raised when the LLM service or the data store call fails."""

    def __init__(self, service: str, error: str):
        super().__init__(
            message=error,
            code="UPSTREAM_ERROR",
            status_code=500,
            suggestion=f"Check that the {service} service is reachable and configured",
            details={"service": service},
        )


class ExecutionError(SQLPilotException):
    """Raised when the database rejects a SQL statement."""

    def __init__(self, error: str, query: str | None = None):
        super().__init__(
            message=error,
            code="EXECUTION_ERROR",
            status_code=500,
            details={"query": query} if query else None,
        )


class ConfigurationError(SQLPilotException):
    """Raised when the SQL execution facility is missing or misconfigured."""

    def __init__(self, message: str, suggestion: str | None = None):
        super().__init__(
            message=message,
            code="CONFIGURATION_ERROR",
            status_code=500,
            suggestion=suggestion,
        )


class AssistantError(SQLPilotException):
    """Raised when the assistant returns no usable content."""

    def __init__(self, message: str = "No response from OpenAI"):
        super().__init__(
            message=message,
            code="ASSISTANT_ERROR",
            status_code=500,
            suggestion="Check that OPENAI_API_KEY is valid and the model is available",
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def sqlpilot_exception_handler(
    request: Request,
    exc: SQLPilotException
) -> JSONResponse:
    """Convert SQLPilotException to the structured failure response."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException
) -> JSONResponse:
    """
    Render Starlette HTTP errors (404, 405, ...) in the structured shape.

    405 responses keep the Allow header and name the rejected method.
    """
    headers = getattr(exc, "headers", None) or {}
    if exc.status_code == 405:
        error = f"Method {request.method} not allowed"
    else:
        error = str(exc.detail)

    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": error, "code": "HTTP_ERROR"},
        headers=headers,
    )


async def validation_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle request body validation errors.

    A missing or malformed required field is a client error, so it is
    reported as 400 like the explicit input checks.
    """
    errors = getattr(exc, "errors", None)
    message = "Invalid request body"
    if callable(errors):
        details = errors()
        if details:
            first = details[0]
            location = ".".join(str(part) for part in first.get("loc", ())[1:])
            message = f"{location}: {first.get('msg', 'invalid value')}" if location else first.get("msg", message)

    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": message,
            "code": "VALIDATION_ERROR",
        }
    )
