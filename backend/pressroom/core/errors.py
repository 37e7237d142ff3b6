"""Service error hierarchy and the JSON error envelope.

Every error leaving the API has the shape:

    {"success": false, "error": {"code": "...", "message": "..."}, "request_id": "..."}

The HTTP status is derived from the error code through ERROR_STATUS_CODES.
"""

from typing import Any

from fastapi.responses import JSONResponse

ERROR_STATUS_CODES: dict[str, int] = {
    "UNAUTHORIZED": 401,
    "FORBIDDEN": 403,
    "NOT_FOUND": 404,
    "VALIDATION_ERROR": 400,
    "METHOD_NOT_ALLOWED": 405,
    "AI_ERROR": 502,
    "CONFIG_ERROR": 503,
}

INTERNAL_ERROR = "INTERNAL_ERROR"


def status_for_code(code: str) -> int:
    """Map an error code to its HTTP status (500 for unknown codes)."""
    return ERROR_STATUS_CODES.get(code, 500)


class ServiceError(Exception):
    """Base exception for service-layer failures surfaced to API clients."""

    code: str = INTERNAL_ERROR

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    @property
    def status_code(self) -> int:
        return status_for_code(self.code)

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message}


class ValidationServiceError(ServiceError):
    """Raised when a request fails business validation."""

    code = "VALIDATION_ERROR"

    def __init__(self, field_name: str, value: Any, message: str) -> None:
        super().__init__(f"Validation failed for '{field_name}': {message}")
        self.field_name = field_name
        self.value = value


class UnauthorizedError(ServiceError):
    code = "UNAUTHORIZED"


class ForbiddenError(ServiceError):
    code = "FORBIDDEN"


class NotFoundError(ServiceError):
    code = "NOT_FOUND"


class AIServiceError(ServiceError):
    """Raised when the LLM provider call fails or returns unusable output."""

    code = "AI_ERROR"

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.upstream_status_code = status_code


class ConfigurationError(ServiceError):
    """Raised when a required setting (e.g. ANTHROPIC_API_KEY) is missing."""

    code = "CONFIG_ERROR"


def error_body(code: str, message: str, request_id: str | None = None) -> dict[str, Any]:
    """Build the error envelope."""
    return {
        "success": False,
        "error": {"code": code, "message": message},
        "request_id": request_id,
    }


def error_response(
    code: str,
    message: str,
    request_id: str | None = None,
    status_code: int | None = None,
) -> JSONResponse:
    """Build a JSONResponse carrying the error envelope."""
    return JSONResponse(
        status_code=status_code or status_for_code(code),
        content=error_body(code, message, request_id),
    )
