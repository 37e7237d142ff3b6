"""Shared response schemas."""

from pydantic import BaseModel


class ErrorDetail(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    """Error envelope returned by every endpoint."""

    success: bool = False
    error: ErrorDetail
    request_id: str | None = None


ERROR_RESPONSES: dict[int | str, dict] = {
    400: {"model": ErrorResponse, "description": "Validation error"},
    401: {"model": ErrorResponse, "description": "Missing or invalid session"},
    500: {"model": ErrorResponse, "description": "Internal error"},
}

AI_ERROR_RESPONSES: dict[int | str, dict] = {
    **ERROR_RESPONSES,
    502: {"model": ErrorResponse, "description": "LLM call failed"},
    503: {"model": ErrorResponse, "description": "ANTHROPIC_API_KEY not configured"},
}
