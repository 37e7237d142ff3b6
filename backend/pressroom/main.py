"""FastAPI application entry point.

Deployment Requirements:
- Binds to HOST/PORT from the environment
- /health for platform health checks, /health/integrations for Claude/auth
- WebSocket clients are told to reconnect on shutdown
- All logs to stdout

Error Logging Requirements:
- Every request is logged with method, path, request_id, status and timing
- JSON request bodies are logged at DEBUG with secrets redacted
- 4xx at WARNING, 5xx at ERROR
- Every error leaves as {"success": false, "error": {...}, "request_id": ...}
"""

import json
import logging
import time
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from pressroom.api.v1 import router as api_v1_router
from pressroom.core.config import get_settings
from pressroom.core.errors import INTERNAL_ERROR, ServiceError, error_response
from pressroom.core.logging import get_logger, setup_logging
from pressroom.core.websocket import connection_manager
from pressroom.integrations.claude import close_claude, get_claude, init_claude

setup_logging()
logger = get_logger(__name__)

REDACTED_KEYS = frozenset(
    {
        "password",
        "token",
        "access_token",
        "refresh_token",
        "secret",
        "api_key",
        "authorization",
    }
)

# Codes for errors raised by routing itself
FRAMEWORK_ERROR_CODES = {
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
}

BODYLESS_METHODS = ("GET", "HEAD", "OPTIONS")


def sanitize_body(body: Any) -> Any:
    """Replace secret values in a (nested) JSON body with ****."""
    if isinstance(body, list):
        return [sanitize_body(item) for item in body]
    if not isinstance(body, dict):
        return body
    return {
        key: "****" if key.lower() in REDACTED_KEYS else sanitize_body(value)
        for key, value in body.items()
    }


def request_id_of(request: Request) -> str:
    return getattr(request.state, "request_id", "unknown")


def _log_for_status(status_code: int) -> tuple[int, str]:
    if status_code >= 500:
        return logging.ERROR, "Request failed"
    if status_code >= 400:
        return logging.WARNING, "Request error"
    return logging.INFO, "Request completed"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Assigns a request_id, logs the request and its outcome, echoes X-Request-ID."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        context = {"request_id": request_id, "method": request.method, "path": request.url.path}
        started = time.monotonic()

        logger.info(
            "Request started",
            extra={**context, "query_params": str(request.query_params) or None},
        )
        if request.method not in BODYLESS_METHODS and logger.isEnabledFor(logging.DEBUG):
            await self._log_body(request, request_id)

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id

        level, message = _log_for_status(response.status_code)
        logger.log(
            level,
            message,
            extra={
                **context,
                "status_code": response.status_code,
                "duration_ms": round((time.monotonic() - started) * 1000, 2),
            },
        )
        return response

    @staticmethod
    async def _log_body(request: Request, request_id: str) -> None:
        raw = await request.body()
        if not raw:
            return
        try:
            body = sanitize_body(json.loads(raw))
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.debug(
                "Request body (non-JSON)",
                extra={"request_id": request_id, "body_length": len(raw)},
            )
            return
        logger.debug("Request body", extra={"request_id": request_id, "body": body})


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================


async def handle_service_error(request: Request, exc: ServiceError) -> JSONResponse:
    """Service errors carry their own code; the status follows from it."""
    extra = {
        "request_id": request_id_of(request),
        "error_code": exc.code,
        "error_message": exc.message,
        "path": request.url.path,
    }
    logger.log(
        logging.ERROR if exc.status_code >= 500 else logging.WARNING,
        "Service error",
        extra=extra,
    )
    return error_response(exc.code, exc.message, request_id_of(request))


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Pydantic request validation failures become VALIDATION_ERROR (400)."""
    message = "; ".join(
        ".".join(str(part) for part in error["loc"]) + f": {error['msg']}"
        for error in exc.errors()
    )
    logger.warning(
        "Validation error",
        extra={"request_id": request_id_of(request), "error_message": message},
    )
    return error_response("VALIDATION_ERROR", message, request_id_of(request))


async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = FRAMEWORK_ERROR_CODES.get(exc.status_code, INTERNAL_ERROR)
    return error_response(
        code, str(exc.detail), request_id_of(request), status_code=exc.status_code
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled exception",
        extra={
            "request_id": request_id_of(request),
            "error_type": type(exc).__name__,
            "error_message": str(exc),
        },
        exc_info=exc,
    )
    return error_response(
        INTERNAL_ERROR,
        "An internal error occurred. Please try again later.",
        request_id_of(request),
    )


# =============================================================================
# APPLICATION
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Start the Claude client and WebSocket heartbeat; tear both down on exit."""
    settings = get_settings()
    logger.info(
        "Starting application",
        extra={
            "app_name": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
        },
    )

    if not (await init_claude()).available:
        logger.warning("Claude not configured (missing ANTHROPIC_API_KEY)")
    if settings.auth_required and not settings.supabase_url:
        logger.warning("AUTH_REQUIRED is set but SUPABASE_URL is missing")
    await connection_manager.start_heartbeat()

    yield

    logger.info("Shutting down application")
    await connection_manager.broadcast_shutdown(reason="server_shutdown")
    await connection_manager.stop_heartbeat()
    await close_claude()
    logger.info("Application shutdown complete")


async def health_check() -> dict[str, str]:
    """Returns {"status": "ok"} if the service is running."""
    return {"status": "ok"}


async def integrations_health() -> dict[str, Any]:
    """Claude configuration and circuit state, plus auth configuration."""
    settings = get_settings()
    claude = await get_claude()
    return {
        "claude": {
            "api_key_set": claude.available,
            "generation_model": settings.generation_model,
            "compliance_model": settings.compliance_model,
            "title_model": settings.title_model,
            "circuit_breaker": claude.circuit_breaker.state.value,
        },
        "auth": {
            "required": settings.auth_required,
            "supabase_url_set": bool(settings.supabase_url),
        },
    }


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(RequestLoggingMiddleware)
    # Lock CORS to the portal when FRONTEND_URL is set
    cors_origins = [settings.frontend_url] if settings.frontend_url else ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ServiceError, handle_service_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.add_api_route("/health", health_check, methods=["GET"], tags=["Health"])
    app.add_api_route(
        "/health/integrations", integrations_health, methods=["GET"], tags=["Health"]
    )
    app.include_router(api_v1_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "pressroom.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
