"""Structured logging configuration.

Everything is written to stdout. LOG_FORMAT=json (default) emits one JSON
object per record, LOG_FORMAT=text a human readable line. Context is passed
with ``extra={...}`` and ends up as top-level keys of the JSON record.

ERROR LOGGING REQUIREMENTS:
- Outbound LLM calls with model, timing and retry attempt
- Rate limits (429), auth failures (401/403) and timeouts at WARNING
- Token usage at INFO level for quota tracking
- Circuit breaker state changes
- Compliance checks with source (quick/ai), score and duration
- Never log API keys or full prompts (truncate at DEBUG)
"""

import logging
import re
import sys
from datetime import UTC, datetime
from typing import Any

from pythonjsonlogger import jsonlogger

from pressroom.core.config import get_settings

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
JSON_FORMAT = "%(timestamp)s %(level)s %(name)s %(message)s"

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore")

PROMPT_PREVIEW_CHARS = 500
SYSTEM_PREVIEW_CHARS = 200


class CustomJsonFormatter(jsonlogger.JsonFormatter):  # type: ignore[name-defined]
    """JSON formatter adding timestamp, level and logger name to every record."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.fromtimestamp(record.created, UTC).isoformat()
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        if record.exc_info and "exception" not in log_record:
            log_record["exception"] = self.formatException(record.exc_info)


def mask_secret(value: str | None, visible: int = 4) -> str:
    """Mask an API key or token, keeping only the last few characters."""
    if not value:
        return ""
    if len(value) <= visible:
        return "****"
    return "****" + value[-visible:]


def mask_bearer_token(header_value: str) -> str:
    """Mask the token part of an Authorization header."""
    return re.sub(r"(Bearer\s+)(\S+)", lambda m: m.group(1) + mask_secret(m.group(2)), header_value)


def truncate(text: str | None, limit: int) -> str:
    """Shorten text for DEBUG logs, noting the original length."""
    if not text:
        return ""
    if len(text) <= limit:
        return text
    return f"{text[:limit]}... (truncated, {len(text)} chars)"


def setup_logging() -> None:
    """Install a single stdout handler on the root logger."""
    settings = get_settings()

    formatter: logging.Formatter
    if settings.log_format == "json":
        formatter = CustomJsonFormatter(JSON_FORMAT)
    else:
        formatter = logging.Formatter(TEXT_FORMAT)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(settings.log_level.upper())

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name."""
    return logging.getLogger(name)


# =============================================================================
# DOMAIN LOGGERS
# =============================================================================


class LLMLogger:
    """Logs Claude calls: attempts, outcomes, retries and circuit changes.

    Prompts and answers only appear at DEBUG and are truncated.
    """

    def __init__(self, name: str = "claude") -> None:
        self.logger = get_logger(name)

    def call_start(
        self,
        model: str,
        attempt: int,
        user_prompt: str,
        system_prompt: str | None = None,
    ) -> None:
        self.logger.debug(
            f"Claude request: {model}",
            extra={
                "model": model,
                "retry_attempt": attempt,
                "prompt_length": len(user_prompt),
                "system_prompt": truncate(system_prompt, SYSTEM_PREVIEW_CHARS),
                "user_prompt": truncate(user_prompt, PROMPT_PREVIEW_CHARS),
            },
        )

    def call_succeeded(
        self,
        model: str,
        duration_ms: float,
        text: str,
        input_tokens: int | None = None,
        output_tokens: int | None = None,
        stop_reason: str | None = None,
        request_id: str | None = None,
    ) -> None:
        self.logger.debug(
            f"Claude response: {model}",
            extra={
                "model": model,
                "duration_ms": round(duration_ms, 2),
                "stop_reason": stop_reason,
                "request_id": request_id,
                "response_text": truncate(text, PROMPT_PREVIEW_CHARS),
            },
        )
        if input_tokens and output_tokens:
            self.logger.info(
                "Claude token usage",
                extra={
                    "model": model,
                    "input_tokens": input_tokens,
                    "output_tokens": output_tokens,
                    "total_tokens": input_tokens + output_tokens,
                },
            )

    def call_failed(
        self,
        model: str,
        duration_ms: float,
        attempt: int,
        error: str,
        error_type: str,
        status_code: int | None = None,
        request_id: str | None = None,
    ) -> None:
        """WARNING for client-side statuses and timeouts, ERROR otherwise."""
        client_side = status_code is not None and status_code < 500
        level = (
            logging.WARNING if client_side or error_type == "TimeoutError" else logging.ERROR
        )
        self.logger.log(
            level,
            f"Claude request failed: {error}",
            extra={
                "model": model,
                "duration_ms": round(duration_ms, 2),
                "retry_attempt": attempt,
                "status_code": status_code,
                "error_type": error_type,
                "request_id": request_id,
            },
        )

    def retry_scheduled(self, model: str, attempt: int, delay: float, reason: str) -> None:
        self.logger.warning(
            f"Retrying Claude request in {delay}s",
            extra={
                "model": model,
                "retry_attempt": attempt + 1,
                "delay_seconds": delay,
                "reason": reason,
            },
        )

    def circuit_changed(
        self,
        previous_state: str,
        new_state: str,
        failure_count: int,
        recovery_timeout: float,
    ) -> None:
        """ERROR when the circuit opens, INFO for every other transition."""
        extra = {
            "previous_state": previous_state,
            "new_state": new_state,
            "failure_count": failure_count,
        }
        if new_state == "open":
            extra["recovery_timeout_seconds"] = recovery_timeout
            self.logger.error("Claude circuit opened, calls disabled", extra=extra)
        else:
            self.logger.info(f"Claude circuit {new_state}", extra=extra)

    def fallback(self, operation: str, reason: str) -> None:
        self.logger.info(
            "Claude unavailable, skipping call",
            extra={"operation": operation, "reason": reason},
        )


class ComplianceLogger:
    """Logs compliance checks and their fallbacks."""

    def __init__(self, slow_threshold_ms: float = 1000) -> None:
        self.logger = get_logger("compliance")
        self.slow_threshold_ms = slow_threshold_ms

    def check_started(self, industry_slug: str, content_length: int, source: str) -> None:
        self.logger.debug(
            f"Compliance check ({source}) starting",
            extra={
                "industry_slug": industry_slug,
                "content_length": content_length,
                "source": source,
            },
        )

    def check_finished(
        self,
        industry_slug: str,
        score: int,
        issue_count: int,
        source: str,
        duration_ms: float,
    ) -> None:
        extra = {
            "industry_slug": industry_slug,
            "score": score,
            "issue_count": issue_count,
            "source": source,
            "duration_ms": round(duration_ms, 2),
        }
        self.logger.info("Compliance check complete", extra=extra)
        if duration_ms > self.slow_threshold_ms:
            self.logger.warning(
                "Slow compliance check",
                extra={**extra, "threshold_ms": self.slow_threshold_ms},
            )

    def fell_back(self, industry_slug: str, reason: str) -> None:
        self.logger.warning(
            "AI compliance analysis unavailable, using quick check",
            extra={"industry_slug": industry_slug, "reason": reason},
        )

    def unparsable_answer(self, response_length: int, error: str) -> None:
        self.logger.warning(
            "Failed to parse AI compliance response",
            extra={"response_length": response_length, "error": error},
        )


llm_logger = LLMLogger()
compliance_logger = ComplianceLogger()
