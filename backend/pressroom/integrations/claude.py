"""Claude/Anthropic Messages API client used for generation and compliance.

Features:
- Async HTTP client using httpx (direct API calls, no SDK)
- Circuit breaker for fault tolerance
- Exponential backoff on 5xx, timeouts and transport errors
- Honours retry-after on 429, never retries other 4xx
- Per-call model, max_tokens, temperature and system prompt
- API failures are returned as CompletionResult(success=False), never raised

ERROR LOGGING REQUIREMENTS:
- Log all outbound API calls with model, timing and retry attempt
- Log request/response bodies at DEBUG level (truncated)
- Log token usage at INFO level
- Never log the API key
"""

import asyncio
import time
from dataclasses import asdict, dataclass
from typing import Any

import httpx

from pressroom.core.circuit_breaker import CircuitBreaker, CircuitBreakerConfig
from pressroom.core.config import get_settings
from pressroom.core.logging import get_logger, llm_logger

logger = get_logger(__name__)

ANTHROPIC_API_URL = "https://api.anthropic.com"
ANTHROPIC_API_VERSION = "2023-06-01"
MESSAGES_PATH = "/v1/messages"

# Longest retry-after we are willing to wait in-process
MAX_RETRY_AFTER_SECONDS = 60.0

# Statuses that count against the circuit breaker besides 5xx
BREAKER_STATUSES = frozenset({401, 403, 429})


@dataclass
class CompletionResult:
    """Result of a Claude completion request."""

    success: bool
    text: str | None = None
    model: str | None = None
    stop_reason: str | None = None
    input_tokens: int | None = None
    output_tokens: int | None = None
    error: str | None = None
    status_code: int | None = None
    duration_ms: float = 0.0
    request_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _elapsed_ms(since: float) -> float:
    return (time.monotonic() - since) * 1000


def _api_error_message(response: httpx.Response) -> str:
    """Pull ``error.message`` out of an API error body."""
    if not response.content:
        return "Client error"
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return str(body)[:200]


def _describe_failure(response: httpx.Response) -> tuple[str, str]:
    """Map a non-2xx response to (error message, error type)."""
    status = response.status_code
    if status == 429:
        return "Rate limit exceeded", "RateLimitError"
    if status in (401, 403):
        return f"Authentication failed ({status})", "AuthError"
    if status >= 500:
        return f"Server error ({status})", "ServerError"
    return f"Client error ({status}): {_api_error_message(response)}", "ClientError"


def _parse_message(response: httpx.Response) -> tuple[str, str | None, dict[str, Any]]:
    """Return (text of the first content block, stop_reason, usage).

    Raises:
        ValueError: If the body is not a Messages API response
    """
    data = response.json()
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")

    blocks = data.get("content") or []
    if not isinstance(blocks, list):
        raise ValueError("content is not a list")
    text = ""
    if blocks:
        first = blocks[0]
        if not isinstance(first, dict) or not isinstance(first.get("text", ""), str):
            raise ValueError("first content block has no text")
        text = first.get("text", "")

    stop_reason = data.get("stop_reason")
    usage = data.get("usage")
    return (
        text,
        stop_reason if isinstance(stop_reason, str) else None,
        usage if isinstance(usage, dict) else {},
    )


def _token_count(value: Any) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def _retry_after(response: httpx.Response) -> float | None:
    value = response.headers.get("retry-after")
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _report_circuit_change(previous_state: str, new_state: str, failure_count: int) -> None:
    llm_logger.circuit_changed(
        previous_state,
        new_state,
        failure_count,
        get_settings().claude_circuit_recovery_timeout,
    )


class ClaudeClient:
    """Async client for the Anthropic Messages API."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        retry_delay: float | None = None,
        max_tokens: int | None = None,
    ) -> None:
        """Create a client; every argument defaults to its setting.

        Args:
            api_key: Anthropic API key
            model: Default model (the generation model)
            timeout: Request timeout in seconds
            max_retries: Maximum attempts per request
            retry_delay: Base delay between retries, doubled per attempt
            max_tokens: Default response token limit
        """
        settings = get_settings()

        self._api_key = api_key or settings.anthropic_api_key
        self._model = model or settings.generation_model
        self._timeout = timeout or settings.claude_timeout
        self._max_retries = max_retries or settings.claude_max_retries
        self._retry_delay = (
            retry_delay if retry_delay is not None else settings.claude_retry_delay
        )
        self._max_tokens = max_tokens or settings.generation_max_tokens

        self._circuit_breaker = CircuitBreaker(
            CircuitBreakerConfig(
                failure_threshold=settings.claude_circuit_failure_threshold,
                recovery_timeout=settings.claude_circuit_recovery_timeout,
            ),
            name="claude",
            on_state_change=_report_circuit_change,
        )

        # Created on first use
        self._client: httpx.AsyncClient | None = None

    @property
    def available(self) -> bool:
        """Whether an API key is configured."""
        return bool(self._api_key)

    @property
    def model(self) -> str:
        return self._model

    @property
    def circuit_breaker(self) -> CircuitBreaker:
        return self._circuit_breaker

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=ANTHROPIC_API_URL,
                headers={
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                    "anthropic-version": ANTHROPIC_API_VERSION,
                    "x-api-key": self._api_key or "",
                },
                timeout=httpx.Timeout(self._timeout),
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
        logger.info("Claude client closed")

    def _request_body(
        self,
        model: str,
        user_prompt: str,
        system_prompt: str | None,
        max_tokens: int | None,
        temperature: float,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {
            "model": model,
            "max_tokens": max_tokens or self._max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": user_prompt}],
        }
        if system_prompt:
            body["system"] = system_prompt
        return body

    async def _completed(
        self,
        model: str,
        message: tuple[str, str | None, dict[str, Any]],
        started: float,
        attempt_started: float,
        request_id: str | None,
    ) -> CompletionResult:
        text, stop_reason, usage = message

        result = CompletionResult(
            success=True,
            text=text,
            model=model,
            stop_reason=stop_reason,
            input_tokens=_token_count(usage.get("input_tokens")),
            output_tokens=_token_count(usage.get("output_tokens")),
            request_id=request_id,
            duration_ms=_elapsed_ms(started),
        )
        llm_logger.call_succeeded(
            model,
            _elapsed_ms(attempt_started),
            text,
            input_tokens=result.input_tokens,
            output_tokens=result.output_tokens,
            stop_reason=result.stop_reason,
            request_id=request_id,
        )
        await self._circuit_breaker.record_success()
        return result

    async def complete(
        self,
        user_prompt: str,
        system_prompt: str | None = None,
        max_tokens: int | None = None,
        temperature: float = 0.0,
        model: str | None = None,
    ) -> CompletionResult:
        """Send a single-turn message to Claude.

        Args:
            user_prompt: The user message
            system_prompt: Optional system prompt
            max_tokens: Response token limit (overrides default)
            temperature: Sampling temperature
            model: Model to use for this call (overrides default)

        Returns:
            CompletionResult with the text of the first content block
        """
        model_name = model or self._model

        if not self.available:
            return CompletionResult(
                success=False,
                model=model_name,
                error="Claude not configured (missing API key)",
            )
        if not await self._circuit_breaker.can_execute():
            llm_logger.fallback("complete", "circuit breaker open")
            return CompletionResult(
                success=False, model=model_name, error="Circuit breaker is open"
            )

        client = await self._get_client()
        body = self._request_body(model_name, user_prompt, system_prompt, max_tokens, temperature)
        started = time.monotonic()
        error = "Request failed"
        status_code: int | None = None
        request_id: str | None = None

        for attempt in range(self._max_retries):
            is_last_attempt = attempt == self._max_retries - 1
            attempt_started = time.monotonic()
            llm_logger.call_start(model_name, attempt, user_prompt, system_prompt)

            response: httpx.Response | None = None
            try:
                response = await client.post(MESSAGES_PATH, json=body)
            except httpx.TimeoutException:
                status_code = None
                error, error_type = f"Request timed out after {self._timeout}s", "TimeoutError"
            except httpx.RequestError as e:
                status_code = None
                error, error_type = f"Request failed: {e}", type(e).__name__
            else:
                request_id = response.headers.get("request-id") or request_id
                status_code = response.status_code
                if response.is_success:
                    try:
                        message = _parse_message(response)
                    except ValueError as e:
                        # Malformed 2xx body: counted against the breaker, not retried
                        llm_logger.call_failed(
                            model_name,
                            _elapsed_ms(attempt_started),
                            attempt,
                            f"Invalid response body: {e}",
                            "InvalidResponse",
                            status_code=status_code,
                            request_id=request_id,
                        )
                        await self._circuit_breaker.record_failure()
                        error = f"Invalid response body: {e}"
                        break
                    return await self._completed(
                        model_name, message, started, attempt_started, request_id
                    )
                error, error_type = _describe_failure(response)

            llm_logger.call_failed(
                model_name,
                _elapsed_ms(attempt_started),
                attempt,
                error,
                error_type,
                status_code=status_code,
                request_id=request_id,
            )
            if status_code is None or status_code >= 500 or status_code in BREAKER_STATUSES:
                await self._circuit_breaker.record_failure()

            if response is not None and status_code == 429:
                wait = _retry_after(response)
                if is_last_attempt or wait is None or wait > MAX_RETRY_AFTER_SECONDS:
                    break
                await asyncio.sleep(wait)
                continue

            # Other 4xx are final
            if status_code is not None and status_code < 500:
                break
            if is_last_attempt:
                break

            delay = self._retry_delay * (2**attempt)
            llm_logger.retry_scheduled(model_name, attempt, delay, error)
            await asyncio.sleep(delay)

        return CompletionResult(
            success=False,
            model=model_name,
            error=error,
            status_code=status_code,
            request_id=request_id,
            duration_ms=_elapsed_ms(started),
        )


# Global Claude client instance
claude_client: ClaudeClient | None = None


async def init_claude() -> ClaudeClient:
    """Create the global Claude client if it does not exist yet."""
    global claude_client
    if claude_client is None:
        claude_client = ClaudeClient()
        logger.info(
            "Claude client initialized",
            extra={"model": claude_client.model, "api_key_set": claude_client.available},
        )
    return claude_client


async def close_claude() -> None:
    """Close and drop the global Claude client."""
    global claude_client
    if claude_client:
        await claude_client.close()
        claude_client = None


async def get_claude() -> ClaudeClient:
    """Dependency returning the global Claude client.

    Usage:
        @router.post("/content/variants")
        async def generate(claude: ClaudeClient = Depends(get_claude)):
            result = await claude.complete(prompt, model=settings.generation_model)
    """
    if claude_client is None:
        return await init_claude()
    return claude_client
