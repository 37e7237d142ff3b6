"""Circuit breaker guarding calls to the LLM provider.

CLOSED: calls go through, consecutive failures are counted.
OPEN: calls are rejected until recovery_timeout has elapsed.
HALF_OPEN: one trial call is allowed; success closes, failure reopens.
"""

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pressroom.core.logging import get_logger

logger = get_logger(__name__)

# (previous_state, new_state, failure_count)
StateChangeCallback = Callable[[str, str, int], None]


class CircuitState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass
class CircuitBreakerConfig:
    failure_threshold: int
    recovery_timeout: float


class CircuitBreaker:
    """Async circuit breaker shared by all calls of one integration.

    Transitions are reported through ``on_state_change`` so the owning
    integration can log them with its own domain logger.
    """

    def __init__(
        self,
        config: CircuitBreakerConfig,
        name: str = "default",
        on_state_change: StateChangeCallback | None = None,
    ) -> None:
        self._config = config
        self._name = name
        self._on_state_change = on_state_change
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._last_failure_at: float | None = None
        self._lock = asyncio.Lock()

    @property
    def name(self) -> str:
        return self._name

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def failure_count(self) -> int:
        return self._failure_count

    @property
    def is_closed(self) -> bool:
        return self._state is CircuitState.CLOSED

    @property
    def is_open(self) -> bool:
        return self._state is CircuitState.OPEN

    @property
    def is_half_open(self) -> bool:
        return self._state is CircuitState.HALF_OPEN

    def _move_to(self, new_state: CircuitState) -> None:
        if new_state is self._state:
            return
        previous, self._state = self._state, new_state
        logger.info(
            f"Circuit '{self._name}' {previous.value} -> {new_state.value}",
            extra={
                "circuit_name": self._name,
                "previous_state": previous.value,
                "new_state": new_state.value,
                "failure_count": self._failure_count,
            },
        )
        if self._on_state_change is not None:
            self._on_state_change(previous.value, new_state.value, self._failure_count)

    async def can_execute(self) -> bool:
        """Whether a call may be attempted now.

        An open circuit whose recovery timeout has elapsed moves to
        half-open and lets the call through as a trial.
        """
        async with self._lock:
            if self._state is not CircuitState.OPEN:
                return True
            opened_at = self._last_failure_at or 0.0
            if time.monotonic() - opened_at < self._config.recovery_timeout:
                return False
            self._move_to(CircuitState.HALF_OPEN)
            return True

    async def record_success(self) -> None:
        async with self._lock:
            self._failure_count = 0
            self._last_failure_at = None
            self._move_to(CircuitState.CLOSED)

    async def record_failure(self) -> None:
        async with self._lock:
            self._failure_count += 1
            self._last_failure_at = time.monotonic()
            trial_failed = self._state is CircuitState.HALF_OPEN
            if trial_failed or self._failure_count >= self._config.failure_threshold:
                self._move_to(CircuitState.OPEN)

    def to_dict(self) -> dict[str, Any]:
        """Snapshot for health endpoints."""
        return {
            "name": self._name,
            "state": self._state.value,
            "failure_count": self._failure_count,
            "failure_threshold": self._config.failure_threshold,
            "recovery_timeout": self._config.recovery_timeout,
        }
