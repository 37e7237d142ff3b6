"""External service integrations."""

from pressroom.integrations.claude import (
    ClaudeClient,
    CompletionResult,
    close_claude,
    get_claude,
    init_claude,
)

__all__ = [
    "ClaudeClient",
    "CompletionResult",
    "close_claude",
    "get_claude",
    "init_claude",
]
