"""Title enhancement service.

Asks the fast title model for up to three improved variations of a working
title. An answer that cannot be parsed degrades to the original title.
"""

import time
from typing import Any

from pressroom.core.config import get_settings
from pressroom.core.errors import AIServiceError, ConfigurationError, ValidationServiceError
from pressroom.core.logging import get_logger
from pressroom.integrations.claude import ClaudeClient, get_claude
from pressroom.services.prompts import TITLE_GUIDELINES, build_title_prompts
from pressroom.utils.llm_json import extract_json_object

logger = get_logger(__name__)

MAX_SUGGESTIONS = 3

TITLE_TEMPERATURE = 0.7


def parse_title_suggestions(text: str, original_title: str) -> list[str]:
    """Pull the suggestions out of the model answer.

    Keeps non-blank strings only, at most three. Falls back to
    ``[original_title]`` when nothing usable is found.
    """
    try:
        payload = extract_json_object(text)
    except ValueError as e:
        logger.warning(
            "Title suggestions answer is not JSON",
            extra={"response_length": len(text), "error": str(e)},
        )
        return [original_title]

    raw: Any = payload.get("suggestions")
    if not isinstance(raw, list):
        return [original_title]

    suggestions = [s.strip() for s in raw if isinstance(s, str) and s.strip()]
    return suggestions[:MAX_SUGGESTIONS] or [original_title]


class TitleEnhancementService:
    """Suggests improved titles for a piece of content."""

    def __init__(self, claude: ClaudeClient | None = None) -> None:
        self._claude = claude

    async def enhance_title(
        self,
        title: str,
        content_type: str,
        context: str | None = None,
        language: str = "ja",
    ) -> list[str]:
        """Return up to three improved titles.

        Raises:
            ValidationServiceError: If title is blank or content_type unknown
            ConfigurationError: If ANTHROPIC_API_KEY is not configured
            AIServiceError: If the Claude call fails
        """
        if not title or not title.strip():
            logger.warning("Title validation failed - empty title", extra={"field": "title"})
            raise ValidationServiceError("title", title, "title is required")
        if content_type not in TITLE_GUIDELINES:
            logger.warning(
                "Title validation failed - unknown content type",
                extra={"field": "content_type", "value": content_type},
            )
            raise ValidationServiceError(
                "content_type", content_type, f"unsupported content type '{content_type}'"
            )

        if self._claude is None:
            self._claude = await get_claude()
        if not self._claude.available:
            raise ConfigurationError("ANTHROPIC_API_KEY is not configured")

        settings = get_settings()
        prompts = build_title_prompts(title.strip(), content_type, context, language)
        start_time = time.monotonic()

        result = await self._claude.complete(
            prompts.user_prompt,
            system_prompt=prompts.system_prompt,
            max_tokens=settings.title_max_tokens,
            temperature=TITLE_TEMPERATURE,
            model=settings.title_model,
        )
        if not result.success:
            logger.error(
                "Title enhancement failed",
                extra={
                    "content_type": content_type,
                    "error": result.error,
                    "status_code": result.status_code,
                },
            )
            raise AIServiceError(
                f"Failed to enhance title: {result.error}",
                operation="enhance_title",
                status_code=result.status_code,
            )

        suggestions = parse_title_suggestions(result.text or "", title.strip())
        logger.info(
            "Title suggestions generated",
            extra={
                "content_type": content_type,
                "language": language,
                "suggestion_count": len(suggestions),
                "duration_ms": round((time.monotonic() - start_time) * 1000, 2),
            },
        )
        return suggestions


_title_enhancement_service: TitleEnhancementService | None = None


def get_title_enhancement_service() -> TitleEnhancementService:
    """Get the global title enhancement service instance."""
    global _title_enhancement_service
    if _title_enhancement_service is None:
        _title_enhancement_service = TitleEnhancementService()
    return _title_enhancement_service
