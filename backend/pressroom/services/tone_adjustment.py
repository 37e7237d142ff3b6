"""Tone adjustment service.

Rewrites existing content in another tone at a chosen intensity, keeping
facts and, on request, pharmaceutical safety wording unchanged.

ERROR LOGGING REQUIREMENTS:
- Log validation failures with field names and rejected values
- Log Claude failures with status code and error
- Add timing logs for completed adjustments
"""

import time
from dataclasses import asdict, dataclass
from typing import Any

from pressroom.core.config import get_settings
from pressroom.core.errors import AIServiceError, ConfigurationError, ValidationServiceError
from pressroom.core.logging import get_logger
from pressroom.integrations.claude import ClaudeClient, get_claude
from pressroom.services.prompts import TONE_DESCRIPTIONS, build_tone_adjustment_prompts
from pressroom.services.structured_content import count_characters

logger = get_logger(__name__)

MIN_INTENSITY = 1
MAX_INTENSITY = 5

# Anthropic's default sampling temperature
TONE_TEMPERATURE = 1.0


@dataclass
class ToneAdjustment:
    adjusted_content: str
    word_count: int
    changes_summary: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def changes_summary(current_tone: str, target_tone: str, intensity: int, language: str) -> str:
    if language == "en":
        return f"Adjusted from {current_tone} to {target_tone} (intensity: {intensity}/5)"
    return f"{current_tone}から{target_tone}へトーンを調整しました（強度: {intensity}/5）"


class ToneAdjustmentService:
    """Rewrites content in a different tone."""

    def __init__(self, claude: ClaudeClient | None = None) -> None:
        self._claude = claude

    def _validate(
        self,
        content: str,
        current_tone: str,
        target_tone: str,
        intensity: int,
        custom_tone: str | None,
    ) -> None:
        if not content or not content.strip():
            logger.warning("Tone validation failed - empty content", extra={"field": "content"})
            raise ValidationServiceError("content", content, "content is required")
        for name, tone in (("current_tone", current_tone), ("target_tone", target_tone)):
            if tone not in TONE_DESCRIPTIONS:
                logger.warning(
                    "Tone validation failed - unknown tone",
                    extra={"field": name, "value": tone},
                )
                raise ValidationServiceError(name, tone, f"unsupported tone '{tone}'")
        if not MIN_INTENSITY <= intensity <= MAX_INTENSITY:
            logger.warning(
                "Tone validation failed - intensity out of range",
                extra={"field": "intensity", "value": intensity},
            )
            raise ValidationServiceError(
                "intensity", intensity, "intensity must be between 1 and 5"
            )
        if target_tone == "custom" and not (custom_tone and custom_tone.strip()):
            logger.warning(
                "Tone validation failed - custom tone missing",
                extra={"field": "custom_tone"},
            )
            raise ValidationServiceError(
                "custom_tone", custom_tone, "custom_tone is required when target_tone is custom"
            )

    async def adjust_tone(
        self,
        content: str,
        current_tone: str,
        target_tone: str,
        intensity: int,
        custom_tone: str | None = None,
        language: str = "ja",
        preserve_compliance: bool = False,
    ) -> ToneAdjustment:
        """Rewrite ``content`` from ``current_tone`` into ``target_tone``.

        Raises:
            ValidationServiceError: If content is blank, a tone is unknown,
                intensity is outside 1-5 or a custom tone is missing
            ConfigurationError: If ANTHROPIC_API_KEY is not configured
            AIServiceError: If the Claude call fails
        """
        self._validate(content, current_tone, target_tone, intensity, custom_tone)

        if self._claude is None:
            self._claude = await get_claude()
        if not self._claude.available:
            raise ConfigurationError("ANTHROPIC_API_KEY is not configured")

        settings = get_settings()
        prompts = build_tone_adjustment_prompts(
            content,
            current_tone,
            target_tone,
            intensity,
            custom_tone=custom_tone,
            language=language,
            preserve_compliance=preserve_compliance,
        )
        start_time = time.monotonic()

        result = await self._claude.complete(
            prompts.user_prompt,
            system_prompt=prompts.system_prompt,
            max_tokens=settings.generation_max_tokens,
            temperature=TONE_TEMPERATURE,
            model=settings.generation_model,
        )
        if not result.success:
            logger.error(
                "Tone adjustment failed",
                extra={
                    "current_tone": current_tone,
                    "target_tone": target_tone,
                    "error": result.error,
                    "status_code": result.status_code,
                },
            )
            raise AIServiceError(
                f"Failed to adjust tone: {result.error}",
                operation="adjust_tone",
                status_code=result.status_code,
            )

        adjusted = (result.text or "").strip()
        word_count = count_characters(adjusted)
        logger.info(
            "Tone adjusted",
            extra={
                "current_tone": current_tone,
                "target_tone": target_tone,
                "intensity": intensity,
                "language": language,
                "word_count": word_count,
                "duration_ms": round((time.monotonic() - start_time) * 1000, 2),
            },
        )
        return ToneAdjustment(
            adjusted_content=adjusted,
            word_count=word_count,
            changes_summary=changes_summary(current_tone, target_tone, intensity, language),
        )


_tone_adjustment_service: ToneAdjustmentService | None = None


def get_tone_adjustment_service() -> ToneAdjustmentService:
    """Get the global tone adjustment service instance."""
    global _tone_adjustment_service
    if _tone_adjustment_service is None:
        _tone_adjustment_service = ToneAdjustmentService()
    return _tone_adjustment_service
