"""Content generation service.

Generates PR content with Claude, either as a set of variants from a
structured brief or as a single draft from a free-text brief.

Each variant is generated by its own Claude call at a slightly higher
temperature than the previous one; the calls run concurrently and the
request fails as a whole if any of them fails.

ERROR LOGGING REQUIREMENTS:
- Log method entry/exit at DEBUG level with parameters (sanitized)
- Log all exceptions with full stack trace and context
- Include project_id in all service logs
- Log validation failures with field names and rejected values
- Add timing logs for operations >1 second
"""

import asyncio
import time
import traceback
from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

from pressroom.core.config import get_settings
from pressroom.core.errors import AIServiceError, ConfigurationError, ValidationServiceError
from pressroom.core.logging import get_logger
from pressroom.integrations.claude import ClaudeClient, CompletionResult, get_claude
from pressroom.schemas.generation import (
    ClientContext,
    ContentGenerationBrief,
    GenerateContentRequest,
    GenerationParams,
)
from pressroom.schemas.structured_content import StructuredContent
from pressroom.services.compliance import (
    ComplianceCategories,
    calculate_basic_details,
    calculate_basic_score,
)
from pressroom.services.prompts import (
    PromptPair,
    build_generation_prompt,
    build_variant_prompt,
)
from pressroom.services.structured_content import CONTENT_TYPE_FIELDS, parse_generation_response

logger = get_logger(__name__)

SLOW_OPERATION_THRESHOLD_MS = 1000

SINGLE_GENERATION_TEMPERATURE = 0.7


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class ContentVariant:
    """One generated variant of a brief."""

    id: str
    content: StructuredContent
    plain_text: str
    compliance_score: int
    word_count: int
    generation_params: GenerationParams

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content.model_dump(exclude_none=True),
            "compliance_score": self.compliance_score,
            "word_count": self.word_count,
            "generation_params": self.generation_params.model_dump(),
        }


@dataclass
class GeneratedContent:
    """Result of a single generation from a free-text brief."""

    content: StructuredContent
    plain_text: str
    compliance_score: int
    categories: ComplianceCategories
    word_count: int
    generation_params: GenerationParams
    compliance_notes: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "content": self.content.model_dump(exclude_none=True),
            "compliance_score": self.compliance_score,
            "compliance_details": {
                "categories": {
                    name: result.to_dict() for name, result in self.categories.items()
                }
            },
            "word_count": self.word_count,
            "compliance_notes": self.compliance_notes,
            "generation_params": self.generation_params.model_dump(),
        }


# =============================================================================
# SERVICE
# =============================================================================


class ContentGenerationService:
    """Generates structured PR content with Claude."""

    def __init__(self, claude: ClaudeClient | None = None) -> None:
        self._claude = claude
        logger.debug("ContentGenerationService initialized")

    async def _get_claude(self) -> ClaudeClient:
        if self._claude is None:
            self._claude = await get_claude()
        if not self._claude.available:
            logger.error("Content generation requested without ANTHROPIC_API_KEY")
            raise ConfigurationError("ANTHROPIC_API_KEY is not configured")
        return self._claude

    def _require(self, project_id: str, field_name: str, value: Any) -> None:
        if value is None or (isinstance(value, str) and not value.strip()):
            logger.warning(
                "Validation failed - required field missing",
                extra={"project_id": project_id, "field": field_name, "value": value},
            )
            raise ValidationServiceError(field_name, value, f"{field_name} is required")

    def _validate_content_type(self, project_id: str, content_type: str) -> None:
        self._require(project_id, "content_type", content_type)
        if content_type not in CONTENT_TYPE_FIELDS:
            logger.warning(
                "Validation failed - unknown content type",
                extra={"project_id": project_id, "field": "content_type", "value": content_type},
            )
            raise ValidationServiceError(
                "content_type",
                content_type,
                f"must be one of {', '.join(CONTENT_TYPE_FIELDS)}",
            )

    def _validate_brief(self, brief: ContentGenerationBrief) -> None:
        self._require(brief.project_id, "project_id", brief.project_id)
        self._validate_content_type(brief.project_id, brief.content_type)
        self._require(brief.project_id, "title", brief.title)
        self._require(brief.project_id, "summary", brief.summary)

    def _variant_temperature(self, index: int) -> float:
        settings = get_settings()
        return round(
            settings.variant_base_temperature + settings.variant_temperature_step * index, 2
        )

    async def _complete(
        self,
        claude: ClaudeClient,
        prompts: PromptPair,
        temperature: float,
    ) -> CompletionResult:
        settings = get_settings()
        return await claude.complete(
            prompts.user_prompt,
            system_prompt=prompts.system_prompt,
            max_tokens=settings.generation_max_tokens,
            temperature=temperature,
            model=settings.generation_model,
        )

    async def generate_variants(
        self,
        brief: ContentGenerationBrief,
        client: ClientContext,
    ) -> list[ContentVariant]:
        """Generate content variants for a brief.

        Args:
            brief: The generation brief
            client: Client the content is written for

        Returns:
            One ContentVariant per configured variant, in variation order

        Raises:
            ValidationServiceError: If a required brief field is missing
            ConfigurationError: If ANTHROPIC_API_KEY is not configured
            AIServiceError: If any of the Claude calls fails
        """
        logger.debug(
            "generate_variants() called",
            extra={
                "project_id": brief.project_id,
                "content_type": brief.content_type,
                "industry_slug": client.industry_slug,
                "tone": brief.tone,
            },
        )
        self._validate_brief(brief)
        claude = await self._get_claude()

        settings = get_settings()
        count = settings.variant_count
        temperatures = [self._variant_temperature(i) for i in range(count)]
        start_time = time.monotonic()

        try:
            results = await asyncio.gather(
                *(
                    self._complete(claude, build_variant_prompt(brief, client, i), temperatures[i])
                    for i in range(count)
                )
            )
        except Exception as e:
            logger.error(
                "Variant generation failed",
                extra={
                    "project_id": brief.project_id,
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "stack_trace": traceback.format_exc(),
                },
                exc_info=True,
            )
            raise AIServiceError(
                f"Failed to generate variants: {e}", operation="generate_variants"
            ) from e

        failed = [(i, r) for i, r in enumerate(results) if not r.success]
        if failed:
            index, result = failed[0]
            logger.error(
                "Variant generation failed",
                extra={
                    "project_id": brief.project_id,
                    "failed_variants": [i for i, _ in failed],
                    "error": result.error,
                    "status_code": result.status_code,
                },
            )
            raise AIServiceError(
                f"Failed to generate variant {index + 1}: {result.error}",
                operation="generate_variants",
                status_code=result.status_code,
            )

        variants = []
        for i, result in enumerate(results):
            parsed = parse_generation_response(result.text or "")
            variants.append(
                ContentVariant(
                    id=str(uuid4()),
                    content=parsed.structured,
                    plain_text=parsed.plain_text,
                    compliance_score=calculate_basic_score(
                        parsed.plain_text, client.industry_slug, brief.include_isi
                    ),
                    word_count=parsed.word_count,
                    generation_params=GenerationParams(
                        tone=brief.tone,
                        model=result.model or settings.generation_model,
                        temperature=temperatures[i],
                    ),
                )
            )

        duration_ms = (time.monotonic() - start_time) * 1000
        logger.info(
            "Content variants generated",
            extra={
                "project_id": brief.project_id,
                "variant_count": len(variants),
                "scores": [v.compliance_score for v in variants],
                "duration_ms": round(duration_ms, 2),
            },
        )
        if duration_ms > SLOW_OPERATION_THRESHOLD_MS:
            logger.warning(
                "Slow variant generation",
                extra={
                    "project_id": brief.project_id,
                    "duration_ms": round(duration_ms, 2),
                    "threshold_ms": SLOW_OPERATION_THRESHOLD_MS,
                },
            )
        return variants

    async def generate_content(
        self,
        request: GenerateContentRequest,
        client: ClientContext,
    ) -> GeneratedContent:
        """Generate a single draft from a free-text brief.

        Raises:
            ValidationServiceError: If project_id, content_type or brief is missing
            ConfigurationError: If ANTHROPIC_API_KEY is not configured
            AIServiceError: If the Claude call fails
        """
        logger.debug(
            "generate_content() called",
            extra={
                "project_id": request.project_id,
                "content_type": request.content_type,
                "brief_length": len(request.brief or ""),
            },
        )
        self._require(request.project_id, "project_id", request.project_id)
        self._validate_content_type(request.project_id, request.content_type)
        self._require(request.project_id, "brief", request.brief)
        claude = await self._get_claude()

        settings = get_settings()
        start_time = time.monotonic()

        result = await self._complete(
            claude,
            build_generation_prompt(request, client),
            SINGLE_GENERATION_TEMPERATURE,
        )
        if not result.success:
            logger.error(
                "Content generation failed",
                extra={
                    "project_id": request.project_id,
                    "error": result.error,
                    "status_code": result.status_code,
                },
            )
            raise AIServiceError(
                f"Failed to generate content: {result.error}",
                operation="generate_content",
                status_code=result.status_code,
            )

        parsed = parse_generation_response(result.text or "")
        score, categories = calculate_basic_details(
            parsed.plain_text, client.industry_slug, request.settings.include_isi
        )

        duration_ms = (time.monotonic() - start_time) * 1000
        logger.info(
            "Content generated",
            extra={
                "project_id": request.project_id,
                "compliance_score": score,
                "word_count": parsed.word_count,
                "duration_ms": round(duration_ms, 2),
            },
        )
        if duration_ms > SLOW_OPERATION_THRESHOLD_MS:
            logger.warning(
                "Slow content generation",
                extra={
                    "project_id": request.project_id,
                    "duration_ms": round(duration_ms, 2),
                    "threshold_ms": SLOW_OPERATION_THRESHOLD_MS,
                },
            )

        return GeneratedContent(
            content=parsed.structured,
            plain_text=parsed.plain_text,
            compliance_score=score,
            categories=categories,
            word_count=parsed.word_count,
            compliance_notes=parsed.compliance_notes,
            generation_params=GenerationParams(
                tone=request.settings.tone,
                model=result.model or settings.generation_model,
                temperature=SINGLE_GENERATION_TEMPERATURE,
            ),
        )


# =============================================================================
# SINGLETON
# =============================================================================


_content_generation_service: ContentGenerationService | None = None


def get_content_generation_service() -> ContentGenerationService:
    """Get the global content generation service instance."""
    global _content_generation_service
    if _content_generation_service is None:
        _content_generation_service = ContentGenerationService()
        logger.info("ContentGenerationService singleton created")
    return _content_generation_service
