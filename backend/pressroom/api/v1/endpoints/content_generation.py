"""Content generation API endpoints.

- POST /api/v1/content/variants - Generate content variants from a brief
- POST /api/v1/content/generate - Generate a single draft from a free-text brief
- POST /api/v1/content/normalize - Normalize AI output, render HTML and plain text
- POST /api/v1/content/adjust-tone - Rewrite content in another tone
- GET /api/v1/content/fields/{content_type} - Editor fields for a content type
"""

import time

from fastapi import APIRouter, Depends, Query, Request

from pressroom.core.auth import UserInfo, get_current_user
from pressroom.core.logging import get_logger
from pressroom.schemas.common import AI_ERROR_RESPONSES, ERROR_RESPONSES
from pressroom.schemas.generation import (
    GenerateContentRequest,
    GenerateContentResponse,
    GenerateVariantsRequest,
    GenerateVariantsResponse,
)
from pressroom.schemas.structured_content import (
    ContentFieldsResponse,
    ContentType,
    Language,
    NormalizeContentRequest,
    NormalizeContentResponse,
)
from pressroom.schemas.tone import AdjustToneRequest, AdjustToneResponse
from pressroom.services.content_generation import get_content_generation_service
from pressroom.services.structured_content import (
    count_characters,
    get_content_type_fields,
    structured_to_html,
    structured_to_plain_text,
    to_structured_content,
)
from pressroom.services.tone_adjustment import get_tone_adjustment_service

logger = get_logger(__name__)

router = APIRouter()


def _get_request_id(request: Request) -> str:
    """Get request_id from request state."""
    return getattr(request.state, "request_id", "unknown")


@router.post(
    "/variants",
    response_model=GenerateVariantsResponse,
    responses=AI_ERROR_RESPONSES,
    summary="Generate content variants",
)
async def generate_variants(
    request: Request,
    data: GenerateVariantsRequest,
    user: UserInfo = Depends(get_current_user),
) -> GenerateVariantsResponse:
    """Generate three variants of a brief in parallel.

    Each variant carries its structured content, a flat compliance score,
    its word count and the parameters it was generated with. Fails with
    AI_ERROR if any of the variants fails.
    """
    request_id = _get_request_id(request)
    start_time = time.monotonic()

    service = get_content_generation_service()
    variants = await service.generate_variants(data, data.client)

    logger.info(
        "Variants generated",
        extra={
            "request_id": request_id,
            "user_id": user.id,
            "project_id": data.project_id,
            "variant_count": len(variants),
            "duration_ms": round((time.monotonic() - start_time) * 1000, 2),
        },
    )
    return GenerateVariantsResponse(variants=[v.to_dict() for v in variants])


@router.post(
    "/generate",
    response_model=GenerateContentResponse,
    responses=AI_ERROR_RESPONSES,
    summary="Generate content from a free-text brief",
)
async def generate_content(
    request: Request,
    data: GenerateContentRequest,
    user: UserInfo = Depends(get_current_user),
) -> GenerateContentResponse:
    """Generate a single draft with per-category compliance details."""
    request_id = _get_request_id(request)

    service = get_content_generation_service()
    generated = await service.generate_content(data, data.client)

    logger.info(
        "Content generated",
        extra={
            "request_id": request_id,
            "user_id": user.id,
            "project_id": data.project_id,
            "compliance_score": generated.compliance_score,
        },
    )
    return GenerateContentResponse(**generated.to_dict())


@router.post(
    "/normalize",
    response_model=NormalizeContentResponse,
    responses=ERROR_RESPONSES,
    summary="Normalize structured content",
)
async def normalize_content(
    data: NormalizeContentRequest,
    user: UserInfo = Depends(get_current_user),
) -> NormalizeContentResponse:
    """Map arbitrary key spellings onto the canonical structure and render it."""
    content = to_structured_content(data.content)
    plain_text = structured_to_plain_text(content)
    return NormalizeContentResponse(
        content=content,
        html=structured_to_html(content),
        plain_text=plain_text,
        character_count=count_characters(plain_text),
    )


@router.post(
    "/adjust-tone",
    response_model=AdjustToneResponse,
    responses=AI_ERROR_RESPONSES,
    summary="Adjust the tone of existing content",
)
async def adjust_tone(
    request: Request,
    data: AdjustToneRequest,
    user: UserInfo = Depends(get_current_user),
) -> AdjustToneResponse:
    """Rewrite content in the target tone at intensity 1 (subtle) to 5 (rewrite)."""
    adjustment = await get_tone_adjustment_service().adjust_tone(
        data.content,
        data.current_tone,
        data.target_tone,
        data.intensity,
        custom_tone=data.custom_tone,
        language=data.language,
        preserve_compliance=data.preserve_compliance,
    )

    logger.info(
        "Tone adjustment request completed",
        extra={
            "request_id": _get_request_id(request),
            "user_id": user.id,
            "target_tone": data.target_tone,
            "intensity": data.intensity,
        },
    )
    return AdjustToneResponse(**adjustment.to_dict())


@router.get(
    "/fields/{content_type}",
    response_model=ContentFieldsResponse,
    responses=ERROR_RESPONSES,
    summary="List editor fields for a content type",
)
async def list_content_fields(
    content_type: ContentType,
    language: Language = Query("ja"),
    user: UserInfo = Depends(get_current_user),
) -> ContentFieldsResponse:
    """Fields the editor shows for ``content_type``, labelled in ``language``."""
    fields = get_content_type_fields(content_type)
    return ContentFieldsResponse(
        content_type=content_type,
        language=language,
        fields=[f.to_dict(language) for f in fields],
    )
