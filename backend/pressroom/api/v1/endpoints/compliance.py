"""Compliance API endpoints.

- POST /api/v1/compliance/check - Full compliance check (quick or AI)
- POST /api/v1/compliance/score - Flat score as used for generated variants

Error Logging Requirements:
- Log all incoming requests with method, path, request_id
- Log response status and timing for every request
- Return structured error responses: {"success": false, "error": {...}, "request_id": str}
"""

from fastapi import APIRouter, Depends, Request

from pressroom.core.auth import UserInfo, get_current_user
from pressroom.core.logging import get_logger
from pressroom.schemas.common import ERROR_RESPONSES
from pressroom.schemas.compliance import (
    ComplianceCheckRequest,
    ComplianceCheckResponse,
    ComplianceScoreRequest,
    ComplianceScoreResponse,
)
from pressroom.services.compliance import calculate_basic_score, get_compliance_service
from pressroom.services.compliance_rules import rate_score

logger = get_logger(__name__)

router = APIRouter()


def _get_request_id(request: Request) -> str:
    """Get request_id from request state."""
    return getattr(request.state, "request_id", "unknown")


@router.post(
    "/check",
    response_model=ComplianceCheckResponse,
    responses=ERROR_RESPONSES,
    summary="Check content compliance",
)
async def check_compliance(
    request: Request,
    data: ComplianceCheckRequest,
    user: UserInfo = Depends(get_current_user),
) -> ComplianceCheckResponse:
    """Score content against the client's industry rules.

    Accepts either plain text (``content``) or structured content
    (``structured``); structured content is rendered to plain text first.
    Content under 100 characters is checked locally without AI.
    """
    request_id = _get_request_id(request)
    logger.debug(
        "Compliance check request",
        extra={
            "request_id": request_id,
            "user_id": user.id,
            "industry_slug": data.industry_slug,
            "structured": data.structured is not None,
        },
    )

    service = get_compliance_service()
    if data.structured is not None:
        result = await service.check_structured(
            data.structured,
            data.industry_slug,
            content_type=data.content_type,
            language=data.language,
        )
    else:
        result = await service.check_compliance(
            data.content or "",
            data.industry_slug,
            content_type=data.content_type,
            language=data.language,
        )

    return ComplianceCheckResponse(**result.to_dict())


@router.post(
    "/score",
    response_model=ComplianceScoreResponse,
    responses=ERROR_RESPONSES,
    summary="Flat compliance score",
)
async def score_content(
    data: ComplianceScoreRequest,
    user: UserInfo = Depends(get_current_user),
) -> ComplianceScoreResponse:
    """Score content with the flat prohibited-phrase / missing-ISI rule."""
    score = calculate_basic_score(data.content, data.industry_slug, data.include_isi)
    return ComplianceScoreResponse(score=score, rating=rate_score(score).value)
