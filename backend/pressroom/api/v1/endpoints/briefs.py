"""Brief expansion API endpoint.

- POST /api/v1/briefs/expand - Expand a brief into a PR plan
"""

from fastapi import APIRouter, Depends, Request

from pressroom.core.auth import UserInfo, get_current_user
from pressroom.core.logging import get_logger
from pressroom.schemas.brief import ExpandBriefRequest, ExpandBriefResponse
from pressroom.schemas.common import AI_ERROR_RESPONSES
from pressroom.services.brief_expansion import get_brief_expansion_service

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "/expand",
    response_model=ExpandBriefResponse,
    responses=AI_ERROR_RESPONSES,
    summary="Expand a brief into a PR plan",
)
async def expand_brief(
    request: Request,
    data: ExpandBriefRequest,
    user: UserInfo = Depends(get_current_user),
) -> ExpandBriefResponse:
    """Objectives, audiences, key messages, deliverables and open questions for a brief."""
    expanded = await get_brief_expansion_service().expand_brief(
        data.project_id,
        data.brief,
        client=data.client,
        language=data.language,
    )

    logger.info(
        "Brief expansion request completed",
        extra={
            "request_id": getattr(request.state, "request_id", "unknown"),
            "user_id": user.id,
            "project_id": data.project_id,
        },
    )
    return ExpandBriefResponse(expanded_brief=expanded)
