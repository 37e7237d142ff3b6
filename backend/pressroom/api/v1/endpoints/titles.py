"""Title enhancement API endpoint.

- POST /api/v1/titles/enhance - Up to three improved titles
"""

from fastapi import APIRouter, Depends

from pressroom.core.auth import UserInfo, get_current_user
from pressroom.core.logging import get_logger
from pressroom.schemas.common import AI_ERROR_RESPONSES
from pressroom.schemas.title import EnhanceTitleRequest, EnhanceTitleResponse
from pressroom.services.title_enhancement import get_title_enhancement_service

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "/enhance",
    response_model=EnhanceTitleResponse,
    responses=AI_ERROR_RESPONSES,
    summary="Suggest improved titles",
)
async def enhance_title(
    data: EnhanceTitleRequest,
    user: UserInfo = Depends(get_current_user),
) -> EnhanceTitleResponse:
    suggestions = await get_title_enhancement_service().enhance_title(
        data.title,
        data.content_type,
        context=data.context,
        language=data.language,
    )
    return EnhanceTitleResponse(suggestions=suggestions)
