"""Workflow API endpoint.

- POST /api/v1/workflow/transition - Validate a project or content status change
"""

from fastapi import APIRouter, Depends

from pressroom.core.auth import UserInfo, get_current_user
from pressroom.core.errors import ValidationServiceError
from pressroom.schemas.common import ERROR_RESPONSES
from pressroom.schemas.workflow import TransitionRequest, TransitionResponse
from pressroom.services.workflow import (
    ContentStatus,
    ProjectStatus,
    allowed_targets,
    status_progress,
    validate_transition,
)

router = APIRouter()


@router.post(
    "/transition",
    response_model=TransitionResponse,
    responses=ERROR_RESPONSES,
    summary="Validate a status transition",
)
async def check_transition(
    data: TransitionRequest,
    user: UserInfo = Depends(get_current_user),
) -> TransitionResponse:
    """Report whether a status change is allowed and where the item can go next.

    Unknown statuses are rejected with VALIDATION_ERROR.
    """
    known = {s.value for s in (ProjectStatus if data.entity == "project" else ContentStatus)}
    for field_name, value in (
        ("current_status", data.current_status),
        ("target_status", data.target_status),
    ):
        if value not in known:
            raise ValidationServiceError(
                field_name, value, f"unknown {data.entity} status '{value}'"
            )

    return TransitionResponse(
        allowed=validate_transition(data.entity, data.current_status, data.target_status),
        current_status=data.current_status,
        target_status=data.target_status,
        allowed_targets=allowed_targets(data.entity, data.current_status),
        progress=status_progress(data.current_status, data.entity),
    )
