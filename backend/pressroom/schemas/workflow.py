"""Pydantic schemas for workflow transition checks."""

from typing import Literal

from pydantic import BaseModel, Field


class TransitionRequest(BaseModel):
    entity: Literal["project", "content"] = Field(
        ..., description="Which workflow the statuses belong to"
    )
    current_status: str = Field(..., examples=["in_progress"])
    target_status: str = Field(..., examples=["in_review"])


class TransitionResponse(BaseModel):
    success: bool = True
    allowed: bool
    current_status: str
    target_status: str
    allowed_targets: list[str]
    progress: int = Field(..., ge=0, le=100, description="Percent through the workflow")
