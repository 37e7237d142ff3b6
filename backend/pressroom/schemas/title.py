"""Pydantic schemas for title enhancement."""

from pydantic import BaseModel, Field

from pressroom.schemas.structured_content import ContentType, Language


class EnhanceTitleRequest(BaseModel):
    title: str = Field(..., examples=["新薬の承認について"])
    content_type: ContentType
    context: str | None = Field(None, description="Extra context for the model")
    language: Language = "ja"


class EnhanceTitleResponse(BaseModel):
    success: bool = True
    suggestions: list[str] = Field(..., max_length=3)
