"""Pydantic schemas for tone adjustment."""

from pydantic import BaseModel, Field

from pressroom.schemas.generation import ToneType
from pressroom.schemas.structured_content import Language


class AdjustToneRequest(BaseModel):
    content: str = Field(..., description="Plain text to rewrite")
    current_tone: ToneType
    target_tone: ToneType
    custom_tone: str | None = Field(None, description="Required when target_tone is 'custom'")
    intensity: int = Field(
        ..., description="1 = subtle adjustment, 5 = complete rewrite", examples=[3]
    )
    language: Language = "ja"
    preserve_compliance: bool = Field(
        False, description="Keep safety information, contraindications and warnings untouched"
    )


class AdjustToneResponse(BaseModel):
    success: bool = True
    adjusted_content: str
    word_count: int = Field(..., ge=0, description="Characters excluding whitespace")
    changes_summary: str
