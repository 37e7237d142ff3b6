"""Pydantic schemas for compliance endpoints."""

from typing import Literal

from pydantic import BaseModel, Field, model_validator

from pressroom.schemas.structured_content import ContentType, Language

IssueType = Literal["error", "warning", "suggestion"]


class IssuePosition(BaseModel):
    start: int = Field(..., ge=0)
    end: int = Field(..., ge=0)


class ComplianceIssueSchema(BaseModel):
    """A single compliance finding."""

    type: IssueType = "warning"
    message: str
    position: IssuePosition | None = None
    suggestion: str | None = None
    rule_reference: str | None = Field(None, examples=["薬機法第66条"])


class CategoryResultSchema(BaseModel):
    score: int = Field(..., ge=0, le=100)
    issues: list[ComplianceIssueSchema] = Field(default_factory=list)


class ComplianceCheckRequest(BaseModel):
    """Text or structured content to check."""

    content: str | None = Field(None, description="Plain text to check")
    structured: dict | None = Field(
        None, description="Structured content to check (rendered to plain text)"
    )
    industry_slug: str = Field(..., examples=["pharmaceutical"])
    content_type: ContentType | None = None
    language: Language = "ja"

    @model_validator(mode="after")
    def _require_content(self) -> "ComplianceCheckRequest":
        if self.content is None and self.structured is None:
            raise ValueError("either content or structured is required")
        return self


class ComplianceDetails(BaseModel):
    categories: dict[str, CategoryResultSchema]


class ComplianceCheckResponse(BaseModel):
    success: bool = True
    score: int = Field(..., ge=0, le=100)
    rating: str = Field(..., examples=["excellent", "good", "warning", "critical"])
    details: ComplianceDetails
    suggestions: list[ComplianceIssueSchema]
    summary: str = ""
    source: Literal["quick", "ai"]
    duration_ms: float


class ComplianceScoreRequest(BaseModel):
    """Flat score request (as used for generated variants)."""

    content: str
    industry_slug: str | None = None
    include_isi: bool = False


class ComplianceScoreResponse(BaseModel):
    success: bool = True
    score: int = Field(..., ge=0, le=100)
    rating: str
