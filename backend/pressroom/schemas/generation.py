"""Pydantic schemas for content generation endpoints.

- ContentGenerationBrief / GenerateVariantsRequest: brief for 3-variant generation
- GenerateContentRequest: single generation from a free-text brief
- ClientContext / StyleProfile: client information used in prompts
"""

from typing import Literal

from pydantic import BaseModel, Field

from pressroom.schemas.compliance import CategoryResultSchema
from pressroom.schemas.structured_content import ContentType, Language, StructuredContent

ToneType = Literal["formal", "professional", "friendly", "urgent", "custom"]
Formality = Literal["low", "medium", "high"]


class StyleProfile(BaseModel):
    """Client writing style preferences."""

    tone: str | None = Field(None, description="Preferred tone in free text")
    formality: Formality | None = None
    key_messages: list[str] = Field(default_factory=list)
    avoid_phrases: list[str] = Field(default_factory=list)
    boilerplate: str | None = Field(None, description="Company boilerplate text")


class ClientContext(BaseModel):
    """Client the content is written for."""

    name: str = Field("Client", description="Client company name")
    industry_slug: str | None = Field(
        None,
        description="Industry slug; 'pharmaceutical' enables 薬機法 rules",
        examples=["pharmaceutical"],
    )
    boilerplate: str | None = None
    style_profile: StyleProfile | None = None

    def resolved_boilerplate(self) -> str | None:
        if self.boilerplate:
            return self.boilerplate
        if self.style_profile and self.style_profile.boilerplate:
            return self.style_profile.boilerplate
        return None


class ContentGenerationBrief(BaseModel):
    """Structured brief used to generate content variants."""

    project_id: str = Field(..., description="Project the content belongs to")
    content_type: ContentType
    title: str = Field(..., description="Working title")
    summary: str = Field(..., description="What the content is about")
    key_messages: list[str] = Field(default_factory=list)
    call_to_action: str | None = None
    target_audience: str = Field("", examples=["医療従事者", "一般消費者"])
    tone: ToneType = "professional"
    custom_tone: str | None = Field(None, description="Used when tone is 'custom'")
    keywords: list[str] = Field(default_factory=list)
    target_length: int = Field(800, gt=0, description="Target length in characters")
    product_name: str | None = None
    therapeutic_area: str | None = None
    include_isi: bool = Field(False, description="Include Important Safety Information")
    include_boilerplate: bool = False
    regulatory_notes: str | None = None
    language: Language = "ja"


class GenerateVariantsRequest(ContentGenerationBrief):
    """Brief plus the client it is written for."""

    client: ClientContext = Field(default_factory=ClientContext)


class GenerationParams(BaseModel):
    tone: str
    model: str
    temperature: float


class ContentVariantSchema(BaseModel):
    id: str
    content: StructuredContent
    compliance_score: int = Field(..., ge=0, le=100)
    word_count: int = Field(..., ge=0)
    generation_params: GenerationParams


class GenerateVariantsResponse(BaseModel):
    success: bool = True
    variants: list[ContentVariantSchema]


class GenerationSettings(BaseModel):
    tone: ToneType = "professional"
    custom_tone: str | None = None
    target_length: int | None = Field(None, gt=0)
    include_isi: bool = False
    include_boilerplate: bool = False
    language: Language = "ja"


class GenerateContentRequest(BaseModel):
    """Single generation from a free-text brief."""

    project_id: str
    content_type: ContentType
    brief: str = Field(..., description="Free-text brief")
    client_style_profile: StyleProfile | None = None
    settings: GenerationSettings = Field(default_factory=GenerationSettings)
    client: ClientContext = Field(default_factory=ClientContext)


class ComplianceDetailsSchema(BaseModel):
    categories: dict[str, CategoryResultSchema]


class GenerateContentResponse(BaseModel):
    success: bool = True
    content: StructuredContent
    compliance_score: int = Field(..., ge=0, le=100)
    compliance_details: ComplianceDetailsSchema
    word_count: int = Field(..., ge=0)
    compliance_notes: list[str] = Field(default_factory=list)
    generation_params: GenerationParams
