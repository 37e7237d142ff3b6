"""Pydantic schemas for brief expansion."""

from pydantic import BaseModel, Field

from pressroom.schemas.generation import ClientContext
from pressroom.schemas.structured_content import Language


class ExpandBriefRequest(BaseModel):
    project_id: str
    brief: str = Field(..., description="Initial free-text brief")
    client: ClientContext = Field(default_factory=ClientContext)
    language: Language = "ja"


class PersonaSchema(BaseModel):
    name: str = ""
    characteristics: str = ""
    needs: str = ""


class TargetAudienceSchema(BaseModel):
    primary: list[str] = Field(default_factory=list)
    secondary: list[str] = Field(default_factory=list)
    personas: list[PersonaSchema] = Field(default_factory=list)


class KeyMessageSchema(BaseModel):
    message: str = ""
    priority: int = Field(..., ge=1)
    proof_points: list[str] = Field(default_factory=list)


class SuggestedToneSchema(BaseModel):
    tone: str = "professional"
    rationale: str = ""


class DeliverableSchema(BaseModel):
    type: str = "press_release"
    purpose: str = ""
    key_points: list[str] = Field(default_factory=list)
    unique_angle: str | None = None


class TimelinePhaseSchema(BaseModel):
    phase: str = ""
    duration: str = ""
    activities: list[str] = Field(default_factory=list)


class ExpandedBriefSchema(BaseModel):
    summary: str
    objectives: list[str]
    target_audience: TargetAudienceSchema
    key_messages: list[KeyMessageSchema]
    suggested_tone: SuggestedToneSchema
    deliverables: list[DeliverableSchema]
    timeline_suggestions: list[TimelinePhaseSchema]
    compliance_considerations: list[str]
    questions_for_client: list[str]
    references_needed: list[str]


class ExpandBriefResponse(BaseModel):
    success: bool = True
    expanded_brief: ExpandedBriefSchema
