"""Pydantic schemas for structured PR content.

StructuredContent is the canonical shape of a content version: one optional
field per document part. Press releases use headline/subheadline/dateline/
lead/body/quotes/boilerplate/isi/contact; blog posts and FAQs use
title/introduction/sections/conclusion/cta. ``plain_text`` and ``html`` hold
unstructured renderings when the content has no fields of its own.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ContentType = Literal[
    "press_release",
    "blog_post",
    "social_media",
    "internal_memo",
    "faq",
    "executive_statement",
]

Language = Literal["ja", "en"]


class Quote(BaseModel):
    """A spokesperson quote."""

    text: str = Field(..., description="Quoted statement")
    attribution: str = Field(
        "",
        description="Who said it (name and title)",
        examples=["代表取締役社長 山田太郎"],
    )


class Section(BaseModel):
    """A heading + content pair (blog section or FAQ question/answer)."""

    heading: str = Field(..., description="Section heading or FAQ question")
    content: str = Field("", description="Section body or FAQ answer")


class StructuredContent(BaseModel):
    """Structured content of a single content version."""

    model_config = ConfigDict(extra="ignore")

    # Press release
    headline: str | None = None
    subheadline: str | None = None
    dateline: str | None = Field(None, examples=["東京、2025年1月15日"])
    lead: str | None = None
    body: list[str] | None = None
    quotes: list[Quote] | None = None
    boilerplate: str | None = None
    isi: str | None = Field(None, description="Important Safety Information")
    contact: str | None = None

    # Blog / FAQ / other
    title: str | None = None
    introduction: str | None = None
    sections: list[Section] | None = None
    conclusion: str | None = None
    cta: str | None = Field(None, description="Call to action")

    # Unstructured renderings
    plain_text: str | None = None
    html: str | None = None


class NormalizeContentRequest(BaseModel):
    """Raw (possibly inconsistent) AI output to normalize."""

    content: dict = Field(
        ...,
        description="Structured content with arbitrary key spellings",
        examples=[{"Headline": "新製品発表", "bodyParagraphs": ["第一段落"]}],
    )


class NormalizeContentResponse(BaseModel):
    success: bool = True
    content: StructuredContent
    html: str = Field(..., description="Editor-ready HTML rendering")
    plain_text: str = Field(..., description="Plain-text rendering")
    character_count: int = Field(..., ge=0)


class ContentFieldSchema(BaseModel):
    key: str
    kind: str = Field(..., description="text | textarea | paragraphs | quotes | sections")
    label: str = Field(..., description="Label in the requested language")
    label_ja: str
    label_en: str


class ContentFieldsResponse(BaseModel):
    success: bool = True
    content_type: ContentType
    language: Language
    fields: list[ContentFieldSchema]
