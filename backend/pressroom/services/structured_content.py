"""Structured content normalization and rendering.

AI generations come back with inconsistent key spellings ("Headline",
"bodyParagraphs", "本文", "call to action", ...) and inconsistent value
shapes (body as one string or a list, quotes keyed by speaker/source, FAQ
sections keyed by question/answer). This module maps all of them onto
StructuredContent and renders it for the editor (HTML) and for compliance
checks and search (plain text).

Features:
- Key alias table covering camelCase, spaced, hyphenated and Japanese keys
- Idempotent normalization (normalizing twice equals normalizing once)
- HTML rendering with every text value escaped
- Stored HTML reduced to an allowlist of tags, attributes and URL schemes
- HTML to plain text conversion with BeautifulSoup
- Best-effort parsing of generation answers
"""

import re
from dataclasses import dataclass, field
from typing import Any

from bs4 import BeautifulSoup, Comment, NavigableString

from pressroom.core.logging import get_logger
from pressroom.schemas.structured_content import (
    ContentType,
    Quote,
    Section,
    StructuredContent,
)
from pressroom.utils.llm_json import extract_json_object

logger = get_logger(__name__)


# =============================================================================
# FIELD CONFIGURATION
# =============================================================================

CANONICAL_FIELDS: tuple[str, ...] = tuple(StructuredContent.model_fields)

LIST_FIELDS = frozenset({"body", "quotes", "sections"})
TEXT_FIELDS = frozenset(CANONICAL_FIELDS) - LIST_FIELDS

# Fields that make content "structured" (plain_text/html do not)
STRUCTURED_FIELDS: tuple[str, ...] = tuple(
    name for name in CANONICAL_FIELDS if name not in ("plain_text", "html")
)


@dataclass(frozen=True)
class FieldConfig:
    """Editor field for one content type."""

    key: str
    kind: str  # text | textarea | paragraphs | quotes | sections
    label_ja: str
    label_en: str

    def label(self, language: str = "ja") -> str:
        return self.label_ja if language == "ja" else self.label_en

    def to_dict(self, language: str = "ja") -> dict[str, str]:
        return {
            "key": self.key,
            "kind": self.kind,
            "label": self.label(language),
            "label_ja": self.label_ja,
            "label_en": self.label_en,
        }


CONTENT_TYPE_FIELDS: dict[str, tuple[FieldConfig, ...]] = {
    "press_release": (
        FieldConfig("headline", "text", "見出し", "Headline"),
        FieldConfig("subheadline", "text", "副見出し", "Subheadline"),
        FieldConfig("dateline", "text", "デートライン", "Dateline"),
        FieldConfig("lead", "textarea", "リード文", "Lead"),
        FieldConfig("body", "paragraphs", "本文", "Body"),
        FieldConfig("quotes", "quotes", "引用", "Quotes"),
        FieldConfig("boilerplate", "textarea", "ボイラープレート", "Boilerplate"),
        FieldConfig("isi", "textarea", "重要な安全性情報", "Important Safety Information"),
        FieldConfig("contact", "textarea", "お問い合わせ先", "Contact"),
    ),
    "blog_post": (
        FieldConfig("title", "text", "タイトル", "Title"),
        FieldConfig("introduction", "textarea", "イントロダクション", "Introduction"),
        FieldConfig("sections", "sections", "セクション", "Sections"),
        FieldConfig("conclusion", "textarea", "まとめ", "Conclusion"),
        FieldConfig("cta", "textarea", "CTA", "Call to Action"),
    ),
    "social_media": (
        FieldConfig("title", "text", "タイトル", "Title"),
        FieldConfig("body", "paragraphs", "本文", "Body"),
    ),
    "internal_memo": (
        FieldConfig("title", "text", "タイトル", "Title"),
        FieldConfig("headline", "text", "ヘッダー", "Header"),
        FieldConfig("lead", "textarea", "目的", "Purpose"),
        FieldConfig("body", "paragraphs", "本文", "Body"),
        FieldConfig("contact", "textarea", "お問い合わせ先", "Contact"),
    ),
    "faq": (
        FieldConfig("title", "text", "タイトル", "Title"),
        FieldConfig("introduction", "textarea", "イントロダクション", "Introduction"),
        FieldConfig("sections", "sections", "Q&A", "Q&A"),
        FieldConfig("conclusion", "textarea", "まとめ", "Conclusion"),
    ),
    "executive_statement": (
        FieldConfig("title", "text", "タイトル", "Title"),
        FieldConfig("lead", "textarea", "冒頭", "Opening"),
        FieldConfig("body", "paragraphs", "本文", "Body"),
        FieldConfig("conclusion", "textarea", "まとめ", "Conclusion"),
    ),
}


def get_content_type_fields(content_type: ContentType | str) -> tuple[FieldConfig, ...]:
    """Editor fields for a content type (empty for unknown types)."""
    return CONTENT_TYPE_FIELDS.get(content_type, ())


# =============================================================================
# KEY ALIASES
# =============================================================================

# Alias -> canonical field. Keys are already in canonical form
# (see _canonical_key), Japanese keys are matched verbatim.
KEY_ALIASES: dict[str, str] = {
    # headline
    "main_headline": "headline",
    "press_headline": "headline",
    "header": "headline",
    "見出し": "headline",
    "ヘッドライン": "headline",
    "ヘッダー": "headline",
    # subheadline
    "sub_headline": "subheadline",
    "subheading": "subheadline",
    "sub_heading": "subheadline",
    "subtitle": "subheadline",
    "sub_title": "subheadline",
    "副見出し": "subheadline",
    "サブ見出し": "subheadline",
    # dateline
    "date_line": "dateline",
    "date_location": "dateline",
    "date": "dateline",
    "デートライン": "dateline",
    "日付": "dateline",
    "日付・発信地": "dateline",
    # lead
    "lead_paragraph": "lead",
    "lede": "lead",
    "summary": "lead",
    "purpose": "lead",
    "opening": "lead",
    "リード": "lead",
    "リード文": "lead",
    "目的": "lead",
    "冒頭": "lead",
    # body
    "body_paragraphs": "body",
    "paragraphs": "body",
    "body_text": "body",
    "main_content": "body",
    "content": "body",
    "本文": "body",
    "主要内容": "body",
    # quotes
    "quote": "quotes",
    "quotations": "quotes",
    "spokesperson_quote": "quotes",
    "spokesperson_quotes": "quotes",
    "引用": "quotes",
    # boilerplate
    "company_overview": "boilerplate",
    "company_description": "boilerplate",
    "about": "boilerplate",
    "about_company": "boilerplate",
    "about_us": "boilerplate",
    "会社概要": "boilerplate",
    "ボイラープレート": "boilerplate",
    # isi
    "important_safety_information": "isi",
    "safety_information": "isi",
    "safety_info": "isi",
    "重要な安全性情報": "isi",
    "安全性情報": "isi",
    # contact
    "contact_info": "contact",
    "contact_information": "contact",
    "media_contact": "contact",
    "お問い合わせ先": "contact",
    "お問い合わせ": "contact",
    # title
    "タイトル": "title",
    # introduction
    "intro": "introduction",
    "導入": "introduction",
    "導入部": "introduction",
    "イントロダクション": "introduction",
    # sections
    "main_sections": "sections",
    "content_sections": "sections",
    "faqs": "sections",
    "faq": "sections",
    "qa": "sections",
    "q_and_a": "sections",
    "q&a": "sections",
    "questions": "sections",
    "セクション": "sections",
    # conclusion
    "closing": "conclusion",
    "まとめ": "conclusion",
    "締めくくり": "conclusion",
    # cta
    "call_to_action": "cta",
    "行動喚起": "cta",
    # unstructured renderings
    "plaintext": "plain_text",
    "full_text": "plain_text",
    "text": "plain_text",
    "html_content": "html",
}

QUOTE_TEXT_KEYS = ("text", "quote", "content", "statement")
QUOTE_ATTRIBUTION_KEYS = ("attribution", "speaker", "source", "author", "name")
SECTION_HEADING_KEYS = ("heading", "title", "question", "header", "subheading")
SECTION_CONTENT_KEYS = ("content", "answer", "body", "text")

# Key that wraps the fields in generation answers
WRAPPER_KEY = "structured"

_CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_SEPARATOR_RE = re.compile(r"[\s\-]+")
_REPEATED_UNDERSCORE_RE = re.compile(r"_+")
_BLANK_LINE_RE = re.compile(r"\n\s*\n")


def _canonical_key(key: Any) -> str:
    """Spell a key the canonical way: trimmed, snake_case, lower-cased."""
    text = str(key).strip()
    text = _CAMEL_BOUNDARY_RE.sub("_", text)
    text = _SEPARATOR_RE.sub("_", text)
    text = _REPEATED_UNDERSCORE_RE.sub("_", text)
    return text.strip("_").lower()


def resolve_key(key: Any) -> str | None:
    """Map a raw key to its StructuredContent field, or None if unknown."""
    canonical = _canonical_key(key)
    if canonical in CANONICAL_FIELDS:
        return canonical
    return KEY_ALIASES.get(canonical)


# =============================================================================
# VALUE COERCION
# =============================================================================


def _as_text(value: Any) -> str | None:
    """Coerce a scalar or list value to stripped text (None when empty)."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        text = value.strip()
    elif isinstance(value, (int, float)):
        text = str(value)
    elif isinstance(value, list):
        parts = [t for t in (_as_text(item) for item in value) if t]
        text = "\n\n".join(parts)
    elif isinstance(value, dict):
        # {"text": ...} style wrappers
        for candidate in ("text", "content", "value"):
            if candidate in value:
                return _as_text(value[candidate])
        return None
    else:
        return None
    return text or None


def _pick(item: dict[str, Any], keys: tuple[str, ...]) -> str | None:
    lookup = {_canonical_key(k): v for k, v in item.items()}
    for key in keys:
        if key in lookup:
            text = _as_text(lookup[key])
            if text:
                return text
    return None


def _as_paragraphs(value: Any) -> list[str] | None:
    if isinstance(value, str):
        paragraphs = [p.strip() for p in _BLANK_LINE_RE.split(value)]
    elif isinstance(value, list):
        paragraphs = [_as_text(item) or "" for item in value]
    elif isinstance(value, dict):
        text = _as_text(value)
        paragraphs = [text] if text else []
    else:
        return None
    result = [p for p in paragraphs if p]
    return result or None


def _as_list_of_dicts(value: Any) -> list[Any]:
    if isinstance(value, list):
        return value
    if isinstance(value, (dict, str)):
        return [value]
    return []


def _as_quotes(value: Any) -> list[dict[str, str]] | None:
    quotes: list[dict[str, str]] = []
    for item in _as_list_of_dicts(value):
        if isinstance(item, str):
            text, attribution = item.strip(), ""
        elif isinstance(item, dict):
            text = _pick(item, QUOTE_TEXT_KEYS) or ""
            attribution = _pick(item, QUOTE_ATTRIBUTION_KEYS) or ""
        else:
            continue
        if text:
            quotes.append({"text": text, "attribution": attribution})
    return quotes or None


def _as_sections(value: Any) -> list[dict[str, str]] | None:
    sections: list[dict[str, str]] = []
    for item in _as_list_of_dicts(value):
        if isinstance(item, str):
            heading, content = "", item.strip()
        elif isinstance(item, dict):
            heading = _pick(item, SECTION_HEADING_KEYS) or ""
            content = _pick(item, SECTION_CONTENT_KEYS) or ""
        else:
            continue
        if heading or content:
            sections.append({"heading": heading, "content": content})
    return sections or None


def _coerce(field_name: str, value: Any) -> Any:
    if field_name == "body":
        return _as_paragraphs(value)
    if field_name == "quotes":
        return _as_quotes(value)
    if field_name == "sections":
        return _as_sections(value)
    return _as_text(value)


# =============================================================================
# NORMALIZATION
# =============================================================================


def normalize_keys(raw: dict[str, Any] | None) -> dict[str, Any]:
    """Canonicalize a raw structured-content dict produced by the AI.

    - Keys are trimmed, camelCase/spaces/hyphens become snake_case,
      then mapped through KEY_ALIASES.
    - A canonical key always wins over an alias for the same field; among
      aliases the first one present wins.
    - Unknown keys are dropped.
    - Values are coerced to the StructuredContent shapes; empty values are
      dropped.
    - A nested {"structured": {...}} wrapper is unwrapped; sibling
      plain_text/html fill in when the wrapper lacks them.

    The output only contains canonical keys in canonical shapes, so
    normalize_keys(normalize_keys(x)) == normalize_keys(x).
    """
    if not raw or not isinstance(raw, dict):
        return {}

    source = raw
    wrapper = next(
        (v for k, v in raw.items() if _canonical_key(k) == WRAPPER_KEY and isinstance(v, dict)),
        None,
    )
    if wrapper is not None:
        source = dict(wrapper)
        for key, value in raw.items():
            resolved = resolve_key(key)
            if resolved in ("plain_text", "html"):
                source.setdefault(resolved, value)

    direct: dict[str, Any] = {}
    aliased: dict[str, Any] = {}
    dropped: list[str] = []

    for key, value in source.items():
        canonical = _canonical_key(key)
        if canonical in CANONICAL_FIELDS:
            direct.setdefault(canonical, value)
        elif canonical in KEY_ALIASES:
            aliased.setdefault(KEY_ALIASES[canonical], value)
        elif canonical != WRAPPER_KEY:
            dropped.append(str(key))

    if dropped:
        logger.debug(
            "Dropped unknown structured content keys",
            extra={"dropped_keys": dropped},
        )

    result: dict[str, Any] = {}
    for field_name in CANONICAL_FIELDS:
        if field_name in direct:
            value = _coerce(field_name, direct[field_name])
            if value is None and field_name in aliased:
                value = _coerce(field_name, aliased[field_name])
        elif field_name in aliased:
            value = _coerce(field_name, aliased[field_name])
        else:
            continue
        if value is not None:
            result[field_name] = value
    return result


def to_structured_content(raw: StructuredContent | dict[str, Any] | None) -> StructuredContent:
    """Build StructuredContent from a model or a raw (un-normalized) dict."""
    if isinstance(raw, StructuredContent):
        return raw
    return StructuredContent.model_validate(normalize_keys(raw))


def has_structured_fields(content: StructuredContent | None) -> bool:
    """Check if content has structured fields (vs. only html/plain_text)."""
    if content is None:
        return False
    return any(getattr(content, name) for name in STRUCTURED_FIELDS)


# =============================================================================
# RENDERING
# =============================================================================

_HTML_ESCAPES = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "'": "&#039;",
    }
)


def escape_html(text: str) -> str:
    """Escape HTML special characters."""
    return text.translate(_HTML_ESCAPES)


def count_characters(text: str | None) -> int:
    """Count characters excluding whitespace (Japanese length convention)."""
    if not text:
        return 0
    return sum(1 for ch in text if not ch.isspace())


def _format_quote(quote: Quote) -> str:
    if quote.attribution:
        return f"「{quote.text}」— {quote.attribution}"
    return f"「{quote.text}」"


def structured_to_plain_text(content: StructuredContent | dict[str, Any] | None) -> str:
    """Render content as plain text for compliance checks and search.

    An explicit plain_text wins; otherwise the fields are emitted in document
    order and joined by blank lines.
    """
    if content is None:
        return ""
    content = to_structured_content(content)
    if content.plain_text:
        return content.plain_text

    parts: list[str] = []

    for value in (
        content.headline,
        content.subheadline,
        content.title,
        content.dateline,
        content.lead,
        content.introduction,
    ):
        if value:
            parts.append(value)

    parts.extend(p for p in content.body or [] if p)

    for section in content.sections or []:
        if section.heading:
            parts.append(section.heading)
        if section.content:
            parts.append(section.content)

    parts.extend(_format_quote(q) for q in content.quotes or [] if q.text)

    for value in (
        content.conclusion,
        content.cta,
        content.isi,
        content.boilerplate,
        content.contact,
    ):
        if value:
            parts.append(value)

    return "\n\n".join(parts)


def _section_html(section: Section) -> str:
    parts = []
    if section.heading:
        parts.append(f"<h2>{escape_html(section.heading)}</h2>")
    if section.content:
        parts.append(f"<p>{escape_html(section.content)}</p>")
    return "".join(parts)


def _fields_to_html(content: StructuredContent) -> str:
    parts: list[str] = []

    heading = content.headline or content.title
    if heading:
        parts.append(f"<h1>{escape_html(heading)}</h1>")
    if content.subheadline:
        parts.append(f"<h2>{escape_html(content.subheadline)}</h2>")
    if content.dateline:
        parts.append(f"<p><em>{escape_html(content.dateline)}</em></p>")
    if content.lead:
        parts.append(f"<p><strong>{escape_html(content.lead)}</strong></p>")
    if content.introduction:
        parts.append(f"<p>{escape_html(content.introduction)}</p>")

    for paragraph in content.body or []:
        parts.append(f"<p>{escape_html(paragraph)}</p>")

    for section in content.sections or []:
        parts.append(_section_html(section))

    for quote in content.quotes or []:
        block = f"<blockquote><p>「{escape_html(quote.text)}」</p>"
        if quote.attribution:
            block += f"<p>— {escape_html(quote.attribution)}</p>"
        parts.append(block + "</blockquote>")

    if content.conclusion:
        parts.append(f"<p>{escape_html(content.conclusion)}</p>")
    if content.cta:
        parts.append(f"<p><strong>{escape_html(content.cta)}</strong></p>")
    if content.isi:
        parts.append(f"<hr><h3>重要な安全性情報</h3><p>{escape_html(content.isi)}</p>")
    if content.boilerplate:
        parts.append(f"<hr><h3>会社概要</h3><p>{escape_html(content.boilerplate)}</p>")
    if content.contact:
        parts.append(
            f"<p><strong>お問い合わせ先:</strong> {escape_html(content.contact)}</p>"
        )

    return "".join(parts)


def plain_text_to_html(text: str) -> str:
    """Wrap blank-line separated blocks of text in <p> tags."""
    blocks = (block.strip() for block in re.split(r"\n{2,}", text or ""))
    return "".join(f"<p>{escape_html(block)}</p>" for block in blocks if block)


# Pass-through HTML is reduced to these elements; anything else is unwrapped
_ALLOWED_TAGS = frozenset(
    {
        "p", "br", "hr", "h1", "h2", "h3", "h4", "h5", "h6",
        "strong", "b", "em", "i", "u", "s", "sub", "sup", "small", "mark",
        "blockquote", "q", "cite", "ul", "ol", "li", "dl", "dt", "dd",
        "a", "img", "figure", "figcaption", "span", "div",
        "section", "article", "header", "footer",
        "table", "thead", "tbody", "tfoot", "tr", "th", "td", "caption",
        "pre", "code",
    }
)

# Removed together with their content
_DROPPED_TAGS = frozenset(
    {
        "script", "style", "noscript", "template", "title",
        "iframe", "frame", "frameset", "noframes", "object", "embed", "applet",
        "form", "input", "button", "select", "textarea",
        "meta", "base", "link", "svg", "math",
    }
)

_GLOBAL_ATTRIBUTES = frozenset({"title", "lang", "dir", "class"})
_TAG_ATTRIBUTES: dict[str, frozenset[str]] = {
    "a": frozenset({"href", "rel"}),
    "img": frozenset({"src", "alt", "width", "height"}),
    "td": frozenset({"colspan", "rowspan"}),
    "th": frozenset({"colspan", "rowspan", "scope"}),
    "ol": frozenset({"start", "type"}),
    "blockquote": frozenset({"cite"}),
    "q": frozenset({"cite"}),
}
_URL_ATTRIBUTES = frozenset({"href", "src", "cite"})
_SAFE_URL_SCHEMES = frozenset({"http", "https", "mailto"})

# Browsers ignore ASCII control characters and whitespace inside a scheme
_URL_IGNORED_CHARS_RE = re.compile(r"[\x00-\x20\x7f]+")
_URL_SCHEME_RE = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.\-]*):")


def is_safe_url(value: str) -> bool:
    """Allow http, https, mailto and relative URLs only."""
    match = _URL_SCHEME_RE.match(_URL_IGNORED_CHARS_RE.sub("", value))
    return match is None or match.group(1).lower() in _SAFE_URL_SCHEMES


def sanitize_html(html: str) -> str:
    """Reduce stored HTML to an allowlist of formatting tags and attributes.

    Active elements are removed with their content, unknown elements are
    unwrapped (their text is kept), and URLs must be http(s), mailto or
    relative.
    """
    soup = BeautifulSoup(html, "html.parser")

    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()
    for tag in soup.find_all(list(_DROPPED_TAGS)):
        # Nested dropped tags go away with their ancestor
        if not tag.decomposed:
            tag.decompose()

    for tag in soup.find_all(True):
        name = tag.name.lower()
        if name not in _ALLOWED_TAGS:
            tag.unwrap()
            continue
        allowed = _GLOBAL_ATTRIBUTES | _TAG_ATTRIBUTES.get(name, frozenset())
        for attr in list(tag.attrs):
            value = tag.attrs[attr]
            if attr.lower() not in allowed:
                del tag.attrs[attr]
            elif attr.lower() in _URL_ATTRIBUTES and not (
                isinstance(value, str) and is_safe_url(value)
            ):
                del tag.attrs[attr]
    return str(soup)


def structured_to_html(content: StructuredContent | dict[str, Any] | None) -> str:
    """Render content as editor-ready HTML.

    Structured fields take precedence, then stored html, then plain_text.
    All text coming from structured fields or plain text is escaped.
    """
    if content is None:
        return ""
    content = to_structured_content(content)

    if has_structured_fields(content):
        return _fields_to_html(content)
    if content.html:
        return sanitize_html(content.html)
    if content.plain_text:
        return plain_text_to_html(content.plain_text)
    return ""


_BLOCK_TAGS = (
    "p",
    "div",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "blockquote",
    "section",
    "article",
    "header",
    "footer",
    "ul",
    "ol",
    "table",
    "tr",
    "hr",
    "pre",
)


def html_to_plain_text(html: str | None) -> str:
    """Convert editor HTML to plain text.

    Block elements become blank-line separated, <br> becomes a newline and
    list items are prefixed with a bullet. Runs of spaces are collapsed and
    at most two consecutive newlines are kept.
    """
    if not html:
        return ""

    soup = BeautifulSoup(html, "html.parser")
    for tag in soup.find_all(["script", "style"]):
        tag.decompose()
    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()

    for br in soup.find_all("br"):
        br.replace_with(NavigableString("\n"))
    for li in soup.find_all("li"):
        li.insert(0, NavigableString("• "))
        li.append(NavigableString("\n"))
    for tag in soup.find_all(list(_BLOCK_TAGS)):
        tag.append(NavigableString("\n\n"))

    text = soup.get_text()
    text = re.sub(r"[ \t\u00a0\u3000]+", " ", text)
    text = re.sub(r" *\n *", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


# =============================================================================
# GENERATION ANSWERS
# =============================================================================


@dataclass
class ParsedGeneration:
    """A generation answer reshaped into structured content."""

    structured: StructuredContent
    plain_text: str
    word_count: int
    compliance_notes: list[str] = field(default_factory=list)
    parsed: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "structured": self.structured.model_dump(exclude_none=True),
            "plain_text": self.plain_text,
            "word_count": self.word_count,
            "compliance_notes": self.compliance_notes,
            "parsed": self.parsed,
        }


def _positive_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def parse_generation_response(text: str) -> ParsedGeneration:
    """Reshape a generation answer into structured content.

    Expected answer: {"structured": {...}, "plain_text": "...",
    "word_count": n, "compliance_notes": [...]}. Answers that are not JSON
    are kept verbatim as plain text.
    """
    try:
        payload = extract_json_object(text)
    except ValueError as e:
        logger.warning(
            "Generation answer is not JSON, keeping it as plain text",
            extra={"response_length": len(text), "error": str(e)},
        )
        return ParsedGeneration(
            structured=StructuredContent(plain_text=text),
            plain_text=text,
            word_count=len(text),
            parsed=False,
        )

    structured = to_structured_content(payload)

    plain_text = _as_text(payload.get("plain_text")) or structured_to_plain_text(structured)
    if not has_structured_fields(structured) and not structured.plain_text and plain_text:
        structured = structured.model_copy(update={"plain_text": plain_text})

    word_count = _positive_int(payload.get("word_count")) or count_characters(plain_text)

    notes = payload.get("compliance_notes") or []
    if isinstance(notes, str):
        notes = [notes]
    compliance_notes = [n.strip() for n in notes if isinstance(n, str) and n.strip()]

    return ParsedGeneration(
        structured=structured,
        plain_text=plain_text,
        word_count=word_count,
        compliance_notes=compliance_notes,
    )
