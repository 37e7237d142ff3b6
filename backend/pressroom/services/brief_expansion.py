"""Brief expansion service.

Expands a short project brief into a PR plan: objectives, audiences, key
messages, a tone recommendation, deliverables, a timeline, compliance
considerations and open questions for the client.

The model answer is reshaped field by field; missing or wrongly typed
fields get their defaults and an unparseable answer degrades to an empty
plan with an error summary.
"""

import time
from typing import Any

from pressroom.core.config import get_settings
from pressroom.core.errors import AIServiceError, ConfigurationError, ValidationServiceError
from pressroom.core.logging import get_logger
from pressroom.integrations.claude import ClaudeClient, get_claude
from pressroom.schemas.generation import ClientContext
from pressroom.services.prompts import build_brief_expansion_prompt
from pressroom.utils.llm_json import extract_json_object

logger = get_logger(__name__)

# Anthropic's default sampling temperature
BRIEF_TEMPERATURE = 1.0

DEFAULT_TONE = "professional"
DEFAULT_DELIVERABLE_TYPE = "press_release"
PARSE_FAILURE_SUMMARY = "ブリーフの展開中にエラーが発生しました。"


# =============================================================================
# RESPONSE PARSING
# =============================================================================


def _text(value: Any, default: str = "") -> str:
    return value if isinstance(value, str) and value else default


def _texts(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def _objects(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _mapping(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def empty_expanded_brief(summary: str = "") -> dict[str, Any]:
    return {
        "summary": summary,
        "objectives": [],
        "target_audience": {"primary": [], "secondary": [], "personas": []},
        "key_messages": [],
        "suggested_tone": {"tone": DEFAULT_TONE, "rationale": ""},
        "deliverables": [],
        "timeline_suggestions": [],
        "compliance_considerations": [],
        "questions_for_client": [],
        "references_needed": [],
    }


def parse_expanded_brief(text: str) -> dict[str, Any]:
    """Reshape the model answer into an expanded brief.

    Key messages without a usable priority get their 1-based position.
    Falls back to an empty plan whose summary reports the failure when no
    JSON object can be parsed.
    """
    try:
        raw = extract_json_object(text)
    except ValueError as e:
        logger.warning(
            "Expanded brief answer is not JSON",
            extra={"response_length": len(text), "error": str(e)},
        )
        return empty_expanded_brief(PARSE_FAILURE_SUMMARY)

    audience = _mapping(raw.get("target_audience"))
    tone = _mapping(raw.get("suggested_tone"))

    key_messages = []
    for index, msg in enumerate(_objects(raw.get("key_messages"))):
        priority = msg.get("priority")
        if not isinstance(priority, int) or isinstance(priority, bool) or priority < 1:
            priority = index + 1
        key_messages.append(
            {
                "message": _text(msg.get("message")),
                "priority": priority,
                "proof_points": _texts(msg.get("proof_points")),
            }
        )

    return {
        "summary": _text(raw.get("summary")),
        "objectives": _texts(raw.get("objectives")),
        "target_audience": {
            "primary": _texts(audience.get("primary")),
            "secondary": _texts(audience.get("secondary")),
            "personas": [
                {
                    "name": _text(p.get("name")),
                    "characteristics": _text(p.get("characteristics")),
                    "needs": _text(p.get("needs")),
                }
                for p in _objects(audience.get("personas"))
            ],
        },
        "key_messages": key_messages,
        "suggested_tone": {
            "tone": _text(tone.get("tone"), DEFAULT_TONE),
            "rationale": _text(tone.get("rationale")),
        },
        "deliverables": [
            {
                "type": _text(d.get("type"), DEFAULT_DELIVERABLE_TYPE),
                "purpose": _text(d.get("purpose")),
                "key_points": _texts(d.get("key_points")),
                "unique_angle": _text(d.get("unique_angle")) or None,
            }
            for d in _objects(raw.get("deliverables"))
        ],
        "timeline_suggestions": [
            {
                "phase": _text(t.get("phase")),
                "duration": _text(t.get("duration")),
                "activities": _texts(t.get("activities")),
            }
            for t in _objects(raw.get("timeline_suggestions"))
        ],
        "compliance_considerations": _texts(raw.get("compliance_considerations")),
        "questions_for_client": _texts(raw.get("questions_for_client")),
        "references_needed": _texts(raw.get("references_needed")),
    }


# =============================================================================
# SERVICE
# =============================================================================


class BriefExpansionService:
    """Turns a short brief into a structured PR plan."""

    def __init__(self, claude: ClaudeClient | None = None) -> None:
        self._claude = claude

    async def expand_brief(
        self,
        project_id: str,
        brief: str,
        client: ClientContext | None = None,
        language: str = "ja",
    ) -> dict[str, Any]:
        """Expand ``brief`` for ``client``.

        Raises:
            ValidationServiceError: If project_id or brief is blank
            ConfigurationError: If ANTHROPIC_API_KEY is not configured
            AIServiceError: If the Claude call fails
        """
        if not project_id or not project_id.strip():
            logger.warning(
                "Brief validation failed - empty project_id", extra={"field": "project_id"}
            )
            raise ValidationServiceError("project_id", project_id, "project_id is required")
        if not brief or not brief.strip():
            logger.warning(
                "Brief validation failed - empty brief",
                extra={"field": "brief", "project_id": project_id},
            )
            raise ValidationServiceError("brief", brief, "brief is required")

        client = client or ClientContext()
        if self._claude is None:
            self._claude = await get_claude()
        if not self._claude.available:
            raise ConfigurationError("ANTHROPIC_API_KEY is not configured")

        settings = get_settings()
        prompt = build_brief_expansion_prompt(brief.strip(), client, language)
        start_time = time.monotonic()

        result = await self._claude.complete(
            prompt,
            max_tokens=settings.generation_max_tokens,
            temperature=BRIEF_TEMPERATURE,
            model=settings.generation_model,
        )
        if not result.success:
            logger.error(
                "Brief expansion failed",
                extra={
                    "project_id": project_id,
                    "error": result.error,
                    "status_code": result.status_code,
                },
            )
            raise AIServiceError(
                f"Failed to expand brief: {result.error}",
                operation="expand_brief",
                status_code=result.status_code,
            )

        expanded = parse_expanded_brief(result.text or "")
        logger.info(
            "Brief expanded",
            extra={
                "project_id": project_id,
                "industry": client.industry_slug,
                "language": language,
                "key_message_count": len(expanded["key_messages"]),
                "deliverable_count": len(expanded["deliverables"]),
                "duration_ms": round((time.monotonic() - start_time) * 1000, 2),
            },
        )
        return expanded


_brief_expansion_service: BriefExpansionService | None = None


def get_brief_expansion_service() -> BriefExpansionService:
    """Get the global brief expansion service instance."""
    global _brief_expansion_service
    if _brief_expansion_service is None:
        _brief_expansion_service = BriefExpansionService()
    return _brief_expansion_service
