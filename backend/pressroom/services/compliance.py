"""Compliance scoring service.

Scores PR content against industry advertising rules (薬機法 / PMDA / JPMA
for pharmaceutical clients) across five weighted categories:
regulatory_claims, safety_info, fair_balance, substantiation, formatting.

Features:
- Flat score for generated variants (no AI)
- Quick local check with issue positions (no AI)
- Claude analysis for longer content, with quick-check fallback when the
  API key is missing, the circuit is open or the call fails
- Weighted aggregation and severity-sorted suggestions

Every score is clamped to [0, 100], and adding prohibited phrases to a text
never raises any locally computed score.

ERROR LOGGING REQUIREMENTS:
- Log check start/complete with source (quick/ai), score and duration
- Log AI fallbacks and unparsable AI answers at WARNING
- Log validation failures with field names
- Add timing logs for operations >1 second
"""

import math
import time
import traceback
from dataclasses import dataclass, field
from typing import Any

from pressroom.core.config import get_settings
from pressroom.core.errors import ValidationServiceError
from pressroom.core.logging import compliance_logger, get_logger
from pressroom.integrations.claude import ClaudeClient, get_claude
from pressroom.schemas.structured_content import StructuredContent
from pressroom.services.compliance_rules import (
    BASIC_MISSING_ISI_PENALTY,
    BASIC_PROHIBITED_PENALTY,
    CATEGORY_NAMES,
    CATEGORY_WEIGHTS,
    MAX_SCORE,
    MIN_SCORE,
    QUICK_MISSING_SAFETY_PENALTY,
    QUICK_PROHIBITED_PENALTY,
    QUICK_WARNING_PENALTY,
    SAFETY_INFO_MIN_LENGTH,
    SEVERITY_ORDER,
    UNPARSED_CATEGORY_SCORE,
    IndustryRuleSet,
    PhraseRule,
    Severity,
    contains_any,
    get_rule_set,
    mask_spans,
    rate_score,
)
from pressroom.services.prompts import build_compliance_prompt
from pressroom.services.structured_content import structured_to_plain_text
from pressroom.utils.llm_json import extract_json_object

logger = get_logger(__name__)

UNPARSED_SUMMARY = "Unable to analyze content"


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class ComplianceIssue:
    """A single compliance finding."""

    type: str
    message: str
    start: int | None = None
    end: int | None = None
    suggestion: str | None = None
    rule_reference: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "message": self.message,
            "position": (
                {"start": self.start, "end": self.end}
                if self.start is not None and self.end is not None
                else None
            ),
            "suggestion": self.suggestion,
            "rule_reference": self.rule_reference,
        }


@dataclass
class CategoryResult:
    """Score and findings of one compliance category."""

    score: int = MAX_SCORE
    issues: list[ComplianceIssue] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": clamp_score(self.score),
            "issues": [issue.to_dict() for issue in self.issues],
        }


ComplianceCategories = dict[str, CategoryResult]


@dataclass
class ComplianceCheckResult:
    """Result of a full compliance check."""

    score: int
    categories: ComplianceCategories
    suggestions: list[ComplianceIssue]
    source: str  # "quick" or "ai"
    summary: str = ""
    duration_ms: float = 0.0
    industry_slug: str | None = None

    @property
    def rating(self) -> str:
        return rate_score(self.score).value

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "rating": self.rating,
            "details": {
                "categories": {
                    name: result.to_dict() for name, result in self.categories.items()
                }
            },
            "suggestions": [issue.to_dict() for issue in self.suggestions],
            "summary": self.summary,
            "source": self.source,
            "duration_ms": round(self.duration_ms, 2),
        }


# =============================================================================
# SCORING HELPERS
# =============================================================================


def clamp_score(score: float) -> int:
    """Clamp to [0, 100], rounding half up."""
    # Weighted sums carry float noise
    return int(min(MAX_SCORE, max(MIN_SCORE, math.floor(round(score, 6) + 0.5))))


def empty_categories(score: int = MAX_SCORE) -> ComplianceCategories:
    return {name: CategoryResult(score=score) for name in CATEGORY_NAMES}


def _prohibited_occurrences(
    text: str, rules: IndustryRuleSet
) -> list[tuple[PhraseRule, int, int]]:
    occurrences = []
    for rule in rules.prohibited_phrases:
        for start, end in rule.find_all(text):
            occurrences.append((rule, start, end))
    return occurrences


def _text_outside_prohibited(text: str, rules: IndustryRuleSet) -> str:
    """Text with prohibited-phrase occurrences blanked out.

    Safety vocabulary inside a prohibited claim ("副作用がない") does not count
    as safety information.
    """
    spans = [(start, end) for _, start, end in _prohibited_occurrences(text, rules)]
    return mask_spans(text, spans)


def calculate_weighted_score(categories: ComplianceCategories) -> int:
    """Combine category scores into the overall 0-100 score.

    Each category is clamped to [0, 100] first; a missing category counts
    as 100.
    """
    total = 0.0
    for name, weight in CATEGORY_WEIGHTS.items():
        result = categories.get(name)
        category_score = MAX_SCORE if result is None else clamp_score(result.score)
        total += category_score * weight
    return clamp_score(total)


def extract_suggestions(categories: ComplianceCategories) -> list[ComplianceIssue]:
    """All issues of all categories, errors first, then warnings, then suggestions."""
    issues = [issue for result in categories.values() for issue in result.issues]
    return sorted(issues, key=lambda issue: SEVERITY_ORDER.get(issue.type, len(SEVERITY_ORDER)))


# =============================================================================
# LOCAL CHECKS
# =============================================================================


def calculate_basic_score(
    text: str,
    industry_slug: str | None,
    include_isi: bool = False,
) -> int:
    """Flat score used for generated variants.

    Starts at 100, subtracts 20 per distinct prohibited phrase present and 30
    when ISI is required but absent.
    """
    rules = get_rule_set(industry_slug)
    if rules is None:
        return MAX_SCORE

    score = MAX_SCORE
    for rule in rules.prohibited_phrases:
        if rule.find_first(text) is not None:
            score -= BASIC_PROHIBITED_PENALTY

    if include_isi and not contains_any(_text_outside_prohibited(text, rules), rules.isi_markers):
        score -= BASIC_MISSING_ISI_PENALTY

    return clamp_score(score)


def calculate_basic_details(
    text: str,
    industry_slug: str | None,
    include_isi: bool = False,
) -> tuple[int, ComplianceCategories]:
    """Per-category version of the flat score, with issues.

    Returns the weighted overall score and the categories.
    """
    categories = empty_categories()
    rules = get_rule_set(industry_slug)
    if rules is None:
        return calculate_weighted_score(categories), categories

    regulatory = categories["regulatory_claims"]
    for rule in rules.prohibited_phrases:
        span = rule.find_first(text)
        if span is None:
            continue
        regulatory.issues.append(
            ComplianceIssue(
                type=Severity.ERROR.value,
                message=rule.message,
                start=span[0],
                end=span[1],
                suggestion=rule.suggestion,
                rule_reference=rule.rule_reference,
            )
        )
        regulatory.score -= BASIC_PROHIBITED_PENALTY

    if include_isi and not contains_any(_text_outside_prohibited(text, rules), rules.isi_markers):
        safety = categories["safety_info"]
        safety.issues.append(
            ComplianceIssue(
                type=Severity.WARNING.value,
                message="重要な安全性情報(ISI)が見つかりません",
                suggestion="適応症、禁忌、警告を含むISIセクションを追加してください",
                rule_reference=rules.safety_rule_reference,
            )
        )
        safety.score -= BASIC_MISSING_ISI_PENALTY

    for result in categories.values():
        result.score = clamp_score(result.score)

    return calculate_weighted_score(categories), categories


def quick_check(text: str, industry_slug: str | None) -> ComplianceCategories:
    """Local rule check, no AI.

    - every prohibited-phrase occurrence: error, -15 regulatory_claims
    - first occurrence of each warning phrase: warning, -5 regulatory_claims
    - text longer than 200 characters without safety vocabulary:
      warning, -20 safety_info
    """
    categories = empty_categories()
    rules = get_rule_set(industry_slug)
    if rules is None:
        return categories

    regulatory = categories["regulatory_claims"]

    for rule, start, end in _prohibited_occurrences(text, rules):
        regulatory.issues.append(
            ComplianceIssue(
                type=Severity.ERROR.value,
                message=rule.message,
                start=start,
                end=end,
                suggestion=rule.suggestion,
                rule_reference=rule.rule_reference,
            )
        )
        regulatory.score -= QUICK_PROHIBITED_PENALTY

    for rule in rules.warning_phrases:
        span = rule.find_first(text)
        if span is None:
            continue
        regulatory.issues.append(
            ComplianceIssue(
                type=Severity.WARNING.value,
                message=rule.message,
                start=span[0],
                end=span[1],
                suggestion=rule.suggestion,
                rule_reference=rule.rule_reference,
            )
        )
        regulatory.score -= QUICK_WARNING_PENALTY

    has_safety_info = contains_any(_text_outside_prohibited(text, rules), rules.safety_terms)
    if not has_safety_info and len(text) > SAFETY_INFO_MIN_LENGTH:
        safety = categories["safety_info"]
        safety.issues.append(
            ComplianceIssue(
                type=Severity.WARNING.value,
                message="安全性情報が含まれていない可能性があります",
                suggestion="禁忌、警告、副作用などの安全性情報を追加してください",
                rule_reference=rules.safety_rule_reference,
            )
        )
        safety.score -= QUICK_MISSING_SAFETY_PENALTY

    for result in categories.values():
        result.score = clamp_score(result.score)

    return categories


# =============================================================================
# AI ANSWER PARSING
# =============================================================================


def _parse_score(value: Any) -> int:
    if isinstance(value, bool) or value is None:
        return MAX_SCORE
    try:
        return clamp_score(float(value))
    except (TypeError, ValueError):
        return MAX_SCORE


def _optional_text(value: Any) -> str | None:
    """Return a non-blank string field of the AI answer, None for anything else."""
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _parse_severity(raw: dict[str, Any]) -> str:
    for key in ("type", "severity"):
        value = raw.get(key)
        if isinstance(value, str) and value.strip().lower() in SEVERITY_ORDER:
            return value.strip().lower()
    return Severity.WARNING.value


def _parse_issue(raw: Any) -> ComplianceIssue | None:
    if isinstance(raw, str):
        return ComplianceIssue(type=Severity.WARNING.value, message=raw) if raw.strip() else None
    if not isinstance(raw, dict):
        return None

    start = end = None
    position = raw.get("position")
    if isinstance(position, dict):
        try:
            start, end = int(position["start"]), int(position["end"])
        except (KeyError, TypeError, ValueError):
            start = end = None
        if start is not None and (start < 0 or end < start):
            start = end = None

    return ComplianceIssue(
        type=_parse_severity(raw),
        message=_optional_text(raw.get("message")) or "",
        start=start,
        end=end,
        suggestion=_optional_text(raw.get("suggestion")),
        rule_reference=_optional_text(raw.get("rule_reference")),
    )


def parse_ai_compliance_response(text: str) -> tuple[ComplianceCategories, str]:
    """Parse Claude's compliance answer into categories and a summary.

    Missing categories default to score 100, issues without a usable type
    become warnings ("severity" is accepted as an alias). Wrongly typed
    fields are dropped rather than trusted. An unparsable answer yields 80
    in every category and a fixed summary.
    """
    try:
        payload = extract_json_object(text)
    except ValueError as e:
        compliance_logger.unparsable_answer(len(text), str(e))
        return empty_categories(UNPARSED_CATEGORY_SCORE), UNPARSED_SUMMARY

    raw_categories = payload.get("categories")
    if not isinstance(raw_categories, dict):
        raw_categories = {}

    categories: ComplianceCategories = {}
    for name in CATEGORY_NAMES:
        raw = raw_categories.get(name)
        if not isinstance(raw, dict):
            categories[name] = CategoryResult()
            continue
        raw_issues = raw.get("issues")
        if not isinstance(raw_issues, list):
            raw_issues = []
        issues = [
            issue for issue in (_parse_issue(item) for item in raw_issues) if issue is not None
        ]
        categories[name] = CategoryResult(score=_parse_score(raw.get("score")), issues=issues)

    summary = payload.get("summary")
    return categories, summary if isinstance(summary, str) else ""


# =============================================================================
# SERVICE
# =============================================================================


class ComplianceService:
    """Runs compliance checks, choosing between the quick check and Claude."""

    def __init__(self, claude: ClaudeClient | None = None) -> None:
        self._claude = claude
        logger.debug("ComplianceService initialized")

    async def _get_claude(self) -> ClaudeClient:
        if self._claude is None:
            self._claude = await get_claude()
        return self._claude

    def _validate(self, content: str, industry_slug: str) -> None:
        if not content or not content.strip():
            logger.warning(
                "Compliance validation failed - empty content",
                extra={"field": "content", "value": ""},
            )
            raise ValidationServiceError("content", "", "content is required")
        if not industry_slug or not industry_slug.strip():
            logger.warning(
                "Compliance validation failed - empty industry_slug",
                extra={"field": "industry_slug", "value": industry_slug},
            )
            raise ValidationServiceError("industry_slug", industry_slug, "industry_slug is required")

    def _quick_result(self, content: str, industry_slug: str) -> ComplianceCheckResult:
        categories = quick_check(content, industry_slug)
        return ComplianceCheckResult(
            score=calculate_weighted_score(categories),
            categories=categories,
            suggestions=extract_suggestions(categories),
            source="quick",
            industry_slug=industry_slug,
        )

    async def _ai_result(
        self, claude: ClaudeClient, content: str, industry_slug: str
    ) -> ComplianceCheckResult | None:
        settings = get_settings()
        result = await claude.complete(
            build_compliance_prompt(content, industry_slug),
            max_tokens=settings.compliance_max_tokens,
            temperature=0.0,
            model=settings.compliance_model,
        )
        if not result.success:
            compliance_logger.fell_back(industry_slug, result.error or "AI call failed")
            return None

        categories, summary = parse_ai_compliance_response(result.text or "")
        return ComplianceCheckResult(
            score=calculate_weighted_score(categories),
            categories=categories,
            suggestions=extract_suggestions(categories),
            source="ai",
            summary=summary,
            industry_slug=industry_slug,
        )

    async def check_compliance(
        self,
        content: str,
        industry_slug: str,
        content_type: str | None = None,
        language: str = "ja",
    ) -> ComplianceCheckResult:
        """Check content against the industry's compliance rules.

        Short content, a missing API key, an open circuit breaker or a failed
        AI call all fall back to the quick local check.

        Args:
            content: Plain text to check
            industry_slug: Industry of the client (e.g. "pharmaceutical")
            content_type: Content type, used for logging
            language: Content language, used for logging

        Returns:
            ComplianceCheckResult with score, categories and suggestions

        Raises:
            ValidationServiceError: If content or industry_slug is empty
        """
        self._validate(content, industry_slug)
        industry_slug = industry_slug.strip().lower()

        start_time = time.monotonic()
        settings = get_settings()

        try:
            result: ComplianceCheckResult | None = None
            if len(content) >= settings.compliance_quick_check_max_length:
                claude = await self._get_claude()
                if not claude.available:
                    compliance_logger.fell_back(industry_slug, "missing API key")
                else:
                    compliance_logger.check_started(industry_slug, len(content), "ai")
                    result = await self._ai_result(claude, content, industry_slug)

            if result is None:
                compliance_logger.check_started(industry_slug, len(content), "quick")
                result = self._quick_result(content, industry_slug)

        except Exception as e:
            logger.error(
                "Compliance check unexpected error",
                extra={
                    "industry_slug": industry_slug,
                    "content_type": content_type,
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "stack_trace": traceback.format_exc(),
                },
                exc_info=True,
            )
            raise

        result.duration_ms = (time.monotonic() - start_time) * 1000
        compliance_logger.check_finished(
            industry_slug,
            result.score,
            len(result.suggestions),
            result.source,
            result.duration_ms,
        )
        logger.debug(
            "Compliance check finished",
            extra={"content_type": content_type, "language": language, "score": result.score},
        )
        return result

    async def check_structured(
        self,
        content: StructuredContent | dict[str, Any],
        industry_slug: str,
        content_type: str | None = None,
        language: str = "ja",
    ) -> ComplianceCheckResult:
        """Check structured content via its plain-text rendering."""
        return await self.check_compliance(
            structured_to_plain_text(content),
            industry_slug,
            content_type=content_type,
            language=language,
        )


# =============================================================================
# SINGLETON
# =============================================================================


_compliance_service: ComplianceService | None = None


def get_compliance_service() -> ComplianceService:
    """Get the global compliance service instance.

    Usage:
        from pressroom.services.compliance import get_compliance_service
        service = get_compliance_service()
        result = await service.check_compliance(text, "pharmaceutical")
    """
    global _compliance_service
    if _compliance_service is None:
        _compliance_service = ComplianceService()
        logger.info("ComplianceService singleton created")
    return _compliance_service
