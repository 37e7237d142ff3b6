"""Tests for the compliance scoring service.

Tests cover:
1. Flat score used for generated variants
2. Quick local check (positions, penalties, safety information)
3. Weighted aggregation and suggestion ordering
4. Parsing of Claude's compliance answers
5. ComplianceService routing between quick check and AI
"""

from unittest.mock import MagicMock

import pytest

from pressroom.core.errors import ValidationServiceError
from pressroom.services.compliance import (
    UNPARSED_SUMMARY,
    CategoryResult,
    ComplianceIssue,
    ComplianceService,
    calculate_basic_details,
    calculate_basic_score,
    calculate_weighted_score,
    clamp_score,
    empty_categories,
    extract_suggestions,
    parse_ai_compliance_response,
    quick_check,
)
from pressroom.services.compliance_rules import CATEGORY_NAMES, PHARMACEUTICAL_RULES
from tests.conftest import make_completion

PHARMA = "pharmaceutical"


# ---------------------------------------------------------------------------
# Flat score
# ---------------------------------------------------------------------------


class TestCalculateBasicScore:
    """Tests for the flat variant score."""

    def test_clean_content_scores_100(self) -> None:
        assert calculate_basic_score("新製品を発表しました。", PHARMA) == 100

    def test_each_distinct_phrase_costs_20(self) -> None:
        text = "最も効果的な治療で、100%安全です。最も効果的です。"
        # Two distinct phrases, the repeat is not counted again
        assert calculate_basic_score(text, PHARMA) == 60

    def test_english_phrases_match_case_insensitively(self) -> None:
        assert calculate_basic_score("A Miracle treatment.", PHARMA) == 80

    def test_missing_isi_costs_30_when_required(self) -> None:
        assert calculate_basic_score("新製品を発表しました。", PHARMA, include_isi=True) == 70

    def test_isi_present_when_required(self) -> None:
        text = "新製品を発表しました。重要な安全性情報: 禁忌を確認してください。"
        assert calculate_basic_score(text, PHARMA, include_isi=True) == 100

    def test_isi_not_required_by_default(self) -> None:
        assert calculate_basic_score("新製品を発表しました。", PHARMA) == 100

    def test_clamped_at_zero(self) -> None:
        text = "最も効果的 完全に治る 副作用がない 100%安全 絶対に効く 奇跡の"
        assert calculate_basic_score(text, PHARMA, include_isi=True) == 0

    def test_industry_without_rules_scores_100(self) -> None:
        assert calculate_basic_score("最も効果的", "technology", include_isi=True) == 100
        assert calculate_basic_score("最も効果的", None) == 100

    def test_industry_slug_is_case_insensitive(self) -> None:
        assert calculate_basic_score("最も効果的", "Pharmaceutical") == 80


class TestCalculateBasicDetails:
    """Tests for the per-category flat score."""

    def test_prohibited_phrase_reported_in_regulatory_claims(self) -> None:
        score, categories = calculate_basic_details("この薬は最も効果的です", PHARMA)

        regulatory = categories["regulatory_claims"]
        assert regulatory.score == 80
        assert len(regulatory.issues) == 1
        issue = regulatory.issues[0]
        assert issue.type == "error"
        assert (issue.start, issue.end) == (4, 9)
        assert issue.rule_reference == "薬機法第66条"
        assert score == calculate_weighted_score(categories)

    def test_missing_isi_reported_in_safety_info(self) -> None:
        _, categories = calculate_basic_details("新製品を発表しました。", PHARMA, include_isi=True)

        safety = categories["safety_info"]
        assert safety.score == 70
        assert safety.issues[0].type == "warning"

    def test_all_categories_present(self) -> None:
        _, categories = calculate_basic_details("text", None)
        assert set(categories) == set(CATEGORY_NAMES)


# ---------------------------------------------------------------------------
# Quick check
# ---------------------------------------------------------------------------


class TestQuickCheck:
    """Tests for the local quick check."""

    def test_clean_short_text(self) -> None:
        categories = quick_check("新製品を発表しました。", PHARMA)
        assert all(result.score == 100 for result in categories.values())
        assert extract_suggestions(categories) == []

    def test_prohibited_phrase_position(self) -> None:
        categories = quick_check("新薬は最も効果的です", PHARMA)

        issues = categories["regulatory_claims"].issues
        assert len(issues) == 1
        assert issues[0].type == "error"
        assert issues[0].start == 3
        assert issues[0].end == 8
        assert categories["regulatory_claims"].score == 85

    def test_every_occurrence_penalized(self) -> None:
        categories = quick_check("最も効果的。最も効果的。", PHARMA)

        assert len(categories["regulatory_claims"].issues) == 2
        assert categories["regulatory_claims"].score == 70

    def test_warning_phrase_first_occurrence_only(self) -> None:
        categories = quick_check("効果がある。本当に効果がある。", PHARMA)

        issues = categories["regulatory_claims"].issues
        assert len(issues) == 1
        assert issues[0].type == "warning"
        assert issues[0].start == 0
        assert categories["regulatory_claims"].score == 95

    def test_long_text_without_safety_terms(self) -> None:
        categories = quick_check("あ" * 201, PHARMA)

        assert categories["safety_info"].score == 80
        assert categories["safety_info"].issues[0].type == "warning"

    def test_long_text_with_safety_terms(self) -> None:
        categories = quick_check("あ" * 201 + "副作用について", PHARMA)
        assert categories["safety_info"].score == 100

    def test_safety_term_inside_prohibited_phrase_does_not_count(self) -> None:
        categories = quick_check("あ" * 201 + "副作用がない", PHARMA)

        assert categories["safety_info"].score == 80
        assert categories["regulatory_claims"].score == 85

    def test_short_text_without_safety_terms_not_flagged(self) -> None:
        categories = quick_check("あ" * 200, PHARMA)
        assert categories["safety_info"].score == 100

    def test_regulatory_score_clamped(self) -> None:
        categories = quick_check("最も効果的" * 7, PHARMA)

        assert categories["regulatory_claims"].score == 0
        assert calculate_weighted_score(categories) == 70

    def test_other_industries_not_checked(self) -> None:
        categories = quick_check("最も効果的" * 3, "technology")
        assert calculate_weighted_score(categories) == 100

    @pytest.mark.parametrize("rule", PHARMACEUTICAL_RULES.prohibited_phrases)
    def test_adding_prohibited_phrase_never_raises_score(self, rule) -> None:
        base = "新製品の発売を発表しました。副作用と禁忌については添付文書をご確認ください。"
        before = calculate_weighted_score(quick_check(base, PHARMA))
        after = calculate_weighted_score(quick_check(base + rule.phrase, PHARMA))
        assert after <= before
        assert calculate_basic_score(base + rule.phrase, PHARMA) <= calculate_basic_score(
            base, PHARMA
        )


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------


class TestWeightedScore:
    """Tests for weighted aggregation."""

    def test_all_perfect(self) -> None:
        assert calculate_weighted_score(empty_categories()) == 100

    def test_weights_applied(self) -> None:
        categories = empty_categories()
        categories["regulatory_claims"].score = 0
        assert calculate_weighted_score(categories) == 70

        categories = empty_categories()
        categories["formatting"].score = 0
        assert calculate_weighted_score(categories) == 90

    def test_missing_category_counts_as_100(self) -> None:
        assert calculate_weighted_score({"safety_info": CategoryResult(score=0)}) == 75

    def test_zero_category_stays_zero(self) -> None:
        categories = empty_categories(0)
        assert calculate_weighted_score(categories) == 0

    def test_out_of_range_categories_clamped(self) -> None:
        categories = empty_categories()
        categories["regulatory_claims"].score = 150
        categories["safety_info"].score = -40
        assert calculate_weighted_score(categories) == 75

    def test_clamp_score_rounds_half_up(self) -> None:
        assert clamp_score(95.5) == 96
        assert clamp_score(-3) == 0
        assert clamp_score(101) == 100


class TestExtractSuggestions:
    """Tests for severity ordering of suggestions."""

    def test_sorted_by_severity(self) -> None:
        categories = empty_categories()
        categories["formatting"].issues.append(ComplianceIssue(type="suggestion", message="s"))
        categories["safety_info"].issues.append(ComplianceIssue(type="warning", message="w"))
        categories["substantiation"].issues.append(ComplianceIssue(type="error", message="e"))

        suggestions = extract_suggestions(categories)
        assert [s.type for s in suggestions] == ["error", "warning", "suggestion"]


# ---------------------------------------------------------------------------
# AI answer parsing
# ---------------------------------------------------------------------------


class TestParseAIComplianceResponse:
    """Tests for parsing Claude's compliance answer."""

    def test_fenced_answer(self) -> None:
        text = """Here is the analysis:
```json
{
  "categories": {
    "regulatory_claims": {
      "score": 60,
      "issues": [
        {"severity": "error", "message": "誇大表現", "position": {"start": 3, "end": 8}}
      ]
    },
    "fair_balance": {"score": 90, "issues": ["リスク情報が少ない"]}
  },
  "summary": "要修正"
}
```"""
        categories, summary = parse_ai_compliance_response(text)

        assert summary == "要修正"
        assert categories["regulatory_claims"].score == 60
        issue = categories["regulatory_claims"].issues[0]
        assert issue.type == "error"
        assert (issue.start, issue.end) == (3, 8)
        assert categories["fair_balance"].issues[0].type == "warning"
        assert categories["safety_info"].score == 100
        assert set(categories) == set(CATEGORY_NAMES)

    def test_unparsable_answer(self) -> None:
        categories, summary = parse_ai_compliance_response("I cannot help with that.")

        assert summary == UNPARSED_SUMMARY
        assert all(result.score == 80 for result in categories.values())
        assert calculate_weighted_score(categories) == 80

    def test_invalid_values_sanitized(self) -> None:
        text = """{"categories": {
            "regulatory_claims": {"score": "abc", "issues": [
                {"type": "fatal", "message": "x", "position": {"start": 9, "end": 2}}
            ]},
            "safety_info": {"score": 250}
        }}"""
        categories, summary = parse_ai_compliance_response(text)

        assert categories["regulatory_claims"].score == 100
        issue = categories["regulatory_claims"].issues[0]
        assert issue.type == "warning"
        assert issue.start is None and issue.end is None
        assert categories["safety_info"].score == 100
        assert summary == ""

    @pytest.mark.parametrize("raw_type", ['{"level": "error"}', '["error"]', "3", "null"])
    def test_non_string_type_becomes_warning(self, raw_type: str) -> None:
        text = (
            '{"categories": {"regulatory_claims": {"score": 70, "issues": ['
            f'{{"type": {raw_type}, "severity": {raw_type}, "message": "x"}}'
            "]}}}"
        )

        categories, _ = parse_ai_compliance_response(text)

        issue = categories["regulatory_claims"].issues[0]
        assert issue.type == "warning"
        assert issue.message == "x"
        assert categories["regulatory_claims"].score == 70

    def test_severity_used_when_type_unusable(self) -> None:
        text = """{"categories": {"fair_balance": {"issues": [
            {"type": {"level": 1}, "severity": " ERROR ", "message": "偏り"}
        ]}}}"""

        categories, _ = parse_ai_compliance_response(text)

        assert categories["fair_balance"].issues[0].type == "error"

    @pytest.mark.parametrize("raw_issues", ["3", '"誇大表現"', '{"message": "x"}', "true"])
    def test_non_list_issues_ignored(self, raw_issues: str) -> None:
        text = (
            '{"categories": {"regulatory_claims": '
            f'{{"score": 60, "issues": {raw_issues}}}}}}}'
        )

        categories, _ = parse_ai_compliance_response(text)

        assert categories["regulatory_claims"].score == 60
        assert categories["regulatory_claims"].issues == []

    def test_non_string_text_fields_dropped(self) -> None:
        text = """{"categories": {"substantiation": {"score": 75, "issues": [
            {"type": "suggestion", "message": ["a"], "suggestion": ["a", "b"],
             "rule_reference": 66}
        ]}}}"""

        categories, _ = parse_ai_compliance_response(text)

        issue = categories["substantiation"].issues[0]
        assert issue.type == "suggestion"
        assert issue.message == ""
        assert issue.suggestion is None
        assert issue.rule_reference is None


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


LONG_TEXT = "新製品の発売を発表しました。" * 10


class TestComplianceService:
    """Tests for quick/AI routing."""

    @pytest.mark.asyncio
    async def test_short_content_uses_quick_check(self, mock_claude: MagicMock) -> None:
        service = ComplianceService(claude=mock_claude)

        result = await service.check_compliance("最も効果的な新薬", PHARMA)

        assert result.source == "quick"
        assert result.score == 96
        mock_claude.complete.assert_not_called()

    @pytest.mark.asyncio
    async def test_long_content_uses_ai(self, mock_claude: MagicMock) -> None:
        mock_claude.complete.return_value = make_completion(
            '{"categories": {"regulatory_claims": {"score": 50, "issues": []}}, "summary": "ok"}'
        )
        service = ComplianceService(claude=mock_claude)

        result = await service.check_compliance(LONG_TEXT, PHARMA)

        assert result.source == "ai"
        assert result.score == 85
        assert result.summary == "ok"
        kwargs = mock_claude.complete.call_args.kwargs
        assert kwargs["temperature"] == 0.0
        assert kwargs["model"] == "claude-sonnet-4-5-20250929"
        assert kwargs["max_tokens"] == 2048

    @pytest.mark.asyncio
    async def test_missing_api_key_falls_back_to_quick(
        self, unavailable_claude: MagicMock
    ) -> None:
        service = ComplianceService(claude=unavailable_claude)

        result = await service.check_compliance(LONG_TEXT + "最も効果的", PHARMA)

        assert result.source == "quick"
        assert result.categories["regulatory_claims"].score == 85
        unavailable_claude.complete.assert_not_called()

    @pytest.mark.asyncio
    async def test_ai_failure_falls_back_to_quick(self, mock_claude: MagicMock) -> None:
        mock_claude.complete.return_value = make_completion(error="Server error (500)")
        service = ComplianceService(claude=mock_claude)

        result = await service.check_compliance(LONG_TEXT, PHARMA)

        assert result.source == "quick"
        assert result.score == 100

    @pytest.mark.asyncio
    async def test_result_to_dict(self, mock_claude: MagicMock) -> None:
        service = ComplianceService(claude=mock_claude)

        data = (await service.check_compliance("最も効果的な新薬", PHARMA)).to_dict()

        assert data["rating"] == "excellent"
        assert set(data["details"]["categories"]) == set(CATEGORY_NAMES)
        assert data["suggestions"][0]["position"] == {"start": 0, "end": 5}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content,industry", [("", PHARMA), ("   ", PHARMA), ("text", "")])
    async def test_validation(self, mock_claude: MagicMock, content: str, industry: str) -> None:
        service = ComplianceService(claude=mock_claude)

        with pytest.raises(ValidationServiceError):
            await service.check_compliance(content, industry)

    @pytest.mark.asyncio
    async def test_check_structured_renders_plain_text(self, mock_claude: MagicMock) -> None:
        service = ComplianceService(claude=mock_claude)

        result = await service.check_structured(
            {"Headline": "奇跡の新薬", "bodyParagraphs": ["発売します。"]}, PHARMA
        )

        assert result.source == "quick"
        assert result.suggestions[0].start == 0
        assert result.suggestions[0].end == 3
