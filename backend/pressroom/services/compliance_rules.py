"""Industry compliance rule sets.

Rule data used by the local compliance checks: prohibited claims, cautionary
phrases, safety-information vocabulary and ISI markers, plus the category
weights and penalties used to turn findings into scores.

Only the pharmaceutical industry carries phrase rules (薬機法 / PMDA / JPMA).
Every other industry slug resolves to no rule set and scores 100 locally.
"""

import re
from dataclasses import dataclass
from enum import Enum

# =============================================================================
# SCORING CONFIGURATION
# =============================================================================

CATEGORY_WEIGHTS: dict[str, float] = {
    "regulatory_claims": 0.30,
    "safety_info": 0.25,
    "fair_balance": 0.20,
    "substantiation": 0.15,
    "formatting": 0.10,
}

CATEGORY_NAMES: tuple[str, ...] = tuple(CATEGORY_WEIGHTS)

MAX_SCORE = 100
MIN_SCORE = 0

# Flat score (generated variants)
BASIC_PROHIBITED_PENALTY = 20  # Per distinct phrase present
BASIC_MISSING_ISI_PENALTY = 30

# Quick check (editor / short content)
QUICK_PROHIBITED_PENALTY = 15  # Per occurrence
QUICK_WARNING_PENALTY = 5  # First occurrence only
QUICK_MISSING_SAFETY_PENALTY = 20
SAFETY_INFO_MIN_LENGTH = 200  # Longer content must carry safety terms

# Score shown when the AI answer cannot be parsed
UNPARSED_CATEGORY_SCORE = 80

PHARMACEUTICAL = "pharmaceutical"


class Severity(str, Enum):
    """Issue severity, in display order."""

    ERROR = "error"
    WARNING = "warning"
    SUGGESTION = "suggestion"


SEVERITY_ORDER: dict[str, int] = {
    Severity.ERROR.value: 0,
    Severity.WARNING.value: 1,
    Severity.SUGGESTION.value: 2,
}


class ComplianceRating(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    WARNING = "warning"
    CRITICAL = "critical"


RATING_THRESHOLDS: tuple[tuple[int, ComplianceRating], ...] = (
    (90, ComplianceRating.EXCELLENT),
    (70, ComplianceRating.GOOD),
    (50, ComplianceRating.WARNING),
)


def rate_score(score: int | float) -> ComplianceRating:
    """Map a 0-100 score to its rating band."""
    for threshold, rating in RATING_THRESHOLDS:
        if score >= threshold:
            return rating
    return ComplianceRating.CRITICAL


# =============================================================================
# RULE TYPES
# =============================================================================


@dataclass(frozen=True)
class PhraseRule:
    """A phrase to look for, with the message shown when it is found."""

    phrase: str
    message: str = ""
    rule_reference: str | None = None
    suggestion: str | None = None
    case_sensitive: bool = True

    def pattern(self) -> re.Pattern[str]:
        flags = 0 if self.case_sensitive else re.IGNORECASE
        return re.compile(re.escape(self.phrase), flags)

    def find_all(self, text: str) -> list[tuple[int, int]]:
        """Return (start, end) of every occurrence, overlapping ones included."""
        pattern = self.pattern()
        spans: list[tuple[int, int]] = []
        pos = 0
        while True:
            match = pattern.search(text, pos)
            if match is None:
                return spans
            spans.append((match.start(), match.end()))
            pos = match.start() + 1

    def find_first(self, text: str) -> tuple[int, int] | None:
        match = self.pattern().search(text)
        return (match.start(), match.end()) if match else None


def _term(phrase: str) -> PhraseRule:
    """Vocabulary entry; English terms match case-insensitively."""
    return PhraseRule(phrase=phrase, case_sensitive=not phrase.isascii())


@dataclass(frozen=True)
class IndustryRuleSet:
    """All local rules for one industry."""

    slug: str
    prohibited_phrases: tuple[PhraseRule, ...] = ()
    warning_phrases: tuple[PhraseRule, ...] = ()
    safety_terms: tuple[PhraseRule, ...] = ()
    isi_markers: tuple[PhraseRule, ...] = ()
    safety_rule_reference: str | None = None


# =============================================================================
# PHARMACEUTICAL (Japan)
# =============================================================================

_YAKKIHO_66 = "薬機法第66条"
_PMDA_GUIDELINE = "PMDA広告ガイドライン"
_JPMA_CODE = "JPMA行動規範"


def _prohibited(phrase: str, message: str, rule: str) -> PhraseRule:
    return PhraseRule(
        phrase=phrase,
        message=message,
        rule_reference=rule,
        suggestion=f"「{phrase}」を削除または修正してください",
        case_sensitive=not phrase.isascii(),
    )


def _warning(phrase: str, message: str, rule: str) -> PhraseRule:
    return PhraseRule(
        phrase=phrase,
        message=message,
        rule_reference=rule,
        suggestion="具体的なデータや条件を追加してください",
        case_sensitive=not phrase.isascii(),
    )


PHARMACEUTICAL_RULES = IndustryRuleSet(
    slug=PHARMACEUTICAL,
    prohibited_phrases=(
        _prohibited("最も効果的", "「最も効果的」は比較試験データなしに使用できません", _YAKKIHO_66),
        _prohibited("完全に治る", "「完全に治る」は絶対的な治癒を示唆するため禁止されています", _YAKKIHO_66),
        _prohibited("副作用がない", "「副作用がない」は不正確な主張です", _PMDA_GUIDELINE),
        _prohibited("100%安全", "「100%安全」は不可能な主張です", _YAKKIHO_66),
        _prohibited("絶対に効く", "「絶対に効く」は根拠のない主張です", _YAKKIHO_66),
        _prohibited("奇跡の", "「奇跡の」は誇大な表現です", _JPMA_CODE),
        _prohibited("画期的な効果", "「画期的な効果」は根拠が必要です", _PMDA_GUIDELINE),
        _prohibited(
            "most effective",
            "\"most effective\" requires head-to-head comparative data",
            _YAKKIHO_66,
        ),
        _prohibited(
            "completely cures", "\"completely cures\" is an absolute cure claim", _YAKKIHO_66
        ),
        _prohibited("no side effects", "\"no side effects\" is an inaccurate claim", _PMDA_GUIDELINE),
        _prohibited("100% safe", "\"100% safe\" is an impossible claim", _YAKKIHO_66),
        _prohibited(
            "guaranteed to work", "\"guaranteed to work\" is an unsubstantiated claim", _YAKKIHO_66
        ),
        _prohibited("miracle", "\"miracle\" is an exaggerated claim", _JPMA_CODE),
    ),
    warning_phrases=(
        _warning("効果がある", "「効果がある」は具体的なデータで裏付ける必要があります", _PMDA_GUIDELINE),
        _warning("安全です", "「安全です」は条件付きで使用し、リスク情報も含めてください", _YAKKIHO_66),
        _warning(
            "proven to work", "\"proven to work\" must be backed by specific data", _PMDA_GUIDELINE
        ),
        _warning(
            "is safe", "\"is safe\" must be qualified and paired with risk information", _YAKKIHO_66
        ),
    ),
    safety_terms=tuple(
        _term(t)
        for t in (
            "禁忌",
            "警告",
            "副作用",
            "注意事項",
            "安全性情報",
            "contraindication",
            "warning",
            "side effect",
            "adverse",
            "safety information",
        )
    ),
    isi_markers=tuple(
        _term(t)
        for t in (
            "安全性情報",
            "重要な安全性",
            "禁忌",
            "警告",
            "important safety information",
            "contraindication",
            "warning",
        )
    ),
    safety_rule_reference="医療用医薬品製品情報概要ガイドライン",
)

RULE_SETS: dict[str, IndustryRuleSet] = {
    PHARMACEUTICAL: PHARMACEUTICAL_RULES,
}


def get_rule_set(industry_slug: str | None) -> IndustryRuleSet | None:
    """Get the rule set for an industry, or None when it has no local rules."""
    if not industry_slug:
        return None
    return RULE_SETS.get(industry_slug.strip().lower())


def mask_spans(text: str, spans: list[tuple[int, int]]) -> str:
    """Blank out the given spans, keeping every other position in place."""
    if not spans:
        return text
    chars = list(text)
    for start, end in spans:
        for i in range(start, end):
            chars[i] = " "
    return "".join(chars)


def contains_any(text: str, rules: tuple[PhraseRule, ...]) -> bool:
    return any(rule.find_first(text) is not None for rule in rules)
