"""Prompt templates for generation, compliance, titles, tone and briefs.

All prompts ask Claude for a bare JSON object; answers are parsed with
pressroom.utils.llm_json and reshaped by the calling service.
"""

from dataclasses import dataclass

from pressroom.schemas.generation import (
    ClientContext,
    ContentGenerationBrief,
    GenerateContentRequest,
    StyleProfile,
)
from pressroom.services.compliance_rules import PHARMACEUTICAL


@dataclass
class PromptPair:
    """System and user prompts for a single Claude call."""

    system_prompt: str
    user_prompt: str


# =============================================================================
# GENERATION
# =============================================================================

BASE_SYSTEM_PROMPT = """You are ClearPress AI, an expert PR content assistant specialized in creating professional communications for Japanese markets. You have deep expertise in:

1. Japanese business communication (ビジネス日本語)
2. Industry-specific regulatory compliance (薬機法, PMDA guidelines)
3. Cultural nuance and appropriate formality levels
4. PR best practices and media relations

Core Principles:
- Accuracy: Never fabricate facts, quotes, or data
- Compliance: Always adhere to industry regulations
- Cultural Appropriateness: Respect Japanese business customs
- Transparency: Clearly indicate when information needs verification

Output Guidelines:
- Respond in the requested language (Japanese or English)
- Use appropriate honorifics and formality levels
- Structure content according to PR industry standards
- Include required disclaimers and safety information when applicable

You are assisting PR professionals, not replacing their judgment. Flag any concerns about accuracy, compliance, or appropriateness for human review."""

CONTENT_TYPE_PROMPTS: dict[str, str] = {
    "press_release": """Generate a press release following this structure:

1. HEADLINE (見出し) - Clear, newsworthy, 20-30 characters in Japanese
2. SUBHEADLINE (サブ見出し) - Supporting detail, 30-50 characters
3. DATELINE (日付・発信地) - Format: [都市名]、[YYYY年MM月DD日]
4. LEAD PARAGRAPH (リード文) - Who, What, When, Where, Why in 2-3 sentences
5. BODY PARAGRAPHS (本文) - 3-5 paragraphs with supporting details
6. QUOTE(S) (引用) - At least one spokesperson quote
7. BOILERPLATE (会社概要) - Standard company description
8. CONTACT INFORMATION (お問い合わせ先)
9. IMPORTANT SAFETY INFORMATION (重要な安全性情報) - if pharmaceutical

Use these keys in "structured": headline, subheadline, dateline, lead, body (array of paragraphs), quotes (array of {"text", "attribution"}), boilerplate, contact, isi""",
    "blog_post": """Generate a blog post following this structure:

1. TITLE (タイトル) - Engaging and searchable, 30-60 characters
2. INTRODUCTION (導入部) - Hook the reader, state value proposition
3. MAIN CONTENT (本文) - 3-5 sections with subheadings
4. CONCLUSION (まとめ) - Summarize key takeaways
5. CALL TO ACTION (CTA) - Clear next step for readers

Use these keys in "structured": title, introduction, sections (array of {"heading", "content"}), conclusion, cta""",
    "social_media": """Generate social media content optimized for the platform:

TWITTER/X: Maximum 140 characters for Japanese, include 2-3 hashtags
LINKEDIN: Professional tone, 150-300 characters
FACEBOOK: 100-250 characters, encourage engagement
INSTAGRAM: Caption 150-300 characters, 5-10 hashtags

Use these keys in "structured": title, body (array of posts)""",
    "internal_memo": """Generate an internal memo following this structure:

HEADER:
- TO: [Recipients]
- FROM: [Sender/Department]
- DATE: [Date]
- RE: [Subject]

BODY:
1. PURPOSE (目的) - State the reason immediately
2. BACKGROUND (背景) - Brief context if needed
3. KEY INFORMATION (主要内容) - Use bullet points
4. ACTION REQUIRED (必要なアクション) - Who does what by when
5. CONTACT (お問い合わせ) - Who to contact for questions

Use these keys in "structured": title, headline (header block), lead (purpose), body (array of paragraphs), contact""",
    "faq": """Generate FAQ content:

- 5-10 question-answer pairs
- Questions from user's perspective
- Direct answer in first sentence
- 50-150 characters per answer in Japanese
- Cover common concerns and objections

Use these keys in "structured": title, introduction, sections (array of {"heading": question, "content": answer}), conclusion""",
    "executive_statement": """Generate an executive statement following this structure:

1. OPENING (冒頭) - Acknowledge the occasion/situation
2. CORE MESSAGE (主要メッセージ) - Clear statement of position
3. CONTEXT/RATIONALE (背景・理由) - Why this matters
4. COMMITMENT/NEXT STEPS (コミットメント) - What the company will do
5. CLOSING (締めくくり) - Forward-looking statement

Use these keys in "structured": title, lead (opening), body (array of paragraphs), conclusion""",
}

TONE_PROMPTS: dict[str, str] = {
    "formal": """TONE: Formal (フォーマル)
- Highest formality level
- Full honorific language (敬語)
- Conservative word choices
- Longer, more complex sentences""",
    "professional": """TONE: Professional (プロフェッショナル)
- Business-appropriate formality
- Standard polite language (丁寧語)
- Clear, precise vocabulary
- Balanced sentence structure""",
    "friendly": """TONE: Friendly (フレンドリー)
- Warm but professional
- Simpler sentence structures
- More accessible vocabulary
- Engaging, conversational""",
    "urgent": """TONE: Urgent (緊急)
- Direct and immediate
- Short, impactful sentences
- Action-oriented language
- Clear calls to action""",
    "custom": "",
}

PHARMACEUTICAL_COMPLIANCE_PROMPT = """PHARMACEUTICAL COMPLIANCE REQUIREMENTS:
Based on 薬機法 (Pharmaceutical and Medical Devices Act) and PMDA Guidelines:

1. All claims must be within approved indications
2. No unsubstantiated efficacy claims
3. Include Important Safety Information (ISI)
4. Balance benefits with risks (fair balance)
5. No superiority claims without head-to-head data
6. Include contraindications and warnings

PROHIBITED:
- "最も効果的" (most effective) without proof
- "完全に治る" (completely cures)
- "副作用がない" (no side effects)
- "100%安全" (100% safe)
- Off-label promotion"""

OUTPUT_FORMAT_PROMPT = """OUTPUT FORMAT:
Respond with a valid JSON object only, no markdown code blocks:
{
  "structured": {
    // Content structure based on content type
  },
  "plain_text": "Full content as plain text",
  "word_count": 000,
  "compliance_notes": ["Any compliance considerations"]
}"""

VARIATION_PROMPTS: tuple[str, ...] = (
    "Create a version that emphasizes the most compelling news angle and key benefits.",
    "Create a version with a more engaging opening and stronger emotional appeal while maintaining professionalism.",
    "Create a version that leads with data and evidence, using a more analytical approach.",
)

LANGUAGE_NAMES = {"ja": "Japanese (日本語)", "en": "English"}


def _tone_block(tone: str, custom_tone: str | None) -> str:
    if tone == "custom" and custom_tone:
        return f"TONE: Custom\n{custom_tone}"
    return TONE_PROMPTS.get(tone) or TONE_PROMPTS["professional"]


def _style_profile_block(profile: StyleProfile) -> str:
    lines = ["CLIENT STYLE PROFILE:"]
    if profile.tone:
        lines.append(f"- Preferred Tone: {profile.tone}")
    if profile.formality:
        lines.append(f"- Formality Level: {profile.formality}")
    if profile.key_messages:
        lines.append(f"- Key Messages: {', '.join(profile.key_messages)}")
    if profile.avoid_phrases:
        lines.append(f"- Avoid: {', '.join(profile.avoid_phrases)}")
    return "\n".join(lines)


def build_variant_prompt(
    brief: ContentGenerationBrief,
    client: ClientContext,
    variation_index: int,
) -> PromptPair:
    """Build the prompt for one of the content variants.

    Args:
        brief: The generation brief
        client: Client the content is written for
        variation_index: Which VARIATION_PROMPTS entry to apply (0-based)
    """
    blocks = [
        f"OUTPUT LANGUAGE: {LANGUAGE_NAMES[brief.language]}",
        CONTENT_TYPE_PROMPTS[brief.content_type],
        _tone_block(brief.tone, brief.custom_tone),
    ]
    if client.industry_slug == PHARMACEUTICAL:
        blocks.append(PHARMACEUTICAL_COMPLIANCE_PROMPT)
    if client.style_profile:
        blocks.append(_style_profile_block(client.style_profile))

    details = [
        f"CLIENT: {client.name}",
        f"TITLE: {brief.title}",
        f"TARGET AUDIENCE: {brief.target_audience}",
    ]
    blocks.append("\n".join(details))
    blocks.append(f"SUMMARY:\n{brief.summary}")

    if brief.key_messages:
        numbered = "\n".join(f"{i}. {msg}" for i, msg in enumerate(brief.key_messages, 1))
        blocks.append(f"KEY MESSAGES TO INCLUDE:\n{numbered}")
    if brief.call_to_action:
        blocks.append(f"CALL TO ACTION: {brief.call_to_action}")
    if brief.keywords:
        blocks.append(f"KEYWORDS TO INCORPORATE: {', '.join(brief.keywords)}")

    pharma = []
    if brief.product_name:
        pharma.append(f"PRODUCT NAME: {brief.product_name}")
    if brief.therapeutic_area:
        pharma.append(f"THERAPEUTIC AREA: {brief.therapeutic_area}")
    if brief.regulatory_notes:
        pharma.append(f"REGULATORY CONSIDERATIONS: {brief.regulatory_notes}")
    if pharma:
        blocks.append("\n".join(pharma))

    settings = [f"TARGET LENGTH: approximately {brief.target_length} characters"]
    if brief.include_isi:
        settings.append("INCLUDE: Important Safety Information (ISI) section")
    boilerplate = client.resolved_boilerplate()
    if brief.include_boilerplate and boilerplate:
        settings.append("INCLUDE: Company boilerplate")
        settings.append(f"BOILERPLATE TO USE: {boilerplate}")
    blocks.append("\n".join(settings))

    variation = VARIATION_PROMPTS[variation_index % len(VARIATION_PROMPTS)]
    blocks.append(f"VARIATION INSTRUCTION: {variation}")
    blocks.append(OUTPUT_FORMAT_PROMPT)

    return PromptPair(system_prompt=BASE_SYSTEM_PROMPT, user_prompt="\n\n".join(blocks))


def build_generation_prompt(
    request: GenerateContentRequest,
    client: ClientContext,
) -> PromptPair:
    """Build the prompt for a single generation from a free-text brief.

    The client's stored style profile wins over one sent with the request.
    """
    settings = request.settings
    profile = client.style_profile or request.client_style_profile

    blocks = [
        f"OUTPUT LANGUAGE: {LANGUAGE_NAMES[settings.language]}",
        CONTENT_TYPE_PROMPTS[request.content_type],
        _tone_block(settings.tone, settings.custom_tone),
    ]
    if client.industry_slug == PHARMACEUTICAL:
        blocks.append(PHARMACEUTICAL_COMPLIANCE_PROMPT)
    if profile:
        blocks.append(_style_profile_block(profile))

    options = []
    if settings.target_length:
        options.append(f"TARGET LENGTH: approximately {settings.target_length} characters")
    if settings.include_isi:
        options.append("INCLUDE: Important Safety Information (ISI) section")
    if settings.include_boilerplate:
        options.append("INCLUDE: Company boilerplate")
        boilerplate = client.boilerplate or (profile.boilerplate if profile else None)
        if boilerplate:
            options.append(f"BOILERPLATE TO USE: {boilerplate}")
    if options:
        blocks.append("\n".join(options))

    blocks.append(f"CLIENT: {client.name}")
    blocks.append(f"BRIEF:\n{request.brief}")
    blocks.append(OUTPUT_FORMAT_PROMPT)

    return PromptPair(system_prompt=BASE_SYSTEM_PROMPT, user_prompt="\n\n".join(blocks))


# =============================================================================
# COMPLIANCE
# =============================================================================

PHARMACEUTICAL_COMPLIANCE_CHECK_PROMPT = """You are a pharmaceutical communications compliance expert specializing in Japanese regulations.

APPLICABLE REGULATIONS:
1. 薬機法 (Pharmaceutical and Medical Devices Act) - Articles 66-68 on advertising
2. PMDA広告ガイドライン (PMDA Advertising Guidelines)
3. JPMA行動規範 (JPMA Code of Practice)
4. 医療用医薬品製品情報概要 (Product Information Summary Guidelines)

CONTENT TO REVIEW:
{content}

Analyze the content for compliance issues across these 5 categories:

1. REGULATORY CLAIMS (規制上の主張) - Weight: 30%
   - Unsubstantiated claims
   - Exaggerated benefits
   - Off-label promotion
   - Superiority claims without data

2. SAFETY INFORMATION (安全性情報) - Weight: 25%
   - Required warnings present
   - Contraindications mentioned
   - Adverse events disclosed
   - ISI completeness

3. FAIR BALANCE (公平なバランス) - Weight: 20%
   - Benefits vs risks balanced
   - No misleading omissions
   - Comparative claims substantiated

4. SUBSTANTIATION (根拠) - Weight: 15%
   - Claims supported by evidence
   - References accurate
   - Data presented fairly

5. FORMATTING (形式) - Weight: 10%
   - Required elements present
   - Disclosures properly displayed
   - Regulatory requirements met

PROHIBITED PHRASES (must be flagged as errors):
- "最も効果的" (most effective) - unless proven with head-to-head data
- "完全に治る" (completely cures) - absolute cure claims prohibited
- "副作用がない" (no side effects) - impossible claim
- "100%安全" (100% safe) - impossible claim
- "絶対に効く" (definitely works) - unsubstantiated
- "奇跡の" (miraculous) - exaggerated claim

For each issue found, provide:
- type: "error" (must fix) | "warning" (should fix) | "suggestion" (consider)
- message: Clear description of the issue in Japanese
- position: Character position {{ "start": number, "end": number }} if identifiable
- suggestion: How to fix the issue
- rule_reference: Specific regulation violated (e.g., "薬機法第66条")

OUTPUT FORMAT (JSON only, no markdown):
{{
  "categories": {{
    "regulatory_claims": {{
      "score": 0-100,
      "issues": [{{ "type": "...", "message": "...", "position": {{...}}, "suggestion": "...", "rule_reference": "..." }}]
    }},
    "safety_info": {{ "score": 0-100, "issues": [...] }},
    "fair_balance": {{ "score": 0-100, "issues": [...] }},
    "substantiation": {{ "score": 0-100, "issues": [...] }},
    "formatting": {{ "score": 0-100, "issues": [...] }}
  }},
  "summary": "Brief overall assessment in Japanese"
}}"""

GENERAL_COMPLIANCE_CHECK_PROMPT = """You are a PR communications compliance reviewer.

CONTENT TO REVIEW:
{content}

Check for general compliance issues:

1. REGULATORY CLAIMS - Are claims substantiated and not misleading?
2. SAFETY INFORMATION - Are any required warnings included?
3. FAIR BALANCE - Is information presented fairly?
4. SUBSTANTIATION - Are claims supported by evidence?
5. FORMATTING - Is the content properly structured?

OUTPUT FORMAT (JSON only, no markdown):
{{
  "categories": {{
    "regulatory_claims": {{ "score": 0-100, "issues": [] }},
    "safety_info": {{ "score": 0-100, "issues": [] }},
    "fair_balance": {{ "score": 0-100, "issues": [] }},
    "substantiation": {{ "score": 0-100, "issues": [] }},
    "formatting": {{ "score": 0-100, "issues": [] }}
  }},
  "summary": "Brief overall assessment"
}}"""


def build_compliance_prompt(content: str, industry_slug: str | None) -> str:
    """Build the compliance analysis prompt for an industry."""
    template = (
        PHARMACEUTICAL_COMPLIANCE_CHECK_PROMPT
        if industry_slug == PHARMACEUTICAL
        else GENERAL_COMPLIANCE_CHECK_PROMPT
    )
    return template.format(content=content)


# =============================================================================
# TITLES
# =============================================================================

TITLE_GUIDELINES: dict[str, dict[str, str]] = {
    "press_release": {
        "ja": """プレスリリース用タイトル:
- ニュース価値を明確に
- 20〜40文字程度
- 具体的な数字や成果を含む
- 「〜を発表」「〜を開始」などの動詞を含む""",
        "en": """Press Release Title:
- Clear news value
- 60-100 characters
- Include specific numbers or achievements
- Include action verbs like "launches", "announces\"""",
    },
    "blog_post": {
        "ja": """ブログ記事用タイトル:
- 読者の興味を引く
- SEOを意識したキーワードを含む
- 30〜60文字程度
- 問いかけや数字を活用""",
        "en": """Blog Post Title:
- Engage the reader
- Include SEO-friendly keywords
- 50-80 characters
- Use questions or numbers""",
    },
    "social_media": {
        "ja": """ソーシャルメディア用タイトル:
- インパクト重視
- 短く簡潔に（20〜30文字）
- 絵文字は使用しない
- アクションを促す""",
        "en": """Social Media Title:
- High impact
- Short and concise (40-60 characters)
- No emojis
- Drive action""",
    },
    "internal_memo": {
        "ja": """社内文書用タイトル:
- 明確で直接的
- 目的がすぐわかる
- フォーマルな表現
- 20〜40文字程度""",
        "en": """Internal Memo Title:
- Clear and direct
- Purpose immediately obvious
- Formal tone
- 40-80 characters""",
    },
    "faq": {
        "ja": """FAQ用タイトル:
- 質問形式も可
- ユーザー視点
- 簡潔で明確
- 検索しやすい""",
        "en": """FAQ Title:
- Can be question format
- User perspective
- Concise and clear
- Searchable""",
    },
    "executive_statement": {
        "ja": """経営者声明用タイトル:
- 権威と信頼感
- フォーマルな表現
- 重要性を伝える
- 30〜50文字程度""",
        "en": """Executive Statement Title:
- Authority and trust
- Formal tone
- Convey importance
- 50-100 characters""",
    },
}

TITLE_SYSTEM_PROMPTS: dict[str, str] = {
    "ja": """あなたはClearPress AIのタイトル作成エキスパートです。PR・マーケティングコンテンツの効果的なタイトルを作成する専門家です。

重要な原則:
- 日本語の自然な表現を使用
- ビジネスに適した丁寧な表現
- 読者の注目を集める
- 事実に基づいた表現のみ使用""",
    "en": """You are ClearPress AI's title creation expert. You specialize in creating effective titles for PR and marketing content.

Key Principles:
- Use natural language
- Business-appropriate tone
- Capture reader attention
- Only use factual expressions""",
}


def build_title_prompts(
    title: str,
    content_type: str,
    context: str | None = None,
    language: str = "ja",
) -> PromptPair:
    """Build the system/user prompts for title suggestions."""
    lang = language if language in TITLE_SYSTEM_PROMPTS else "ja"
    guidelines = TITLE_GUIDELINES[content_type][lang]

    if lang == "ja":
        context_line = f"追加コンテキスト: {context}" if context else ""
        user_prompt = f"""以下のタイトルを改善し、3つの異なるバリエーションを提案してください。

元のタイトル: {title}

コンテンツタイプ: {content_type}
{guidelines}

{context_line}

以下のJSON形式のみで応答してください（説明は不要）:
{{
  "suggestions": [
    "タイトル案1",
    "タイトル案2",
    "タイトル案3"
  ]
}}"""
    else:
        context_line = f"Additional Context: {context}" if context else ""
        user_prompt = f"""Please improve the following title and suggest 3 different variations.

Original Title: {title}

Content Type: {content_type}
{guidelines}

{context_line}

Respond only with the following JSON format (no explanation):
{{
  "suggestions": [
    "Title suggestion 1",
    "Title suggestion 2",
    "Title suggestion 3"
  ]
}}"""

    return PromptPair(system_prompt=TITLE_SYSTEM_PROMPTS[lang], user_prompt=user_prompt)


# =============================================================================
# TONE ADJUSTMENT
# =============================================================================

TONE_DESCRIPTIONS: dict[str, dict[str, str]] = {
    "formal": {
        "ja": "フォーマル: 最高レベルの丁寧さ、敬語を使用、保守的な言葉選び、より複雑な文章構造",
        "en": "Formal: Highest level of politeness, honorific language, conservative word choices, longer complex sentences",
    },
    "professional": {
        "ja": "プロフェッショナル: ビジネスにふさわしい丁寧さ、丁寧語を使用、明確で正確な語彙、バランスの取れた文章構造",
        "en": "Professional: Business-appropriate politeness, polite language, clear precise vocabulary, balanced sentence structure",
    },
    "friendly": {
        "ja": "フレンドリー: 親しみやすくもプロフェッショナル、シンプルな文章構造、親しみやすい語彙、会話的なトーン",
        "en": "Friendly: Warm but professional, simpler sentence structures, accessible vocabulary, conversational tone",
    },
    "urgent": {
        "ja": "緊急: 直接的で即座の印象、短くインパクトのある文章、行動志向の言葉、明確なアクション要請",
        "en": "Urgent: Direct and immediate, short impactful sentences, action-oriented language, clear calls to action",
    },
    "custom": {"ja": "カスタム", "en": "Custom"},
}

INTENSITY_DESCRIPTIONS: dict[int, dict[str, str]] = {
    1: {
        "ja": "微調整: 非常に細かい変更のみ。トーンをわずかに調整し、ほとんどの原文をそのまま維持",
        "en": "Subtle: Very minor changes only. Slightly adjust tone while keeping most of the original text intact",
    },
    2: {
        "ja": "軽度: 軽い変更。トーンの一部を変更し、文章構造は維持",
        "en": "Light: Light modifications. Change some tonal elements while maintaining sentence structure",
    },
    3: {
        "ja": "中程度: 適度な変更。トーンを明確に変更し、必要に応じて文章を再構成",
        "en": "Moderate: Moderate changes. Clearly change tone and restructure sentences as needed",
    },
    4: {
        "ja": "強め: 大幅な変更。トーンを積極的に変更し、多くの文章を書き換え",
        "en": "Strong: Significant changes. Actively transform tone and rewrite many sentences",
    },
    5: {
        "ja": "完全書き換え: コンテンツを新しいトーンで完全に書き換え、事実と重要な情報は保持",
        "en": "Complete rewrite: Completely rewrite content in the new tone while preserving facts and key information",
    },
}

TONE_ADJUSTMENT_SYSTEM_PROMPTS: dict[str, str] = {
    "ja": """あなたはClearPress AIの専門的なコンテンツエディターです。PRコンテンツのトーンを調整する専門家です。

重要な原則:
- 事実の正確性を維持する
- 規制コンプライアンスを維持する（特に製薬関連の場合）
- 同じ意味と情報を伝える
- 指定された強度レベルに従って変更を加える
- 説明や注釈は含めず、調整されたコンテンツのみを返す""",
    "en": """You are ClearPress AI's expert content editor, specializing in adjusting the tone of PR content.

Key Principles:
- Maintain factual accuracy
- Preserve regulatory compliance (especially for pharmaceutical content)
- Convey the same meaning and information
- Make changes according to the specified intensity level
- Return only the adjusted content without explanations or notes""",
}

PRESERVE_COMPLIANCE_NOTES: dict[str, str] = {
    "ja": "注意: 製薬規制のコンプライアンスを厳密に維持してください。安全性情報、禁忌、警告は変更しないでください。",
    "en": "IMPORTANT: Strictly maintain pharmaceutical regulatory compliance. Do not modify safety information, contraindications, or warnings.",
}


def build_tone_adjustment_prompts(
    content: str,
    current_tone: str,
    target_tone: str,
    intensity: int,
    custom_tone: str | None = None,
    language: str = "ja",
    preserve_compliance: bool = False,
) -> PromptPair:
    """Build the system/user prompts for rewriting content in another tone.

    ``intensity`` is clamped to 1-5; a custom target tone is described by
    ``custom_tone`` verbatim.
    """
    lang = language if language in TONE_ADJUSTMENT_SYSTEM_PROMPTS else "ja"
    intensity = min(5, max(1, intensity))
    current = TONE_DESCRIPTIONS.get(current_tone, TONE_DESCRIPTIONS["professional"])[lang]
    if target_tone == "custom" and custom_tone:
        target = custom_tone
    else:
        target = TONE_DESCRIPTIONS.get(target_tone, TONE_DESCRIPTIONS["professional"])[lang]
    strength = INTENSITY_DESCRIPTIONS[intensity][lang]
    compliance_note = PRESERVE_COMPLIANCE_NOTES[lang] if preserve_compliance else ""

    if lang == "ja":
        user_prompt = f"""以下のコンテンツのトーンを調整してください。

現在のトーン: {current}

目標のトーン: {target}

変更強度: {intensity}/5
{strength}

{compliance_note}

---コンテンツ開始---
{content}
---コンテンツ終了---

調整されたコンテンツのみを返してください。説明や注釈は含めないでください。"""
    else:
        user_prompt = f"""Please adjust the tone of the following content.

Current Tone: {current}

Target Tone: {target}

Change Intensity: {intensity}/5
{strength}

{compliance_note}

---CONTENT START---
{content}
---CONTENT END---

Return only the adjusted content. Do not include any explanations or notes."""

    return PromptPair(
        system_prompt=TONE_ADJUSTMENT_SYSTEM_PROMPTS[lang], user_prompt=user_prompt
    )


# =============================================================================
# BRIEFS
# =============================================================================

EXPAND_BRIEF_PROMPT = """You are a PR strategist helping expand an initial project brief into a comprehensive plan.

INITIAL BRIEF:
{brief}

CLIENT INFORMATION:
- Name: {client_name}
- Industry: {industry}

LANGUAGE: {language}

Expand the brief by analyzing and developing:

1. BRIEF ANALYSIS (ブリーフ分析)
   - Identify key objectives
   - Distill core message
   - Note gaps or ambiguities

2. TARGET AUDIENCE (ターゲットオーディエンス)
   - Primary audience
   - Secondary audiences
   - Audience characteristics and needs

3. KEY MESSAGES (キーメッセージ)
   - 3-5 main messages to convey
   - Priority order
   - Supporting proof points

4. TONE RECOMMENDATION (トーン推奨)
   - Suggested tone based on audience and purpose
   - Justification

5. DELIVERABLES PLAN (成果物計画)
   - For each content type:
     - Specific purpose
     - Key points to include
     - Unique angle or focus

6. TIMELINE SUGGESTIONS (タイムライン提案)
   - Recommended phases
   - Key milestones
   - Dependencies

7. COMPLIANCE CONSIDERATIONS (コンプライアンス考慮事項)
   - Industry-specific requirements
   - Potential compliance risks
   - Required reviews

8. QUESTIONS FOR CLIENT (クライアントへの質問)
   - Information gaps to fill
   - Decisions needed
   - Clarifications required

9. REFERENCE MATERIALS NEEDED (必要な参考資料)
   - Data or research needed
   - Existing materials to gather
   - Approvals required

OUTPUT FORMAT (JSON only, no markdown code blocks):
{{
  "summary": "Brief summary of the expanded plan",
  "objectives": ["objective1", "objective2"],
  "target_audience": {{
    "primary": ["primary audience 1", "primary audience 2"],
    "secondary": ["secondary audience 1"],
    "personas": [
      {{
        "name": "Persona name",
        "characteristics": "Key characteristics",
        "needs": "What they need"
      }}
    ]
  }},
  "key_messages": [
    {{
      "message": "Main message",
      "priority": 1,
      "proof_points": ["proof point 1", "proof point 2"]
    }}
  ],
  "suggested_tone": {{
    "tone": "professional",
    "rationale": "Why this tone is appropriate"
  }},
  "deliverables": [
    {{
      "type": "press_release",
      "purpose": "Specific purpose",
      "key_points": ["point 1", "point 2"],
      "unique_angle": "What makes this unique"
    }}
  ],
  "timeline_suggestions": [
    {{
      "phase": "Phase 1: Research & Planning",
      "duration": "1-2 days",
      "activities": ["activity 1", "activity 2"]
    }}
  ],
  "compliance_considerations": ["consideration 1", "consideration 2"],
  "questions_for_client": ["question 1", "question 2"],
  "references_needed": ["reference 1", "reference 2"]
}}"""

PHARMACEUTICAL_BRIEF_CONTEXT = """PHARMACEUTICAL INDUSTRY CONTEXT:
- All communications must comply with 薬機法 (Pharmaceutical and Medical Devices Act)
- PMDA approval status must be clearly stated
- Fair balance between efficacy and safety is required
- Important Safety Information (ISI) must be included where applicable
- Off-label promotion is strictly prohibited"""


def build_brief_expansion_prompt(brief: str, client: ClientContext, language: str = "ja") -> str:
    """Build the single user prompt that expands a brief into a PR plan."""
    prompt = EXPAND_BRIEF_PROMPT.format(
        brief=brief,
        client_name=client.name or "Client",
        industry=client.industry_slug or "General",
        language=LANGUAGE_NAMES.get(language, LANGUAGE_NAMES["ja"]),
    )
    if client.industry_slug == PHARMACEUTICAL:
        prompt += "\n\n" + PHARMACEUTICAL_BRIEF_CONTEXT
    return prompt
