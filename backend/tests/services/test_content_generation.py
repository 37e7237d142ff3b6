"""Tests for the content generation service.

Claude is mocked; tests check prompt parameters, variant assembly, failure
policy and validation.
"""

import json
from unittest.mock import MagicMock

import pytest

from pressroom.core.errors import AIServiceError, ConfigurationError, ValidationServiceError
from pressroom.schemas.generation import (
    ClientContext,
    ContentGenerationBrief,
    GenerateContentRequest,
    GenerationSettings,
    StyleProfile,
)
from pressroom.services.content_generation import ContentGenerationService
from tests.conftest import make_completion

PHARMA_CLIENT = ClientContext(name="サンプル製薬", industry_slug="pharmaceutical")


def _brief(**overrides) -> ContentGenerationBrief:
    data = {
        "project_id": "proj-1",
        "content_type": "press_release",
        "title": "新薬承認のお知らせ",
        "summary": "新しい治療薬が承認されました。",
        "key_messages": ["国内初の承認"],
        "tone": "formal",
    }
    data.update(overrides)
    return ContentGenerationBrief(**data)


def _answer(headline: str, body: list[str], **extra) -> str:
    return json.dumps(
        {"structured": {"headline": headline, "body": body}, **extra}, ensure_ascii=False
    )


class TestGenerateVariants:
    """Tests for generate_variants."""

    @pytest.mark.asyncio
    async def test_three_variants_with_increasing_temperature(
        self, mock_claude: MagicMock
    ) -> None:
        mock_claude.complete.side_effect = [
            make_completion(_answer("見出しA", ["本文A"]), model="claude-sonnet"),
            make_completion(_answer("見出しB", ["最も効果的な本文B"]), model="claude-sonnet"),
            make_completion(_answer("見出しC", ["本文C"]), model="claude-sonnet"),
        ]
        service = ContentGenerationService(claude=mock_claude)

        variants = await service.generate_variants(_brief(), PHARMA_CLIENT)

        assert len(variants) == 3
        assert [v.content.headline for v in variants] == ["見出しA", "見出しB", "見出しC"]
        assert [v.generation_params.temperature for v in variants] == [0.7, 0.8, 0.9]
        assert all(v.generation_params.tone == "formal" for v in variants)
        assert [v.compliance_score for v in variants] == [100, 80, 100]
        assert len({v.id for v in variants}) == 3

        temperatures = [c.kwargs["temperature"] for c in mock_claude.complete.call_args_list]
        assert temperatures == [0.7, 0.8, 0.9]
        assert all(
            c.kwargs["max_tokens"] == 4096 for c in mock_claude.complete.call_args_list
        )

    @pytest.mark.asyncio
    async def test_each_variant_gets_its_own_variation_instruction(
        self, mock_claude: MagicMock
    ) -> None:
        mock_claude.complete.return_value = make_completion(_answer("H", ["B"]))
        service = ContentGenerationService(claude=mock_claude)

        await service.generate_variants(_brief(), PHARMA_CLIENT)

        prompts = [c.args[0] for c in mock_claude.complete.call_args_list]
        instructions = [p.split("VARIATION INSTRUCTION:")[1].split("\n")[0] for p in prompts]
        assert len(set(instructions)) == 3
        assert all("新薬承認のお知らせ" in p for p in prompts)

    @pytest.mark.asyncio
    async def test_missing_isi_lowers_score(self, mock_claude: MagicMock) -> None:
        mock_claude.complete.return_value = make_completion(_answer("H", ["本文"]))
        service = ContentGenerationService(claude=mock_claude)

        variants = await service.generate_variants(_brief(include_isi=True), PHARMA_CLIENT)

        assert all(v.compliance_score == 70 for v in variants)

    @pytest.mark.asyncio
    async def test_word_count_from_answer(self, mock_claude: MagicMock) -> None:
        mock_claude.complete.return_value = make_completion(
            _answer("H", ["本文"], word_count=812)
        )
        service = ContentGenerationService(claude=mock_claude)

        variants = await service.generate_variants(_brief(), ClientContext())

        assert all(v.word_count == 812 for v in variants)

    @pytest.mark.asyncio
    async def test_any_failure_fails_request(self, mock_claude: MagicMock) -> None:
        mock_claude.complete.side_effect = [
            make_completion(_answer("A", ["a"])),
            make_completion(error="Server error (500)", status_code=500),
            make_completion(_answer("C", ["c"])),
        ]
        service = ContentGenerationService(claude=mock_claude)

        with pytest.raises(AIServiceError) as exc_info:
            await service.generate_variants(_brief(), PHARMA_CLIENT)

        assert exc_info.value.code == "AI_ERROR"
        assert exc_info.value.status_code == 502
        assert exc_info.value.upstream_status_code == 500
        assert "variant 2" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_unexpected_exception_becomes_ai_error(self, mock_claude: MagicMock) -> None:
        mock_claude.complete.side_effect = RuntimeError("boom")
        service = ContentGenerationService(claude=mock_claude)

        with pytest.raises(AIServiceError):
            await service.generate_variants(_brief(), PHARMA_CLIENT)

    @pytest.mark.asyncio
    async def test_missing_api_key(self, unavailable_claude: MagicMock) -> None:
        service = ContentGenerationService(claude=unavailable_claude)

        with pytest.raises(ConfigurationError) as exc_info:
            await service.generate_variants(_brief(), PHARMA_CLIENT)

        assert exc_info.value.status_code == 503
        unavailable_claude.complete.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "field,value",
        [("project_id", ""), ("title", "  "), ("summary", "")],
    )
    async def test_required_fields(self, mock_claude: MagicMock, field: str, value: str) -> None:
        service = ContentGenerationService(claude=mock_claude)

        with pytest.raises(ValidationServiceError) as exc_info:
            await service.generate_variants(_brief(**{field: value}), PHARMA_CLIENT)

        assert exc_info.value.field_name == field
        mock_claude.complete.assert_not_called()

    @pytest.mark.asyncio
    async def test_to_dict(self, mock_claude: MagicMock) -> None:
        mock_claude.complete.return_value = make_completion(_answer("H", ["B"]))
        service = ContentGenerationService(claude=mock_claude)

        variants = await service.generate_variants(_brief(), PHARMA_CLIENT)
        data = variants[0].to_dict()

        assert data["content"] == {"headline": "H", "body": ["B"]}
        assert set(data["generation_params"]) == {"tone", "model", "temperature"}


class TestGenerateContent:
    """Tests for single generation from a free-text brief."""

    def _request(self, **settings) -> GenerateContentRequest:
        return GenerateContentRequest(
            project_id="proj-1",
            content_type="blog_post",
            brief="新製品の紹介ブログを書いてください",
            settings=GenerationSettings(**settings),
        )

    @pytest.mark.asyncio
    async def test_generates_with_details(self, mock_claude: MagicMock) -> None:
        mock_claude.complete.return_value = make_completion(
            json.dumps(
                {
                    "structured": {"title": "奇跡の新製品", "introduction": "導入"},
                    "compliance_notes": ["誇張表現に注意"],
                },
                ensure_ascii=False,
            )
        )
        service = ContentGenerationService(claude=mock_claude)

        result = await service.generate_content(self._request(), PHARMA_CLIENT)

        assert result.content.title == "奇跡の新製品"
        assert result.compliance_notes == ["誇張表現に注意"]
        assert result.categories["regulatory_claims"].score == 80
        assert result.compliance_score == 94
        assert result.generation_params.temperature == 0.7
        assert mock_claude.complete.call_args.kwargs["temperature"] == 0.7

    @pytest.mark.asyncio
    async def test_client_style_profile_wins(self, mock_claude: MagicMock) -> None:
        mock_claude.complete.return_value = make_completion(_answer("H", ["B"]))
        service = ContentGenerationService(claude=mock_claude)
        request = self._request()
        request.client_style_profile = StyleProfile(tone="request tone")
        client = ClientContext(style_profile=StyleProfile(tone="stored tone"))

        await service.generate_content(request, client)

        prompt = mock_claude.complete.call_args.args[0]
        assert "stored tone" in prompt
        assert "request tone" not in prompt

    @pytest.mark.asyncio
    async def test_failure_raises_ai_error(self, mock_claude: MagicMock) -> None:
        mock_claude.complete.return_value = make_completion(error="Rate limit exceeded")
        service = ContentGenerationService(claude=mock_claude)

        with pytest.raises(AIServiceError):
            await service.generate_content(self._request(), PHARMA_CLIENT)

    @pytest.mark.asyncio
    async def test_unknown_content_type_rejected(self, mock_claude: MagicMock) -> None:
        service = ContentGenerationService(claude=mock_claude)
        request = self._request().model_copy(update={"content_type": "newsletter"})

        with pytest.raises(ValidationServiceError):
            await service.generate_content(request, PHARMA_CLIENT)
