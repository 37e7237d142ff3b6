"""Tests for the title enhancement service."""

from unittest.mock import MagicMock

import pytest

from pressroom.core.errors import AIServiceError, ConfigurationError, ValidationServiceError
from pressroom.services.title_enhancement import (
    TitleEnhancementService,
    parse_title_suggestions,
)
from tests.conftest import make_completion


class TestParseTitleSuggestions:
    """Tests for parsing the title model's answer."""

    def test_valid_answer(self) -> None:
        text = '{"suggestions": ["案1", "案2", "案3"]}'
        assert parse_title_suggestions(text, "元") == ["案1", "案2", "案3"]

    def test_at_most_three(self) -> None:
        text = '{"suggestions": ["1", "2", "3", "4"]}'
        assert parse_title_suggestions(text, "元") == ["1", "2", "3"]

    def test_blank_and_non_string_entries_skipped(self) -> None:
        text = '{"suggestions": ["", "  ", 42, null, " 案 "]}'
        assert parse_title_suggestions(text, "元") == ["案"]

    @pytest.mark.parametrize(
        "text",
        ["not json", '{"suggestions": "案"}', '{"other": []}', '{"suggestions": []}'],
    )
    def test_falls_back_to_original(self, text: str) -> None:
        assert parse_title_suggestions(text, "元のタイトル") == ["元のタイトル"]


class TestEnhanceTitle:
    """Tests for TitleEnhancementService.enhance_title."""

    @pytest.mark.asyncio
    async def test_uses_title_model(self, mock_claude: MagicMock) -> None:
        mock_claude.complete.return_value = make_completion(
            '```json\n{"suggestions": ["新薬Xが国内承認を取得"]}\n```'
        )
        service = TitleEnhancementService(claude=mock_claude)

        suggestions = await service.enhance_title("新薬の承認について", "press_release")

        assert suggestions == ["新薬Xが国内承認を取得"]
        kwargs = mock_claude.complete.call_args.kwargs
        assert kwargs["model"] == "claude-3-5-haiku-20241022"
        assert kwargs["max_tokens"] == 512
        assert "新薬の承認について" in mock_claude.complete.call_args.args[0]

    @pytest.mark.asyncio
    async def test_english_prompt(self, mock_claude: MagicMock) -> None:
        mock_claude.complete.return_value = make_completion('{"suggestions": ["A"]}')
        service = TitleEnhancementService(claude=mock_claude)

        await service.enhance_title("Launch", "blog_post", context="B2B", language="en")

        prompt = mock_claude.complete.call_args.args[0]
        assert "Original Title: Launch" in prompt
        assert "Additional Context: B2B" in prompt

    @pytest.mark.asyncio
    async def test_ai_failure(self, mock_claude: MagicMock) -> None:
        mock_claude.complete.return_value = make_completion(error="Request timed out")
        service = TitleEnhancementService(claude=mock_claude)

        with pytest.raises(AIServiceError):
            await service.enhance_title("タイトル", "press_release")

    @pytest.mark.asyncio
    async def test_missing_api_key(self, unavailable_claude: MagicMock) -> None:
        service = TitleEnhancementService(claude=unavailable_claude)

        with pytest.raises(ConfigurationError):
            await service.enhance_title("タイトル", "press_release")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("title,content_type", [("", "press_release"), ("T", "newsletter")])
    async def test_validation(
        self, mock_claude: MagicMock, title: str, content_type: str
    ) -> None:
        service = TitleEnhancementService(claude=mock_claude)

        with pytest.raises(ValidationServiceError):
            await service.enhance_title(title, content_type)

        mock_claude.complete.assert_not_called()
