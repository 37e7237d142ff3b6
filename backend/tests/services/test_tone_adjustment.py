"""Tests for the tone adjustment service."""

from unittest.mock import MagicMock

import pytest

from pressroom.core.errors import AIServiceError, ConfigurationError, ValidationServiceError
from pressroom.services.tone_adjustment import ToneAdjustmentService, changes_summary
from tests.conftest import make_completion


class TestChangesSummary:
    def test_japanese(self) -> None:
        assert changes_summary("formal", "friendly", 3, "ja") == (
            "formalからfriendlyへトーンを調整しました（強度: 3/5）"
        )

    def test_english(self) -> None:
        assert changes_summary("formal", "friendly", 3, "en") == (
            "Adjusted from formal to friendly (intensity: 3/5)"
        )


class TestAdjustTone:
    """Tests for ToneAdjustmentService.adjust_tone."""

    @pytest.mark.asyncio
    async def test_adjusts_content(self, mock_claude: MagicMock) -> None:
        mock_claude.complete.return_value = make_completion("\n  新しい 本文です。 \n")
        service = ToneAdjustmentService(claude=mock_claude)

        result = await service.adjust_tone("本文です。", "formal", "friendly", 2)

        assert result.adjusted_content == "新しい 本文です。"
        assert result.word_count == len("新しい本文です。")
        assert result.changes_summary.endswith("（強度: 2/5）")
        kwargs = mock_claude.complete.call_args.kwargs
        assert kwargs["model"] == "claude-sonnet-4-5-20250929"
        assert kwargs["max_tokens"] == 4096
        assert "コンテンツエディター" in kwargs["system_prompt"]
        assert "本文です。" in mock_claude.complete.call_args.args[0]

    @pytest.mark.asyncio
    async def test_custom_tone_in_english(self, mock_claude: MagicMock) -> None:
        mock_claude.complete.return_value = make_completion("Rewritten.")
        service = ToneAdjustmentService(claude=mock_claude)

        result = await service.adjust_tone(
            "Original.",
            "professional",
            "custom",
            4,
            custom_tone="Like a science magazine",
            language="en",
            preserve_compliance=True,
        )

        prompt = mock_claude.complete.call_args.args[0]
        assert "Target Tone: Like a science magazine" in prompt
        assert "Do not modify safety information" in prompt
        assert result.changes_summary == "Adjusted from professional to custom (intensity: 4/5)"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "kwargs,field_name",
        [
            ({"content": " "}, "content"),
            ({"intensity": 0}, "intensity"),
            ({"intensity": 6}, "intensity"),
            ({"target_tone": "custom"}, "custom_tone"),
            ({"target_tone": "custom", "custom_tone": "  "}, "custom_tone"),
            ({"current_tone": "sarcastic"}, "current_tone"),
        ],
    )
    async def test_validation(
        self, mock_claude: MagicMock, kwargs: dict, field_name: str
    ) -> None:
        args = {
            "content": "本文",
            "current_tone": "formal",
            "target_tone": "friendly",
            "intensity": 3,
            **kwargs,
        }
        service = ToneAdjustmentService(claude=mock_claude)

        with pytest.raises(ValidationServiceError) as exc_info:
            await service.adjust_tone(**args)

        assert exc_info.value.field_name == field_name
        mock_claude.complete.assert_not_called()

    @pytest.mark.asyncio
    async def test_ai_failure(self, mock_claude: MagicMock) -> None:
        mock_claude.complete.return_value = make_completion(error="Server error (500)")
        service = ToneAdjustmentService(claude=mock_claude)

        with pytest.raises(AIServiceError):
            await service.adjust_tone("本文", "formal", "urgent", 3)

    @pytest.mark.asyncio
    async def test_missing_api_key(self, unavailable_claude: MagicMock) -> None:
        service = ToneAdjustmentService(claude=unavailable_claude)

        with pytest.raises(ConfigurationError):
            await service.adjust_tone("本文", "formal", "urgent", 3)
