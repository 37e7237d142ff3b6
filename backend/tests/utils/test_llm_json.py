"""Tests for JSON extraction from LLM answers."""

import pytest

from pressroom.utils.llm_json import extract_json_object, strip_code_fence


class TestStripCodeFence:
    def test_json_fence(self) -> None:
        assert strip_code_fence('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence(self) -> None:
        assert strip_code_fence('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_no_fence(self) -> None:
        assert strip_code_fence('  {"a": 1}  ') == '{"a": 1}'


class TestExtractJsonObject:
    def test_surrounding_prose(self) -> None:
        text = 'Here is the analysis:\n{"score": 90}\nLet me know if you need more.'
        assert extract_json_object(text) == {"score": 90}

    def test_literal_newline_in_string(self) -> None:
        assert extract_json_object('{"text": "line1\nline2"}') == {"text": "line1\nline2"}

    @pytest.mark.parametrize("text", ["no json here", "[1, 2, 3]", '{"broken": '])
    def test_invalid(self, text: str) -> None:
        with pytest.raises(ValueError):
            extract_json_object(text)
