"""Helpers for pulling JSON out of LLM answers.

Claude is asked to answer with a bare JSON object but regularly wraps it in a
markdown fence or adds a sentence before/after it.
"""

import json
import re
from typing import Any

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


def strip_code_fence(text: str) -> str:
    """Return the contents of the first ``` fence, or the text unchanged."""
    match = _FENCE_RE.search(text)
    if match:
        return match.group(1).strip()
    return text.strip()


def extract_json_object(text: str) -> dict[str, Any]:
    """Extract and parse the outermost JSON object of an LLM answer.

    Literal newlines inside string values are tolerated.

    Raises:
        ValueError: If no JSON object can be parsed from the text
    """
    json_text = strip_code_fence(text)

    first_brace = json_text.find("{")
    last_brace = json_text.rfind("}")
    if first_brace != -1 and last_brace > first_brace:
        json_text = json_text[first_brace : last_brace + 1]

    parsed = json.loads(json_text, strict=False)
    if not isinstance(parsed, dict):
        raise ValueError(f"Expected a JSON object, got {type(parsed).__name__}")
    return parsed
