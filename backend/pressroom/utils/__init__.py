"""Utility functions shared across services."""

from pressroom.utils.llm_json import extract_json_object, strip_code_fence

__all__ = [
    "extract_json_object",
    "strip_code_fence",
]
