"""
ForkYes - AI response parsing.

Salvages JSON from free-text completions. The model is asked for JSON but
often wraps it in prose or code fences, so each parser takes the widest
bracketed span (first opening bracket to last closing bracket, across
newlines) and tries json.loads on it.

Malformed output degrades the feature instead of failing the request:
the parsers log and fall back, they never raise.
"""

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

_ARRAY_SPAN = re.compile(r"\[.*\]", re.DOTALL)
_OBJECT_SPAN = re.compile(r"\{.*\}", re.DOTALL)


def extract_json_span(text: str, pattern: re.Pattern[str]) -> Any | None:
    """
    Parse the first span of `text` matching `pattern`.

    Returns None when there is no span.

    Raises:
        json.JSONDecodeError: a span exists but is not valid JSON
    """
    match = pattern.search(text or "")
    if match is None:
        return None
    return json.loads(match.group(0))


def parse_meal_suggestions(text: str) -> list[dict[str, Any]]:
    """
    Meal suggestions from a completion.

    Prefers a JSON array; a lone JSON object is treated as a single
    suggestion. Anything else yields [].
    """
    try:
        parsed = extract_json_span(text, _ARRAY_SPAN)
        if parsed is None:
            parsed = extract_json_span(text, _OBJECT_SPAN)
        if parsed is None:
            return []
        return parsed if isinstance(parsed, list) else [parsed]
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse AI meal suggestions: {e}")
        return []


def parse_shopping_list(text: str) -> list[dict[str, Any]]:
    """Shopping list items from a completion, [] if no valid JSON array."""
    try:
        parsed = extract_json_span(text, _ARRAY_SPAN)
        return parsed if isinstance(parsed, list) else []
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse AI shopping list: {e}")
        return []


def parse_meal_modification(text: str, original: dict[str, Any]) -> dict[str, Any]:
    """Modified meal from a completion; the original meal if none can be parsed."""
    try:
        parsed = extract_json_span(text, _OBJECT_SPAN)
        return parsed if isinstance(parsed, dict) else original
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse AI meal modification: {e}")
        return original
