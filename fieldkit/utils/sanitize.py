"""
Display Sanitization Utilities

Turns raw field values into short, markup-free strings for listing views.
"""

import json
import re
from collections.abc import Mapping
from typing import Any, Optional

import bleach

ELLIPSIS = "…"


def sanitize_plain_text(text: Optional[str]) -> str:
    """
    Strip all HTML tags and return plain text only.

    Args:
        text: The text to sanitize

    Returns:
        Plain text with HTML tags stripped and whitespace collapsed
    """
    if text is None:
        return ""

    cleaned = bleach.clean(text, tags=set(), strip=True)
    cleaned = re.sub(r"\s+", " ", cleaned).strip()

    return cleaned


def truncate(text: str, max_length: int) -> str:
    """Cut `text` to at most `max_length` characters, marking the cut with an ellipsis."""
    if max_length <= 0 or len(text) <= max_length:
        return text
    return text[: max_length - 1].rstrip() + ELLIPSIS


def summarize(value: Any, max_length: int) -> Any:
    """
    Condense a value for display.

    Strings are stripped of markup and truncated; mappings and sequences are
    serialized to compact JSON and truncated; None becomes an empty string;
    other scalars are returned unchanged.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return truncate(sanitize_plain_text(value), max_length)
    if isinstance(value, (Mapping, list, tuple, set)):
        serialized = json.dumps(_jsonable(value), ensure_ascii=False, separators=(",", ":"), default=str)
        return truncate(serialized, max_length)
    return value


def _jsonable(value: Any) -> Any:
    # Keys are stringified before sorting; json.dumps(sort_keys=True) fails on mixed key types
    if isinstance(value, Mapping):
        items = sorted(((str(k), v) for k, v in value.items()), key=lambda kv: kv[0])
        return {k: _jsonable(v) for k, v in items}
    if isinstance(value, set):
        return [_jsonable(v) for v in sorted(value, key=str)]
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value
