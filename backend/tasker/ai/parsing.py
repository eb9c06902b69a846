"""Helpers for turning free-form model output and HTML pages into data."""

import json
import re
from typing import Any

from tasker.ai.exceptions import BadUpstreamResponseError

# Greedy: first opening bracket through the last closing one
_JSON_ARRAY_RE = re.compile(r"\[[\s\S]*\]")
_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")

_SCRIPT_RE = re.compile(r"<script[^>]*>[\s\S]*?</script>", re.IGNORECASE)
_STYLE_RE = re.compile(r"<style[^>]*>[\s\S]*?</style>", re.IGNORECASE)
_BLOCK_TAG_RE = re.compile(r"</?(tr|th|td|li|br|p|div|h[1-6])[^>]*>", re.IGNORECASE)
_ANY_TAG_RE = re.compile(r"<[^>]*>")
_NUMERIC_ENTITY_RE = re.compile(r"&#\d+;")
_BLANK_LINES_RE = re.compile(r"\n\s*\n")
_SPACES_RE = re.compile(r" {2,}")

_ENTITIES = (
    ("&nbsp;", " "),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
)


def html_to_text(html: str) -> str:
    """Flatten an HTML page to plain text.

    Block-level tags become line breaks, every other tag becomes a space,
    a handful of named entities are decoded and numeric entities dropped.
    """
    text = _SCRIPT_RE.sub("", html)
    text = _STYLE_RE.sub("", text)
    text = _BLOCK_TAG_RE.sub("\n", text)
    text = _ANY_TAG_RE.sub(" ", text)
    for entity, replacement in _ENTITIES:
        text = text.replace(entity, replacement)
    text = _NUMERIC_ENTITY_RE.sub("", text)
    text = _BLANK_LINES_RE.sub("\n", text)
    text = _SPACES_RE.sub(" ", text)
    return text.strip()


def _extract(pattern: re.Pattern, text: str, message: str) -> Any:
    match = pattern.search(text or "")
    if match is None:
        raise BadUpstreamResponseError(message)
    try:
        return json.loads(match.group(0))
    except json.JSONDecodeError:
        raise BadUpstreamResponseError(message) from None


def extract_json_array(text: str, message: str = "Could not parse AI response") -> list:
    """Parse the bracketed span of a model reply as a JSON array.

    Tolerates prose or code fences around the array.

    Raises:
        BadUpstreamResponseError: No bracketed span, or it is not a JSON array
    """
    value = _extract(_JSON_ARRAY_RE, text, message)
    if not isinstance(value, list):
        raise BadUpstreamResponseError(message)
    return value


def extract_json_object(text: str, message: str = "Could not parse AI response") -> dict:
    """Parse the braced span of a model reply as a JSON object.

    Raises:
        BadUpstreamResponseError: No braced span, or it is not a JSON object
    """
    value = _extract(_JSON_OBJECT_RE, text, message)
    if not isinstance(value, dict):
        raise BadUpstreamResponseError(message)
    return value
