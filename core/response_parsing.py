# core/response_parsing.py
"""Normalization of raw model responses into structured values or text.

Models often wrap JSON in markdown fences or explanatory prose. The helpers
here strip that formatting and make a best-effort attempt at decoding the
outermost ``{...}`` block. A failed decode is not an error: the cleaned text
is returned instead.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

_FENCE_PATTERNS = (
    re.compile(r"```json\n?"),
    re.compile(r"```\n?"),
    re.compile(r"Corrected Schema:\n"),
)


@dataclass(frozen=True)
class StructuredValue:
    """A successfully decoded JSON value."""

    value: Any


@dataclass(frozen=True)
class PlainText:
    """Cleaned response text that did not decode as JSON."""

    text: str


NormalizedResult = StructuredValue | PlainText


def clean_markdown(text: str) -> str:
    """Remove code fences and the ``Corrected Schema:`` prefix line, then trim."""
    for pattern in _FENCE_PATTERNS:
        text = pattern.sub("", text)
    return text.strip()


def extract_json_block(text: str) -> str | None:
    """Return the span from the first ``{`` to the last ``}`` inclusive."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        return None
    return text[start : end + 1]


def normalize_response(raw: str) -> NormalizedResult:
    cleaned = clean_markdown(raw)
    candidate = extract_json_block(cleaned)
    if candidate is None:
        return PlainText(cleaned)
    try:
        return StructuredValue(json.loads(candidate))
    except json.JSONDecodeError as exc:
        logger.debug(
            "Structured decode failed; falling back to text",
            error=str(exc),
            candidate_chars=len(candidate),
        )
        return PlainText(cleaned)


def find_keys(obj: Any, keys: Iterable[str]) -> dict[str, Any]:
    """Collect values for ``keys`` found at any depth of ``obj``.

    The walk is depth-first in mapping order; when a key occurs more than
    once the last visited occurrence wins.
    """
    wanted = set(keys)
    found: dict[str, Any] = {}

    def _walk(node: Any) -> None:
        if isinstance(node, dict):
            for key, value in node.items():
                if key in wanted:
                    found[key] = value
                _walk(value)
        elif isinstance(node, list):
            for item in node:
                _walk(item)

    _walk(obj)
    return found


def parse_json_keys(raw: str, keys: Iterable[str]) -> dict[str, Any]:
    """Decode the JSON block in ``raw`` and pick out ``keys``.

    Returns an empty dict when nothing decodes or none of the keys is present.
    """
    result = normalize_response(raw)
    if not isinstance(result, StructuredValue):
        logger.warning("Failed to parse input JSON", raw_chars=len(raw))
        return {}
    matches = find_keys(result.value, keys)
    if not matches:
        logger.info("Failed to find any matching keys in the JSON")
    return matches
