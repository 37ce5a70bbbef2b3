"""Extract mentions and hashtags from status text."""

from __future__ import annotations

import json
import re
from typing import Sequence

from search_extract.models import EntityExtraction

# A sigil cluster only counts when it starts the text or follows ASCII whitespace.
MENTION_PATTERN = re.compile(r"(?:[ \t\n\x0b\f\r]|\A)@+[A-Za-z0-9_-]+")
HASHTAG_PATTERN = re.compile(r"(?:[ \t\n\x0b\f\r]|\A)#+[A-Za-z0-9_-]+")

_WHITESPACE = re.compile(r"[ \t\n\x0b\f\r]+")


def _find_tokens(pattern: re.Pattern, text: str) -> tuple[str, ...]:
    return tuple(_WHITESPACE.sub("", match.group()) for match in pattern.finditer(text))


def extract(text: str | None) -> EntityExtraction:
    """Return mentions and hashtags found in `text`, in order of appearance."""
    if not text:
        return EntityExtraction()
    return EntityExtraction(
        mentions=_find_tokens(MENTION_PATTERN, text),
        hashtags=_find_tokens(HASHTAG_PATTERN, text),
    )


def serialize_entities(key: str, tokens: Sequence[str]) -> str:
    """Render tokens as a compact JSON object keyed by `key`.

    An empty sequence renders as "{}" so downstream fields are never null.
    """
    if not tokens:
        return "{}"
    return json.dumps({key: list(tokens)}, ensure_ascii=False, separators=(",", ":"))
