"""Multi-strategy approximate text matching (core domain).

A record matches a query when any of four strategies succeeds:
- single-field: one field contains every query word.
- all-words: every query word appears in some field (fields may differ).
- prefix: a word (longer than 2 chars) is a prefix of a field token, or the
  other way round, which covers abbreviations and partial typing.
- fuzzy: a word (longer than 3 chars) is within edit-distance similarity 0.8
  of a field token, which covers typos.

Strategies run cheapest first and stop at the first hit; the result is the
same as evaluating all four.
"""

from __future__ import annotations

import re
from typing import Any, List, Optional

from rapidfuzz.distance import Levenshtein

from core.config import SearchConfig

SINGLE_FIELD = "single-field"
ALL_WORDS = "all-words"
PREFIX = "prefix"
FUZZY = "fuzzy"

_NON_WORD = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Lowercase, turn punctuation into spaces, collapse whitespace."""

    lowered = _NON_WORD.sub(" ", text.lower())
    return _WHITESPACE.sub(" ", lowered).strip()


def levenshtein(first: str, second: str) -> int:
    """Edit distance with unit insertion, deletion and substitution costs."""

    return Levenshtein.distance(first, second)


def similarity(first: str, second: str) -> float:
    """Return 1.0 for identical strings down to 0.0 for nothing in common."""

    longest = max(len(first), len(second))
    if longest == 0:
        return 1.0
    return (longest - levenshtein(first, second)) / longest


def record_fields(record: Any) -> List[str]:
    """Collect the normalized searchable fields of a message-like record."""

    raw_fields = [
        getattr(record, "text", None) or "",
        getattr(record, "cleaned_text", None) or "",
        getattr(record, "channel", None) or "",
    ]
    raw_fields.extend(getattr(record, "locations", None) or ())
    return [normalize_text(str(value)) for value in raw_fields if value is not None]


def _fuzzy_token_match(word: str, tokens: List[str], config: SearchConfig) -> bool:
    max_length_gap = len(word) * config.length_tolerance
    for token in tokens:
        if abs(len(token) - len(word)) > max_length_gap:
            continue
        if similarity(token, word) >= config.similarity_threshold:
            return True
    return False


def match_strategy(record: Any, query: str, config: Optional[SearchConfig] = None) -> Optional[str]:
    """Return the name of the first strategy that matches, or None.

    An empty query (or one with no words after normalization) matches
    everything and reports the all-words strategy.
    """

    config = config or SearchConfig()
    words = normalize_text(query or "").split()
    if not words:
        return ALL_WORDS

    fields = record_fields(record)

    if any(all(word in field for word in words) for field in fields):
        return SINGLE_FIELD
    if all(any(word in field for field in fields) for word in words):
        return ALL_WORDS

    field_tokens = [token for field in fields for token in field.split()]

    for word in words:
        if len(word) <= config.prefix_min_length:
            continue
        if any(token.startswith(word) or word.startswith(token) for token in field_tokens):
            return PREFIX

    for word in words:
        if len(word) <= config.fuzzy_min_length:
            continue
        if _fuzzy_token_match(word, field_tokens, config):
            return FUZZY

    return None


def matches(record: Any, query: str, config: Optional[SearchConfig] = None) -> bool:
    return match_strategy(record, query, config) is not None
