from __future__ import annotations

from datetime import datetime, timezone

import pytest

from core.config import SearchConfig
from core.models import Message
from core.search import (
    ALL_WORDS,
    FUZZY,
    PREFIX,
    SINGLE_FIELD,
    levenshtein,
    match_strategy,
    matches,
    normalize_text,
    similarity,
)


def _make_message(text: str, channel: str = "news", locations: tuple = ()) -> Message:
    return Message(
        message_id=0,
        text=text,
        cleaned_text=None,
        channel=channel,
        date=datetime(2024, 1, 1, tzinfo=timezone.utc),
        locations=locations,
    )


def test_normalize_text_strips_punctuation_and_whitespace() -> None:
    assert normalize_text("  Gaza-City,   NORTH!  ") == "gaza city north"
    assert normalize_text("!!!") == ""


def test_levenshtein_and_similarity() -> None:
    assert levenshtein("kitten", "sitting") == 3
    assert similarity("", "") == 1.0
    assert similarity("shelling", "shellng") == pytest.approx(0.875)


def test_single_field_match_ignores_case() -> None:
    message = _make_message("Strike reported in Gaza City")
    assert match_strategy(message, "gaza") == SINGLE_FIELD
    assert match_strategy(message, "GAZA city") == SINGLE_FIELD


def test_words_spread_across_fields() -> None:
    message = _make_message("Strike reported overnight", channel="Gaza Now")
    assert match_strategy(message, "strike gaza") == ALL_WORDS


def test_locations_are_searchable() -> None:
    message = _make_message("Sirens heard", locations=("Khan Younis",))
    assert match_strategy(message, "younis") == SINGLE_FIELD


def test_prefix_covers_longer_query_words() -> None:
    message = _make_message("Jerusalem update")
    assert match_strategy(message, "jerusalemite") == PREFIX


def test_fuzzy_covers_typos() -> None:
    message = _make_message("Shelling near Rafah")
    assert match_strategy(message, "shellng") == FUZZY


def test_short_words_skip_prefix_and_fuzzy() -> None:
    message = _make_message("Shelling near Rafah")
    assert match_strategy(message, "ab") is None
    assert not matches(message, "xyzzy")


def test_empty_query_matches_everything() -> None:
    message = _make_message("anything")
    assert match_strategy(message, "") == ALL_WORDS
    assert match_strategy(message, "  ?! ") == ALL_WORDS


def test_threshold_is_configurable() -> None:
    message = _make_message("Shelling near Rafah")
    strict = SearchConfig(similarity_threshold=0.95)
    assert match_strategy(message, "shellng", strict) is None


def test_partial_word_finds_full_word() -> None:
    message = _make_message("Clashes reported at the north gate")
    assert match_strategy(message, "nort gate") == SINGLE_FIELD


def test_location_only_match() -> None:
    message = _make_message("Sirens heard overnight", locations=("Gaza City",))
    assert match_strategy(message, "gaza") == SINGLE_FIELD


def test_prefix_and_fuzzy_need_only_one_word() -> None:
    assert match_strategy(_make_message("Jerusalem update"), "jerusalemite zzzzzz") == PREFIX
    assert match_strategy(_make_message("Shelling near Rafah"), "shellng zzzzzz") == FUZZY
