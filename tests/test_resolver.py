from __future__ import annotations

from datetime import datetime, timezone

from core.models import Message, NotFound, Point, Region, Unresolved
from core.resolver import LocationResolver

CACHE = {
    "Gaza City ": {"north": 31.6, "south": 31.4, "east": 34.55, "west": 34.35},
    "Rafah": {"lat": 31.29, "lon": 34.25},
    "Atlantis": None,
    "Upside Down": {"north": 30.0, "south": 31.0, "east": 35.0, "west": 34.0},
    "Nowhere": {"lat": "north", "lon": 34.0},
}


def _make_message(locations: list) -> Message:
    return Message(
        message_id=0,
        text="report",
        cleaned_text=None,
        channel="news",
        date=datetime(2024, 1, 1, tzinfo=timezone.utc),
        locations=tuple(locations),
    )


def test_resolve_returns_each_outcome() -> None:
    resolver = LocationResolver(CACHE)
    assert isinstance(resolver.resolve("gaza city"), Region)
    assert resolver.resolve("Rafah") == Point(lat=31.29, lon=34.25)
    assert isinstance(resolver.resolve("atlantis"), Unresolved)
    assert isinstance(resolver.resolve("Jericho"), NotFound)


def test_resolve_ignores_case_and_whitespace_on_both_sides() -> None:
    resolver = LocationResolver(CACHE)
    assert resolver.resolve("  GAZA CITY") == resolver.resolve("gaza city")
    assert "  rafah " in resolver


def test_not_found_only_when_key_absent() -> None:
    resolver = LocationResolver(CACHE)
    for raw in ["Gaza City", "RAFAH", " atlantis "]:
        assert not isinstance(resolver.resolve(raw), NotFound)
    assert isinstance(resolver.resolve("Khan Younis"), NotFound)
    assert isinstance(resolver.resolve(""), NotFound)
    assert isinstance(resolver.resolve(None), NotFound)


def test_malformed_geometry_degrades_to_unresolved() -> None:
    resolver = LocationResolver(CACHE)
    assert isinstance(resolver.resolve("upside down"), Unresolved)
    assert isinstance(resolver.resolve("nowhere"), Unresolved)
    assert resolver.geometry_for("upside down") is None


def test_resolved_locations_keeps_only_usable_geometry() -> None:
    resolver = LocationResolver(CACHE)
    message = _make_message(["Rafah", "Atlantis", "Jericho", None, "Gaza City"])
    assert resolver.resolved_locations(message) == ["Rafah", "Gaza City"]


def test_coverage_splits_keys() -> None:
    resolver = LocationResolver(CACHE)
    coverage = resolver.coverage([_make_message(["Rafah", "Atlantis", "Gaza North", " "])])
    assert coverage.matched == {"rafah"}
    assert coverage.unresolved == {"atlantis"}
    assert coverage.missing == {"gaza north"}


def test_similar_keys_share_a_leading_word() -> None:
    resolver = LocationResolver(CACHE)
    assert resolver.similar_keys("Gaza North") == ["gaza city"]
    assert resolver.similar_keys("") == []
