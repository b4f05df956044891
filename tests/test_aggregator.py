from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from core.aggregator import RegionAggregator, activity_tier, build_map_layers
from core.config import TierConfig
from core.models import ActivityTier, Message, Region, RegionEntity
from core.resolver import LocationResolver

GAZA = Region(north=31.6, south=31.4, east=34.55, west=34.35)


class FakeListener:
    def __init__(self) -> None:
        self.refreshed: list[tuple[str, int]] = []

    def request_refresh(self, region: RegionEntity) -> None:
        self.refreshed.append((region.region_id, region.message_count))


def _make_message(message_id: int, locations: tuple = ()) -> Message:
    return Message(
        message_id=message_id,
        text=f"message {message_id}",
        cleaned_text=None,
        channel="news",
        date=datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=message_id),
        locations=locations,
    )


def test_same_name_and_bounds_merge_into_one_region() -> None:
    aggregator = RegionAggregator()
    first = aggregator.ingest(_make_message(1), "Gaza City", GAZA)
    second = aggregator.ingest(
        _make_message(2), "Gaza City", Region(north=31.6, south=31.4, east=34.55, west=34.35)
    )

    assert first == second == "region_0"
    assert len(aggregator) == 1
    region = aggregator.get(first)
    assert [message.message_id for message in region.messages] == [1, 2]
    assert region.center.lat == pytest.approx(31.5)
    assert region.center.lon == pytest.approx(34.45)


def test_different_bounds_create_two_regions() -> None:
    aggregator = RegionAggregator()
    aggregator.ingest(_make_message(1), "Gaza City", GAZA)
    aggregator.ingest(
        _make_message(2), "Gaza City", Region(north=31.6, south=31.4, east=34.55, west=34.3500001)
    )
    assert [region.region_id for region in aggregator.regions] == ["region_0", "region_1"]


def test_invalid_bounds_are_skipped() -> None:
    aggregator = RegionAggregator()
    result = aggregator.ingest(
        _make_message(1), "Inverted", Region(north=30.0, south=31.0, east=35.0, west=34.0)
    )
    assert result is None
    assert len(aggregator) == 0


def test_tier_moves_up_as_messages_arrive() -> None:
    aggregator = RegionAggregator()
    tiers = []
    for message_id in range(1, 12):
        region_id = aggregator.ingest(_make_message(message_id), "Gaza City", GAZA)
        tiers.append(aggregator.get(region_id).tier)

    assert tiers[:4] == [ActivityTier.LOW] * 4
    assert tiers[4:9] == [ActivityTier.MEDIUM] * 5
    assert tiers[9:] == [ActivityTier.HIGH] * 2


def test_activity_tier_uses_configured_thresholds() -> None:
    tiers = TierConfig(medium=2, high=3)
    assert activity_tier(1, tiers) is ActivityTier.LOW
    assert activity_tier(2, tiers) is ActivityTier.MEDIUM
    assert activity_tier(3, tiers) is ActivityTier.HIGH


def test_every_mutation_requests_a_refresh() -> None:
    listener = FakeListener()
    aggregator = RegionAggregator(listener=listener)
    aggregator.ingest(_make_message(1), "Gaza City", GAZA)
    aggregator.ingest(_make_message(2), "Gaza City", GAZA)
    assert listener.refreshed == [("region_0", 1), ("region_0", 2)]


def test_reset_all_clears_regions_and_ids() -> None:
    aggregator = RegionAggregator()
    aggregator.ingest(_make_message(1), "Gaza City", GAZA)
    aggregator.reset_all()
    assert aggregator.regions == []
    assert aggregator.ingest(_make_message(2), "Rafah", GAZA) == "region_0"


def test_find_by_name_ignores_case() -> None:
    aggregator = RegionAggregator()
    aggregator.ingest(_make_message(1), "Gaza City", GAZA)
    assert [region.name for region in aggregator.find_by_name("gaza city ")] == ["Gaza City"]


def test_build_map_layers_routes_each_location() -> None:
    resolver = LocationResolver(
        {
            "Gaza City": {"north": 31.6, "south": 31.4, "east": 34.55, "west": 34.35},
            "Rafah": {"lat": 31.29, "lon": 34.25},
            "Atlantis": None,
        }
    )
    messages = [
        _make_message(1, ("Gaza City", "Rafah")),
        _make_message(2, (" gaza city", "Atlantis", "Jericho", None, "")),
        _make_message(3, ("Gaza City",)),
    ]

    layers = build_map_layers(messages, resolver)

    assert [placement.location_name for placement in layers.points] == ["Rafah"]
    assert layers.unresolved == 1
    assert layers.not_found == 1
    assert layers.skipped_invalid == 2
    # Region identity uses the raw name, so " gaza city" is its own entity.
    assert [(region.name, region.message_count) for region in layers.regions] == [
        ("Gaza City", 2),
        (" gaza city", 1),
    ]


def test_each_rebuild_starts_from_a_clean_aggregator() -> None:
    resolver = LocationResolver({"Gaza City": {"north": 31.6, "south": 31.4, "east": 34.55, "west": 34.35}})
    messages = [_make_message(1, ("Gaza City",))]
    first = build_map_layers(messages, resolver)
    second = build_map_layers(messages, resolver)
    assert first.regions[0].message_count == 1
    assert second.regions[0].message_count == 1
    assert second.regions[0].region_id == "region_0"


def test_empty_input_builds_empty_layers() -> None:
    layers = build_map_layers([], LocationResolver({}))
    assert layers.points == []
    assert layers.regions == []
