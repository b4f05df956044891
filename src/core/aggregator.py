"""Region aggregation and the map-layer rebuild pass (core domain).

A rebuild always starts from a fresh aggregator, so region state is never
patched incrementally across filter changes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from core.config import TierConfig
from core.location_keys import normalize_location_key
from core.models import (
    ActivityTier,
    Message,
    NotFound,
    Point,
    PointPlacement,
    Region,
    RegionEntity,
)
from core.ports import RefreshListener
from core.resolver import LocationResolver

LOGGER = logging.getLogger(__name__)


def activity_tier(message_count: int, tiers: TierConfig) -> ActivityTier:
    if message_count >= tiers.high:
        return ActivityTier.HIGH
    if message_count >= tiers.medium:
        return ActivityTier.MEDIUM
    return ActivityTier.LOW


class RegionAggregator:
    """Deduplicate region geometry into region entities.

    Identity is (name, bounds) compared by value, with exact float equality
    on bounds since they come from one deterministic cache.
    """

    def __init__(
        self,
        tiers: Optional[TierConfig] = None,
        listener: Optional[RefreshListener] = None,
    ) -> None:
        self._tiers = tiers or TierConfig()
        self._listener = listener
        self._by_identity: Dict[Tuple[str, Region], RegionEntity] = {}
        self._by_id: Dict[str, RegionEntity] = {}
        self._next_region_id = 0

    def __len__(self) -> int:
        return len(self._by_id)

    @property
    def regions(self) -> List[RegionEntity]:
        """Region entities in creation order."""

        return list(self._by_id.values())

    def get(self, region_id: str) -> Optional[RegionEntity]:
        return self._by_id.get(region_id)

    def find_by_name(self, name: str) -> List[RegionEntity]:
        """Return regions whose display name matches, case-insensitively."""

        key = normalize_location_key(name)
        return [
            region
            for region in self._by_id.values()
            if normalize_location_key(region.name) == key
        ]

    def ingest(self, message: Message, location_name: str, region: Region) -> Optional[str]:
        """Attach a message to the region entity for (location_name, region).

        Returns the region id, or None when the bounds are inverted.
        """

        if not region.is_valid:
            LOGGER.warning("Skipping region %r with invalid bounds %s", location_name, region)
            return None

        identity = (location_name, region)
        entity = self._by_identity.get(identity)
        if entity is None:
            entity = RegionEntity(
                region_id=f"region_{self._next_region_id}",
                name=location_name,
                bounds=region,
            )
            self._next_region_id += 1
            self._by_identity[identity] = entity
            self._by_id[entity.region_id] = entity

        entity.messages.append(message)
        entity.tier = activity_tier(len(entity.messages), self._tiers)

        if self._listener is not None:
            self._listener.request_refresh(entity)
        return entity.region_id

    def reset_all(self) -> None:
        """Drop every region entity and restart id assignment."""

        self._by_identity.clear()
        self._by_id.clear()
        self._next_region_id = 0


@dataclass
class MapLayers:
    """Result of one rebuild pass over a message set."""

    aggregator: RegionAggregator
    points: List[PointPlacement] = field(default_factory=list)
    skipped_invalid: int = 0
    unresolved: int = 0
    not_found: int = 0

    @property
    def regions(self) -> List[RegionEntity]:
        return self.aggregator.regions


def build_map_layers(
    messages: Iterable[Message],
    resolver: LocationResolver,
    tiers: Optional[TierConfig] = None,
    listener: Optional[RefreshListener] = None,
) -> MapLayers:
    """Run a full rebuild: resolve every (message, location) pair.

    Points become marker placements, regions are aggregated, and anything
    malformed, unresolved, or missing from the cache is skipped without
    affecting the message's other locations.
    """

    layers = MapLayers(aggregator=RegionAggregator(tiers=tiers, listener=listener))

    for message in messages:
        for location in message.locations:
            if normalize_location_key(location) is None:
                LOGGER.warning("Invalid location name %r in message %s", location, message.message_id)
                layers.skipped_invalid += 1
                continue

            resolved = resolver.resolve(location)
            if isinstance(resolved, Region):
                if layers.aggregator.ingest(message, location, resolved) is None:
                    layers.skipped_invalid += 1
            elif isinstance(resolved, Point):
                layers.points.append(
                    PointPlacement(message=message, location_name=location, point=resolved)
                )
            elif isinstance(resolved, NotFound):
                LOGGER.debug("Location %r not found in cache", location)
                layers.not_found += 1
            else:
                LOGGER.debug("Location %r is marked unresolved in cache", location)
                layers.unresolved += 1

    LOGGER.info(
        "Map layers rebuilt: points=%s, regions=%s, unresolved=%s, not_found=%s, invalid=%s",
        len(layers.points),
        len(layers.aggregator),
        layers.unresolved,
        layers.not_found,
        layers.skipped_invalid,
    )
    return layers
