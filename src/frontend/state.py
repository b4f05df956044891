"""State container for the loaded dataset and its derived map layers."""

from __future__ import annotations

from dataclasses import dataclass, field

from core.aggregator import MapLayers, RegionAggregator
from core.models import Message, RegionEntity
from core.resolver import LocationResolver


@dataclass
class ExplorerState:
    messages: list[Message] = field(default_factory=list)
    resolver: LocationResolver = field(default_factory=lambda: LocationResolver({}))
    layers: MapLayers = field(default_factory=lambda: MapLayers(aggregator=RegionAggregator()))
    error: str | None = None


class StaleRegionTracker:
    """Collects the regions changed since the visibility plan was last drawn."""

    def __init__(self) -> None:
        self._stale: set[str] = set()

    def request_refresh(self, region: RegionEntity) -> None:
        self._stale.add(region.region_id)

    @property
    def is_stale(self) -> bool:
        return bool(self._stale)

    def take_stale(self) -> set[str]:
        """Return the changed region ids and start collecting afresh."""

        stale, self._stale = self._stale, set()
        return stale
