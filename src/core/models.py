"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any loader- or UI-specific types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union


@dataclass(frozen=True)
class Message:
    """A geotagged text record as loaded from the message source."""

    message_id: int
    text: str
    cleaned_text: Optional[str]
    channel: str
    date: datetime
    # Raw entries from the source; malformed ones are skipped downstream.
    locations: Tuple[Any, ...] = ()
    source_id: Optional[str] = None

    @property
    def dedup_key(self) -> tuple:
        """Return the identity used when a message must be counted once."""

        if self.source_id is not None:
            return ("id", self.source_id)
        return ("content", self.text, self.date, self.channel)


@dataclass(frozen=True)
class Point:
    lat: float
    lon: float


@dataclass(frozen=True)
class Region:
    """Axis-aligned latitude/longitude bounding box."""

    north: float
    south: float
    east: float
    west: float

    @property
    def is_valid(self) -> bool:
        return self.north >= self.south and self.east >= self.west

    @property
    def lat_span(self) -> float:
        return self.north - self.south

    @property
    def lon_span(self) -> float:
        return self.east - self.west

    @property
    def area(self) -> float:
        return self.lat_span * self.lon_span

    @property
    def center(self) -> Point:
        return Point(lat=(self.north + self.south) / 2, lon=(self.east + self.west) / 2)


@dataclass(frozen=True)
class Unresolved:
    """Cache entry recorded as "resolution attempted and failed"."""


@dataclass(frozen=True)
class NotFound:
    """The key is absent from the cache."""


UNRESOLVED = Unresolved()
NOT_FOUND = NotFound()

Geometry = Union[Point, Region, Unresolved]
Resolution = Union[Point, Region, Unresolved, NotFound]


class ActivityTier(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass
class RegionEntity:
    """Deduplicated region aggregate built by the region aggregator."""

    region_id: str
    name: str
    bounds: Region
    messages: List[Message] = field(default_factory=list)
    tier: ActivityTier = ActivityTier.LOW

    @property
    def center(self) -> Point:
        return self.bounds.center

    @property
    def message_count(self) -> int:
        return len(self.messages)


@dataclass(frozen=True)
class PointPlacement:
    """A marker to place for one (message, location) pair."""

    message: Message
    location_name: str
    point: Point


@dataclass(frozen=True)
class Dataset:
    """Messages plus the raw location cache, as returned by a dataset source."""

    messages: List[Message]
    location_cache: Dict[str, Any]
