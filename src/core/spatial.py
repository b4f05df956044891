"""Spatial predicates and region queries (core domain).

Queries scan every message on each call. Datasets hold thousands of messages,
not millions, so a spatial index is not worth maintaining.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Tuple

from core.models import Message, Point, Region, RegionEntity
from core.resolver import LocationResolver

POINT_ZOOM = 15


def point_in_region(point: Point, region: Region) -> bool:
    return region.south <= point.lat <= region.north and region.west <= point.lon <= region.east


def regions_overlap(a: Region, b: Region) -> bool:
    """Return True unless the boxes are strictly separated; shared edges overlap."""

    return not (a.south > b.north or a.north < b.south or a.west > b.east or a.east < b.west)


def geometry_in_region(geometry: Any, bounds: Region) -> bool:
    if isinstance(geometry, Point):
        return point_in_region(geometry, bounds)
    if isinstance(geometry, Region):
        return regions_overlap(geometry, bounds)
    return False


def find_messages_in_region(
    bounds: Region,
    messages: Iterable[Message],
    resolver: LocationResolver,
) -> List[Message]:
    """Return every message with a location inside or overlapping bounds.

    Each message appears once, most recent first; equal dates keep source
    order.
    """

    found: List[Message] = []
    seen: set = set()
    for message in messages:
        if message.dedup_key in seen:
            continue
        for location in message.locations:
            if geometry_in_region(resolver.geometry_for(location), bounds):
                found.append(message)
                seen.add(message.dedup_key)
                break

    # sorted() is stable, so ties keep their relative order.
    return sorted(found, key=lambda message: message.date, reverse=True)


@dataclass(frozen=True)
class RegionDetails:
    """Everything a details panel needs for one region entity."""

    region: RegionEntity
    direct_count: int
    within_count: int
    channels: Tuple[str, ...]
    # Ordered (message, is_direct) pairs, most recent first.
    messages: Tuple[Tuple[Message, bool], ...]

    @property
    def total(self) -> int:
        return len(self.messages)


def region_details(
    region: RegionEntity,
    messages: Iterable[Message],
    resolver: LocationResolver,
) -> RegionDetails:
    """Split the messages inside a region into direct and sub-area messages."""

    contained = find_messages_in_region(region.bounds, messages, resolver)
    direct_keys = {message.dedup_key for message in region.messages}

    channels: List[str] = []
    for message in contained:
        if message.channel not in channels:
            channels.append(message.channel)

    flagged = tuple((message, message.dedup_key in direct_keys) for message in contained)
    direct_count = sum(1 for _, is_direct in flagged if is_direct)
    return RegionDetails(
        region=region,
        direct_count=direct_count,
        within_count=len(flagged) - direct_count,
        channels=tuple(channels),
        messages=flagged,
    )


@dataclass(frozen=True)
class NavigationTarget:
    """Where a map should move to show a location."""

    center: Point
    bounds: Optional[Region] = None
    zoom: Optional[int] = None


def navigation_target(geometry: Any) -> Optional[NavigationTarget]:
    """Fit regions to their bounds; centre points at a fixed street zoom."""

    if isinstance(geometry, Region):
        return NavigationTarget(center=geometry.center, bounds=geometry)
    if isinstance(geometry, Point):
        return NavigationTarget(center=geometry, zoom=POINT_ZOOM)
    return None
