"""Location resolution against the precomputed location cache (core domain)."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from numbers import Real
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from core.location_keys import normalize_location_key
from core.models import (
    NOT_FOUND,
    UNRESOLVED,
    Geometry,
    Message,
    NotFound,
    Point,
    Region,
    Resolution,
    Unresolved,
)

LOGGER = logging.getLogger(__name__)

_BOUND_FIELDS = ("north", "south", "east", "west")


@dataclass
class CacheCoverage:
    """How the locations mentioned in a message set line up with the cache."""

    matched: Set[str] = field(default_factory=set)
    unresolved: Set[str] = field(default_factory=set)
    missing: Set[str] = field(default_factory=set)


def _is_number(value: Any) -> bool:
    # bool is a Real subclass but never a coordinate.
    return isinstance(value, Real) and not isinstance(value, bool)


def parse_geometry(raw_name: str, value: Any) -> Geometry:
    """Parse one cache value into a geometry.

    Explicit nulls are the upstream "geocoding failed" marker. Anything that
    cannot be used safely (missing fields, non-numeric values, inverted
    bounds) is degraded to Unresolved as well so nothing downstream ever sees
    malformed geometry.
    """

    if value is None:
        return UNRESOLVED
    if not isinstance(value, Mapping):
        LOGGER.warning("Invalid cache entry for %r: %r", raw_name, value)
        return UNRESOLVED

    if all(name in value for name in _BOUND_FIELDS):
        if not all(_is_number(value[name]) for name in _BOUND_FIELDS):
            LOGGER.warning("Non-numeric bounds for %r: %r", raw_name, value)
            return UNRESOLVED
        region = Region(**{name: float(value[name]) for name in _BOUND_FIELDS})
        if not region.is_valid:
            LOGGER.warning("Inverted bounds for %r: %r", raw_name, value)
            return UNRESOLVED
        return region

    if "lat" in value and "lon" in value:
        if not (_is_number(value["lat"]) and _is_number(value["lon"])):
            LOGGER.warning("Non-numeric coordinates for %r: %r", raw_name, value)
            return UNRESOLVED
        return Point(lat=float(value["lat"]), lon=float(value["lon"]))

    LOGGER.warning("Unknown coordinate format for %r: %r", raw_name, value)
    return UNRESOLVED


class LocationResolver:
    """Resolve location names using a cache keyed by normalized name."""

    def __init__(self, cache: Mapping[str, Any]) -> None:
        self._geometries: Dict[str, Geometry] = {}
        for raw_key, value in cache.items():
            key = normalize_location_key(raw_key)
            if key is None:
                LOGGER.warning("Skipping invalid cache key: %r", raw_key)
                continue
            if key in self._geometries:
                LOGGER.debug("Cache key %r collapses onto existing key %r", raw_key, key)
            self._geometries[key] = parse_geometry(raw_key, value)
        LOGGER.info("Location cache ready with %s keys", len(self._geometries))

    def __len__(self) -> int:
        return len(self._geometries)

    def __contains__(self, raw_name: object) -> bool:
        key = normalize_location_key(raw_name)
        return key is not None and key in self._geometries

    def resolve(self, raw_name: Any) -> Resolution:
        """Return Point, Region, Unresolved, or NotFound for a location name.

        The same normalization used for cache keys is applied here, so case
        and surrounding whitespace never cause a miss.
        """

        key = normalize_location_key(raw_name)
        if key is None:
            return NOT_FOUND
        return self._geometries.get(key, NOT_FOUND)

    def geometry_for(self, raw_name: Any) -> Optional[Geometry]:
        """Return usable geometry (Point or Region) or None."""

        resolved = self.resolve(raw_name)
        if isinstance(resolved, (Point, Region)):
            return resolved
        return None

    def resolved_locations(self, message: Message) -> List[str]:
        """Return the message's location names that have usable geometry."""

        return [
            location
            for location in message.locations
            if isinstance(location, str) and self.geometry_for(location) is not None
        ]

    def coverage(self, messages: Iterable[Message]) -> CacheCoverage:
        """Split every mentioned location key into matched/unresolved/missing."""

        result = CacheCoverage()
        for message in messages:
            for location in message.locations:
                key = normalize_location_key(location)
                if key is None:
                    continue
                resolved = self._geometries.get(key, NOT_FOUND)
                if isinstance(resolved, NotFound):
                    result.missing.add(key)
                elif isinstance(resolved, Unresolved):
                    result.unresolved.add(key)
                else:
                    result.matched.add(key)
        return result

    def similar_keys(self, raw_name: Any) -> List[str]:
        """Return cache keys sharing a leading word with the given name.

        Only used to troubleshoot cache misses.
        """

        key = normalize_location_key(raw_name)
        if key is None:
            return []
        first_word = key.split()[0]
        similar: List[str] = []
        for candidate in self._geometries:
            if first_word in candidate or candidate.split()[0] in key:
                similar.append(candidate)
        return sorted(similar)
