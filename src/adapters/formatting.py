"""Shared display formatting helpers.

Keeping formatting here prevents drift between the CLI and the terminal
browser and keeps labels consistent regardless of surface.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from rich.text import Text

from core.filters import TimelineStats
from core.models import ActivityTier, Message, RegionEntity
from core.spatial import NavigationTarget

TIER_STYLES = {
    ActivityTier.LOW: "#ff6b35",
    ActivityTier.MEDIUM: "#f59e0b",
    ActivityTier.HIGH: "bold #dc2626",
}


def region_label(region: RegionEntity) -> str:
    """Return the tooltip-style label for a region entity."""

    count = region.message_count
    plural = "message" if count == 1 else "messages"
    return f"📍 {region.name} ({count} {plural})"


def tier_text(tier: ActivityTier) -> Text:
    return Text(tier.value, style=TIER_STYLES[tier])


def message_body(message: Message) -> str:
    """Prefer the cleaned text, falling back to the original text."""

    return message.cleaned_text or message.text


def clip_text(value: str, limit: int = 64) -> str:
    value = " ".join(value.split())
    if len(value) <= limit:
        return value
    return value[: limit - 3] + "..."


def format_relative_time(value: datetime, now: Optional[datetime] = None) -> str:
    """Return a compact age such as "5m ago", "3h ago", "2d ago" or "1w ago"."""

    now = now or datetime.now(timezone.utc)
    minutes = int((now - value).total_seconds() // 60)
    if minutes < 60:
        return f"{minutes}m ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h ago"
    days = hours // 24
    if days < 7:
        return f"{days}d ago"
    return f"{days // 7}w ago"


def format_timestamp(value: datetime) -> str:
    return value.astimezone().strftime("%Y-%m-%d %H:%M")


def format_stats(stats: TimelineStats) -> str:
    """Summarize a filtered timeline in one line."""

    if stats.first_date is None or stats.last_date is None:
        date_range = "No events"
    else:
        date_range = (
            f"{stats.first_date.astimezone().strftime('%Y-%m-%d')} - "
            f"{stats.last_date.astimezone().strftime('%Y-%m-%d')}"
        )
    return (
        f"Showing {stats.total} events from {stats.unique_channels} channels | "
        f"Date range: {date_range}"
    )


def navigation_text(target: Optional[NavigationTarget]) -> str:
    """Describe where a map would move to show a location."""

    if target is None:
        return "Map target: none"
    centre = f"{target.center.lat:.4f}, {target.center.lon:.4f}"
    if target.bounds is not None:
        bounds = target.bounds
        return (
            f"Map target: fit N {bounds.north:g} S {bounds.south:g} "
            f"E {bounds.east:g} W {bounds.west:g} (centre {centre})"
        )
    return f"Map target: centre {centre} at zoom {target.zoom}"
