"""Timeline filtering, grouping and stats (core domain)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from core.config import SearchConfig
from core.models import Message
from core.search import matches


class FilterError(ValueError):
    """Raised for filter input that cannot describe any time window."""


@dataclass(frozen=True)
class EventFilter:
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    channel: Optional[str] = None
    search_text: str = ""


@dataclass(frozen=True)
class TimelineStats:
    total: int
    unique_channels: int
    first_date: Optional[datetime]
    last_date: Optional[datetime]


def date_window(
    start_date: Optional[date], end_date: Optional[date]
) -> Optional[Tuple[datetime, datetime]]:
    """Return the inclusive UTC window covered by the given day(s).

    A single date selects that whole day; no dates means no window.
    """

    if start_date is None and end_date is None:
        return None
    first = start_date or end_date
    last = end_date or start_date
    if first > last:
        raise FilterError("Start date can't be after end date.")
    return (
        datetime.combine(first, time.min, tzinfo=timezone.utc),
        datetime.combine(last, time.max, tzinfo=timezone.utc),
    )


def sort_newest_first(messages: Iterable[Message]) -> List[Message]:
    return sorted(messages, key=lambda message: message.date, reverse=True)


def apply_filters(
    messages: Iterable[Message],
    event_filter: EventFilter,
    search_config: Optional[SearchConfig] = None,
) -> List[Message]:
    """Apply the date window, channel and search text; newest first."""

    window = date_window(event_filter.start_date, event_filter.end_date)
    search_text = event_filter.search_text.strip()

    selected: List[Message] = []
    for message in messages:
        if window is not None and not window[0] <= message.date <= window[1]:
            continue
        if event_filter.channel and message.channel != event_filter.channel:
            continue
        if search_text and not matches(message, search_text, search_config):
            continue
        selected.append(message)
    return sort_newest_first(selected)


def list_channels(messages: Iterable[Message]) -> List[str]:
    return sorted({message.channel for message in messages})


def date_bounds(messages: Iterable[Message]) -> Optional[Tuple[date, date]]:
    """Return the first and last UTC day present, for date pickers."""

    days = [message.date.astimezone(timezone.utc).date() for message in messages]
    if not days:
        return None
    return min(days), max(days)


def timeline_stats(messages: Iterable[Message]) -> TimelineStats:
    messages = list(messages)
    if not messages:
        return TimelineStats(total=0, unique_channels=0, first_date=None, last_date=None)
    dates = [message.date for message in messages]
    return TimelineStats(
        total=len(messages),
        unique_channels=len({message.channel for message in messages}),
        first_date=min(dates),
        last_date=max(dates),
    )


def group_by_day(messages: Iterable[Message]) -> List[Tuple[date, List[Message]]]:
    """Group messages by UTC day, newest day first, keeping order inside a day."""

    groups: Dict[date, List[Message]] = {}
    for message in messages:
        day = message.date.astimezone(timezone.utc).date()
        groups.setdefault(day, []).append(message)
    return sorted(groups.items(), key=lambda item: item[0], reverse=True)
