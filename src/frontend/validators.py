"""Validation helpers for filter inputs."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass
class DateInputInfo:
    value: date | None
    error: str | None = None


def parse_date_input(raw_value: str) -> DateInputInfo:
    """Parse a YYYY-MM-DD field; blank means "no bound"."""

    raw_value = raw_value.strip()
    if not raw_value:
        return DateInputInfo(None)
    try:
        return DateInputInfo(date.fromisoformat(raw_value))
    except ValueError:
        return DateInputInfo(None, f"invalid date: {raw_value} (use YYYY-MM-DD)")
