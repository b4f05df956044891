"""Helpers for working with location keys."""

from __future__ import annotations

from typing import Any, Optional


def normalize_location_key(raw: Any) -> Optional[str]:
    """Return the canonical lookup key for a raw location name.

    None marks an invalid entry (not a string, or empty after trimming);
    callers skip it.
    """

    if not isinstance(raw, str):
        return None
    key = raw.strip().lower()
    if not key:
        return None
    return key
