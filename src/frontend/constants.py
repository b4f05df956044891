"""Shared constants for the Textual UI."""

from __future__ import annotations

ACCENT_ORANGE = "#ff6b35"
DETAILS_LIMIT = 20
