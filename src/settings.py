"""Static configuration for geoscope.

All user-editable settings (data locations, search thresholds, tiers,
visibility bands, logging) live in a single JSON file for quick edits
without touching Python.
"""

import json
import os

from dotenv import load_dotenv

from core.config import SearchConfig, TierConfig, VisibilityConfig

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

CONFIG_PATH = os.path.join(PROJECT_ROOT, "config.json")


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _bands(raw_bands: list, default: tuple) -> tuple:
    if not raw_bands:
        return default
    return tuple((float(zoom), float(threshold)) for zoom, threshold in raw_bands)


# .env may override where the data is fetched from without editing config.json.
load_dotenv()

_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Data locations may be local paths or http(s) URLs.
_data = _CONFIG.get("data", {})
MESSAGES_URL = os.getenv("GEOSCOPE_MESSAGES_URL") or _data.get("messages_url", "tagged_messages.json")
CACHE_URL = os.getenv("GEOSCOPE_CACHE_URL") or _data.get("cache_url", "location_cache.json")
HTTP_TIMEOUT_SECONDS = float(_data.get("timeout_seconds", 30))
# Appends ?t=<ms> to URLs so intermediaries never serve a stale dataset.
CACHE_BUST = bool(_data.get("cache_bust", True))

_search = _CONFIG.get("search", {})
SEARCH_CONFIG = SearchConfig(
    similarity_threshold=float(_search.get("similarity_threshold", 0.8)),
    length_tolerance=float(_search.get("length_tolerance", 0.4)),
    fuzzy_min_length=int(_search.get("fuzzy_min_length", 3)),
    prefix_min_length=int(_search.get("prefix_min_length", 2)),
)

# Activity tiers: "medium" and "high" are minimum message counts.
_tiers = _CONFIG.get("tiers", {})
TIER_CONFIG = TierConfig(
    medium=int(_tiers.get("medium", 5)),
    high=int(_tiers.get("high", 10)),
)

# Visibility bands are [zoom, threshold] pairs; see core.config.VisibilityConfig.
_visibility = _CONFIG.get("visibility", {})
_default_visibility = VisibilityConfig()
VISIBILITY_CONFIG = VisibilityConfig(
    span_bands=_bands(_visibility.get("span_bands"), _default_visibility.span_bands),
    area_bands=_bands(_visibility.get("area_bands"), _default_visibility.area_bands),
)

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
