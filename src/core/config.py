"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely. Defaults
are empirically tuned values, not derived ones.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class TierConfig:
    """Message-count thresholds for region activity tiers."""

    medium: int = 5
    high: int = 10


@dataclass(frozen=True)
class SearchConfig:
    """Thresholds used by the fuzzy search strategies."""

    similarity_threshold: float = 0.8
    # Candidate tokens whose length differs by more than this share of the
    # query word length are never compared.
    length_tolerance: float = 0.4
    # Words must be longer than these to take part in the strategy.
    fuzzy_min_length: int = 3
    prefix_min_length: int = 2


@dataclass(frozen=True)
class VisibilityConfig:
    """Zoom-band culling thresholds for region shapes.

    - span_bands: (zoom_below, min_span) pairs; the first band whose zoom_below
      exceeds the current zoom hides shapes with either span under min_span.
    - area_bands: (zoom_above, max_relative_area) pairs; the first band whose
      zoom_above is under the current zoom hides shapes covering more than
      max_relative_area of the viewport.
    """

    span_bands: Tuple[Tuple[float, float], ...] = ((9, 0.1), (11, 0.05), (13, 0.01))
    area_bands: Tuple[Tuple[float, float], ...] = ((13, 0.4), (11, 0.6))
