"""Viewport culling and paint order for region shapes (core domain).

Small regions nested inside larger ones must stay visible and clickable, so
the planner hides shapes that are too small for the zoom level or too large
for the viewport, and paints the smaller half of the survivors on top.

The plan is a pure function of (viewport, zoom, shapes). Callers recompute it
on every viewport/zoom change and whenever the shape set changes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from core.config import VisibilityConfig
from core.models import Region

FRONT = "front"
BACK = "back"


@dataclass(frozen=True)
class ShapePlan:
    shape_id: str
    visible: bool
    # Paint position among visible shapes: 0 is bottom-most.
    rank: Optional[int]
    layer: Optional[str]
    lat_span: float
    lon_span: float
    area: float
    relative_area: float


def relative_area(shape: Region, viewport: Region) -> float:
    """Fraction of the viewport's span product covered by the shape.

    Returns 0.0 for a degenerate viewport, which disables area culling.
    """

    if viewport.lat_span <= 0 or viewport.lon_span <= 0:
        return 0.0
    return (shape.lat_span / viewport.lat_span) * (shape.lon_span / viewport.lon_span)


def min_span_for_zoom(zoom: float, config: VisibilityConfig) -> Optional[float]:
    for zoom_below, min_span in config.span_bands:
        if zoom < zoom_below:
            return min_span
    return None


def max_relative_area_for_zoom(zoom: float, config: VisibilityConfig) -> Optional[float]:
    for zoom_above, max_area in config.area_bands:
        if zoom > zoom_above:
            return max_area
    return None


def _is_shown(shape: Region, rel_area: float, zoom: float, config: VisibilityConfig) -> bool:
    if not shape.is_valid:
        return False
    min_span = min_span_for_zoom(zoom, config)
    if min_span is not None and (shape.lat_span < min_span or shape.lon_span < min_span):
        return False
    max_area = max_relative_area_for_zoom(zoom, config)
    if max_area is not None and rel_area > max_area:
        return False
    return True


def plan_visibility(
    viewport: Region,
    zoom: float,
    shapes: Iterable[Tuple[str, Region]],
    config: Optional[VisibilityConfig] = None,
) -> List[ShapePlan]:
    """Classify every shape as shown/hidden and assign a paint rank.

    Plans come back in ascending-area order (ties keep input order).
    """

    config = config or VisibilityConfig()
    ordered = sorted(shapes, key=lambda item: item[1].area)

    visible_ids = [
        shape_id
        for shape_id, shape in ordered
        if _is_shown(shape, relative_area(shape, viewport), zoom, config)
    ]
    # The smaller half (rounded up) goes to the front layer.
    front_count = (len(visible_ids) + 1) // 2
    front_ids = visible_ids[:front_count]
    back_ids = visible_ids[front_count:]

    # Back to front: larger shapes first, smallest shape painted last.
    paint_order = list(reversed(back_ids)) + list(reversed(front_ids))
    ranks = {shape_id: rank for rank, shape_id in enumerate(paint_order)}
    front_set = set(front_ids)

    plans: List[ShapePlan] = []
    for shape_id, shape in ordered:
        rank = ranks.get(shape_id)
        if rank is None:
            layer = None
        elif shape_id in front_set:
            layer = FRONT
        else:
            layer = BACK
        plans.append(
            ShapePlan(
                shape_id=shape_id,
                visible=rank is not None,
                rank=rank,
                layer=layer,
                lat_span=shape.lat_span,
                lon_span=shape.lon_span,
                area=shape.area,
                relative_area=relative_area(shape, viewport),
            )
        )
    return plans
