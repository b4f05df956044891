from __future__ import annotations

from core.config import VisibilityConfig
from core.models import Region
from core.visibility import (
    BACK,
    FRONT,
    max_relative_area_for_zoom,
    min_span_for_zoom,
    plan_visibility,
    relative_area,
)

VIEWPORT = Region(north=32, south=31, east=35, west=34)


def _box(span: float) -> Region:
    return Region(north=31.0 + span, south=31.0, east=34.0 + span, west=34.0)


def _by_id(plans):
    return {plan.shape_id: plan for plan in plans}


def test_zoom_bands_follow_the_defaults() -> None:
    config = VisibilityConfig()
    assert min_span_for_zoom(8, config) == 0.1
    assert min_span_for_zoom(10, config) == 0.05
    assert min_span_for_zoom(12, config) == 0.01
    assert min_span_for_zoom(13, config) is None
    assert max_relative_area_for_zoom(14, config) == 0.4
    assert max_relative_area_for_zoom(12, config) == 0.6
    assert max_relative_area_for_zoom(11, config) is None


def test_small_shape_hidden_when_zoomed_out() -> None:
    plans = _by_id(plan_visibility(VIEWPORT, 8, [("tiny", _box(0.05))]))
    assert not plans["tiny"].visible
    assert plans["tiny"].rank is None
    assert plans["tiny"].layer is None


def test_large_shape_hidden_when_zoomed_in() -> None:
    plans = _by_id(plan_visibility(VIEWPORT, 14, [("big", _box(0.7))]))
    assert plans["big"].relative_area > 0.4
    assert not plans["big"].visible


def test_mid_zoom_keeps_both_extremes() -> None:
    plans = _by_id(plan_visibility(VIEWPORT, 11, [("small", _box(0.06)), ("big", _box(0.9))]))
    assert plans["small"].visible
    assert plans["big"].visible


def test_smaller_half_is_painted_in_front() -> None:
    shapes = [
        ("large", _box(0.5)),
        ("small", _box(0.2)),
        ("medium", _box(0.3)),
    ]
    plans = plan_visibility(VIEWPORT, 11, shapes)

    assert [plan.shape_id for plan in plans] == ["small", "medium", "large"]
    by_id = _by_id(plans)
    assert by_id["small"].layer == FRONT
    assert by_id["medium"].layer == FRONT
    assert by_id["large"].layer == BACK
    assert (by_id["large"].rank, by_id["medium"].rank, by_id["small"].rank) == (0, 1, 2)


def test_every_front_shape_paints_above_every_back_shape() -> None:
    shapes = [(f"shape_{index}", _box(0.1 + index * 0.05)) for index in range(6)]
    plans = [plan for plan in plan_visibility(VIEWPORT, 11, shapes) if plan.visible]
    front_ranks = [plan.rank for plan in plans if plan.layer == FRONT]
    back_ranks = [plan.rank for plan in plans if plan.layer == BACK]
    assert len(front_ranks) == 3
    assert min(front_ranks) > max(back_ranks)


def test_degenerate_viewport_disables_area_culling() -> None:
    flat = Region(north=31, south=31, east=35, west=34)
    assert relative_area(_box(0.9), flat) == 0.0
    plans = _by_id(plan_visibility(flat, 14, [("big", _box(0.9))]))
    assert plans["big"].visible


def test_invalid_bounds_are_never_shown() -> None:
    inverted = Region(north=31, south=32, east=35, west=34)
    plans = _by_id(plan_visibility(VIEWPORT, 14, [("inverted", inverted)]))
    assert not plans["inverted"].visible


def test_empty_shape_set() -> None:
    assert plan_visibility(VIEWPORT, 10, []) == []
