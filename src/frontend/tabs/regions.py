"""Regions tab: aggregated regions, their details, and viewport visibility."""

from __future__ import annotations

import logging
from typing import Any, Optional

from rich.text import Text
from textual import on
from textual.containers import Container, Horizontal, Vertical, VerticalScroll
from textual.widgets import DataTable, Input, Static

from adapters.formatting import (
    clip_text,
    format_relative_time,
    message_body,
    navigation_text,
    region_label,
    tier_text,
)
from core.aggregator import build_map_layers
from core.filters import EventFilter, FilterError, apply_filters
from core.models import Region
from core.spatial import navigation_target, region_details
from core.visibility import plan_visibility
from ..constants import ACCENT_ORANGE, DETAILS_LIMIT
from ..state import StaleRegionTracker
from ..validators import parse_date_input

LOGGER = logging.getLogger(__name__)


def parse_viewport(raw_value: str) -> Optional[Region]:
    """Parse "north,south,east,west"; None when blank or malformed."""

    parts = [part.strip() for part in raw_value.split(",")]
    if len(parts) != 4:
        return None
    try:
        north, south, east, west = (float(part) for part in parts)
    except ValueError:
        return None
    return Region(north=north, south=south, east=east, west=west)


class RegionsTab(Container):
    """Region list with a details panel and a viewport/zoom visibility check."""

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._table_ready = False
        self._stale_regions = StaleRegionTracker()
        # (viewport, zoom) and the visibility computed for it.
        self._plan_cache: tuple[tuple[Region, float], dict[str, tuple[str, str]]] | None = None

    def compose(self):
        with Vertical(id="regions-panel"):
            with Horizontal(id="regions-filters"):
                yield Input(placeholder="start YYYY-MM-DD", id="regions-start")
                yield Input(placeholder="end YYYY-MM-DD", id="regions-end")
                yield Input(placeholder="viewport N,S,E,W", id="regions-viewport")
                yield Input(placeholder="zoom", id="regions-zoom")
            yield Static("", id="regions-error")
            with Horizontal(id="regions-body"):
                with Container(id="regions-left"):
                    yield DataTable(id="regions-table", cursor_type="row")
                with VerticalScroll(id="regions-right"):
                    yield Static("Select a region", id="regions-details")

    def on_mount(self) -> None:
        table = self.query_one("#regions-table", DataTable)
        table.add_column("region", key="region", width=36)
        table.add_column("tier", key="tier", width=8)
        table.add_column("visible", key="visible", width=8)
        table.add_column("layer", key="layer", width=6)
        table.zebra_stripes = True
        self.query_one("#regions-filters").styles.height = 3
        self._table_ready = True
        self.reload_from_state()

    def reload_from_state(self) -> None:
        """Rebuild region layers from scratch for the current date filter."""

        if not self._table_ready:
            return
        start = parse_date_input(self.query_one("#regions-start", Input).value)
        end = parse_date_input(self.query_one("#regions-end", Input).value)
        if start.error or end.error:
            self._set_error(start.error or end.error or "")
            return

        state = self.app.explorer_state
        try:
            messages = apply_filters(
                state.messages, EventFilter(start_date=start.value, end_date=end.value)
            )
        except FilterError as exc:
            self._set_error(str(exc))
            return
        self._set_error("")
        state.layers = build_map_layers(
            messages,
            state.resolver,
            tiers=self.app.tier_config,
            listener=self._stale_regions,
        )
        if not state.layers.regions:
            self._plan_cache = None
        self._refresh_table()

    @on(Input.Changed, "#regions-start")
    @on(Input.Changed, "#regions-end")
    def _on_dates_changed(self, event: Input.Changed) -> None:
        self.reload_from_state()

    @on(Input.Changed, "#regions-viewport")
    @on(Input.Changed, "#regions-zoom")
    def _on_view_changed(self, event: Input.Changed) -> None:
        self._refresh_table()

    def _visibility(self) -> dict[str, tuple[str, str]]:
        """Return region id -> (visible, layer), replanning only when needed."""

        viewport = parse_viewport(self.query_one("#regions-viewport", Input).value)
        try:
            zoom = float(self.query_one("#regions-zoom", Input).value)
        except ValueError:
            return {}
        if viewport is None:
            return {}

        view = (viewport, zoom)
        stale = self._stale_regions.take_stale()
        if not stale and self._plan_cache is not None and self._plan_cache[0] == view:
            return self._plan_cache[1]

        regions = self.app.explorer_state.layers.regions
        plans = plan_visibility(
            viewport,
            zoom,
            [(region.region_id, region.bounds) for region in regions],
            self.app.visibility_config,
        )
        LOGGER.debug("Replanned %s regions (%s changed)", len(plans), len(stale))
        visibility = {
            plan.shape_id: ("yes" if plan.visible else "no", plan.layer or "")
            for plan in plans
        }
        self._plan_cache = (view, visibility)
        return visibility

    def _refresh_table(self) -> None:
        if not self._table_ready:
            return
        visibility = self._visibility()
        table = self.query_one("#regions-table", DataTable)
        table.clear()
        for region in self.app.explorer_state.layers.regions:
            visible, layer = visibility.get(region.region_id, ("", ""))
            table.add_row(
                region_label(region),
                tier_text(region.tier),
                visible,
                layer,
                key=region.region_id,
            )

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        region_id = event.row_key.value if hasattr(event.row_key, "value") else str(event.row_key)
        state = self.app.explorer_state
        region = state.layers.aggregator.get(region_id)
        if region is None:
            return
        details = region_details(region, state.messages, state.resolver)

        body = Text()
        body.append(f"Region: {region.name}\n", style="bold")
        body.append(f"Messages about this region: {details.direct_count}\n")
        body.append(f"Messages from areas within: {details.within_count}\n")
        body.append(f"Total messages: {details.total}\n")
        body.append(f"Channels: {', '.join(details.channels)}\n")
        body.append(f"{navigation_text(navigation_target(region.bounds))}\n\n", style="dim")
        for message, is_direct in details.messages[:DETAILS_LIMIT]:
            label = "About Region" if is_direct else "Within Area"
            body.append(f"[{label}] ", style=ACCENT_ORANGE if is_direct else "#10b981")
            body.append(f"{format_relative_time(message.date)} {message.channel}\n", style="dim")
            body.append(f"{clip_text(message_body(message), 240)}\n\n")
        if details.total > DETAILS_LIMIT:
            body.append(f"... and {details.total - DETAILS_LIMIT} more messages", style="italic")
        self.query_one("#regions-details", Static).update(body)

    def _set_error(self, message: str) -> None:
        self.query_one("#regions-error", Static).update(message)
