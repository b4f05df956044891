"""Events tab: filterable timeline of every loaded message."""

from __future__ import annotations

from typing import Any, Iterable

from rich.text import Text
from textual import on
from textual.containers import Container, Horizontal, Vertical
from textual.widgets import Button, DataTable, Input, Select, Static

from adapters.formatting import clip_text, format_stats, format_timestamp
from core.filters import (
    EventFilter,
    FilterError,
    apply_filters,
    date_bounds,
    group_by_day,
    list_channels,
    timeline_stats,
)
from core.models import Message
from core.resolver import LocationResolver
from ..constants import ACCENT_ORANGE
from ..validators import parse_date_input


def default_date_inputs(messages: Iterable[Message]) -> tuple[str, str]:
    """Return the first and last day of the dataset as input values."""

    bounds = date_bounds(messages)
    if bounds is None:
        return "", ""
    return bounds[0].isoformat(), bounds[1].isoformat()


def timeline_rows(
    messages: Iterable[Message], resolver: LocationResolver
) -> list[tuple[str, tuple[Any, ...]]]:
    """Build (row key, cells) pairs with a header row before each day."""

    rows: list[tuple[str, tuple[Any, ...]]] = []
    for day, day_messages in group_by_day(messages):
        count = len(day_messages)
        rows.append(
            (
                f"day:{day.isoformat()}",
                (
                    Text(day.strftime("%a %Y-%m-%d"), style=f"bold {ACCENT_ORANGE}"),
                    "",
                    Text(f"{count} event{'' if count == 1 else 's'}", style="dim"),
                    "",
                ),
            )
        )
        for message in day_messages:
            rows.append(
                (
                    str(message.message_id),
                    (
                        format_timestamp(message.date),
                        message.channel,
                        clip_text(message.text),
                        ", ".join(resolver.resolved_locations(message)),
                    ),
                )
            )
    return rows


class EventsTab(Container):
    """Timeline with date, channel and fuzzy text filters."""

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._table_ready = False

    def compose(self):
        with Vertical(id="events-panel"):
            with Horizontal(id="events-filters"):
                yield Input(placeholder="search text", id="events-search")
                yield Select([], prompt="All channels", id="events-channel")
                yield Input(placeholder="start YYYY-MM-DD", id="events-start")
                yield Input(placeholder="end YYYY-MM-DD", id="events-end")
                yield Button("Clear", id="events-clear")
            yield Static("", id="events-error")
            yield DataTable(id="events-table", cursor_type="row")
            yield Static("", id="events-stats")

    def on_mount(self) -> None:
        table = self.query_one("#events-table", DataTable)
        table.add_column("date", key="date", width=16)
        table.add_column("channel", key="channel", width=18)
        table.add_column("text", key="text", width=64)
        table.add_column("locations", key="locations", width=28)
        table.zebra_stripes = True
        table.styles.height = "1fr"
        self.query_one("#events-filters").styles.height = 3
        self._table_ready = True
        self.reload_from_state()

    def reload_from_state(self) -> None:
        """Refresh channel choices, reset the date range and re-apply filters."""

        if not self._table_ready:
            return
        messages = self.app.explorer_state.messages
        self.query_one("#events-channel", Select).set_options(
            [(channel, channel) for channel in list_channels(messages)]
        )
        self._reset_dates()
        self._apply()

    def _reset_dates(self) -> None:
        start, end = default_date_inputs(self.app.explorer_state.messages)
        self.query_one("#events-start", Input).value = start
        self.query_one("#events-end", Input).value = end

    @on(Input.Changed)
    def _on_filter_input(self, event: Input.Changed) -> None:
        self._apply()

    @on(Select.Changed, "#events-channel")
    def _on_channel_changed(self, event: Select.Changed) -> None:
        self._apply()

    @on(Button.Pressed, "#events-clear")
    def _on_clear(self) -> None:
        self.query_one("#events-search", Input).value = ""
        self.query_one("#events-channel", Select).value = Select.BLANK
        self._reset_dates()
        self._apply()

    def _current_filter(self) -> EventFilter | None:
        start = parse_date_input(self.query_one("#events-start", Input).value)
        end = parse_date_input(self.query_one("#events-end", Input).value)
        error = start.error or end.error
        if error:
            self._set_error(error)
            return None
        channel = self.query_one("#events-channel", Select).value
        return EventFilter(
            start_date=start.value,
            end_date=end.value,
            channel=None if channel is Select.BLANK else str(channel),
            search_text=self.query_one("#events-search", Input).value,
        )

    def _apply(self) -> None:
        if not self._table_ready:
            return
        event_filter = self._current_filter()
        if event_filter is None:
            return
        state = self.app.explorer_state
        try:
            messages = apply_filters(state.messages, event_filter, self.app.search_config)
        except FilterError as exc:
            self._set_error(str(exc))
            return
        self._set_error("")

        table = self.query_one("#events-table", DataTable)
        table.clear()
        for key, cells in timeline_rows(messages, state.resolver):
            table.add_row(*cells, key=key)
        self.query_one("#events-stats", Static).update(format_stats(timeline_stats(messages)))

    def _set_error(self, message: str) -> None:
        self.query_one("#events-error", Static).update(message)
