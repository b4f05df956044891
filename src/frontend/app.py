"""Main Textual app for the geoscope browser."""

from __future__ import annotations

import logging
from typing import Any

from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Center, Container, Horizontal, Vertical
from textual.css.query import NoMatches
from textual.widgets import Button, ContentSwitcher, Footer, Static, Tab, Tabs

import settings
from adapters.json_source import DatasetLoadError
from core.aggregator import MapLayers, RegionAggregator
from core.ports import DatasetSource
from core.resolver import LocationResolver
from .constants import ACCENT_ORANGE
from .state import ExplorerState
from .tabs.coverage import CoverageTab
from .tabs.events import EventsTab
from .tabs.regions import RegionsTab

LOGGER = logging.getLogger(__name__)


class ExplorerApp(App):
    """Browser over the loaded dataset with Events, Regions and Coverage tabs."""

    def __init__(self, source: DatasetSource, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._source = source
        self.explorer_state = ExplorerState()
        self.search_config = settings.SEARCH_CONFIG
        self.tier_config = settings.TIER_CONFIG
        self.visibility_config = settings.VISIBILITY_CONFIG

    BINDINGS = [
        ("ctrl+r", "reload_data", "Reload"),
        ("q", "quit", "Quit"),
    ]

    CSS_PATH = "app.tcss"

    def compose(self) -> ComposeResult:
        with Container(id="header"):
            with Horizontal(id="header-row"):
                with Vertical(id="header-left"):
                    yield Static(self._title_text(), id="title")
                    yield Static("", id="header-counts", classes="subtle")
                with Vertical(id="header-right"):
                    yield Static("", id="header-status")
                    yield Button("Reload", id="reload-btn")

        with Container(id="tabs-bar"):
            with Center(id="tabs-center"):
                yield Tabs(
                    Tab("Events", id="events"),
                    Tab("Regions", id="regions"),
                    Tab("Coverage", id="coverage"),
                    id="tabs",
                )

        with ContentSwitcher(id="content"):
            yield EventsTab(id="events")
            yield RegionsTab(id="regions")
            yield CoverageTab(id="coverage")
        yield Footer()

    def on_mount(self) -> None:
        self._load_data()
        self._set_active_tab("events")

    def on_tabs_tab_activated(self, event: Tabs.TabActivated) -> None:
        tab_id = event.tab.id or ""
        if not tab_id:
            label = event.tab.label
            if hasattr(label, "plain"):
                label = label.plain
            tab_id = str(label).strip().lower()
        self._set_active_tab(tab_id)

    def _set_active_tab(self, tab_id: str) -> None:
        switcher = self.query_one("#content", ContentSwitcher)
        switcher.current = tab_id

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "reload-btn":
            self.action_reload_data()

    def action_reload_data(self) -> None:
        self._load_data()

    def _load_data(self) -> None:
        """Load the dataset; on failure keep an empty state and report once."""

        state = self.explorer_state
        try:
            dataset = self._source.load()
        except DatasetLoadError as exc:
            LOGGER.error("Dataset load failed: %s", exc)
            state.messages = []
            state.resolver = LocationResolver({})
            state.error = str(exc)
        else:
            state.messages = dataset.messages
            state.resolver = LocationResolver(dataset.location_cache)
            state.error = None
        state.layers = MapLayers(aggregator=RegionAggregator(tiers=self.tier_config))
        self._refresh_header()
        self._refresh_tabs()

    def _refresh_header(self) -> None:
        state = self.explorer_state
        status = self.query_one("#header-status", Static)
        if state.error:
            status.update(Text(f"data: error - {state.error}", style="bold red"))
        else:
            status.update("data: loaded")
        self.query_one("#header-counts", Static).update(
            f"messages: {len(state.messages)} | cached locations: {len(state.resolver)}"
        )

    def _refresh_tabs(self) -> None:
        for tab_type in (EventsTab, RegionsTab, CoverageTab):
            try:
                tab = self.query_one(tab_type)
            except NoMatches:
                continue
            tab.reload_from_state()

    @staticmethod
    def _title_text() -> Text:
        return Text.assemble(
            ("GEO", ACCENT_ORANGE),
            ("SCOPE > Explorer", "bold"),
        )
