"""Coverage tab: how message locations line up with the location cache."""

from __future__ import annotations

from typing import Any

from textual.containers import Container, Vertical
from textual.widgets import DataTable, Static


class CoverageTab(Container):
    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._table_ready = False

    def compose(self):
        with Vertical(id="coverage-panel"):
            yield Static("", id="coverage-summary")
            yield DataTable(id="coverage-table", cursor_type="row")

    def on_mount(self) -> None:
        table = self.query_one("#coverage-table", DataTable)
        table.add_column("location", key="location", width=32)
        table.add_column("status", key="status", width=12)
        table.add_column("similar keys", key="similar", width=48)
        table.zebra_stripes = True
        table.styles.height = "1fr"
        self._table_ready = True
        self.reload_from_state()

    def reload_from_state(self) -> None:
        if not self._table_ready:
            return
        state = self.app.explorer_state
        coverage = state.resolver.coverage(state.messages)
        self.query_one("#coverage-summary", Static).update(
            f"matched: {len(coverage.matched)} | unresolved: {len(coverage.unresolved)} | "
            f"missing: {len(coverage.missing)}"
        )
        table = self.query_one("#coverage-table", DataTable)
        table.clear()
        for key in sorted(coverage.missing):
            table.add_row(key, "missing", ", ".join(state.resolver.similar_keys(key)), key=f"missing:{key}")
        for key in sorted(coverage.unresolved):
            table.add_row(key, "unresolved", "", key=f"unresolved:{key}")
