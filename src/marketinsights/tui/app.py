"""Textual TUI dashboard - status, filters, market table."""

from __future__ import annotations

import asyncio
from typing import Any

from rich.markup import escape
from textual.app import App, ComposeResult
from textual.css.query import NoMatches
from textual.reactive import reactive
from textual.widgets import DataTable, Footer, Header, Static

from marketinsights.dashboard.format import (
    category_label,
    fmt_count,
    fmt_countdown,
    fmt_date,
    fmt_updated,
    fmt_volume,
    market_url,
    prob_class,
)
from marketinsights.dashboard.manager import DashboardManager
from marketinsights.models import Category, DashboardView, SortKey

_PROB_STYLES = {
    "very-high": "bold green",
    "high": "green",
    "medium": "yellow",
    "low": "red",
}

_SORT_CYCLE = [SortKey.PROBABILITY, SortKey.VOLUME, SortKey.EXPIRY]

_COLUMNS = ("Category", "Yes %", "Event", "Question", "Volume", "Liquidity", "Resolves", "Link")


class StatusPanel(Static):
    """Count, last update, filters, countdown and error banner."""

    count_text = reactive("Loading...")
    updated_text = reactive("")
    filters_text = reactive("")
    countdown_text = reactive("")
    error_text = reactive("")

    def render(self) -> str:
        line = (
            f"[bold]{self.count_text}[/]  |  {self.updated_text}  |  "
            f"{self.filters_text}  |  {self.countdown_text}"
        )
        if self.error_text:
            line += f"\n[bold red]Failed to load markets:[/] {escape(self.error_text)}"
        return line


class MarketTable(DataTable):
    """Visible markets, one row each."""

    def on_mount(self) -> None:
        self.cursor_type = "row"
        self.add_columns(*_COLUMNS)

    def show(self, view: DashboardView) -> None:
        self.clear()
        for m in view.markets:
            style = _PROB_STYLES[prob_class(m.probability)]
            event_title = m.event.title if m.event else ""
            question = m.question or "Untitled market"
            self.add_row(
                category_label(m.category),
                f"[{style}]{m.probability:.1f}%[/]",
                escape(event_title[:40]),
                escape(question[:80]),
                fmt_volume(m.volume),
                fmt_volume(m.liquidity),
                fmt_date(m.end_date),
                escape(market_url(m)),
                key=m.market_id or None,
            )


class MarketInsightsTUI(App[None]):
    """Market Insights TUI - high-probability finance & politics markets."""

    TITLE = "Market Insights"
    BINDINGS = [
        ("q", "quit", "Quit"),
        ("r", "refresh", "Refresh"),
        ("f", "toggle('finance')", "Finance"),
        ("p", "toggle('politics')", "Politics"),
        ("plus,equals_sign", "threshold(5)", "Threshold +5"),
        ("minus", "threshold(-5)", "Threshold -5"),
        ("s", "cycle_sort", "Sort"),
    ]

    def __init__(self, manager: DashboardManager, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._manager = manager
        self._stop_event = asyncio.Event()
        self._refresh_task: asyncio.Task[None] | None = None
        self._unsubscribe = manager.subscribe(self._on_view)

    def compose(self) -> ComposeResult:
        yield Header()
        yield StatusPanel(id="status")
        yield MarketTable(id="markets")
        yield Footer()

    def on_mount(self) -> None:
        self._refresh_task = asyncio.create_task(self._manager.run(stop_event=self._stop_event))
        self.set_interval(1.0, self._tick)

    def _tick(self) -> None:
        self.query_one(StatusPanel).countdown_text = fmt_countdown(self._manager.seconds_until_refresh())

    def _on_view(self, view: DashboardView) -> None:
        try:
            status = self.query_one(StatusPanel)
        except NoMatches:
            return
        if view.loading:
            status.count_text = "Loading..."
            return
        status.count_text = fmt_count(view.total)
        status.updated_text = fmt_updated(view.last_updated)
        active = ", ".join(category_label(c) for c in Category if c in view.filters.categories)
        status.filters_text = (
            f"{active}  >= {view.filters.threshold}%  sort: {view.filters.sort.value}"
        )
        status.error_text = view.error or ""
        self.query_one(MarketTable).show(view)

    async def action_refresh(self) -> None:
        await self._manager.refresh()

    def action_toggle(self, category: str) -> None:
        self._manager.toggle_category(category)

    def action_threshold(self, delta: int) -> None:
        current = self._manager.filters.threshold
        self._manager.set_threshold(min(100, max(0, current + delta)))

    def action_cycle_sort(self) -> None:
        idx = _SORT_CYCLE.index(self._manager.filters.sort)
        self._manager.set_sort(_SORT_CYCLE[(idx + 1) % len(_SORT_CYCLE)])

    async def on_unmount(self) -> None:
        self._unsubscribe()
        self._stop_event.set()
        if self._refresh_task and not self._refresh_task.done():
            self._refresh_task.cancel()
        await self._manager.close()


def run_tui(settings: Any) -> None:
    """Entry point: create the dashboard manager and run the TUI."""
    manager = DashboardManager(settings)
    app = MarketInsightsTUI(manager)
    app.run()
