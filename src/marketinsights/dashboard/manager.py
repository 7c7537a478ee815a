"""Dashboard orchestrator - refresh cycle, filter state and view publishing."""

from __future__ import annotations

import asyncio
import time
from typing import Callable

import httpx
import structlog

from marketinsights.config import Settings
from marketinsights.ingestion.gamma import load_all_markets
from marketinsights.models import Category, DashboardView, FilterState, Market, SortKey
from marketinsights.processing import process_markets
from marketinsights.query import recompute

log = structlog.get_logger(__name__)

ViewCallback = Callable[[DashboardView], None]


class DashboardManager:
    """Holds the market set and filter state; runs fetch -> process -> publish on a timer."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None):
        self.settings = settings
        self.filters = FilterState(threshold=settings.default_threshold)
        self.markets: list[Market] = []
        self.last_updated: int | None = None
        self.last_error: str | None = None
        self.loading = False
        self._client = client
        self._owns_client = client is None
        self._subscribers: list[ViewCallback] = []
        self._next_refresh_at: float | None = None
        self._refresh_count = 0

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.settings.request_timeout_sec)
        return self._client

    # --- renderer boundary ---

    def subscribe(self, callback: ViewCallback) -> Callable[[], None]:
        """Register a renderer; returns a function that unregisters it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def view(self) -> DashboardView:
        visible = recompute(self.markets, self.filters)
        return DashboardView(
            markets=visible,
            total=len(visible),
            universe=len(self.markets),
            last_updated=self.last_updated,
            error=self.last_error,
            loading=self.loading,
            filters=self.filters.model_copy(deep=True),
        )

    def _publish(self) -> DashboardView:
        view = self.view()
        for callback in list(self._subscribers):
            try:
                callback(view)
            except Exception as e:
                log.warning("renderer_callback_failed", error=str(e))
        return view

    # --- filter mutations ---

    def set_threshold(self, threshold: int) -> bool:
        changed = self.filters.set_threshold(threshold)
        if changed:
            self._publish()
        return changed

    def set_sort(self, sort: SortKey | str) -> bool:
        changed = self.filters.set_sort(sort)
        if changed:
            self._publish()
        return changed

    def toggle_category(self, category: Category | str) -> bool:
        changed = self.filters.toggle_category(category)
        if changed:
            self._publish()
        return changed

    # --- refresh cycle ---

    async def refresh(self) -> DashboardView | None:
        """One fetch -> process -> publish cycle. No-op (returns None) if one is already running."""
        if self.loading:
            log.debug("refresh_skipped", reason="in_progress")
            return None
        self.loading = True
        self._refresh_count += 1
        self._publish()
        try:
            raw = await load_all_markets(
                self._get_client(),
                base_url=self.settings.api_base,
                limit=self.settings.market_limit,
                tag_slugs=self.settings.tag_slugs,
                order=self.settings.order,
            )
            self.markets = process_markets(raw)
            self.last_updated = int(time.time() * 1000)
            self.last_error = None
            log.info("refresh_complete", raw=len(raw), markets=len(self.markets))
        except Exception as e:
            # Previous market set stays visible
            self.last_error = str(e) or type(e).__name__
            log.error("refresh_failed", error=self.last_error, stale_markets=len(self.markets))
        finally:
            self.loading = False
        return self._publish()

    def seconds_until_refresh(self) -> int:
        """Whole seconds until the next scheduled refresh (0 if none scheduled)."""
        if self._next_refresh_at is None:
            return 0
        return max(0, int(round(self._next_refresh_at - time.monotonic())))

    async def run(self, stop_event: asyncio.Event | None = None) -> None:
        """Refresh now and then every refresh_interval_ms until stop_event is set."""
        stop = stop_event or asyncio.Event()
        interval = self.settings.refresh_interval_ms / 1000
        log.info("dashboard_started", interval_sec=interval, api_base=self.settings.api_base)
        while not stop.is_set():
            await self.refresh()
            self._next_refresh_at = time.monotonic() + interval
            try:
                await asyncio.wait_for(stop.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass
        self._next_refresh_at = None
        log.info("dashboard_stopped", refreshes=self._refresh_count)

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
