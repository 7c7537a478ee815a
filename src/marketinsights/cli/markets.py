"""Markets subcommand: list (one refresh), watch (refresh on a timer)."""

from __future__ import annotations

import asyncio
import json
import signal
import sys

import typer

from marketinsights.dashboard.format import (
    category_label,
    fmt_count,
    fmt_date,
    fmt_updated,
    fmt_volume,
    market_url,
)
from marketinsights.dashboard.manager import DashboardManager
from marketinsights.models import Category, DashboardView, FilterState, SortKey

app = typer.Typer(help="Fetch, filter and list markets")


def _apply_filters(
    manager: DashboardManager,
    categories: list[Category] | None,
    threshold: int | None,
    sort: SortKey,
) -> None:
    manager.filters = FilterState(
        categories=set(categories) if categories else set(Category),
        threshold=manager.settings.default_threshold if threshold is None else threshold,
        sort=sort,
    )


def _echo_view(view: DashboardView, limit: int, as_json: bool) -> None:
    markets = view.markets[:limit] if limit > 0 else view.markets
    if as_json:
        payload = {
            "total": view.total,
            "last_updated": view.last_updated,
            "error": view.error,
            "markets": [
                {
                    "id": m.market_id,
                    "question": m.question,
                    "category": m.category.value,
                    "probability": m.probability,
                    "volume": m.volume,
                    "liquidity": m.liquidity,
                    "end_date": m.end_date,
                    "url": market_url(m),
                }
                for m in markets
            ],
        }
        typer.echo(json.dumps(payload, indent=2, default=str))
        return
    for m in markets:
        question = (m.question or "Untitled market")[:70]
        typer.echo(
            f"  {m.probability:5.1f}%  {category_label(m.category):<8}  {fmt_volume(m.volume):>8}  "
            f"{fmt_date(m.end_date):<13}  {question}"
        )
    typer.echo(f"{fmt_count(view.total)}  {fmt_updated(view.last_updated)}".rstrip())


@app.command("list")
def list_markets(
    ctx: typer.Context,
    category: list[Category] | None = typer.Option(
        None, "--category", "-c", help="Category to include (repeatable; default all)"
    ),
    threshold: int | None = typer.Option(
        None, "--threshold", "-t", min=0, max=100, help="Minimum Yes probability (default from config)"
    ),
    sort: SortKey = typer.Option(SortKey.PROBABILITY, "--sort", "-s", help="Sort order"),
    limit: int = typer.Option(0, "--limit", "-n", help="Max rows to print (0 = all)"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
) -> None:
    """Fetch markets once from the Gamma API and print the filtered, sorted list."""
    settings = ctx.obj["settings"]
    manager = DashboardManager(settings)
    _apply_filters(manager, category, threshold, sort)

    async def once() -> DashboardView | None:
        try:
            return await manager.refresh()
        finally:
            await manager.close()

    view = asyncio.run(once())
    if view is None:
        raise typer.Exit(1)
    if view.error:
        typer.echo(f"Failed to load markets: {view.error}", err=True)
        raise typer.Exit(1)
    _echo_view(view, limit, as_json)


@app.command("watch")
def watch(
    ctx: typer.Context,
    category: list[Category] | None = typer.Option(
        None, "--category", "-c", help="Category to include (repeatable; default all)"
    ),
    threshold: int | None = typer.Option(
        None, "--threshold", "-t", min=0, max=100, help="Minimum Yes probability (default from config)"
    ),
    sort: SortKey = typer.Option(SortKey.PROBABILITY, "--sort", "-s", help="Sort order"),
    limit: int = typer.Option(20, "--limit", "-n", help="Max rows to print per refresh (0 = all)"),
) -> None:
    """Refresh on the configured interval and print each result (Ctrl+C to stop)."""
    settings = ctx.obj["settings"]
    manager = DashboardManager(settings)
    _apply_filters(manager, category, threshold, sort)

    def on_view(view: DashboardView) -> None:
        if view.loading:
            return
        if view.error:
            typer.echo(f"Failed to load markets: {view.error}", err=True)
            if not view.markets:
                return
        _echo_view(view, limit, as_json=False)

    manager.subscribe(on_view)
    stop_event = asyncio.Event()

    def shutdown() -> None:
        stop_event.set()

    loop = asyncio.new_event_loop()
    if sys.platform != "win32":
        loop.add_signal_handler(signal.SIGINT, shutdown)
        loop.add_signal_handler(signal.SIGTERM, shutdown)
    try:
        typer.echo(f"Watching markets every {settings.refresh_interval_ms // 1000}s (Ctrl+C to stop)...")
        loop.run_until_complete(manager.run(stop_event=stop_event))
    except KeyboardInterrupt:
        pass
    finally:
        loop.run_until_complete(manager.close())
        loop.close()
    typer.echo("Stopped.")
