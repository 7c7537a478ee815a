"""Dashboard manager: refresh cycle, stale data on failure, re-entrancy, timer loop."""

import asyncio

import httpx
import pytest

from marketinsights.config import Settings
from marketinsights.dashboard.manager import DashboardManager
from marketinsights.models import Category, SortKey

RAW_MARKETS = [
    {"id": "1", "question": "Will Bitcoin reach $150k?", "outcomePrices": '["0.91", "0.09"]', "volume": "500"},
    {"id": "2", "question": "Who will win the Senate race in Ohio?", "outcomePrices": '["0.75", "0.25"]', "volume": "9000"},
    {"id": "3", "question": "Will the Fed cut rates?", "outcomePrices": '["0.40", "0.60"]'},
    {"id": "4", "question": "Will it rain in London tomorrow?", "outcomePrices": '["0.95", "0.05"]'},
]


@pytest.fixture
def settings():
    return Settings.from_dict({"api": {"base": "https://gamma.test"}})


def _ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json=RAW_MARKETS)


def _fail(request: httpx.Request) -> httpx.Response:
    return httpx.Response(503)


class Switch:
    """Mock handler whose behaviour can be flipped between refreshes."""

    def __init__(self) -> None:
        self.handler = _ok
        self.calls = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        return self.handler(request)


def _manager(settings, handler) -> DashboardManager:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), trust_env=False)
    return DashboardManager(settings, client=client)


def test_refresh_builds_market_set_and_view(settings):
    manager = _manager(settings, _ok)
    view = asyncio.run(manager.refresh())
    assert view is not None
    assert view.error is None
    assert view.loading is False
    assert view.last_updated is not None
    assert view.universe == 3  # rain market has no category
    # default threshold 70 drops the 40% market
    assert [m.market_id for m in view.markets] == ["1", "2"]
    assert view.total == 2


def test_total_failure_keeps_stale_markets(settings):
    switch = Switch()
    manager = _manager(settings, switch)
    views = []
    manager.subscribe(views.append)

    first = asyncio.run(manager.refresh())
    stamp = first.last_updated
    switch.handler = _fail
    second = asyncio.run(manager.refresh())

    assert second.error is not None
    assert "503" in second.error
    assert [m.market_id for m in second.markets] == ["1", "2"]
    assert second.last_updated == stamp
    assert views[-1].error == second.error
    assert switch.calls == 10


def test_total_failure_without_previous_data(settings):
    manager = _manager(settings, _fail)
    view = asyncio.run(manager.refresh())
    assert view.error is not None
    assert view.markets == []
    assert view.last_updated is None


def test_success_clears_previous_error(settings):
    switch = Switch()
    switch.handler = _fail
    manager = _manager(settings, switch)
    asyncio.run(manager.refresh())
    switch.handler = _ok
    view = asyncio.run(manager.refresh())
    assert view.error is None
    assert view.total == 2


def test_concurrent_refresh_is_noop(settings):
    async def go():
        gate = asyncio.Event()
        calls = []

        async def slow(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            await gate.wait()
            return httpx.Response(200, json=RAW_MARKETS)

        manager = _manager(settings, slow)
        first = asyncio.create_task(manager.refresh())
        await asyncio.sleep(0)
        assert manager.loading is True
        assert await manager.refresh() is None
        gate.set()
        view = await first
        return view, len(calls)

    view, calls = asyncio.run(go())
    assert view is not None and view.total == 2
    assert calls == 5


def test_filter_mutations_publish_only_on_change(settings):
    manager = _manager(settings, _ok)
    asyncio.run(manager.refresh())
    views = []
    manager.subscribe(views.append)

    assert manager.set_threshold(90) is True
    assert [m.market_id for m in views[-1].markets] == ["1"]

    assert manager.toggle_category(Category.FINANCE) is True
    assert views[-1].markets == []
    assert manager.toggle_category(Category.POLITICS) is False  # last one stays

    assert manager.set_sort(SortKey.VOLUME) is True
    assert manager.set_sort(SortKey.VOLUME) is False
    assert len(views) == 3


def test_unsubscribe_and_failing_subscriber(settings):
    manager = _manager(settings, _ok)
    seen = []

    def broken(view):
        raise RuntimeError("renderer exploded")

    manager.subscribe(broken)
    unsubscribe = manager.subscribe(seen.append)
    view = asyncio.run(manager.refresh())
    assert view is not None and view.total == 2
    count = len(seen)
    unsubscribe()
    manager.set_threshold(10)
    assert len(seen) == count


def test_default_threshold_from_settings():
    settings = Settings.from_dict({"dashboard": {"default_threshold": 35}})
    manager = _manager(settings, _ok)
    assert manager.filters.threshold == 35
    view = asyncio.run(manager.refresh())
    assert view.total == 3


def test_run_loop_survives_failures(settings):
    fast = Settings.from_dict({"api": {"base": "https://gamma.test"}, "dashboard": {"refresh_interval_ms": 10}})
    switch = Switch()
    switch.handler = _fail
    manager = _manager(fast, switch)

    async def go():
        stop = asyncio.Event()
        done = []

        def on_view(view):
            if not view.loading:
                done.append(view)
                if len(done) >= 3:
                    stop.set()

        manager.subscribe(on_view)
        await asyncio.wait_for(manager.run(stop_event=stop), timeout=5)
        return done

    done = asyncio.run(go())
    assert len(done) >= 3
    assert all(v.error for v in done)
    assert manager.seconds_until_refresh() == 0


def test_malformed_record_does_not_fail_refresh(settings):
    bad = [
        {"id": "9", "question": "Will Bitcoin reach $1M?", "outcomePrices": ["1e306", "0"]},
        {"id": "8", "question": "Will the Senate act?", "outcomePrices": ["0.8", "0.2"], "events": [{"tags": 5}]},
    ]

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=RAW_MARKETS + bad)

    view = asyncio.run(_manager(settings, handler).refresh())
    assert view.error is None
    assert [m.market_id for m in view.markets] == ["1", "8", "2"]
