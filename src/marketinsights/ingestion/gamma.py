"""Polymarket Gamma API client - concurrent category-scoped market fetch and merge."""

from __future__ import annotations

import asyncio
from typing import Any, Sequence

import httpx
import structlog

log = structlog.get_logger(__name__)

GAMMA_API_BASE = "https://gamma-api.polymarket.com"


class AggregationError(RuntimeError):
    """Every market query in a fetch round failed."""

    def __init__(self, failures: list[BaseException]):
        self.failures = failures
        detail = "; ".join(str(e) or type(e).__name__ for e in failures)
        super().__init__(f"All {len(failures)} market queries failed: {detail}")


def normalize_market_id(value: Any) -> str | None:
    """Canonical string form of a Gamma market id; numeric 123 and "123" compare equal."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return str(value)
        value = int(value)
    s = str(value).strip()
    return s or None


def build_markets_url(base_url: str, params: dict[str, Any]) -> str:
    """Append the query string by hand so a CORS relay prefix (base containing '?') still works."""
    base = base_url.rstrip("/")
    return f"{base}/markets?{httpx.QueryParams(params)}"


def market_query_params(
    limit: int = 100,
    order: str = "volume",
    tag_slug: str | None = None,
) -> dict[str, Any]:
    params: dict[str, Any] = {
        "active": "true",
        "closed": "false",
        "archived": "false",
        "limit": str(limit),
        "order": order,
        "ascending": "false",
    }
    if tag_slug:
        params["tag_slug"] = tag_slug
    return params


async def fetch_market_page(
    client: httpx.AsyncClient,
    base_url: str = GAMMA_API_BASE,
    limit: int = 100,
    order: str = "volume",
    tag_slug: str | None = None,
) -> list[dict[str, Any]]:
    """One Gamma /markets query. Raises on transport errors and non-2xx status."""
    url = build_markets_url(base_url, market_query_params(limit, order, tag_slug))
    resp = await client.get(url)
    resp.raise_for_status()
    data = resp.json()
    if not isinstance(data, list):
        return []
    return [row for row in data if isinstance(row, dict)]


def merge_unique(batches: Sequence[Sequence[dict[str, Any]]]) -> list[dict[str, Any]]:
    """Flatten batches keeping the first record per id, in first-seen order. Id-less records are skipped."""
    seen: set[str] = set()
    out: list[dict[str, Any]] = []
    for batch in batches:
        for row in batch:
            mid = normalize_market_id(row.get("id"))
            if mid is None or mid in seen:
                continue
            seen.add(mid)
            out.append(row)
    return out


async def load_all_markets(
    client: httpx.AsyncClient,
    base_url: str = GAMMA_API_BASE,
    limit: int = 100,
    tag_slugs: Sequence[str] = ("politics", "finance", "economics", "crypto"),
    order: str = "volume",
) -> list[dict[str, Any]]:
    """Run the unscoped query plus one per tag slug concurrently and merge the successes.

    Failed queries are logged and skipped. Raises AggregationError only if all fail.
    """
    scopes: list[str | None] = [None, *tag_slugs]
    results = await asyncio.gather(
        *(fetch_market_page(client, base_url, limit, order, tag) for tag in scopes),
        return_exceptions=True,
    )
    batches: list[list[dict[str, Any]]] = []
    failures: list[BaseException] = []
    for tag, result in zip(scopes, results):
        if isinstance(result, BaseException):
            if isinstance(result, asyncio.CancelledError):
                raise result
            log.warning("market_query_failed", tag_slug=tag, error=str(result) or type(result).__name__)
            failures.append(result)
        else:
            batches.append(result)
    if not batches:
        raise AggregationError(failures)
    markets = merge_unique(batches)
    log.info("markets_loaded", queries=len(scopes), failed=len(failures), unique=len(markets))
    return markets
