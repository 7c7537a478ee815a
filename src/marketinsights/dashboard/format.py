"""Display formatting for market rows (volume, dates, probability bands, links)."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from marketinsights.models import Category, Market
from marketinsights.query.engine import parse_end_date, parse_volume

POLYMARKET_URL = "https://polymarket.com"

_CATEGORY_LABELS = {Category.FINANCE: "Finance", Category.POLITICS: "Politics"}


def fmt_volume(value: Any) -> str:
    n = parse_volume(value)
    if n == 0:
        return "–"
    if n >= 1_000_000:
        return f"${n / 1_000_000:.1f}M"
    if n >= 1_000:
        return f"${n / 1_000:.0f}K"
    return f"${n:.0f}"


def fmt_date(value: Any) -> str:
    if not value:
        return "Open-ended"
    dt = parse_end_date(value)
    if dt is None:
        return "Unknown"
    return f"{dt:%b} {dt.day}, {dt.year}"


def prob_class(p: float) -> str:
    if p >= 90:
        return "very-high"
    if p >= 75:
        return "high"
    if p >= 60:
        return "medium"
    return "low"


def market_url(market: Market) -> str:
    """Outbound link: event slug first, then the market's own slug."""
    slug = (market.event.slug if market.event else None) or market.slug
    return f"{POLYMARKET_URL}/event/{slug}" if slug else POLYMARKET_URL


def category_label(category: Category | str) -> str:
    return _CATEGORY_LABELS.get(Category(category), str(category))


def fmt_count(n: int) -> str:
    if n == 0:
        return "No markets match current filters"
    return f"{n} market{'s' if n != 1 else ''}"


def fmt_updated(last_updated_ms: int | None) -> str:
    if not last_updated_ms:
        return ""
    return f"Updated {datetime.fromtimestamp(last_updated_ms / 1000):%H:%M:%S}"


def fmt_countdown(seconds: int) -> str:
    m, s = divmod(max(0, int(seconds)), 60)
    return f"Next refresh in {m}:{s:02d}"
