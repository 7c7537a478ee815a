"""Query engine: filter + sort the processed market set for display."""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, Iterable

from marketinsights.models import FilterState, Market, SortKey

# Open-ended markets rank after every dated one under expiry sort
FAR_FUTURE = datetime(9999, 12, 31, tzinfo=timezone.utc)


def parse_volume(value: Any) -> float:
    """Numeric volume; missing, unparsable or non-finite -> 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        v = float(value)
    except (TypeError, ValueError):
        return 0.0
    return v if math.isfinite(v) else 0.0


def parse_end_date(value: Any) -> datetime | None:
    """ISO-8601 end date as an aware datetime (naive -> UTC). None if missing or unparsable."""
    if not value or not isinstance(value, str):
        return None
    try:
        dt = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _expiry_key(m: Market) -> datetime:
    return parse_end_date(m.end_date) or FAR_FUTURE


def filter_markets(markets: Iterable[Market], state: FilterState) -> list[Market]:
    """Category in the active set and probability >= threshold (inclusive)."""
    return [
        m for m in markets if m.category in state.categories and m.probability >= state.threshold
    ]


def sort_markets(markets: Iterable[Market], sort: SortKey) -> list[Market]:
    if sort == SortKey.VOLUME:
        return sorted(markets, key=lambda m: parse_volume(m.volume), reverse=True)
    if sort == SortKey.EXPIRY:
        return sorted(markets, key=_expiry_key)
    return sorted(markets, key=lambda m: m.probability, reverse=True)


def recompute(markets: Iterable[Market], state: FilterState) -> list[Market]:
    """Visible markets for the given state. Pure; call after every state change."""
    return sort_markets(filter_markets(markets, state), state.sort)
