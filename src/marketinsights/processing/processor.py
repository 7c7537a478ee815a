"""Raw Gamma markets -> canonical Market set (annotate + filter pass)."""

from __future__ import annotations

from typing import Any, Iterable

import structlog

from marketinsights.ingestion.gamma import normalize_market_id
from marketinsights.models import Category, Market, MarketEvent
from marketinsights.processing.classifier import detect_category
from marketinsights.processing.probability import extract_probability

log = structlog.get_logger(__name__)


def is_valid_probability(p: float) -> bool:
    return 0 < p < 100


def to_market(raw: dict[str, Any], probability: float, category: Category) -> Market:
    """Build a Market from a raw record that already passed the filters."""
    events = raw.get("events")
    event = MarketEvent.from_raw(events[0]) if isinstance(events, list) and events else None
    end_date = raw.get("endDate")
    slug = raw.get("slug")
    return Market(
        market_id=normalize_market_id(raw.get("id")) or "",
        question=str(raw.get("question") or ""),
        probability=probability,
        category=category,
        volume=raw.get("volume"),
        liquidity=raw.get("liquidity"),
        end_date=str(end_date) if end_date else None,
        slug=str(slug) if slug else None,
        closed=bool(raw.get("closed")),
        archived=bool(raw.get("archived")),
        event=event,
        raw=raw,
    )


def process_markets(raw_markets: Iterable[Any]) -> list[Market]:
    """Keep categorized, open markets with a probability strictly inside (0, 100). Order preserved."""
    out: list[Market] = []
    dropped = 0
    for raw in raw_markets:
        if not isinstance(raw, dict):
            dropped += 1
            continue
        probability = extract_probability(raw)
        category = detect_category(raw)
        if (
            category is None
            or not is_valid_probability(probability)
            or raw.get("closed")
            or raw.get("archived")
        ):
            dropped += 1
            continue
        out.append(to_market(raw, probability, category))
    log.debug("markets_processed", kept=len(out), dropped=dropped)
    return out
