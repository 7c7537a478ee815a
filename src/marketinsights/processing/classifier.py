"""Keyword-based category classification of raw Gamma markets."""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Mapping

from marketinsights.models.market import Category

# Checked in declaration order; the first category with a hit wins.
# Matching is plain substring search, so "un " and "eu " keep their trailing space.
CATEGORY_KEYWORDS: Mapping[Category, tuple[str, ...]] = MappingProxyType(
    {
        Category.FINANCE: (
            "finance", "financial", "economics", "economy", "economic",
            "stock", "stocks", "equities", "market", "markets",
            "crypto", "bitcoin", "ethereum", "defi", "blockchain",
            "fed", "federal reserve", "interest rate", "inflation", "cpi", "gdp",
            "recession", "currency", "dollar", "euro", "yen", "pound",
            "oil", "gold", "silver", "commodity", "commodities",
            "trading", "investment", "nasdaq", "s&p", "dow jones",
            "bonds", "treasury", "yield", "etf", "ipo", "earnings",
            "bank", "banking", "hedge fund", "private equity",
        ),
        Category.POLITICS: (
            "politics", "political", "geopolitics",
            "election", "elections", "vote", "voting", "ballot",
            "president", "presidential", "prime minister",
            "congress", "senate", "house", "parliament", "legislation",
            "government", "policy", "democrat", "republican", "party",
            "primary", "campaign", "candidate", "inauguration",
            "war", "military", "sanctions", "treaty",
            "nato", "un ", "united nations", "eu ", "european union",
            "supreme court", "administration", "cabinet",
            "referendum", "constitution", "impeach",
        ),
    }
)


def _first_event(raw: dict[str, Any]) -> dict[str, Any] | None:
    events = raw.get("events")
    if isinstance(events, list) and events and isinstance(events[0], dict):
        return events[0]
    return None


def build_search_text(raw: dict[str, Any]) -> str:
    """Lowercased event category + tag labels/slugs + question, space separated."""
    event = _first_event(raw) or {}
    category = str(event.get("category") or "")
    tags = event.get("tags")
    if not isinstance(tags, list):
        tags = []
    tag_text = " ".join(
        f"{t.get('label') or ''} {t.get('slug') or ''}" for t in tags if isinstance(t, dict)
    )
    question = str(raw.get("question") or "")
    return f"{category} {tag_text} {question}".lower()


def detect_category(
    raw: dict[str, Any],
    keywords: Mapping[Category, tuple[str, ...]] = CATEGORY_KEYWORDS,
) -> Category | None:
    """Return the first category whose keywords occur in the search text, else None."""
    haystack = build_search_text(raw)
    for category, words in keywords.items():
        if any(k in haystack for k in words):
            return category
    return None
