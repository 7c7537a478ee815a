"""Shared factories for raw Gamma records and processed markets."""

from __future__ import annotations

from typing import Any

import pytest

from marketinsights.models import Category, Market


@pytest.fixture
def raw_market():
    def make(
        market_id: Any = "1",
        question: str = "Will Bitcoin close above $100k this year?",
        prices: Any = '["0.85", "0.15"]',
        **extra: Any,
    ) -> dict[str, Any]:
        raw = {"id": market_id, "question": question, "outcomePrices": prices}
        raw.update(extra)
        return raw

    return make


@pytest.fixture
def market():
    def make(
        market_id: str = "1",
        probability: float = 80.0,
        category: Category = Category.FINANCE,
        **extra: Any,
    ) -> Market:
        return Market(market_id=market_id, probability=probability, category=category, **extra)

    return make
