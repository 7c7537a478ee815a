"""Canonical schema (Pydantic) - Market, Event, FilterState, DashboardView."""

from marketinsights.models.market import Category, EventTag, Market, MarketEvent
from marketinsights.models.state import DashboardView, FilterState, SortKey

__all__ = [
    "Category",
    "EventTag",
    "Market",
    "MarketEvent",
    "FilterState",
    "SortKey",
    "DashboardView",
]
