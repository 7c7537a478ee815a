"""FilterState and DashboardView - user-mutable filter state and the renderer payload."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from marketinsights.models.market import Category, Market


class SortKey(str, Enum):
    PROBABILITY = "probability"
    VOLUME = "volume"
    EXPIRY = "expiry"


def _default_categories() -> set[Category]:
    return {Category.FINANCE, Category.POLITICS}


class FilterState(BaseModel):
    """Active categories, probability threshold and sort key.

    Mutators return True when the state changed. Invalid transitions (dropping
    the last active category, out-of-range threshold, unknown sort key) are
    rejected and leave the state as it was.
    """

    categories: set[Category] = Field(default_factory=_default_categories)
    threshold: int = Field(70, ge=0, le=100)
    sort: SortKey = SortKey.PROBABILITY

    def toggle_category(self, category: Category | str) -> bool:
        try:
            cat = Category(category)
        except ValueError:
            return False
        if cat in self.categories:
            if len(self.categories) <= 1:
                return False
            self.categories = self.categories - {cat}
        else:
            self.categories = self.categories | {cat}
        return True

    def set_threshold(self, threshold: int) -> bool:
        if isinstance(threshold, bool) or not isinstance(threshold, int):
            return False
        if not 0 <= threshold <= 100 or threshold == self.threshold:
            return False
        self.threshold = threshold
        return True

    def set_sort(self, sort: SortKey | str) -> bool:
        try:
            key = SortKey(sort)
        except ValueError:
            return False
        if key == self.sort:
            return False
        self.sort = key
        return True


class DashboardView(BaseModel):
    """What a renderer receives after each refresh or filter change."""

    markets: list[Market] = Field(default_factory=list)
    total: int = 0
    universe: int = 0  # size of the full processed market set
    last_updated: int | None = None  # ms epoch of last successful refresh
    error: str | None = None
    loading: bool = False
    filters: FilterState = Field(default_factory=FilterState)
