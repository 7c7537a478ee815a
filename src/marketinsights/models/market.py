"""Market, MarketEvent, EventTag - canonical entities derived from Gamma API records."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class Category(str, Enum):
    """Dashboard categories, in classification precedence order."""

    FINANCE = "finance"
    POLITICS = "politics"


class EventTag(BaseModel):
    """Tag attached to a Gamma event (label + slug)."""

    label: str = ""
    slug: str = ""


class MarketEvent(BaseModel):
    """Event grouping one or more markets; carries category/tag metadata."""

    title: str = ""
    category: str | None = None
    slug: str | None = None
    tags: list[EventTag] = Field(default_factory=list)

    @classmethod
    def from_raw(cls, raw: Any) -> MarketEvent | None:
        """Lenient parse of a raw event dict. Non-dict input returns None."""
        if not isinstance(raw, dict):
            return None
        tags = []
        raw_tags = raw.get("tags")
        for t in raw_tags if isinstance(raw_tags, list) else []:
            if isinstance(t, dict):
                tags.append(EventTag(label=str(t.get("label") or ""), slug=str(t.get("slug") or "")))
        category = raw.get("category")
        slug = raw.get("slug")
        return cls(
            title=str(raw.get("title") or ""),
            category=str(category) if category else None,
            slug=str(slug) if slug else None,
            tags=tags,
        )


class Market(BaseModel):
    """Processed market: raw Gamma record plus computed probability and category."""

    market_id: str
    question: str = ""
    probability: float = Field(..., gt=0, lt=100, description="Yes probability in (0, 100)")
    category: Category
    volume: Any = None  # raw value; parsed at sort/format time
    liquidity: Any = None
    end_date: str | None = None
    slug: str | None = None
    closed: bool = False
    archived: bool = False
    event: MarketEvent | None = None
    raw: dict[str, Any] = Field(default_factory=dict)
