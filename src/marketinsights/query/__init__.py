"""Filter/sort projection of the market set."""

from marketinsights.query.engine import filter_markets, recompute, sort_markets

__all__ = ["filter_markets", "recompute", "sort_markets"]
