"""Yes-probability extraction from Gamma outcome prices."""

from __future__ import annotations

import json
import math
from typing import Any


def _parse_prices(value: Any) -> list[Any]:
    """Outcome prices arrive either as a list or as a JSON-encoded list string."""
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except (json.JSONDecodeError, TypeError):
            return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def _float(s: Any) -> float | None:
    if s is None or isinstance(s, bool):
        return None
    try:
        f = float(s)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None


def extract_probability(raw: dict[str, Any]) -> float:
    """First outcome price scaled to 0-100, one decimal place, half-up.

    Returns 0.0 for anything unparsable; callers treat 0 as invalid.
    """
    prices = _parse_prices(raw.get("outcomePrices"))
    if not prices:
        return 0.0
    p = _float(prices[0])
    if p is None:
        return 0.0
    scaled = p * 1000 + 0.5
    if not math.isfinite(scaled):
        return 0.0
    return math.floor(scaled) / 10
