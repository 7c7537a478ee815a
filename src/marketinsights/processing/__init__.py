"""Probability extraction, category classification and the market processing pass."""

from marketinsights.processing.classifier import CATEGORY_KEYWORDS, build_search_text, detect_category
from marketinsights.processing.probability import extract_probability
from marketinsights.processing.processor import process_markets

__all__ = [
    "CATEGORY_KEYWORDS",
    "build_search_text",
    "detect_category",
    "extract_probability",
    "process_markets",
]
