"""Market Insights - high-probability finance & politics prediction markets."""

__version__ = "0.1.0"
