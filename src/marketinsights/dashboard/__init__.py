"""Dashboard state, refresh cycle and display formatting."""

from marketinsights.dashboard.manager import DashboardManager

__all__ = ["DashboardManager"]
