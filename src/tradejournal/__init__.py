"""
Trade Journal - performance analytics for a trading checklist journal.

Public API for turning logged trades into metrics, drawdowns, consistency
scores and grouped reports.
"""

from importlib.metadata import version

try:
    __version__ = version("tradejournal")
except Exception:
    __version__ = "0.0.0.dev"  # Fallback for development


__all__ = [
    "__version__",
]
