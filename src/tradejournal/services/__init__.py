"""Trade journal services package.

Services sit on top of the pure analytics library: loading journal files
and assembling reports.
"""

from tradejournal.services.journal import load_trades
from tradejournal.services.reporting import ReportingService

__all__: list[str] = [
    "ReportingService",
    "load_trades",
]
