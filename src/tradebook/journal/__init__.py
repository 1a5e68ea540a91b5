"""Trade journal: FIFO pairing, behavioral tagging and report aggregation.

Key components
--------------
Trade            One execution leg from a brokerage export
RoundTrip        A matched entry/exit slice with tags
OpenPosition     Quantity left unmatched per symbol
pair_round_trips FIFO pairing engine
BehaviorTagger   Demon / good-practice tagging with cross-trade state
build_stats      Paired-raw and round-trip aggregation into ``Stats``
ReportStore      Last report per owner
ReportExporter   CSV / JSON export
"""

from .record import DataQualityWarning, OpenPosition, RoundTrip, Trade
from .pairing import PairingResult, build_open_positions, pair_round_trips
from .mistakes import (
    STANDARD_DEMONS,
    STANDARD_GOOD,
    BehaviorTagger,
    TaggingSummary,
)
from .stats import PairedTotals, ScripSummaryRow, Stats, build_stats
from .report_store import ReportStore
from .export import ReportExporter

__all__ = [
    "DataQualityWarning",
    "OpenPosition",
    "RoundTrip",
    "Trade",
    "PairingResult",
    "build_open_positions",
    "pair_round_trips",
    "STANDARD_DEMONS",
    "STANDARD_GOOD",
    "BehaviorTagger",
    "TaggingSummary",
    "PairedTotals",
    "ScripSummaryRow",
    "Stats",
    "build_stats",
    "ReportStore",
    "ReportExporter",
]
