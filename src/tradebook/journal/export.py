"""Report export: CSV of tagged round-trips and JSON of the full report.

Usage::

    exporter = ReportExporter()
    csv_str = exporter.to_csv(stats.trades)
    json_str = exporter.to_json(stats)
"""

from __future__ import annotations

import csv
import io
import json
import logging
from typing import Any

from .record import RoundTrip
from .stats import Stats

logger = logging.getLogger(__name__)

# Default CSV columns
_CSV_COLUMNS = [
    "symbol",
    "side",
    "quantity",
    "entry_date",
    "entry_time",
    "entry_price",
    "exit_date",
    "exit_time",
    "exit_price",
    "gross_pnl",
    "charges",
    "pnl",
    "holding_minutes",
    "demons",
    "good_practices",
    "is_bad_trade",
    "is_good_trade",
]


class ReportExporter:
    """Export round-trips to CSV and reports to JSON.

    Parameters
    ----------
    decimal_places : int
        Rounding precision for money fields.  Default 2.
    """

    def __init__(self, *, decimal_places: int = 2) -> None:
        self._dp = decimal_places

    def to_csv(
        self,
        round_trips: list[RoundTrip],
        *,
        columns: list[str] | None = None,
    ) -> str:
        """Export round-trips as a CSV string with a header row."""
        cols = columns or _CSV_COLUMNS
        buf = io.StringIO()
        writer = csv.DictWriter(buf, fieldnames=cols, extrasaction="ignore")
        writer.writeheader()
        for rt in round_trips:
            row = self._round_trip_to_row(rt)
            writer.writerow({c: row.get(c, "") for c in cols})
        return buf.getvalue()

    def to_json(self, stats: Stats, *, indent: int = 2) -> str:
        """Export the full report.  An infinite profit factor is written as ``Infinity``."""
        return json.dumps(stats.to_dict(), indent=indent, default=str)

    def _round_trip_to_row(self, rt: RoundTrip) -> dict[str, Any]:
        dp = self._dp
        return {
            "symbol": rt.symbol,
            "side": rt.entry.side.value,
            "quantity": rt.quantity,
            "entry_date": rt.entry.date,
            "entry_time": rt.entry.time,
            "entry_price": round(rt.entry.price, dp),
            "exit_date": rt.exit.date,
            "exit_time": rt.exit.time,
            "exit_price": round(rt.exit.price, dp),
            "gross_pnl": round(rt.gross_pnl, dp),
            "charges": round(rt.charges, dp),
            "pnl": round(rt.pnl, dp),
            "holding_minutes": rt.holding_minutes,
            "demons": ";".join(rt.demons),
            "good_practices": ";".join(rt.good_practices),
            "is_bad_trade": rt.is_bad_trade,
            "is_good_trade": rt.is_good_trade,
        }
