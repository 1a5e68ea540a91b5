"""Upload pipeline: parse, report, remember, persist.

``JournalService`` is the single entry point the surrounding service
calls for an uploaded orderbook.  It is synchronous per upload apart
from the execution store writes, each of which checks and inserts one
row independently.

Usage::

    service = JournalService(MemoryExecutionStore())
    result = await service.upload("user-42", "/tmp/orderbook.csv")
    print(result.stats.net_pnl, result.new_executions)
    latest = service.last_report("user-42")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from tradebook.core.config import TaggerConfig
from tradebook.core.errors import NoTradesError
from tradebook.core.interfaces import IExecutionStore
from tradebook.core.models import ExecutedTrade
from tradebook.ingestion.normalizer import ParseResult, parse_tradebook
from tradebook.observability.logger import new_trace_id

from .record import Trade
from .report_store import ReportStore
from .stats import Stats, build_stats

logger = logging.getLogger(__name__)


@dataclass
class UploadResult:
    stats: Stats
    parse: ParseResult
    new_executions: int

    @property
    def message(self) -> str:
        return (
            "Orderbook uploaded & stats calculated. "
            f"{self.new_executions} new executed trades saved for plan comparison."
        )


class JournalService:
    """Orchestrates one upload end to end.

    Parameters
    ----------
    store : IExecutionStore
        Where executions are recorded for later plan comparison.
    reports : ReportStore | None
        Per-owner last-report store.  A private one is created if omitted.
    config : TaggerConfig | None
        Tagger thresholds.
    """

    def __init__(
        self,
        store: IExecutionStore,
        reports: ReportStore | None = None,
        config: TaggerConfig | None = None,
    ) -> None:
        self._store = store
        self._reports = reports or ReportStore()
        self._config = config or TaggerConfig()

    async def upload(
        self,
        owner_id: str,
        path: str | Path,
        *,
        symbol: str | None = None,
    ) -> UploadResult:
        """Process one orderbook file.

        The caller owns ``path`` and deletes it afterwards.

        Raises:
            UnrecognizedFormatError: If the file has no known trade table.
            NoTradesError: If no valid trade rows survive parsing.  The
                owner's previous report is kept.
            StorageError: If the execution store fails.
        """
        new_trace_id()
        parsed = parse_tradebook(path, symbol=symbol)
        if not parsed.trades:
            raise NoTradesError(Path(path).name)
        stats = build_stats(parsed.trades, self._config, warnings=parsed.warnings)
        self._reports.save(owner_id, stats)

        saved = await self.record_executions(parsed.trades)
        logger.info(
            "Upload for %s: %d trades, %d round-trips, %d new executions",
            owner_id, len(parsed.trades), len(stats.trades), saved,
        )
        return UploadResult(stats=stats, parse=parsed, new_executions=saved)

    async def record_executions(self, trades: list[Trade]) -> int:
        """Check-then-insert every fully specified trade; return rows written."""
        saved = 0
        for trade in trades:
            if not trade.is_complete:
                continue
            if await self._store.record_if_new(ExecutedTrade.from_trade(trade)):
                saved += 1
        return saved

    def last_report(self, owner_id: str) -> Stats:
        return self._reports.get(owner_id)
