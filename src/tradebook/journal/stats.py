"""Report aggregation: two P&L bases and the behavioral summary.

The headline net P&L is computed on the **paired-raw** basis: for every
symbol with at least one buy row and one sell row anywhere in the
upload, sell notional minus buy notional minus the full charges of every
row.  It does not depend on how FIFO slices the legs.

Everything that needs a per-trade decomposition (win rate, profit
factor, average win/loss, day win rate, tag attribution) comes from the
FIFO round-trips instead.  Both bases are reported side by side and
their difference is surfaced as ``pnl_basis_difference``.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any

from tradebook.core.config import TaggerConfig
from tradebook.core.enums import Side

from .mistakes import STANDARD_DEMONS, STANDARD_GOOD, BehaviorTagger, TaggingSummary
from .pairing import build_open_positions, pair_round_trips
from .record import DataQualityWarning, OpenPosition, RoundTrip, Trade, r2

logger = logging.getLogger(__name__)

PNL_BASIS = "PAIRED_RAW"


@dataclass
class ScripSummaryRow:
    symbol: str
    quantity: int
    avg_buy: float
    avg_sell: float
    charges: float
    net_realized: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "quantity": self.quantity,
            "avg_buy": self.avg_buy,
            "avg_sell": self.avg_sell,
            "charges": self.charges,
            "net_realized": self.net_realized,
        }


@dataclass
class PairedTotals:
    buy_qty: int = 0
    sell_qty: int = 0
    avg_buy: float = 0.0
    avg_sell: float = 0.0
    charges: float = 0.0
    net_pnl: float = 0.0
    paired_symbols: frozenset[str] = frozenset()

    def to_dict(self) -> dict[str, Any]:
        return {
            "buy_qty": self.buy_qty,
            "sell_qty": self.sell_qty,
            "avg_buy": self.avg_buy,
            "avg_sell": self.avg_sell,
            "charges": self.charges,
            "net_pnl": self.net_pnl,
        }


@dataclass
class _Ledger:
    buy_qty: int = 0
    sell_qty: int = 0
    buy_notional: float = 0.0
    sell_notional: float = 0.0
    charges: float = 0.0

    def add(self, trade: Trade) -> None:
        if trade.side == Side.BUY:
            self.buy_qty += trade.quantity
            self.buy_notional += trade.notional
        else:
            self.sell_qty += trade.quantity
            self.sell_notional += trade.notional
        self.charges += trade.charges

    @property
    def avg_buy(self) -> float:
        return self.buy_notional / self.buy_qty if self.buy_qty else 0.0

    @property
    def avg_sell(self) -> float:
        return self.sell_notional / self.sell_qty if self.sell_qty else 0.0

    @property
    def net(self) -> float:
        return self.sell_notional - self.buy_notional - self.charges


@dataclass
class Stats:
    """Complete report for one upload.  JSON-serialisable via ``to_dict``."""

    net_pnl: float = 0.0
    pnl_basis: str = PNL_BASIS
    round_trip_net_pnl: float = 0.0
    pnl_basis_difference: float = 0.0
    totals_check: dict[str, float] = field(
        default_factory=lambda: {"net_pnl_from_scrips": 0.0, "charges_from_scrips": 0.0}
    )

    trade_win_percent: float = 0.0
    profit_factor: float = 0.0
    day_win_percent: float = 0.0
    avg_win: float = 0.0
    avg_loss: float = 0.0
    gross_profit: float = 0.0
    gross_loss: float = 0.0

    score: int = 0
    patience: int = 0
    demon_finder: list[str] = field(default_factory=list)
    remedies: list[str] = field(default_factory=list)

    trades: list[RoundTrip] = field(default_factory=list)
    trade_dates: list[str] = field(default_factory=list)
    empty: bool = True

    total_bad_trade_cost: float = 0.0
    total_good_trade_profit: float = 0.0
    bad_trade_counts: dict[str, dict[str, Any]] = field(default_factory=dict)
    good_trade_counts: dict[str, dict[str, Any]] = field(default_factory=dict)
    standard_demons: list[str] = field(default_factory=lambda: list(STANDARD_DEMONS))
    standard_good: list[str] = field(default_factory=lambda: list(STANDARD_GOOD))
    entered_too_soon_count: int = 0

    scrip_summary: list[ScripSummaryRow] = field(default_factory=list)
    paired_totals: PairedTotals = field(default_factory=PairedTotals)
    open_positions: list[OpenPosition] = field(default_factory=list)
    data_quality_warnings: list[DataQualityWarning] = field(default_factory=list)

    @classmethod
    def empty_report(cls) -> Stats:
        """Zero-valued report served before any upload."""
        return cls()

    def to_dict(self) -> dict[str, Any]:
        return {
            "net_pnl": self.net_pnl,
            "pnl_basis": self.pnl_basis,
            "round_trip_net_pnl": self.round_trip_net_pnl,
            "pnl_basis_difference": self.pnl_basis_difference,
            "totals_check": dict(self.totals_check),
            "trade_win_percent": self.trade_win_percent,
            "profit_factor": self.profit_factor,
            "day_win_percent": self.day_win_percent,
            "avg_win_loss": {"avg_win": self.avg_win, "avg_loss": self.avg_loss},
            "gross_profit": self.gross_profit,
            "gross_loss": self.gross_loss,
            "score": self.score,
            "pointers": {
                "patience": self.patience,
                "demon_finder": list(self.demon_finder),
                "remedies": list(self.remedies),
            },
            "trades": [rt.to_dict() for rt in self.trades],
            "trade_dates": list(self.trade_dates),
            "empty": self.empty,
            "total_bad_trade_cost": self.total_bad_trade_cost,
            "total_good_trade_profit": self.total_good_trade_profit,
            "bad_trade_counts": self.bad_trade_counts,
            "good_trade_counts": self.good_trade_counts,
            "standard_demons": list(self.standard_demons),
            "standard_good": list(self.standard_good),
            "entered_too_soon_count": self.entered_too_soon_count,
            "scrip_summary": [row.to_dict() for row in self.scrip_summary],
            "paired_totals": self.paired_totals.to_dict(),
            "open_positions": [p.to_dict() for p in self.open_positions],
            "data_quality_warnings": [w.to_dict() for w in self.data_quality_warnings],
        }


# ---------------------------------------------------------------------------
# Paired-raw basis
# ---------------------------------------------------------------------------

def paired_symbols(trades: list[Trade]) -> frozenset[str]:
    """Symbols with at least one buy row and one sell row."""
    buys = {t.symbol for t in trades if t.symbol and t.side == Side.BUY}
    sells = {t.symbol for t in trades if t.symbol and t.side == Side.SELL}
    return frozenset(buys & sells)


def paired_raw_totals(trades: list[Trade]) -> PairedTotals:
    """Headline netting over paired symbols, on each row's own price basis."""
    symbols = paired_symbols(trades)
    ledger = _Ledger()
    for t in trades:
        if t.symbol in symbols:
            ledger.add(t)

    return PairedTotals(
        buy_qty=ledger.buy_qty,
        sell_qty=ledger.sell_qty,
        avg_buy=r2(ledger.avg_buy),
        avg_sell=r2(ledger.avg_sell),
        charges=r2(ledger.charges),
        net_pnl=r2(ledger.net),
        paired_symbols=symbols,
    )


def build_scrip_summary(
    trades: list[Trade],
    symbols: frozenset[str] | set[str],
) -> list[ScripSummaryRow]:
    """Per-symbol realized ledger, best performer first."""
    ledgers: dict[str, _Ledger] = defaultdict(_Ledger)
    for t in trades:
        if t.symbol in symbols:
            ledgers[t.symbol].add(t)

    rows = [
        ScripSummaryRow(
            symbol=symbol,
            quantity=min(ledger.buy_qty, ledger.sell_qty),
            avg_buy=r2(ledger.avg_buy),
            avg_sell=r2(ledger.avg_sell),
            charges=r2(ledger.charges),
            net_realized=r2(ledger.net),
        )
        for symbol, ledger in ledgers.items()
    ]
    rows.sort(key=lambda r: r.net_realized, reverse=True)
    return rows


# ---------------------------------------------------------------------------
# Round-trip basis
# ---------------------------------------------------------------------------

def profit_factor(gross_profit: float, gross_loss: float) -> float:
    """Gross profit / gross loss; ``inf`` when only profit, ``0`` when neither."""
    if gross_loss == 0:
        return float("inf") if gross_profit > 0 else 0.0
    return gross_profit / gross_loss


def build_stats(
    trades: list[Trade],
    config: TaggerConfig | None = None,
    *,
    warnings: list[DataQualityWarning] | None = None,
) -> Stats:
    """Pair, tag and aggregate one upload into a report."""
    cfg = config or TaggerConfig()

    pairing = pair_round_trips(trades)
    round_trips = pairing.round_trips

    paired = paired_raw_totals(trades)
    scrip_summary = build_scrip_summary(trades, paired.paired_symbols)
    open_positions = build_open_positions(pairing.open_legs)

    wins = losses = 0
    gross_profit = gross_loss = 0.0
    pnl_by_date: dict[str, float] = {}
    for rt in round_trips:
        pnl_by_date[rt.exit_date] = pnl_by_date.get(rt.exit_date, 0.0) + rt.pnl
        if rt.pnl > 0:
            wins += 1
            gross_profit += rt.pnl
        elif rt.pnl < 0:
            losses += 1
            gross_loss += abs(rt.pnl)

    trade_dates = list(pnl_by_date)
    avg_win = gross_profit / wins if wins else 0.0
    avg_loss = gross_loss / losses if losses else 0.0
    trade_win_percent = wins / len(round_trips) * 100 if round_trips else 0.0
    day_win_percent = (
        sum(1 for v in pnl_by_date.values() if v > 0) / len(trade_dates) * 100
        if trade_dates else 0.0
    )

    summary: TaggingSummary = BehaviorTagger(cfg).tag(round_trips)

    score = min(100.0, cfg.patience * 0.4 + trade_win_percent * 0.3 + day_win_percent * 0.3)
    round_trip_net = sum(rt.pnl for rt in round_trips)

    stats = Stats(
        net_pnl=paired.net_pnl,
        round_trip_net_pnl=r2(round_trip_net),
        pnl_basis_difference=r2(paired.net_pnl - round_trip_net),
        totals_check={
            "net_pnl_from_scrips": r2(sum(r.net_realized for r in scrip_summary)),
            "charges_from_scrips": r2(sum(r.charges for r in scrip_summary)),
        },
        trade_win_percent=r2(trade_win_percent),
        profit_factor=profit_factor(gross_profit, gross_loss),
        day_win_percent=r2(day_win_percent),
        avg_win=r2(avg_win),
        avg_loss=r2(avg_loss),
        gross_profit=r2(gross_profit),
        gross_loss=r2(gross_loss),
        score=max(0, math.floor(score + 0.5)),
        patience=cfg.patience,
        demon_finder=summary.demon_finder,
        remedies=summary.remedies,
        trades=round_trips,
        trade_dates=trade_dates,
        empty=not round_trips,
        total_bad_trade_cost=r2(summary.total_bad_trade_cost),
        total_good_trade_profit=r2(summary.total_good_trade_profit),
        bad_trade_counts={
            tag: c.to_dict("total_cost") for tag, c in summary.bad_trade_counts.items()
        },
        good_trade_counts={
            tag: c.to_dict("total_profit") for tag, c in summary.good_trade_counts.items()
        },
        entered_too_soon_count=summary.entered_too_soon_count,
        scrip_summary=scrip_summary,
        paired_totals=paired,
        open_positions=open_positions,
        data_quality_warnings=list(warnings or []),
    )

    if stats.pnl_basis_difference:
        logger.info(
            "P&L bases differ: paired-raw %.2f vs round-trip %.2f",
            stats.net_pnl, stats.round_trip_net_pnl,
        )
    return stats
