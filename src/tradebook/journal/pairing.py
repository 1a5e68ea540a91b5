"""FIFO round-trip pairing.

Walks the time-ordered trade stream and, per symbol, keeps a queue of
unmatched legs on the currently open side.  A trade on the same side
extends the position; an opposite-side trade closes legs oldest-first
in quantity slices, each slice producing one ``RoundTrip``.  Anything
left in a queue at the end is an open position.

Entries are always closed oldest-first regardless of price.  This is a
matching convention, not a P&L-optimizing choice.

Usage::

    result = pair_round_trips(trades)
    for rt in result.round_trips:
        print(rt.symbol, rt.quantity, rt.pnl)
    positions = build_open_positions(result.open_legs)
"""

from __future__ import annotations

import logging
from collections import defaultdict, deque
from dataclasses import dataclass, field, replace
from datetime import datetime

from tradebook.core.enums import Side

from .record import OpenPosition, RoundTrip, Trade, r2

logger = logging.getLogger(__name__)


@dataclass
class PairingResult:
    """Closed round-trips plus the unmatched legs left per symbol."""

    round_trips: list[RoundTrip] = field(default_factory=list)
    open_legs: dict[str, list[Trade]] = field(default_factory=dict)


def sort_key(trade: Trade) -> tuple[str, str]:
    """Chronological key; a missing time sorts as start of day."""
    return trade.date, trade.time or "00:00"


def holding_minutes(entry: Trade, exit_leg: Trade) -> int:
    """Minutes between entry and exit, rounded to the nearest minute."""
    start, end = entry.timestamp, exit_leg.timestamp
    if start == datetime.min or end == datetime.min:
        return 0
    return round((end - start).total_seconds() / 60)


def slice_pnl(entry: Trade, exit_leg: Trade) -> float:
    """Net P&L of one matched slice: price delta x qty less both legs' charges."""
    qty = entry.quantity
    if entry.side == Side.BUY:
        gross = (exit_leg.price - entry.price) * qty
    else:
        gross = (entry.price - exit_leg.price) * qty
    return gross - (entry.charges + exit_leg.charges)


def pair_round_trips(trades: list[Trade]) -> PairingResult:
    """Match trades into round-trips, strict FIFO per symbol.

    Caller trades are never mutated; the engine consumes copies.  The
    sort is stable, so trades with identical timestamps keep file order.
    """
    ordered = sorted(
        (replace(t) for t in trades if t.symbol and t.side and t.quantity > 0),
        key=sort_key,
    )

    round_trips: list[RoundTrip] = []
    queues: dict[str, deque[Trade]] = defaultdict(deque)

    for trade in ordered:
        legs = queues[trade.symbol]

        if not legs or trade.side == legs[0].side:
            legs.append(trade)
            continue

        remaining = trade.quantity
        while legs and remaining > 0:
            front = legs[0]
            qty = min(remaining, front.quantity)

            entry = front.slice(qty)
            exit_leg = trade.slice(qty)

            if front.quantity > qty:
                front.quantity -= qty
            else:
                legs.popleft()

            round_trips.append(RoundTrip(
                symbol=trade.symbol,
                entry=entry,
                exit=exit_leg,
                pnl=slice_pnl(entry, exit_leg),
                holding_minutes=holding_minutes(entry, exit_leg),
            ))
            remaining -= qty

        if remaining > 0:
            # Position flips: the leftover opens on the new side.  Charges
            # stay whole so later slices pro-rate against the full quantity.
            legs.append(replace(trade, quantity=remaining))

    open_legs = {symbol: list(legs) for symbol, legs in queues.items() if legs}
    logger.info(
        "Paired %d trades into %d round-trips (%d symbols still open)",
        len(ordered), len(round_trips), len(open_legs),
    )
    return PairingResult(round_trips=round_trips, open_legs=open_legs)


def build_open_positions(open_legs: dict[str, list[Trade]]) -> list[OpenPosition]:
    """Net the leftover legs per symbol into open positions.

    The average price is quantity-weighted over the legs on the net side,
    using each leg's raw price for that side.
    """
    positions: list[OpenPosition] = []
    for symbol, legs in open_legs.items():
        net = sum(l.quantity if l.side == Side.BUY else -l.quantity for l in legs)
        if net == 0:
            continue
        side = Side.BUY if net > 0 else Side.SELL

        notional = 0.0
        qty = 0
        for leg in legs:
            if leg.side != side or not leg.quantity:
                continue
            notional += leg.raw_price * leg.quantity
            qty += leg.quantity

        positions.append(OpenPosition(
            symbol=symbol,
            side=side,
            quantity=abs(net),
            avg_price=r2(notional / qty) if qty else 0.0,
        ))

    positions.sort(key=lambda p: p.symbol)
    return positions
