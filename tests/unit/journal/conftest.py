"""Shared helpers for journal tests."""

from __future__ import annotations

import pytest

from tradebook.core.config import TaggerConfig
from tradebook.core.enums import Side
from tradebook.journal.mistakes import BehaviorTagger
from tradebook.journal.pairing import holding_minutes, slice_pnl
from tradebook.journal.record import RoundTrip, Trade


@pytest.fixture
def tagger():
    return BehaviorTagger(TaggerConfig())


def make_trade(
    side: Side | str = Side.BUY,
    qty: int = 1,
    price: float = 100.0,
    time: str = "10:00",
    date: str = "2024-01-05",
    symbol: str = "XYZ",
    charges: float = 0.0,
    stop_distance: float | None = None,
    buy_price_raw: float | None = None,
    sell_price_raw: float | None = None,
) -> Trade:
    """Helper to create a Trade leg."""
    return Trade(
        date=date,
        time=time,
        symbol=symbol,
        side=Side(side) if isinstance(side, str) else side,
        quantity=qty,
        price=price,
        charges=charges,
        stop_distance=stop_distance,
        buy_price_raw=buy_price_raw,
        sell_price_raw=sell_price_raw,
    )


def make_round_trip(
    entry_price: float = 100.0,
    exit_price: float = 110.0,
    qty: int = 1,
    entry_time: str = "10:00",
    exit_time: str = "10:30",
    side: Side = Side.BUY,
    date: str = "2024-01-05",
    symbol: str = "XYZ",
    stop_distance: float | None = None,
) -> RoundTrip:
    """Helper to create an untagged round-trip with consistent P&L."""
    entry = make_trade(
        side=side, qty=qty, price=entry_price, time=entry_time, date=date,
        symbol=symbol, stop_distance=stop_distance,
    )
    exit_leg = make_trade(
        side=side.opposite, qty=qty, price=exit_price, time=exit_time, date=date,
        symbol=symbol,
    )
    return RoundTrip(
        symbol=symbol,
        entry=entry,
        exit=exit_leg,
        pnl=slice_pnl(entry, exit_leg),
        holding_minutes=holding_minutes(entry, exit_leg),
    )
