"""Tests for the journal data model."""

import math

import pytest

from tradebook.core.enums import Side
from tradebook.journal.record import OpenPosition, r2

from .conftest import make_round_trip, make_trade


class TestTrade:
    """Trade leg properties."""

    def test_full_quantity_defaults_to_quantity(self):
        assert make_trade(qty=40).full_quantity == 40

    def test_timestamp_missing_time_is_start_of_day(self):
        trade = make_trade(time="")
        assert (trade.timestamp.hour, trade.timestamp.minute) == (0, 0)

    def test_raw_price_follows_side(self):
        buy = make_trade(side=Side.BUY, price=100, buy_price_raw=99.5, sell_price_raw=101)
        sell = make_trade(side=Side.SELL, price=100, buy_price_raw=99.5, sell_price_raw=101)
        assert buy.raw_price == 99.5
        assert sell.raw_price == 101

    def test_raw_price_falls_back_to_price(self):
        assert make_trade(price=123.0).raw_price == 123.0

    def test_slice_prorates_charges(self):
        trade = make_trade(qty=100, charges=50.0)
        part = trade.slice(30)
        assert part.quantity == 30
        assert part.charges == pytest.approx(15.0)
        assert part.full_quantity == 100
        assert trade.quantity == 100

    def test_is_complete(self):
        assert make_trade().is_complete
        assert not make_trade(date="").is_complete

    def test_to_dict_serializes_side(self):
        assert make_trade(side=Side.SELL).to_dict()["side"] == "Sell"


class TestRoundTrip:
    """Round-trip derived fields."""

    def test_gross_pnl_adds_back_charges(self):
        rt = make_round_trip(entry_price=100, exit_price=110, qty=2)
        rt.entry.charges = 1.0
        rt.exit.charges = 1.5
        rt.pnl = 20 - 2.5
        assert rt.charges == 2.5
        assert rt.gross_pnl == pytest.approx(20.0)

    def test_primary_tags(self):
        rt = make_round_trip()
        assert rt.primary_demon is None
        rt.demons = ["CHASED ENTRY", "OVERTRADING"]
        assert rt.primary_demon == "CHASED ENTRY"

    def test_to_dict_joins_tags(self):
        rt = make_round_trip()
        rt.good_practices = ["PROPER ENTRY", "PROPER EXIT"]
        row = rt.to_dict()
        assert row["good_practice"] == "PROPER ENTRY, PROPER EXIT"
        assert row["demon"] == ""


class TestHelpers:

    def test_r2(self):
        assert r2(1.005 + 0.001) == 1.01
        assert math.isinf(r2(float("inf")))

    def test_open_position_to_dict(self):
        pos = OpenPosition(symbol="XYZ", side=Side.SELL, quantity=5, avg_price=10.0)
        assert pos.to_dict() == {"symbol": "XYZ", "side": "Sell", "quantity": 5, "avg_price": 10.0}
