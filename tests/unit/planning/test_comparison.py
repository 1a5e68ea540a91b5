"""Tests for daily plan comparison."""

import pytest

from tradebook.core.models import ExecutedTrade
from tradebook.planning.comparison import (
    DailyPlan,
    PlannedTrade,
    badge_for,
    compare_plan,
    extra_group_key,
    trade_matches,
)


def planned(symbol="NIFTY-Sep2025-25000-CE", trade_type="BUY", entry=100.0, quantity=None):
    return PlannedTrade(symbol=symbol, trade_type=trade_type, entry=entry, quantity=quantity)


def executed(symbol="NIFTY25U1825000CE", trade_type="BUY", entry=100.4, quantity=75, pnl=None):
    return ExecutedTrade(
        date="2025-09-10", symbol=symbol, trade_type=trade_type,
        entry=entry, quantity=quantity, pnl=pnl,
    )


class TestTradeMatches:
    """Contract, direction, quantity and price."""

    def test_matches_across_dialects(self):
        assert trade_matches(planned(), executed())

    def test_direction_must_agree(self):
        assert not trade_matches(planned(), executed(trade_type="SELL"))

    def test_price_tolerance(self):
        assert not trade_matches(planned(entry=100.0), executed(entry=101.0))
        assert trade_matches(planned(entry=100.0), executed(entry=101.0), price_tolerance=1.5)

    def test_quantity_optional_on_plan(self):
        assert trade_matches(planned(quantity=None), executed(quantity=75))
        assert trade_matches(planned(quantity=75), executed(quantity=75))
        assert not trade_matches(planned(quantity=50), executed(quantity=75))

    def test_different_contract(self):
        assert not trade_matches(planned(symbol="NIFTY-Sep2025-25100-CE"), executed())


class TestBadges:

    @pytest.mark.parametrize("pct,badge", [
        (100, "MASTER"), (90, "MASTER"), (89, "EXPERT"), (75, "EXPERT"),
        (60, "SKILLED"), (59, "LEARNING"), (0, "LEARNING"),
    ])
    def test_thresholds(self, pct, badge):
        assert badge_for(pct) == badge


class TestComparePlan:
    """Matched, missed and extra trades with feedback text."""

    def test_no_executions(self):
        plan = DailyPlan(date="2025-09-10", planned_trades=[planned()])
        result = compare_plan(plan, [])
        assert result.status == "no-executions"
        assert result.badge == "NO DATA"
        assert result.total_planned == 1
        assert result.insights == []
        assert result.confidence_level == 5
        assert result.sleep_hours == 7

    def test_followed_plan(self):
        plan = DailyPlan(date="2025-09-10", planned_trades=[planned()])
        result = compare_plan(plan, [executed()])
        assert result.matched == 1
        assert result.execution_percent == 100
        assert result.badge == "MASTER"
        assert result.insights == ["Executed 1 of 1 planned trades (100%)"]
        assert result.what_went_wrong == ["Great job! You stuck to your plan. Keep it up."]

    def test_each_execution_claimed_once(self):
        plan = DailyPlan(date="2025-09-10", planned_trades=[planned(), planned()])
        result = compare_plan(plan, [executed()])
        assert result.matched == 1
        assert len(result.missed_trades) == 1
        assert result.execution_percent == 50
        assert result.badge == "LEARNING"
        assert result.what_went_wrong[0] == "You missed 1 planned trade."

    def test_extras_grouped_and_reported(self):
        plan = DailyPlan(date="2025-09-10", planned_trades=[planned(), planned(entry=150.0)])
        extra_a = executed(symbol="BANKNIFTY", trade_type="SELL", entry=500.0)
        extra_b = executed(symbol="BANKNIFTY", trade_type="SELL", entry=505.0)
        result = compare_plan(plan, [extra_a, executed(), extra_b])

        assert result.matched == 1
        assert result.extra_trades == [extra_a, extra_b]
        assert list(result.grouped_extras) == [extra_group_key(extra_a)]
        assert "You took 2 unplanned trades (overtrading)." in result.insights
        assert result.what_went_wrong == [
            "You missed 1 planned trade.",
            "Most common unplanned trade: BANKNIFTY SELL (2 times)",
            "Try to stick to your plan and avoid impulsive/unplanned trades.",
        ]

    def test_best_trade_and_average_pnl(self):
        plan = DailyPlan(
            date="2025-09-10",
            planned_trades=[planned(), planned(symbol="INFY", entry=1500.0)],
        )
        result = compare_plan(plan, [
            executed(pnl=300.0),
            executed(symbol="INFY", entry=1500.2, pnl=-100.0),
        ])
        assert result.insights[1].startswith("Best trade: NIFTY25U1825000CE (BUY)")
        assert result.insights[2] == "Average P&L (matched): ₹100.00"

    def test_state_readings(self):
        plan = DailyPlan(
            date="2025-09-10",
            planned_trades=[planned()],
            confidence_level=2,
            stress_level=8,
            sleep_hours=5,
        )
        result = compare_plan(plan, [executed()])
        assert "Low confidence: review setups before market open." in result.insights
        assert "High stress: reduce position size or number of trades." in result.what_went_wrong
        assert "Low sleep may have impacted your trading decisions." in result.what_went_wrong
        assert (result.confidence_level, result.stress_level, result.sleep_hours) == (2, 8, 5)

    def test_high_confidence(self):
        plan = DailyPlan(date="2025-09-10", planned_trades=[planned()], confidence_level=9)
        result = compare_plan(plan, [executed()])
        assert result.insights[-1] == "High confidence: be wary of overtrading."

    def test_empty_plan_with_executions(self):
        result = compare_plan(DailyPlan(date="2025-09-10"), [executed()])
        assert result.execution_percent == 0
        assert result.badge == "LEARNING"
        assert len(result.extra_trades) == 1

    def test_serializable(self):
        plan = DailyPlan(date="2025-09-10", planned_trades=[planned()])
        dumped = compare_plan(plan, [executed()]).model_dump()
        assert dumped["matched_trades"][0]["trade_type"] == "BUY"
