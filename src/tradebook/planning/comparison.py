"""Daily plan versus executed trades.

A trader records a ``DailyPlan`` (intended trades plus a few self-reported
state readings) before the session.  After uploading the orderbook the
persisted executions for that date are compared against it:

- each planned trade claims the first unclaimed execution that matches it
  (same contract per ``InstrumentSymbol.matches``, same direction,
  compatible quantity, entry within one rupee);
- unclaimed executions are *extras* (unplanned trades);
- the share of planned trades executed earns a badge.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Literal

from pydantic import BaseModel, Field

from tradebook.core.models import ExecutedTrade

from .symbols import parse_instrument

logger = logging.getLogger(__name__)

NO_DATA_BADGE = "NO DATA"

# (minimum execution percent, badge), best first
BADGES: tuple[tuple[int, str], ...] = (
    (90, "MASTER"),
    (75, "EXPERT"),
    (60, "SKILLED"),
    (0, "LEARNING"),
)


class PlannedTrade(BaseModel):
    """One trade the trader intends to take."""

    symbol: str
    trade_type: Literal["BUY", "SELL"]
    entry: float
    quantity: int | None = None  # None matches any executed quantity
    exit: float | None = None
    notes: str = ""
    expiry: str | None = None
    option_type: str | None = None
    strike_price: str | None = None
    underlying_symbol: str | None = None


class DailyPlan(BaseModel):
    date: str  # YYYY-MM-DD
    plan_notes: str = ""
    planned_trades: list[PlannedTrade] = Field(default_factory=list)

    # Self-reported state; None when not recorded
    confidence_level: int | None = Field(default=None, ge=0, le=10)
    stress_level: int | None = Field(default=None, ge=0, le=10)
    distractions: str | None = None
    sleep_hours: float | None = Field(default=None, ge=0)
    mood: str | None = None
    focus: int | None = Field(default=None, ge=0, le=10)
    energy: int | None = Field(default=None, ge=0, le=10)


class PlanComparison(BaseModel):
    """Outcome of comparing one plan with one day's executions."""

    status: Literal["ok", "no-executions"] = "ok"
    matched: int = 0
    total_planned: int = 0
    execution_percent: int = 0
    badge: str = NO_DATA_BADGE
    matched_trades: list[ExecutedTrade] = Field(default_factory=list)
    missed_trades: list[PlannedTrade] = Field(default_factory=list)
    extra_trades: list[ExecutedTrade] = Field(default_factory=list)
    grouped_extras: dict[str, list[ExecutedTrade]] = Field(default_factory=dict)
    insights: list[str] = Field(default_factory=list)
    what_went_wrong: list[str] = Field(default_factory=list)

    # Plan state echoed back with defaults applied
    confidence_level: int = 5
    stress_level: int = 5
    distractions: str = ""
    sleep_hours: float = 7
    mood: str = ""
    focus: int = 5
    energy: int = 5


def badge_for(execution_percent: int) -> str:
    for threshold, badge in BADGES:
        if execution_percent >= threshold:
            return badge
    return BADGES[-1][1]


def trade_matches(
    planned: PlannedTrade,
    executed: ExecutedTrade,
    price_tolerance: float = 1.0,
) -> bool:
    """True when *executed* fulfils *planned*."""
    if not parse_instrument(planned.symbol).matches(parse_instrument(executed.symbol)):
        return False
    if planned.trade_type != executed.trade_type:
        return False
    if planned.quantity and executed.quantity and planned.quantity != executed.quantity:
        return False
    return abs(planned.entry - executed.entry) < price_tolerance


def extra_group_key(trade: ExecutedTrade) -> str:
    return "__".join((
        trade.symbol,
        trade.trade_type,
        trade.expiry or "",
        trade.strike_price or "",
        trade.option_type or "",
    ))


def _state_defaults(plan: DailyPlan) -> dict:
    return {
        "confidence_level": 5 if plan.confidence_level is None else plan.confidence_level,
        "stress_level": 5 if plan.stress_level is None else plan.stress_level,
        "distractions": plan.distractions or "",
        "sleep_hours": 7 if plan.sleep_hours is None else plan.sleep_hours,
        "mood": plan.mood or "",
        "focus": 5 if plan.focus is None else plan.focus,
        "energy": 5 if plan.energy is None else plan.energy,
    }


def _insights(
    plan: DailyPlan,
    matched: list[ExecutedTrade],
    extras: list[ExecutedTrade],
    execution_percent: int,
) -> list[str]:
    out: list[str] = []
    total = len(plan.planned_trades)
    if matched:
        out.append(f"Executed {len(matched)} of {total} planned trades ({execution_percent}%)")
        if any(t.pnl and abs(t.pnl) > 0.01 for t in matched):
            best = max(matched, key=lambda t: t.pnl or 0.0)
            out.append(
                f"Best trade: {best.symbol} ({best.trade_type}) @ ₹{best.entry:g} "
                f"(P&L: ₹{best.pnl or 0:g})"
            )
            avg_pnl = sum(t.pnl or 0.0 for t in matched) / len(matched)
            if abs(avg_pnl) > 0.01:
                out.append(f"Average P&L (matched): ₹{avg_pnl:.2f}")
    if extras:
        out.append(f"You took {len(extras)} unplanned trades (overtrading).")

    if plan.confidence_level is not None:
        if plan.confidence_level < 4:
            out.append("Low confidence: review setups before market open.")
        if plan.confidence_level > 7:
            out.append("High confidence: be wary of overtrading.")
    return out


def _what_went_wrong(
    plan: DailyPlan,
    missed: list[PlannedTrade],
    extras: list[ExecutedTrade],
) -> list[str]:
    out: list[str] = []
    if missed:
        plural = "s" if len(missed) > 1 else ""
        out.append(f"You missed {len(missed)} planned trade{plural}.")
    if extras:
        counts = Counter(f"{t.symbol} {t.trade_type}" for t in extras)
        kind, n = counts.most_common(1)[0]
        if n > 1:
            out.append(f"Most common unplanned trade: {kind} ({n} times)")
        out.append("Try to stick to your plan and avoid impulsive/unplanned trades.")
    if not missed and not extras:
        out.append("Great job! You stuck to your plan. Keep it up.")

    if plan.stress_level is not None and plan.stress_level > 6:
        out.append("High stress: reduce position size or number of trades.")
    if plan.sleep_hours is not None and plan.sleep_hours < 6:
        out.append("Low sleep may have impacted your trading decisions.")
    return out


def compare_plan(plan: DailyPlan, executed: list[ExecutedTrade]) -> PlanComparison:
    """Match *plan* against the executions recorded for its date.

    Parameters
    ----------
    plan : DailyPlan
        The trader's plan for the day.
    executed : list[ExecutedTrade]
        Executions for ``plan.date``, in store order.  Earlier executions
        are claimed first.
    """
    state = _state_defaults(plan)
    total_planned = len(plan.planned_trades)

    if not executed:
        return PlanComparison(
            status="no-executions",
            total_planned=total_planned,
            missed_trades=list(plan.planned_trades),
            badge=NO_DATA_BADGE,
            **state,
        )

    claimed: set[int] = set()
    matched: list[ExecutedTrade] = []
    missed: list[PlannedTrade] = []
    for planned in plan.planned_trades:
        idx = next(
            (i for i, ex in enumerate(executed) if i not in claimed and trade_matches(planned, ex)),
            None,
        )
        if idx is None:
            missed.append(planned)
        else:
            claimed.add(idx)
            matched.append(executed[idx])

    extras = [ex for i, ex in enumerate(executed) if i not in claimed]
    grouped: dict[str, list[ExecutedTrade]] = {}
    for ex in extras:
        grouped.setdefault(extra_group_key(ex), []).append(ex)

    execution_percent = round(len(matched) / total_planned * 100) if total_planned else 0

    logger.info(
        "Plan %s: %d/%d planned trades executed, %d unplanned",
        plan.date, len(matched), total_planned, len(extras),
    )

    return PlanComparison(
        status="ok",
        matched=len(matched),
        total_planned=total_planned,
        execution_percent=execution_percent,
        badge=badge_for(execution_percent),
        matched_trades=matched,
        missed_trades=missed,
        extra_trades=[ex for group in grouped.values() for ex in group],
        grouped_extras=grouped,
        insights=_insights(plan, matched, extras, execution_percent),
        what_went_wrong=_what_went_wrong(plan, missed, extras),
        **state,
    )
