"""Plan comparison: match a trader's declared trades against executions."""

from .comparison import DailyPlan, PlanComparison, PlannedTrade, compare_plan, trade_matches
from .symbols import InstrumentSymbol, parse_instrument

__all__ = [
    "DailyPlan",
    "PlanComparison",
    "PlannedTrade",
    "compare_plan",
    "trade_matches",
    "InstrumentSymbol",
    "parse_instrument",
]
