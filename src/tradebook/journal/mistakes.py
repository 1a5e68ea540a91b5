"""Behavioral tagging: demon and good-practice detection on round-trips.

Walks closed round-trips chronologically and attaches negative-habit
("demon") and positive-habit tags to each one:

- Poor risk/reward (profit small relative to a known stop distance)
- Held loss too long
- Premature exit (quick win well below the average win)
- Missed stop loss (loss well beyond the average loss)
- Chased entry (entered before the early-entry cutoff)
- Wrong position size (risk beyond a capital cap or the average loss)
- Overtrading (too many trades on one exit day)
- Revenge trading (new loss in the same direction right after a loss)

Good-practice tags mirror these.  Cross-trade state (per-day trade
count, the last losing trip, running average win and loss) is carried
from one trip to the next, so the input order matters.

Each tagged trip is classified as a bad trade (at least one demon and a
loss) or a good trade (two or more good tags, no demons, and either a
profit or a respected stop).  Per-tag cost and profit totals attribute
each classified trip to its *primary* (first) tag only.

Usage::

    tagger = BehaviorTagger(TaggerConfig(overtrade_limit=3))
    summary = tagger.tag(round_trips)
    print(summary.demon_finder, summary.total_bad_trade_cost)
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from tradebook.core.config import TaggerConfig
from tradebook.core.enums import Side

from .record import RoundTrip, r2

logger = logging.getLogger(__name__)

# Demon tags
POOR_RISK_REWARD = "POOR RISK/REWARD TRADE"
HELD_LOSS_TOO_LONG = "HELD LOSS TOO LONG"
PREMATURE_EXIT = "PREMATURE EXIT"
REVENGE_TRADING = "REVENGE TRADING"
OVERTRADING = "OVERTRADING"
WRONG_POSITION_SIZE = "WRONG POSITION SIZE"
CHASED_ENTRY = "CHASED ENTRY"
MISSED_STOP_LOSS = "MISSED STOP LOSS"

# Good-practice tags
GOOD_RISK_REWARD = "GOOD RISK/REWARD"
PROPER_ENTRY = "PROPER ENTRY"
PROPER_EXIT = "PROPER EXIT"
FOLLOWED_PLAN = "FOLLOWED PLAN"
STOP_LOSS_RESPECTED = "STOP LOSS RESPECTED"
HELD_FOR_TARGET = "HELD FOR TARGET"
DISCIPLINED = "DISCIPLINED"

STANDARD_DEMONS: tuple[str, ...] = (
    POOR_RISK_REWARD,
    HELD_LOSS_TOO_LONG,
    PREMATURE_EXIT,
    REVENGE_TRADING,
    OVERTRADING,
    WRONG_POSITION_SIZE,
    CHASED_ENTRY,
    MISSED_STOP_LOSS,
)

STANDARD_GOOD: tuple[str, ...] = (
    GOOD_RISK_REWARD,
    PROPER_ENTRY,
    PROPER_EXIT,
    FOLLOWED_PLAN,
    STOP_LOSS_RESPECTED,
    HELD_FOR_TARGET,
    DISCIPLINED,
)

DEMON_REMEDIES: dict[str, str] = {
    POOR_RISK_REWARD: "Only take setups where the target is at least 1.2x the distance to your stop.",
    HELD_LOSS_TOO_LONG: "Decide your maximum holding time for a losing trade before entry and exit when it is reached.",
    PREMATURE_EXIT: "Let winners reach the planned target; trail the stop instead of closing at the first wiggle.",
    REVENGE_TRADING: "After a loss, step away for at least 15 minutes before placing the next trade.",
    OVERTRADING: "Cap the number of trades per day and stop once the cap is reached.",
    WRONG_POSITION_SIZE: "Size every position so a stop-out costs no more than 2% of capital.",
    CHASED_ENTRY: "Let the opening range settle; avoid entries in the first minutes of the session.",
    MISSED_STOP_LOSS: "Place a hard stop-loss order with every entry and never widen it.",
}

GENERIC_REMEDIES: tuple[str, ...] = (
    "Write down entry, stop and target before every trade.",
    "Review each trade at the end of the day and note what you would repeat.",
    "Keep position sizes consistent until your process is stable.",
)


@dataclass
class TagCount:
    """Count and P&L attributed to one tag."""

    count: int = 0
    total: float = 0.0

    def to_dict(self, amount_key: str) -> dict[str, Any]:
        return {"count": self.count, amount_key: r2(self.total)}


@dataclass
class TaggingSummary:
    """Aggregate outcome of tagging one round-trip sequence."""

    bad_trade_counts: dict[str, TagCount] = field(
        default_factory=lambda: {t: TagCount() for t in STANDARD_DEMONS}
    )
    good_trade_counts: dict[str, TagCount] = field(
        default_factory=lambda: {t: TagCount() for t in STANDARD_GOOD}
    )
    demon_frequency: Counter = field(default_factory=Counter)
    total_bad_trade_cost: float = 0.0
    total_good_trade_profit: float = 0.0
    entered_too_soon_count: int = 0

    @property
    def demon_finder(self) -> list[str]:
        return demon_finder(self.demon_frequency)

    @property
    def remedies(self) -> list[str]:
        return remediation(self.demon_finder)


def demon_finder(frequency: Counter, limit: int = 3) -> list[str]:
    """Most frequent demons, ties broken by vocabulary order."""
    ranked = sorted(
        (tag for tag, count in frequency.items() if count > 0),
        key=lambda tag: (
            -frequency[tag],
            STANDARD_DEMONS.index(tag) if tag in STANDARD_DEMONS else len(STANDARD_DEMONS),
        ),
    )
    return ranked[:limit]


def remediation(demons: list[str], size: int = 3) -> list[str]:
    """Prose suggestions for the given demons, padded with generic advice."""
    out = [DEMON_REMEDIES[d] for d in demons if d in DEMON_REMEDIES][:size]
    for filler in GENERIC_REMEDIES:
        if len(out) >= size:
            break
        out.append(filler)
    return out


@dataclass
class _TaggerState:
    """Cross-trip state carried through one tagging pass."""

    trades_per_day: Counter = field(default_factory=Counter)
    last_loss_exit: datetime | None = None
    last_loss_side: Side | None = None
    win_sum: float = 0.0
    wins: int = 0
    loss_sum: float = 0.0
    losses: int = 0

    @property
    def avg_win(self) -> float:
        return self.win_sum / self.wins if self.wins else 0.0

    @property
    def avg_loss(self) -> float:
        return self.loss_sum / self.losses if self.losses else 0.0

    def observe(self, pnl: float) -> None:
        if pnl > 0:
            self.wins += 1
            self.win_sum += pnl
        elif pnl < 0:
            self.losses += 1
            self.loss_sum += abs(pnl)


class BehaviorTagger:
    """Rule-based demon / good-practice tagger.

    Parameters
    ----------
    config : TaggerConfig | None
        Thresholds for every rule.  Defaults to ``TaggerConfig()``.
    """

    def __init__(self, config: TaggerConfig | None = None) -> None:
        self._cfg = config or TaggerConfig()

    @property
    def config(self) -> TaggerConfig:
        return self._cfg

    # ------------------------------------------------------------------ #
    # Tagging                                                              #
    # ------------------------------------------------------------------ #

    def tag(self, round_trips: list[RoundTrip]) -> TaggingSummary:
        """Tag every round-trip in place and summarise the result.

        ``round_trips`` must already be in chronological order.
        """
        state = _TaggerState()
        summary = TaggingSummary()

        for rt in round_trips:
            state.observe(rt.pnl)
            demons = self._demons(rt, state, summary)
            good = self._good_practices(rt, state, demons)

            rt.demons = list(dict.fromkeys(demons))
            rt.good_practices = list(dict.fromkeys(good))
            rt.is_bad_trade = bool(rt.demons) and rt.pnl < 0
            rt.is_good_trade = (
                len(rt.good_practices) >= 2
                and not rt.demons
                and (rt.pnl > 0 or STOP_LOSS_RESPECTED in rt.good_practices)
            )

            summary.demon_frequency.update(rt.demons)
            self._attribute(rt, summary)

            if rt.pnl < 0:
                state.last_loss_exit = rt.exit.timestamp
                state.last_loss_side = rt.entry.side

        logger.info(
            "Tagged %d round-trips: bad cost %.2f, good profit %.2f, top demons %s",
            len(round_trips),
            summary.total_bad_trade_cost,
            summary.total_good_trade_profit,
            summary.demon_finder,
        )
        return summary

    # ------------------------------------------------------------------ #
    # Rules                                                                #
    # ------------------------------------------------------------------ #

    def _demons(
        self,
        rt: RoundTrip,
        state: _TaggerState,
        summary: TaggingSummary,
    ) -> list[str]:
        cfg = self._cfg
        pnl = rt.pnl
        demons: list[str] = []

        state.trades_per_day[rt.exit_date] += 1
        trade_number_today = state.trades_per_day[rt.exit_date]

        stop = rt.entry.stop_distance
        if pnl > 0 and stop and stop > 0:
            risk = stop * (rt.quantity or 1)
            if pnl / risk < cfg.min_good_rr:
                demons.append(POOR_RISK_REWARD)

        if pnl < 0 and rt.holding_minutes > cfg.held_loss_minutes:
            demons.append(HELD_LOSS_TOO_LONG)

        if (pnl > 0
                and rt.holding_minutes < cfg.premature_exit_minutes
                and pnl < state.avg_win * cfg.premature_exit_ratio):
            demons.append(PREMATURE_EXIT)

        if pnl < 0 and abs(pnl) > state.avg_loss * cfg.stop_loss_tolerance:
            demons.append(MISSED_STOP_LOSS)

        if rt.entry.time and rt.entry.time < cfg.early_entry_cutoff:
            demons.append(CHASED_ENTRY)
            summary.entered_too_soon_count += 1

        risk_approx = abs(rt.entry.price - rt.exit.price) * (rt.quantity or 1)
        if (risk_approx > cfg.capital * cfg.max_risk_percent / 100
                or (state.avg_loss > 0
                    and risk_approx > state.avg_loss * cfg.oversize_loss_multiple)):
            demons.append(WRONG_POSITION_SIZE)

        if trade_number_today > cfg.overtrade_limit:
            demons.append(OVERTRADING)

        if (pnl < 0
                and rt.entry.time
                and state.last_loss_exit is not None
                and state.last_loss_side == rt.entry.side):
            gap = round((rt.entry.timestamp - state.last_loss_exit).total_seconds() / 60)
            if 0 <= gap <= cfg.revenge_window_minutes:
                demons.append(REVENGE_TRADING)

        return demons

    def _good_practices(
        self,
        rt: RoundTrip,
        state: _TaggerState,
        demons: list[str],
    ) -> list[str]:
        cfg = self._cfg
        pnl = rt.pnl
        stop_band = state.avg_loss * cfg.stop_loss_tolerance
        target = state.avg_loss * cfg.good_rr_loss_multiple
        good: list[str] = []

        if pnl > 0 and state.avg_loss > 0 and pnl >= target:
            good.append(GOOD_RISK_REWARD)

        respected_stop = pnl > 0 or abs(pnl) <= stop_band
        if CHASED_ENTRY not in demons and respected_stop:
            good.append(PROPER_ENTRY)

        if PREMATURE_EXIT not in demons and MISSED_STOP_LOSS not in demons:
            good.append(PROPER_EXIT)

        if pnl < 0 and abs(pnl) <= stop_band:
            good.append(STOP_LOSS_RESPECTED)

        if pnl > 0 and rt.holding_minutes > cfg.held_for_target_minutes and pnl > target:
            good.append(HELD_FOR_TARGET)

        if not demons and len(good) >= 2:
            good.append(DISCIPLINED)

        return good

    # ------------------------------------------------------------------ #
    # Attribution                                                          #
    # ------------------------------------------------------------------ #

    @staticmethod
    def _attribute(rt: RoundTrip, summary: TaggingSummary) -> None:
        """Book a classified trip against its primary tag only."""
        if rt.is_bad_trade:
            cost = abs(rt.pnl)
            summary.total_bad_trade_cost += cost
            bucket = summary.bad_trade_counts.setdefault(rt.primary_demon, TagCount())
            bucket.count += 1
            bucket.total += cost

        if rt.is_good_trade and rt.pnl > 0:
            summary.total_good_trade_profit += rt.pnl
            bucket = summary.good_trade_counts.setdefault(rt.primary_good_practice, TagCount())
            bucket.count += 1
            bucket.total += rt.pnl
