"""Trade journal data model.

A ``Trade`` is one execution leg as it appears in a brokerage export.
The pairing engine turns a stream of trades into ``RoundTrip`` records
(one entry slice matched against one exit slice) plus whatever is left
open per symbol.  The aggregator folds both into a ``Stats`` report.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field, replace
from datetime import datetime
from typing import Any

from tradebook.core.enums import Side, TradebookSchema


def r2(value: float) -> float:
    """Round a money figure to 2 decimal places (non-finite values pass through)."""
    if not math.isfinite(value):
        return value
    return round(value, 2)


@dataclass
class Trade:
    """A single execution leg.

    ``price`` is the side-selected price used for matching.  Vendors that
    report separate buy and sell price columns also populate
    ``buy_price_raw`` / ``sell_price_raw``; headline netting reads those
    through :attr:`raw_price` so it stays on the row's own price basis.
    """

    date: str                 # YYYY-MM-DD
    symbol: str
    side: Side
    quantity: int
    price: float
    time: str = ""            # HH:MM, empty when the export has no time
    charges: float = 0.0      # Brokerage + taxes + duty, summed
    full_quantity: int = 0    # Quantity before any partial consumption
    buy_price_raw: float | None = None
    sell_price_raw: float | None = None
    stop_distance: float | None = None
    schema: TradebookSchema | None = None

    def __post_init__(self) -> None:
        if not self.full_quantity:
            self.full_quantity = self.quantity

    # ------------------------------------------------------------------ #
    # Computed properties                                                  #
    # ------------------------------------------------------------------ #

    @property
    def timestamp(self) -> datetime:
        """Execution time; a missing time sorts as start of day."""
        try:
            return datetime.strptime(f"{self.date} {self.time or '00:00'}", "%Y-%m-%d %H:%M")
        except ValueError:
            return datetime.min

    @property
    def raw_price(self) -> float:
        """Price on the row's own basis for this leg's side."""
        raw = self.buy_price_raw if self.side == Side.BUY else self.sell_price_raw
        return raw if raw is not None else self.price

    @property
    def notional(self) -> float:
        return self.raw_price * self.quantity

    @property
    def is_complete(self) -> bool:
        """True when every field the execution store keys on is present."""
        return bool(self.date and self.symbol and self.side and self.price and self.quantity)

    # ------------------------------------------------------------------ #
    # Slicing                                                              #
    # ------------------------------------------------------------------ #

    def prorated_charges(self, qty: int) -> float:
        """Share of this leg's charges attributable to ``qty`` units."""
        full = self.full_quantity if self.full_quantity > 0 else qty
        if full <= 0:
            return 0.0
        return self.charges * (qty / full)

    def slice(self, qty: int) -> Trade:
        """Copy of this leg holding ``qty`` units with pro-rated charges."""
        return replace(self, quantity=qty, charges=self.prorated_charges(qty))

    def to_dict(self) -> dict[str, Any]:
        row = asdict(self)
        row["side"] = self.side.value
        row["schema"] = self.schema.value if self.schema else None
        row["charges"] = r2(self.charges)
        return row


@dataclass
class RoundTrip:
    """One matched entry/exit pair, or a quantity slice of one.

    Tags are attached in place by the behavioral tagger.
    """

    symbol: str
    entry: Trade
    exit: Trade
    pnl: float
    holding_minutes: int

    demons: list[str] = field(default_factory=list)
    good_practices: list[str] = field(default_factory=list)
    is_bad_trade: bool = False
    is_good_trade: bool = False

    @property
    def legs(self) -> list[Trade]:
        return [self.entry, self.exit]

    @property
    def quantity(self) -> int:
        return self.entry.quantity

    @property
    def charges(self) -> float:
        return self.entry.charges + self.exit.charges

    @property
    def gross_pnl(self) -> float:
        return self.pnl + self.charges

    @property
    def exit_date(self) -> str:
        return self.exit.date

    @property
    def primary_demon(self) -> str | None:
        return self.demons[0] if self.demons else None

    @property
    def primary_good_practice(self) -> str | None:
        return self.good_practices[0] if self.good_practices else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "entry": self.entry.to_dict(),
            "exit": self.exit.to_dict(),
            "quantity": self.quantity,
            "gross_pnl": r2(self.gross_pnl),
            "charges": r2(self.charges),
            "pnl": r2(self.pnl),
            "holding_minutes": self.holding_minutes,
            "demons": list(self.demons),
            "demon": ", ".join(self.demons),
            "good_practices": list(self.good_practices),
            "good_practice": ", ".join(self.good_practices),
            "is_bad_trade": self.is_bad_trade,
            "is_good_trade": self.is_good_trade,
        }


@dataclass
class OpenPosition:
    """Quantity still open for a symbol after pairing."""

    symbol: str
    side: Side
    quantity: int
    avg_price: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "side": self.side.value,
            "quantity": self.quantity,
            "avg_price": self.avg_price,
        }


@dataclass
class DataQualityWarning:
    """A row value that could not be interpreted with confidence."""

    row_number: int
    field: str
    value: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
