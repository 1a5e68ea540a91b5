"""Core domain models shared between the journal and its consumers.

``ExecutedTrade`` is the shape persisted for every fully specified
execution leg.  The plan comparison reads these back to match a
trader's declared intentions against what actually happened.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal, NamedTuple

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from tradebook.journal.record import Trade


class ExecutionKey(NamedTuple):
    """Identity of an execution for de-duplication across uploads."""

    date: str
    symbol: str
    price: float
    side: str  # "BUY" / "SELL"
    quantity: int


class ExecutedTrade(BaseModel):
    """A persisted execution leg."""

    date: str  # YYYY-MM-DD
    symbol: str
    quantity: int = Field(gt=0)
    entry: float = Field(ge=0)  # Execution price
    trade_type: Literal["BUY", "SELL"]
    exit: float | None = None
    pnl: float | None = None

    # Optional instrument metadata supplied by richer exports
    expiry: str | None = None
    option_type: str | None = None
    strike_price: str | None = None
    underlying_symbol: str | None = None

    @property
    def key(self) -> ExecutionKey:
        return ExecutionKey(self.date, self.symbol, self.entry, self.trade_type, self.quantity)

    @classmethod
    def from_trade(cls, trade: Trade) -> ExecutedTrade:
        """Build from a parsed ``Trade`` leg."""
        return cls(
            date=trade.date,
            symbol=trade.symbol,
            quantity=trade.quantity,
            entry=trade.price,
            trade_type=trade.side.value.upper(),
        )
