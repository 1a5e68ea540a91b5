"""SQLAlchemy ORM models for the execution store.

Column types are dialect-neutral so the same table works on
PostgreSQL in production and SQLite in throwaway environments.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, Float, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Shared declarative base for all ORM models."""

    pass


class ExecutedTradeRecord(Base):
    """One execution leg seen in an uploaded orderbook.

    Uniqueness on (date, symbol, entry, trade_type, quantity) makes
    repeated uploads of overlapping periods idempotent.
    """

    __tablename__ = "executed_trades"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    date: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    symbol: Mapped[str] = mapped_column(String(128), nullable=False)
    entry: Mapped[float] = mapped_column(Float, nullable=False)
    trade_type: Mapped[str] = mapped_column(String(4), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    exit: Mapped[float | None] = mapped_column(Float, nullable=True)
    pnl: Mapped[float | None] = mapped_column(Float, nullable=True)
    expiry: Mapped[str | None] = mapped_column(String(32), nullable=True)
    option_type: Mapped[str | None] = mapped_column(String(8), nullable=True)
    strike_price: Mapped[str | None] = mapped_column(String(32), nullable=True)
    underlying_symbol: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(),
    )

    __table_args__ = (
        UniqueConstraint(
            "date", "symbol", "entry", "trade_type", "quantity",
            name="uq_executed_trades_key",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<ExecutedTradeRecord(date={self.date!r}, symbol={self.symbol!r}, "
            f"side={self.trade_type!r}, qty={self.quantity!r}, entry={self.entry!r})>"
        )
