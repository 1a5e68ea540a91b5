"""Repository for persisted executions.

All methods run on an :class:`AsyncSession` obtained from
:meth:`tradebook.storage.postgres.connection.Database.session`.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tradebook.core.errors import StorageError
from tradebook.core.models import ExecutedTrade

from .connection import Database
from .models import ExecutedTradeRecord

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Conversion helpers
# ---------------------------------------------------------------------------

def _execution_to_record(execution: ExecutedTrade) -> ExecutedTradeRecord:
    return ExecutedTradeRecord(
        date=execution.date,
        symbol=execution.symbol,
        entry=execution.entry,
        trade_type=execution.trade_type,
        quantity=execution.quantity,
        exit=execution.exit,
        pnl=execution.pnl,
        expiry=execution.expiry,
        option_type=execution.option_type,
        strike_price=execution.strike_price,
        underlying_symbol=execution.underlying_symbol,
    )


def _record_to_execution(record: ExecutedTradeRecord) -> ExecutedTrade:
    return ExecutedTrade(
        date=record.date,
        symbol=record.symbol,
        entry=record.entry,
        trade_type=record.trade_type,
        quantity=record.quantity,
        exit=record.exit,
        pnl=record.pnl,
        expiry=record.expiry,
        option_type=record.option_type,
        strike_price=record.strike_price,
        underlying_symbol=record.underlying_symbol,
    )


class ExecutedTradeRepo:
    """Session-scoped queries over ``executed_trades``."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def exists(self, execution: ExecutedTrade) -> bool:
        stmt = select(ExecutedTradeRecord.id).where(
            ExecutedTradeRecord.date == execution.date,
            ExecutedTradeRecord.symbol == execution.symbol,
            ExecutedTradeRecord.entry == execution.entry,
            ExecutedTradeRecord.trade_type == execution.trade_type,
            ExecutedTradeRecord.quantity == execution.quantity,
        ).limit(1)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def insert_if_new(self, execution: ExecutedTrade) -> bool:
        if await self.exists(execution):
            return False
        self._session.add(_execution_to_record(execution))
        await self._session.flush()
        return True

    async def get_by_date(self, date: str) -> list[ExecutedTrade]:
        stmt = (
            select(ExecutedTradeRecord)
            .where(ExecutedTradeRecord.date == date)
            .order_by(ExecutedTradeRecord.id)
        )
        result = await self._session.execute(stmt)
        return [_record_to_execution(r) for r in result.scalars().all()]


class PostgresExecutionStore:
    """``IExecutionStore`` over a :class:`Database`, one session per call."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def record_if_new(self, execution: ExecutedTrade) -> bool:
        try:
            async with self._db.session() as session:
                return await ExecutedTradeRepo(session).insert_if_new(execution)
        except IntegrityError:
            # A concurrent upload inserted the same key after our existence check
            logger.debug("Execution already recorded: %s", execution.key)
            return False
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to record execution {execution.key}: {exc}") from exc

    async def executions_on(self, date: str) -> list[ExecutedTrade]:
        try:
            async with self._db.session() as session:
                return await ExecutedTradeRepo(session).get_by_date(date)
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to load executions for {date}: {exc}") from exc
