"""Protocol interfaces for the trade journal.

Implementations can be swapped (in-memory / PostgreSQL) without
changing callers.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .models import ExecutedTrade


@runtime_checkable
class IExecutionStore(Protocol):
    """Durable record of executions seen across uploads."""

    async def record_if_new(self, execution: ExecutedTrade) -> bool:
        """Insert unless an execution with the same key exists.

        Returns True when a new row was written.
        """
        ...

    async def executions_on(self, date: str) -> list[ExecutedTrade]: ...
