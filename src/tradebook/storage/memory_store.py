"""In-memory execution store for tests, the CLI, and single-process use.

No external dependencies.  Mirrors the check-then-insert contract of
the PostgreSQL repository so callers behave identically against both.
"""

from __future__ import annotations

import logging

from tradebook.core.models import ExecutedTrade, ExecutionKey

logger = logging.getLogger(__name__)


class MemoryExecutionStore:
    """Execution store backed by a dict keyed on ``ExecutionKey``."""

    def __init__(self) -> None:
        self._rows: dict[ExecutionKey, ExecutedTrade] = {}

    async def record_if_new(self, execution: ExecutedTrade) -> bool:
        key = execution.key
        if key in self._rows:
            logger.debug("Execution already recorded: %s", key)
            return False
        self._rows[key] = execution
        return True

    async def executions_on(self, date: str) -> list[ExecutedTrade]:
        return [row for key, row in self._rows.items() if key.date == date]

    def __len__(self) -> int:
        return len(self._rows)
