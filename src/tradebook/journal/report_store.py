"""Per-owner store of the most recently computed report.

Each user (or session) sees only its own last report.  Reading before
any upload yields the zero-valued report rather than None, so readers
never need to null-check.
"""

from __future__ import annotations

import threading

from .stats import Stats


class ReportStore:
    """Thread-safe map of owner id to last ``Stats``."""

    def __init__(self) -> None:
        self._reports: dict[str, Stats] = {}
        self._lock = threading.Lock()

    def save(self, owner_id: str, stats: Stats) -> None:
        with self._lock:
            self._reports[owner_id] = stats

    def get(self, owner_id: str) -> Stats:
        with self._lock:
            stats = self._reports.get(owner_id)
        return stats if stats is not None else Stats.empty_report()

    def has_report(self, owner_id: str) -> bool:
        with self._lock:
            return owner_id in self._reports

    def clear(self, owner_id: str | None = None) -> None:
        """Forget one owner's report, or every report when no owner is given."""
        with self._lock:
            if owner_id is None:
                self._reports.clear()
            else:
                self._reports.pop(owner_id, None)
