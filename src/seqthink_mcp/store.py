"""In-memory thought history shared by every tool call in a process."""

from __future__ import annotations

from dataclasses import dataclass
from threading import Lock

from .models import ThoughtRecord


@dataclass(frozen=True)
class HistorySnapshot:
    """Counts observed right after a record was stored."""

    history_length: int
    branch_names: tuple[str, ...]


class ThoughtHistory:
    """Append-only thought log with branch grouping.

    Records keep arrival order. A branch sequence is created on first use
    and branch names keep creation order. All mutations are serialized by
    one lock so concurrent callers still observe a single append order.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._records: list[ThoughtRecord] = []
        self._branches: dict[str, list[ThoughtRecord]] = {}

    def append(self, record: ThoughtRecord) -> int:
        """Append a record and return the new history length."""
        with self._lock:
            self._records.append(record)
            return len(self._records)

    def append_to_branch(self, branch_id: str, record: ThoughtRecord) -> int:
        """Append a record to a branch and return that branch's length."""
        with self._lock:
            return self._append_to_branch(branch_id, record)

    def record(self, record: ThoughtRecord) -> HistorySnapshot:
        """Store a record in history and, when it qualifies, in its branch."""
        with self._lock:
            self._records.append(record)
            if record.joins_branch:
                self._append_to_branch(record.branch_id, record)
            return HistorySnapshot(
                history_length=len(self._records),
                branch_names=tuple(self._branches),
            )

    def branch_names(self) -> list[str]:
        with self._lock:
            return list(self._branches)

    def history_length(self) -> int:
        with self._lock:
            return len(self._records)

    def records(self) -> tuple[ThoughtRecord, ...]:
        with self._lock:
            return tuple(self._records)

    def branch(self, branch_id: str) -> tuple[ThoughtRecord, ...]:
        with self._lock:
            return tuple(self._branches.get(branch_id, ()))

    def clear(self) -> None:
        """Drop all records and branches."""
        with self._lock:
            self._records.clear()
            self._branches.clear()

    def _append_to_branch(self, branch_id: str, record: ThoughtRecord) -> int:
        sequence = self._branches.setdefault(branch_id, [])
        sequence.append(record)
        return len(sequence)
