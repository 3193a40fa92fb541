"""In-memory execution registry.

PUBLIC API:
  - ExecutionRegistry: Mapping of execution id to record, with per-record locks
  - ExecutionNotFoundError: Unknown execution id
"""

import logging
import threading
import time
from contextlib import contextmanager
from typing import Iterator, List, Optional

from .record import ExecutionRecord

logger = logging.getLogger(__name__)


class ExecutionNotFoundError(KeyError):
    """Raised when an execution id is not in the registry."""

    def __str__(self) -> str:
        return f"Execution not found: {self.args[0]}"


class ExecutionRegistry:
    """Process-local store of execution records.

    Each record has its own lock; ``locked(id)`` is how the tracker
    serializes poll and cancel on one execution. The registry-wide lock only
    guards the mapping itself.
    """

    def __init__(self):
        self._records: dict[str, ExecutionRecord] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, execution_id: str) -> bool:
        return execution_id in self._records

    def insert(self, record: ExecutionRecord) -> None:
        with self._lock:
            if record.id in self._records:
                raise ValueError(f"Duplicate execution id: {record.id}")
            self._records[record.id] = record
            self._locks[record.id] = threading.Lock()

    def get(self, execution_id: str) -> ExecutionRecord:
        try:
            return self._records[execution_id]
        except KeyError:
            raise ExecutionNotFoundError(execution_id) from None

    def find(self, execution_id: str) -> Optional[ExecutionRecord]:
        return self._records.get(execution_id)

    @contextmanager
    def locked(self, execution_id: str) -> Iterator[ExecutionRecord]:
        """Hold the record's lock for the duration of the block."""
        with self._lock:
            lock = self._locks.get(execution_id)
        if lock is None:
            raise ExecutionNotFoundError(execution_id)
        with lock:
            yield self.get(execution_id)

    def list(self, active_only: bool = False) -> List[ExecutionRecord]:
        """Records sorted newest first."""
        with self._lock:
            records = list(self._records.values())
        if active_only:
            records = [r for r in records if not r.is_terminal]
        return sorted(records, key=lambda r: r.start_time, reverse=True)

    def evict(self, max_age_seconds: float, now: Optional[float] = None) -> List[ExecutionRecord]:
        """Remove terminal records that ended at least ``max_age_seconds`` ago.

        Non-terminal records are never evicted.

        Returns:
            The evicted records.
        """
        now = now if now is not None else time.time()
        evicted = []
        with self._lock:
            for execution_id, record in list(self._records.items()):
                if not record.is_terminal or record.end_time is None:
                    continue
                if now - record.end_time >= max_age_seconds:
                    evicted.append(record)
                    del self._records[execution_id]
                    del self._locks[execution_id]

        if evicted:
            logger.info(f"Evicted {len(evicted)} finished executions")
        return evicted

    def clear(self) -> None:
        with self._lock:
            self._records.clear()
            self._locks.clear()
