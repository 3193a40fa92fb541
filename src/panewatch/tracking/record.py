"""Execution records - the tracked state of one submitted command.

PUBLIC API:
  - ExecutionStatus: Lifecycle states
  - Anomaly: Diagnostic kinds recorded while a command is unresolved
  - ExecutionRecord: Mutable record owned by the registry
"""

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from ..types import ExecutionID, MarkerProtocol, Target


class ExecutionStatus(str, Enum):
    """Lifecycle of an execution. Transitions only move forward."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    ERROR = "error"
    CANCELLED = "cancelled"
    TIMEOUT = "timeout"

    @property
    def is_terminal(self) -> bool:
        return self not in (ExecutionStatus.PENDING, ExecutionStatus.RUNNING)


class Anomaly(str, Enum):
    """Why an execution has not resolved, or resolved without a shell status."""

    DETECTION_FAILURE = "detection_failure"  # markers absent or out of order
    PROTOCOL_ANOMALY = "protocol_anomaly"  # markers found, exit code missing
    RETRY_EXHAUSTED = "retry_exhausted"  # start marker never seen
    CANCELLATION_RACE = "cancellation_race"  # cancel on a terminal record


# Exit code for errors the tracker raises itself, where no shell status exists.
NO_SHELL_STATUS = -1

# Order used to validate transitions; terminal states share the last rank.
_RANK = {
    ExecutionStatus.PENDING: 0,
    ExecutionStatus.RUNNING: 1,
}


def _iso(ts: Optional[float]) -> Optional[str]:
    if ts is None:
        return None
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


@dataclass
class ExecutionRecord:
    """Tracked state of one submitted command.

    Only the registry's owner mutates a record, and only through
    ``transition`` for status changes.
    """

    id: ExecutionID
    pane_target: Target
    command_text: str
    start_marker: str
    end_marker: str
    protocol: MarkerProtocol = "inline"
    status: ExecutionStatus = ExecutionStatus.PENDING
    start_time: float = field(default_factory=time.time)
    end_time: Optional[float] = None
    exit_code: Optional[int] = None
    result_output: Optional[str] = None
    shell_type: Optional[str] = None
    current_working_directory: Optional[str] = None
    system_info: Optional[str] = None
    retry_count: int = 0
    aborted: bool = False
    timeout: Optional[float] = None
    diagnostic: Optional[str] = None
    anomaly: Optional[Anomaly] = None
    last_sent_at: Optional[float] = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def duration(self) -> Optional[float]:
        """Seconds from submission to the terminal transition."""
        if self.end_time is None:
            return None
        return self.end_time - self.start_time

    @property
    def deadline(self) -> Optional[float]:
        if self.timeout is None:
            return None
        return self.start_time + self.timeout

    def transition(
        self,
        status: ExecutionStatus,
        *,
        exit_code: Optional[int] = None,
        output: Optional[str] = None,
        now: Optional[float] = None,
    ) -> None:
        """Move to a new status, enforcing forward-only transitions.

        Terminal transitions set ``end_time``; ``exit_code`` is kept only for
        completed and error.

        Raises:
            ValueError: If the transition would move backwards or leave a
                terminal state.
        """
        if self.is_terminal:
            raise ValueError(f"Execution {self.id} is already {self.status.value}")
        if not status.is_terminal and _RANK[status] < _RANK[self.status]:
            raise ValueError(f"Execution {self.id} cannot go from {self.status.value} to {status.value}")

        self.status = status
        if not status.is_terminal:
            return

        self.end_time = now if now is not None else time.time()
        if status in (ExecutionStatus.COMPLETED, ExecutionStatus.ERROR):
            self.exit_code = exit_code if exit_code is not None else NO_SHELL_STATUS
        else:
            self.exit_code = None
        if output is not None:
            self.result_output = output

    def note(self, anomaly: Anomaly, message: str) -> None:
        """Record a diagnostic without changing status."""
        self.anomaly = anomaly
        self.diagnostic = message

    def to_dict(self) -> dict[str, Any]:
        """JSON-shaped view for the consumer layer."""
        return {
            "id": self.id,
            "pane": self.pane_target,
            "command": self.command_text,
            "status": self.status.value,
            "start_time": _iso(self.start_time),
            "end_time": _iso(self.end_time),
            "duration": round(self.duration, 3) if self.duration is not None else None,
            "exit_code": self.exit_code,
            "output": self.result_output,
            "shell_type": self.shell_type,
            "cwd": self.current_working_directory,
            "retry_count": self.retry_count,
            "aborted": self.aborted,
            "protocol": self.protocol,
            "diagnostic": self.diagnostic,
        }
