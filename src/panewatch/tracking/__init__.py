"""Command execution tracking.

PUBLIC API:
  - ExecutionTracker: Submit, poll, cancel and evict tracked executions
  - ExecutionRecord: Tracked state of one command
  - ExecutionStatus: Lifecycle states
  - Anomaly: Diagnostic kinds
  - ExecutionRegistry: In-memory record store
  - ExecutionNotFoundError: Unknown execution id
  - CommandHistory: JSON-lines log of finished executions
"""

from .record import Anomaly, ExecutionRecord, ExecutionStatus, NO_SHELL_STATUS
from .registry import ExecutionNotFoundError, ExecutionRegistry
from .history import CommandHistory
from .engine import ExecutionTracker

__all__ = [
    "Anomaly",
    "ExecutionRecord",
    "ExecutionStatus",
    "NO_SHELL_STATUS",
    "ExecutionNotFoundError",
    "ExecutionRegistry",
    "CommandHistory",
    "ExecutionTracker",
]
