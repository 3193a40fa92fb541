"""Tracked command execution in tmux panes.

Injects commands into live interactive panes and works out, only from the
rendered pane text, when each command finished, what it printed and how it
exited. Runs as a REPL or MCP server (``python -m panewatch [--mcp]``), or
as a library:

    tracker = ExecutionTracker()
    execution_id = tracker.submit("%3", "make test", timeout=600)
    record = tracker.wait(execution_id)

PUBLIC API:
  - ExecutionTracker: Submit, poll, cancel and evict tracked executions
  - ExecutionRecord: Tracked state of one command
  - ExecutionStatus: Lifecycle states
  - TmuxTransport: Pane transport over the tmux binary
  - TransportError: A tmux invocation failed
"""

from .tmux import TmuxTransport, TransportError
from .tracking import ExecutionRecord, ExecutionStatus, ExecutionTracker

__version__ = "0.1.0"
__all__ = ["ExecutionTracker", "ExecutionRecord", "ExecutionStatus", "TmuxTransport", "TransportError"]
