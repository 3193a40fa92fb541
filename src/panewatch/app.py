"""panewatch ReplKit2 application.

Main application entry point providing dual REPL/MCP functionality for
tracked command execution in tmux panes.
"""

from dataclasses import dataclass, field

from replkit2 import App

from .tracking import ExecutionTracker


@dataclass
class PaneWatchState:
    """Application state: the tracker owning every execution of this process."""

    tracker: ExecutionTracker = field(default_factory=ExecutionTracker)


# Must be created before command imports for decorator registration
app = App(
    "panewatch",
    PaneWatchState,
    uri_scheme="panewatch",
    fastmcp={
        "description": "Run commands in tmux panes and track their completion",
        "tags": {"terminal", "automation", "tmux"},
    },
)


# Command imports trigger @app.command decorator registration
from .commands import execution  # noqa: E402, F401
from .commands import structure  # noqa: E402, F401
