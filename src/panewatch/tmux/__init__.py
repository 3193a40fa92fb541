"""Pure tmux operations - the pane transport.

PUBLIC API:
  - run_tmux: Run tmux command and return result
  - tmux_call: Run tmux command, raising TransportError on failure
  - TmuxTransport: PaneTransport implementation over tmux
  - PaneTransport: Transport protocol used by the tracker
  - send_literal: Type literal text into a pane
  - send_keys: Send named keys to a pane
  - capture_last_n: Capture the last N lines of a pane
  - list_sessions / find_session / create_session: Session operations
  - list_windows / create_window: Window operations
  - list_panes / split_pane: Pane structure operations
  - TmuxError / TransportError / CurrentPaneError: Exceptions
"""

from .core import run_tmux, tmux_call

from .exceptions import TmuxError, TransportError, CurrentPaneError

from .pane import (
    PaneInfo,
    send_literal,
    send_keys,
    capture_last_n,
    list_panes,
    split_pane,
)

from .session import (
    SessionInfo,
    list_sessions,
    find_session,
    create_session,
)

from .window import WindowInfo, list_windows, create_window

from .transport import PaneTransport, TmuxTransport

__all__ = [
    "run_tmux",
    "tmux_call",
    "TmuxError",
    "TransportError",
    "CurrentPaneError",
    "PaneInfo",
    "send_literal",
    "send_keys",
    "capture_last_n",
    "list_panes",
    "split_pane",
    "SessionInfo",
    "list_sessions",
    "find_session",
    "create_session",
    "WindowInfo",
    "list_windows",
    "create_window",
    "PaneTransport",
    "TmuxTransport",
]
