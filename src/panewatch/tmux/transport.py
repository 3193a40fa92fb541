"""Pane transport - the seam between the tracker and tmux.

PUBLIC API:
  - PaneTransport: Protocol the tracker talks to
  - TmuxTransport: Implementation backed by the tmux binary
"""

from typing import Protocol

from . import pane as _pane
from . import session as _session
from . import window as _window


class PaneTransport(Protocol):
    """Primitive pane operations used by the tracker.

    Every call is an independent tmux invocation and raises
    ``TransportError`` when it fails.
    """

    def send(self, pane_id: str, text: str) -> None: ...

    def send_keys(self, pane_id: str, *keys: str) -> None: ...

    def capture(self, pane_id: str, lines: int) -> str: ...


class TmuxTransport:
    """PaneTransport over the tmux command line.

    Args:
        enter_delay: Seconds to wait between typing text and pressing Enter.
    """

    def __init__(self, enter_delay: float = 0.05):
        self.enter_delay = enter_delay

    def send(self, pane_id: str, text: str) -> None:
        _pane.send_literal(pane_id, text, enter=True, delay=self.enter_delay)

    def send_keys(self, pane_id: str, *keys: str) -> None:
        _pane.send_keys(pane_id, *keys)

    def capture(self, pane_id: str, lines: int) -> str:
        return _pane.capture_last_n(pane_id, lines)

    # Structure queries, used by the consumer commands

    def list_sessions(self):
        return _session.list_sessions()

    def find_session(self, name: str):
        return _session.find_session(name)

    def list_windows(self, session_id: str):
        return _window.list_windows(session_id)

    def list_panes(self, window_id: str):
        return _pane.list_panes(window_id)

    def create_session(self, name: str, start_dir: str | None = None):
        return _session.create_session(name, start_dir)

    def create_window(self, session_id: str, name: str):
        return _window.create_window(session_id, name)

    def split_pane(self, target: str, vertical: bool = False, start_dir: str | None = None):
        return _pane.split_pane(target, vertical=vertical, start_dir=start_dir)
