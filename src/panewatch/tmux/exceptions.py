"""Tmux-specific exceptions.

PUBLIC API:
  - TmuxError: Base exception for all tmux operations
  - TransportError: A tmux invocation failed
  - CurrentPaneError: Refused send to the pane panewatch itself runs in
"""


class TmuxError(Exception):
    """Base exception for all tmux operations."""

    pass


class TransportError(TmuxError):
    """Raised when a tmux invocation fails.

    Carries the underlying tmux message (stderr, or the OS error when the
    tmux binary could not be started).
    """

    def __init__(self, message: str, args: list[str] | None = None):
        super().__init__(message)
        self.message = message
        self.tmux_args = args or []


class CurrentPaneError(TransportError):
    """Raised when attempting forbidden operations on current pane."""

    pass
