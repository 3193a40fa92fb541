"""Pane operations - keystrokes, capture and pane structure."""

from typing import List
from dataclasses import dataclass
import time

from .core import tmux_call, is_current_pane
from .exceptions import CurrentPaneError, TransportError


@dataclass
class PaneInfo:
    """Information about a tmux pane."""

    pane_id: str  # %42
    window_id: str  # @3
    active: bool
    height: int
    width: int
    title: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.pane_id,
            "window_id": self.window_id,
            "active": self.active,
            "height": self.height,
            "width": self.width,
            "title": self.title,
        }


def _guard_current(pane_id: str) -> None:
    if is_current_pane(pane_id):
        raise CurrentPaneError(f"Cannot send commands to current pane ({pane_id})")


def send_literal(pane_id: str, text: str, enter: bool = True, delay: float = 0.05) -> None:
    """Type text into a pane exactly as given.

    The text is passed with ``-l`` after ``--`` so tmux never interprets it as
    key names or flags, even when it starts with a dash. Arguments go to tmux
    as a list, so no outer shell ever sees the text.

    Args:
        pane_id: Target pane ID
        text: Literal text to type
        enter: Whether to send Enter key after the text
        delay: Delay in seconds before sending Enter (default: 0.05)

    Raises:
        CurrentPaneError: If attempting to send to current pane
        TransportError: If tmux rejects the invocation
    """
    _guard_current(pane_id)

    if text:
        tmux_call(["send-keys", "-t", pane_id, "-l", "--", text])

    if enter:
        if delay > 0:
            time.sleep(delay)
        tmux_call(["send-keys", "-t", pane_id, "Enter"])


def send_keys(pane_id: str, *keys: str) -> None:
    """Send named keys to a pane.

    Examples:
        send_keys("%3", "C-c")  # Just Ctrl+C
        send_keys("%3", "Escape", "Escape")  # Multiple special keys
    """
    _guard_current(pane_id)

    if not keys:
        return

    tmux_call(["send-keys", "-t", pane_id, *keys])


def _strip_trailing_empty_lines(content: str) -> str:
    """Strip trailing empty lines that tmux adds to fill pane height.

    Preserves empty lines within the content but removes padding at the end.
    """
    if not content:
        return ""

    lines = content.splitlines()
    while lines and not lines[-1].strip():
        lines.pop()

    if lines:
        return "\n".join(lines) + "\n"
    return ""


def capture_last_n(pane_id: str, lines: int) -> str:
    """Capture the last N lines of a pane, scrollback included.

    Wrapped lines are joined (``-J``) so a marker split by the pane width is
    still found as one line.

    Raises:
        TransportError: If the pane cannot be captured
    """
    if lines <= 0:
        raise ValueError(f"lines must be positive, got {lines}")
    stdout = tmux_call(["capture-pane", "-p", "-J", "-t", pane_id, "-S", f"-{lines}"])
    return _strip_trailing_empty_lines(stdout)


def list_panes(window_id: str) -> List[PaneInfo]:
    """List panes in a window."""
    format_str = "#{pane_id}\t#{window_id}\t#{?pane_active,1,0}\t#{pane_height}\t#{pane_width}\t#{pane_title}"
    stdout = tmux_call(["list-panes", "-t", window_id, "-F", format_str])

    panes = []
    for line in stdout.strip().split("\n"):
        if not line:
            continue
        parts = line.split("\t")
        if len(parts) < 5:
            raise TransportError(f"Failed to parse pane info: invalid format '{line}'")
        panes.append(
            PaneInfo(
                pane_id=parts[0],
                window_id=parts[1],
                active=parts[2] == "1",
                height=int(parts[3]),
                width=int(parts[4]),
                title=parts[5] if len(parts) > 5 else "",
            )
        )
    return panes


def split_pane(target: str, vertical: bool = False, start_dir: str | None = None) -> str:
    """Split a pane and return the new pane ID.

    Args:
        target: Pane or window to split
        vertical: Stack panes vertically (``-v``) instead of side by side
        start_dir: Starting directory for the new pane
    """
    args = ["split-window", "-t", target, "-v" if vertical else "-h", "-P", "-F", "#{pane_id}"]
    if start_dir:
        args.extend(["-c", start_dir])
    return tmux_call(args).strip()
