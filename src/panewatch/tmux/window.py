"""Window operations."""

from typing import List, NamedTuple

from .core import tmux_call, parse_format_line

_WINDOW_FORMAT = "#{window_id}:#{?window_active,1,0}:#{window_name}"


class WindowInfo(NamedTuple):
    """Window information named tuple."""

    id: str
    name: str
    active: bool
    session_id: str

    def to_dict(self) -> dict:
        return self._asdict()


def _parse_window(line: str, session_id: str) -> WindowInfo:
    # Window names may contain the delimiter, so the name is the remainder.
    parts = parse_format_line(line)
    name = ":".join(parts[str(i)] for i in range(2, len(parts)))
    return WindowInfo(id=parts["0"], name=name, active=parts.get("1") == "1", session_id=session_id)


def list_windows(session_id: str) -> List[WindowInfo]:
    """List windows in a session."""
    stdout = tmux_call(["list-windows", "-t", session_id, "-F", _WINDOW_FORMAT])
    return [_parse_window(line, session_id) for line in stdout.strip().split("\n") if line]


def create_window(session_id: str, name: str) -> WindowInfo:
    """Create a new window in a session and return it."""
    stdout = tmux_call(["new-window", "-t", f"{session_id}:", "-n", name, "-P", "-F", _WINDOW_FORMAT])
    return _parse_window(stdout.strip(), session_id)
