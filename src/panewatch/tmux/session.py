"""Session management for tmux.

PUBLIC API:
  - SessionInfo: Session information named tuple
  - list_sessions: Get all tmux sessions
  - find_session: Find a session by name
  - create_session: Create a detached session
"""

from typing import Optional, NamedTuple, List

from .core import tmux_call, parse_format_line


class SessionInfo(NamedTuple):
    """Session information named tuple.

    Attributes:
        id: Session ID ($3).
        name: Session name.
        attached: Whether a client is attached.
        windows: Number of windows.
    """

    id: str
    name: str
    attached: bool
    windows: int

    @classmethod
    def from_format_line(cls, line: str) -> "SessionInfo":
        """Parse from tmux format string."""
        parts = parse_format_line(line)
        return cls(
            id=parts["0"],
            name=parts.get("1", ""),
            attached=parts.get("2", "0") == "1",
            windows=int(parts.get("3", "0") or 0),
        )

    def to_dict(self) -> dict:
        return self._asdict()


def list_sessions() -> List[SessionInfo]:
    """Get all tmux sessions.

    Raises:
        TransportError: If tmux cannot list sessions (e.g. no server running).
    """
    out = tmux_call(
        [
            "list-sessions",
            "-F",
            "#{session_id}:#{session_name}:#{?session_attached,1,0}:#{session_windows}",
        ]
    )

    if not out.strip():
        return []

    return [SessionInfo.from_format_line(line) for line in out.strip().split("\n") if line]


def find_session(name: str) -> Optional[SessionInfo]:
    """Find a session by name.

    Returns:
        SessionInfo if a session with that exact name exists, None otherwise.
    """
    for session in list_sessions():
        if session.name == name:
            return session
    return None


def create_session(name: str, start_dir: Optional[str] = None) -> SessionInfo:
    """Create new detached session.

    Args:
        name: Session name.
        start_dir: Starting directory for the session.

    Returns:
        SessionInfo of the created session.
    """
    args = [
        "new-session",
        "-d",
        "-s",
        name,
        "-P",
        "-F",
        "#{session_id}:#{session_name}:#{?session_attached,1,0}:#{session_windows}",
    ]
    if start_dir:
        args.extend(["-c", start_dir])
    stdout = tmux_call(args)
    return SessionInfo.from_format_line(stdout.strip())
