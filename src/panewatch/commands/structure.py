"""Tmux structure and inspection commands.

Every command goes through the tracker's transport, so the app talks to
tmux through one object.

PUBLIC API:
  - sessions: List tmux sessions
  - find_session: Find a session by name
  - windows: List windows in a session
  - panes: List panes in a window
  - capture: Capture pane content
  - new_session / new_window / split: Create sessions, windows and panes
  - detect: Detect the shell running in a pane
"""

from typing import Any

from ..app import app
from ..errors import markdown_error_response, table_error_response
from ..tmux import TmuxError
from ..types import Target


@app.command(
    display="table",
    headers=["id", "name", "attached", "windows"],
    fastmcp={"type": "tool", "tags": {"tmux"}, "description": "List all active tmux sessions"},
)
def sessions(state):
    """List tmux sessions."""
    try:
        return [s.to_dict() for s in state.tracker.transport.list_sessions()]
    except TmuxError as e:
        return table_error_response(str(e))


@app.command(
    display="markdown",
    fastmcp={"type": "tool", "tags": {"tmux"}, "description": "Find a tmux session by name"},
)
def find_session(state, name: str) -> dict[str, Any]:
    """Find a session by name.

    Args:
        state: Application state.
        name: Exact session name.
    """
    try:
        session = state.tracker.transport.find_session(name)
    except TmuxError as e:
        return markdown_error_response(str(e))

    if session is None:
        return {
            "elements": [{"type": "text", "content": f"Session not found: {name}"}],
            "frontmatter": {"status": "not_found", "name": name},
        }
    return {"elements": [], "frontmatter": {"status": "found", **session.to_dict()}}


@app.command(
    display="table",
    headers=["id", "name", "active", "session_id"],
    fastmcp={"type": "tool", "tags": {"tmux"}, "description": "List windows in a tmux session"},
)
def windows(state, session_id: str):
    """List windows in a session."""
    try:
        return [w.to_dict() for w in state.tracker.transport.list_windows(session_id)]
    except TmuxError as e:
        return table_error_response(str(e))


@app.command(
    display="table",
    headers=["id", "window_id", "active", "height", "width", "title"],
    fastmcp={"type": "tool", "tags": {"tmux"}, "description": "List panes in a tmux window"},
)
def panes(state, window_id: str):
    """List panes in a window."""
    try:
        return [p.to_dict() for p in state.tracker.transport.list_panes(window_id)]
    except TmuxError as e:
        return table_error_response(str(e))


@app.command(
    display="markdown",
    fastmcp={
        "type": "tool",
        "mime_type": "text/markdown",
        "tags": {"inspection", "output"},
        "description": "Capture content from a tmux pane",
    },
)
def capture(state, pane: Target, lines: int = 200) -> dict[str, Any]:
    """Capture the last lines of a pane.

    Args:
        state: Application state.
        pane: Target pane.
        lines: Number of lines to capture.
    """
    try:
        content = state.tracker.transport.capture(pane, lines)
    except (TmuxError, ValueError) as e:
        return markdown_error_response(str(e), pane=pane)

    return {
        "elements": [{"type": "code_block", "content": content or "No content captured", "language": "text"}],
        "frontmatter": {"pane": pane, "lines": lines},
    }


@app.command(
    display="markdown",
    fastmcp={"type": "tool", "tags": {"tmux"}, "description": "Create a new tmux session"},
)
def new_session(state, name: str) -> dict[str, Any]:
    """Create a detached session."""
    try:
        session = state.tracker.transport.create_session(name)
    except TmuxError as e:
        return markdown_error_response(str(e))
    return {"elements": [{"type": "text", "content": f"Session created: {session.name}"}], "frontmatter": session.to_dict()}


@app.command(
    display="markdown",
    fastmcp={"type": "tool", "tags": {"tmux"}, "description": "Create a new window in a tmux session"},
)
def new_window(state, session_id: str, name: str) -> dict[str, Any]:
    """Create a window in a session."""
    try:
        window = state.tracker.transport.create_window(session_id, name)
    except TmuxError as e:
        return markdown_error_response(str(e))
    return {"elements": [{"type": "text", "content": f"Window created: {window.name}"}], "frontmatter": window.to_dict()}


@app.command(
    display="markdown",
    fastmcp={"type": "tool", "tags": {"tmux"}, "description": "Split a tmux pane"},
)
def split(state, target: Target, vertical: bool = False) -> dict[str, Any]:
    """Split a pane and report the new pane id."""
    try:
        pane_id = state.tracker.transport.split_pane(target, vertical=vertical)
    except TmuxError as e:
        return markdown_error_response(str(e))
    return {"elements": [{"type": "text", "content": f"Pane created: {pane_id}"}], "frontmatter": {"pane": pane_id}}


@app.command(
    display="markdown",
    fastmcp={"type": "tool", "tags": {"inspection"}, "description": "Detect shell type and directory of a pane"},
)
def detect(state, pane: Target) -> dict[str, Any]:
    """Run shell detection in a pane.

    Args:
        state: Application state.
        pane: Target pane.
    """
    try:
        detection = state.tracker.detect(pane)
    except TmuxError as e:
        return markdown_error_response(str(e), pane=pane)

    if detection is None:
        return {
            "elements": [{"type": "text", "content": "Shell detection failed: no SHELL_TYPE/PWD_PATH in pane output"}],
            "frontmatter": {"pane": pane, "status": "failed"},
        }
    return {"elements": [], "frontmatter": {"pane": pane, "status": "detected", **detection.to_dict()}}
