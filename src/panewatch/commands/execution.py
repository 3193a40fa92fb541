"""Tracked execution commands.

PUBLIC API:
  - execute: Submit a command to a pane
  - result: Poll an execution and show its state
  - cancel: Cancel a pending or running execution
  - active: List unresolved executions
  - executions: List every tracked execution
  - history: Show finished executions from the history file
  - cleanup: Evict old finished executions
"""

from typing import Any, Optional

from ..app import app
from ..errors import markdown_error_response, table_error_response
from ..tmux import TmuxError
from ..tracking import ExecutionNotFoundError
from ..types import Target
from ._helpers import record_markdown, record_row, truncate_command


@app.command(
    display="markdown",
    fastmcp={
        "type": "tool",
        "mime_type": "text/markdown",
        "tags": {"execution"},
        "description": (
            "Execute a command in a tmux pane and return an execution id. "
            "Avoid heredocs and trailing comments; they break command wrapping."
        ),
    },
)
def execute(
    state,
    command: str,
    pane: Target,
    timeout: Optional[float] = None,
    detect_shell: Optional[bool] = None,
) -> dict[str, Any]:
    """Submit a command to a pane without waiting for it.

    Args:
        state: Application state.
        command: Command to execute.
        pane: Target pane (%id or session:window.pane).
        timeout: Seconds before the execution is marked as timed out.
        detect_shell: Use the shell's completion hook instead of inline markers.

    Returns:
        Markdown formatted result with the execution id.
    """
    try:
        execution_id = state.tracker.submit(pane, command, timeout=timeout, detect_shell=detect_shell)
    except (TmuxError, ValueError) as e:
        return markdown_error_response(str(e), pane=pane)

    return {
        "elements": [
            {"type": "text", "content": "Command execution started."},
            {"type": "blockquote", "content": f'Use `result(execution_id="{execution_id}")` to get the output'},
        ],
        "frontmatter": {
            "id": execution_id,
            "pane": pane,
            "command": truncate_command(command),
            "status": "pending",
        },
    }


@app.command(
    display="markdown",
    fastmcp={
        "type": "tool",
        "mime_type": "text/markdown",
        "tags": {"execution"},
        "description": "Get the status and output of an executed command",
    },
)
def result(state, execution_id: str) -> dict[str, Any]:
    """Poll an execution and show its current state.

    Args:
        state: Application state.
        execution_id: Id returned by execute.
    """
    try:
        record = state.tracker.poll(execution_id)
    except ExecutionNotFoundError as e:
        return markdown_error_response(str(e), execution_id=execution_id)
    except TmuxError as e:
        return markdown_error_response(f"Could not read pane: {e}", execution_id=execution_id)

    return record_markdown(record)


@app.command(
    display="markdown",
    fastmcp={"type": "tool", "tags": {"execution"}, "description": "Cancel a running command"},
)
def cancel(state, execution_id: str) -> dict[str, Any]:
    """Cancel an execution and interrupt its pane.

    Args:
        state: Application state.
        execution_id: Id returned by execute.
    """
    try:
        cancelled = state.tracker.cancel(execution_id)
    except ExecutionNotFoundError as e:
        return markdown_error_response(str(e), execution_id=execution_id)

    record = state.tracker.get(execution_id)
    response = record_markdown(record)
    if not cancelled:
        response["elements"].insert(
            0, {"type": "text", "content": f"Execution already {record.status.value}; nothing to cancel"}
        )
    return response


@app.command(
    display="table",
    headers=["ID", "Pane", "Command", "Status", "Exit", "Elapsed"],
    fastmcp={"type": "resource", "tags": {"execution"}, "description": "List running commands"},
)
def active(state):
    """List pending and running executions, newest first."""
    return [record_row(record) for record in state.tracker.list_active()]


@app.command(
    display="table",
    headers=["ID", "Pane", "Command", "Status", "Exit", "Elapsed"],
    fastmcp={"type": "resource", "tags": {"execution"}, "description": "List all tracked commands"},
)
def executions(state):
    """List every execution this process tracks, newest first."""
    return [record_row(record) for record in state.tracker.list_all()]


@app.command(
    display="table",
    headers=["ID", "Pane", "Command", "Status", "Exit", "Elapsed"],
    fastmcp={"type": "tool", "tags": {"execution"}, "description": "Show finished commands from the history file"},
)
def history(state, limit: int = 50):
    """Show finished executions recorded in the history file.

    Args:
        state: Application state.
        limit: Maximum number of entries.
    """
    tracker = state.tracker
    if tracker.history is None:
        return table_error_response("history_file is not configured")

    return [
        {
            "ID": entry.get("id", "-"),
            "Pane": entry.get("pane", "-"),
            "Command": truncate_command(entry.get("command", ""), 40),
            "Status": entry.get("status", "-"),
            "Exit": "-" if entry.get("exit_code") is None else str(entry["exit_code"]),
            "Elapsed": "-" if entry.get("duration") is None else f"{entry['duration']:.1f}s",
        }
        for entry in tracker.history.read(limit)
    ]


@app.command(
    display="markdown",
    fastmcp={"type": "tool", "tags": {"execution"}, "description": "Remove old finished commands"},
)
def cleanup(state, max_age_minutes: Optional[float] = None) -> dict[str, Any]:
    """Evict finished executions and time out overdue ones.

    Args:
        state: Application state.
        max_age_minutes: Minimum age of evicted executions. Defaults to config.
    """
    timed_out = state.tracker.sweep_timeouts()
    evicted = state.tracker.cleanup_old(max_age_minutes)
    return {
        "elements": [{"type": "text", "content": f"Removed {evicted} finished executions"}],
        "frontmatter": {"evicted": evicted, "timed_out": len(timed_out), "remaining": len(state.tracker.registry)},
    }
