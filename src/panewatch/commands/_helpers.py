"""Shared helper functions for commands.

PUBLIC API:
  - truncate_command: Shorten a command for frontmatter and tables
  - record_markdown: Markdown response for one execution record
  - record_row: Table row for one execution record
  - cap_output: Keep only the tail of long output
"""

from typing import Any

from ..tracking import ExecutionRecord, ExecutionStatus

__all__ = ["truncate_command", "record_markdown", "record_row", "cap_output"]

_MAX_OUTPUT_LINES = 200


def truncate_command(command: str, limit: int = 50) -> str:
    return command[:limit] + ("..." if len(command) > limit else "")


def cap_output(output: str) -> tuple[str, int]:
    """Cap output to _MAX_OUTPUT_LINES, returning (output, total_lines).

    Returns total_lines=0 when not truncated.
    """
    lines = output.splitlines()
    if len(lines) <= _MAX_OUTPUT_LINES:
        return output, 0
    return "\n".join(lines[-_MAX_OUTPUT_LINES:]), len(lines)


def record_markdown(record: ExecutionRecord) -> dict[str, Any]:
    """Build the markdown response for an execution.

    Pending and running executions show how to keep polling; terminal ones
    show their output, or the diagnostic when there is none.
    """
    elements: list[dict[str, Any]] = []

    if not record.is_terminal:
        elements.append({"type": "text", "content": f"Command still executing ({record.status.value})"})
        if record.diagnostic:
            elements.append({"type": "blockquote", "content": record.diagnostic})
        elements.append({"type": "blockquote", "content": f'Use `result(execution_id="{record.id}")` to check again'})
    else:
        if record.result_output:
            output, truncated = cap_output(record.result_output)
            if truncated:
                elements.append(
                    {
                        "type": "blockquote",
                        "content": f"Output truncated: showing last {_MAX_OUTPUT_LINES} of {truncated} lines",
                    }
                )
            elements.append({"type": "code_block", "content": output, "language": "text"})
        elif record.status == ExecutionStatus.COMPLETED:
            elements.append({"type": "text", "content": "(no output)"})
        if record.diagnostic:
            elements.append({"type": "blockquote", "content": record.diagnostic})

    frontmatter: dict[str, Any] = {
        "id": record.id,
        "pane": record.pane_target,
        "command": truncate_command(record.command_text),
        "status": record.status.value,
    }
    if record.exit_code is not None:
        frontmatter["exit_code"] = record.exit_code
    if record.duration is not None:
        frontmatter["elapsed"] = round(record.duration, 2)
    if record.retry_count:
        frontmatter["retries"] = record.retry_count

    return {"elements": elements, "frontmatter": frontmatter}


def record_row(record: ExecutionRecord) -> dict[str, Any]:
    """Table row for execution listings."""
    return {
        "ID": record.id,
        "Pane": record.pane_target,
        "Command": truncate_command(record.command_text, 40),
        "Status": record.status.value,
        "Exit": "-" if record.exit_code is None else str(record.exit_code),
        "Elapsed": "-" if record.duration is None else f"{record.duration:.1f}s",
    }
