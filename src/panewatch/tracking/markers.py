"""Marker construction and pane text scanning.

A tracked command is bracketed by a start marker, echoed before it runs, and
an end marker followed by an ``exit_code: N`` line once it finishes. Markers
embed the execution id so scrollback from other executions on the same pane
can never match.

PUBLIC API:
  - make_markers: Start/end marker pair for an execution id
  - inline_command: Command line that prints its own markers and exit code
  - hooked_command: Command line for a pane with a dialect hook installed
  - scan: Locate markers in captured text and extract output and exit code
  - MarkerScan: Result of a scan
"""

import re
from dataclasses import dataclass
from typing import Optional

from ..shell import EXIT_CODE_LABEL, split_quote, strip_ansi

START_PREFIX = "PANEWATCH_START_"
END_PREFIX = "PANEWATCH_END_"
_TOKEN_LEN = 16

_EXIT_CODE_RE = re.compile(re.escape(EXIT_CODE_LABEL) + r"\s*(-?\d+)")

# Exit code lines are looked for this many lines past the end marker; the sh
# hook prints it right before the prompt, so it may share a line with it.
_EXIT_CODE_WINDOW = 5


def make_markers(execution_id: str) -> tuple[str, str]:
    """Return the (start, end) marker pair for an execution."""
    token = execution_id.replace("-", "")[:_TOKEN_LEN]
    return f"{START_PREFIX}{token}", f"{END_PREFIX}{token}"


def inline_command(command: str, start_marker: str, end_marker: str) -> str:
    """Wrap a command so it announces its own boundaries.

    ``$?`` is expanded as printf's argument, so it still holds the command's
    status. The typed line carries the markers only as split literals.
    """
    command = command.rstrip("\n").rstrip().rstrip(";")
    # A trailing "&" already terminates the command; "&;" is a syntax error.
    sep = " " if command.endswith("&") and not command.endswith("&&") else "; "
    return (
        f"echo {split_quote(start_marker)}; {command}{sep}"
        f"printf '%s\\n{EXIT_CODE_LABEL} %s\\n' {split_quote(end_marker)} \"$?\""
    )


def hooked_command(command: str, start_marker: str, prefix: str = "") -> str:
    """Command line for a pane whose shell hook prints the end marker.

    The bash and zsh hooks compare the executed line against the start
    marker, so it must appear literally here.
    """
    command = command.rstrip("\n").rstrip().rstrip(";")
    return f"{prefix}echo {start_marker}; {command}"


@dataclass
class MarkerScan:
    """What a capture revealed about one execution.

    Attributes:
        started: The start marker appears somewhere in the capture.
        ended: The end marker appears somewhere in the capture. The command
            has run even when its start marker scrolled out of the capture.
        running: The start marker was printed as output (a line of its own).
        finished: Both markers were found, end after start.
        output: Text between the markers (finished only).
        partial_output: Text after the last start marker (unfinished only).
        exit_code: Exit code following the end marker, if any.
        reason: Why the scan did not finish, for diagnostics.
    """

    started: bool = False
    ended: bool = False
    running: bool = False
    finished: bool = False
    output: Optional[str] = None
    partial_output: Optional[str] = None
    exit_code: Optional[int] = None
    reason: Optional[str] = None


def _last_index(lines: list[str], needle: str, stop: Optional[int] = None) -> int:
    end = len(lines) if stop is None else stop
    for i in range(end - 1, -1, -1):
        if needle in lines[i]:
            return i
    return -1


def scan(text: str, start_marker: str, end_marker: str) -> MarkerScan:
    """Scan captured pane text for one execution's markers.

    The last occurrence of each marker wins. Output is the lines strictly
    between the start and end marker lines, plus any text printed before the
    end marker on its own line (output without a trailing newline).

    Args:
        text: Captured pane content (ANSI escapes are stripped here).
        start_marker: Execution's start marker.
        end_marker: Execution's end marker.
    """
    lines = strip_ansi(text).replace("\r", "").split("\n")
    result = MarkerScan()

    start_idx = _last_index(lines, start_marker)
    end_idx = _last_index(lines, end_marker)

    result.started = start_idx >= 0
    result.ended = end_idx >= 0
    result.running = any(line.strip() == start_marker for line in lines)

    if start_idx < 0 and end_idx < 0:
        result.reason = "start and end markers not found"
        return result
    if start_idx < 0:
        result.reason = "end marker found without start marker"
        return result
    if end_idx < 0 or end_idx <= start_idx:
        result.reason = "end marker not found after start marker"
        result.partial_output = "\n".join(lines[start_idx + 1 :]).strip()
        return result

    result.finished = True
    body = lines[start_idx + 1 : end_idx]
    before_end = lines[end_idx].split(end_marker, 1)[0].strip()
    if before_end:
        body.append(before_end)
    result.output = "\n".join(body).strip()

    after_end = lines[end_idx].split(end_marker, 1)[1]
    for line in [after_end] + lines[end_idx + 1 : end_idx + 1 + _EXIT_CODE_WINDOW]:
        match = _EXIT_CODE_RE.search(line)
        if match:
            result.exit_code = int(match.group(1))
            break
    else:
        result.reason = "exit code missing after end marker"

    return result
