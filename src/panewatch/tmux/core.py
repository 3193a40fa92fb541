"""Core tmux operations - shared utilities for all tmux modules.

PUBLIC API:
  - run_tmux: Execute tmux command and return result
  - tmux_call: Execute tmux command, raising TransportError on failure
  - parse_format_line: Parse tmux format string output into dict
"""

import logging
import os
import subprocess
from typing import Optional, Tuple, List

from .exceptions import TransportError

logger = logging.getLogger(__name__)


def run_tmux(args: List[str]) -> Tuple[int, str, str]:
    """Run tmux command, return (returncode, stdout, stderr).

    A missing tmux binary is reported as returncode 127 instead of raising.
    """
    cmd = ["tmux"] + args
    try:
        result = subprocess.run(cmd, capture_output=True, text=True)
    except OSError as e:
        return 127, "", str(e)
    return result.returncode, result.stdout, result.stderr


def tmux_call(args: List[str]) -> str:
    """Run tmux command and return stdout.

    Args:
        args: Arguments after the tmux binary.

    Returns:
        Raw stdout of the invocation.

    Raises:
        TransportError: If tmux exits nonzero or cannot be started.
    """
    code, stdout, stderr = run_tmux(args)
    if code != 0:
        message = stderr.strip() or f"tmux exited with status {code}"
        logger.error(f"tmux {args[0] if args else ''} failed: {message}")
        raise TransportError(f"Failed to execute tmux command: {message}", args)
    return stdout


def parse_format_line(line: str, delimiter: str = ":") -> dict:
    """Parse tmux format string output into dict."""
    parts = line.strip().split(delimiter)
    return {str(i): part for i, part in enumerate(parts)}


def get_current_pane() -> Optional[str]:
    """Get current tmux pane ID if inside tmux."""
    if not os.environ.get("TMUX"):
        return None

    code, stdout, _ = run_tmux(["display", "-p", "#{pane_id}"])
    if code == 0:
        return stdout.strip()
    return None


def is_current_pane(pane_id: str) -> bool:
    """Check if given pane ID is the current pane.

    Args:
        pane_id: Pane ID to check (e.g., "%42")

    Returns:
        True if pane_id matches current pane
    """
    current = get_current_pane()
    return current == pane_id if current else False
