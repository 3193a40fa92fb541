"""Parse the output of the shell detection script.

PUBLIC API:
  - ShellDetection: Detected shell type, working directory and system info
  - detect_shell: Find detection tags in captured pane text
  - strip_ansi: Remove ANSI escape sequences
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

# Lines inspected from the bottom of the capture; banners and scrollback can
# sit above the tags.
DETECTION_WINDOW = 10

_ANSI_RE = re.compile(
    r"\x1b\[[0-9;?]*[A-Za-z]"
    r"|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)"
    r"|\x1b[()][0-9A-Za-z]"
)


def strip_ansi(text: str) -> str:
    """Strip ANSI escape sequences from text."""
    return _ANSI_RE.sub("", text)


@dataclass(frozen=True)
class ShellDetection:
    """Result of running the detection script in a pane."""

    shell_type: str
    current_working_directory: str
    system_info: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "shell_type": self.shell_type,
            "current_working_directory": self.current_working_directory,
            "system_info": self.system_info,
        }


def detect_shell(text: str, window: int = DETECTION_WINDOW) -> Optional[ShellDetection]:
    """Find SHELL_TYPE, PWD_PATH and SYSTEM_INFO tags in captured text.

    Only the last ``window`` lines are searched. SHELL_TYPE and PWD_PATH are
    both required; SYSTEM_INFO is optional and keeps everything after the
    first ``=``.

    Args:
        text: Captured pane content.
        window: Number of trailing lines to inspect (at least 10).

    Returns:
        ShellDetection, or None when a required tag is missing.
    """
    if not text:
        return None

    lines = strip_ansi(text).splitlines()
    shell_type = None
    cwd = None
    system_info = None

    for line in lines[-max(window, DETECTION_WINDOW) :]:
        line = line.strip()
        if line.startswith("SHELL_TYPE="):
            shell_type = line.split("=", 1)[1].strip() or None
        elif line.startswith("PWD_PATH="):
            cwd = line.split("=", 1)[1].strip() or None
        elif line.startswith("SYSTEM_INFO="):
            system_info = line.split("=", 1)[1].strip() or None

    if shell_type and cwd:
        logger.debug(f"Detected shell {shell_type} in {cwd}")
        return ShellDetection(shell_type=shell_type, current_working_directory=cwd, system_info=system_info)

    logger.debug("Missing SHELL_TYPE or PWD_PATH in captured text")
    return None
