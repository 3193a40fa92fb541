"""Shell dialects and shell detection.

PUBLIC API:
  - ShellDialect: Frozen descriptor of one shell family
  - get_dialect: Look up a dialect by shell name
  - DIALECTS: Table of supported dialects
  - DETECTION_SCRIPT: Script identifying shell, directory and system
  - ShellDetection: Parsed detection result
  - detect_shell: Parse detection tags from captured text
  - strip_ansi: Remove ANSI escape sequences
"""

from .dialects import DETECTION_SCRIPT, DIALECTS, EXIT_CODE_LABEL, ShellDialect, get_dialect, split_quote
from .detection import ShellDetection, detect_shell, strip_ansi

__all__ = [
    "DETECTION_SCRIPT",
    "DIALECTS",
    "EXIT_CODE_LABEL",
    "ShellDialect",
    "get_dialect",
    "split_quote",
    "ShellDetection",
    "detect_shell",
    "strip_ansi",
]
