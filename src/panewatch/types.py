"""Type definitions for panewatch.

Panes are addressed by whatever tmux accepts as a target: a pane ID such as
"%42" or an explicit "session:window.pane".
"""

from typing import Literal

type PaneID = str  # e.g., "%42"
type Target = PaneID | str  # anything tmux resolves to a pane
type ExecutionID = str  # uuid4 hex

# Known shells - single source of truth
type ShellType = Literal["bash", "zsh", "sh", "unknown"]

# How completion is announced: markers echoed by the command line itself, or
# printed by a shell hook installed just before the command.
type MarkerProtocol = Literal["inline", "hooked"]
