"""Shell dialects - per-shell hooks that announce command completion.

Each supported shell has a different "run this after every command line"
mechanism. A dialect turns a start/end marker pair into a setup script that
installs a small hook, plus the matching cleanup script and an optional
prefix that must precede the tracked command for the hook to fire.

The hook always reads ``$?`` first, prints the end marker on its own line
followed by ``exit_code: N``. Markers are written into scripts as two
adjacent quoted halves so the script text itself never contains them.

PUBLIC API:
  - ShellDialect: Frozen descriptor of one shell family
  - DIALECTS: Closed table of supported dialects
  - get_dialect: Look up a dialect by shell name (falls back to unknown)
  - DETECTION_SCRIPT: Script printing SHELL_TYPE, PWD_PATH and SYSTEM_INFO
  - EXIT_CODE_LABEL: Label of the exit code line printed by every hook
"""

from dataclasses import dataclass
from typing import Callable

from ..types import ShellType

EXIT_CODE_LABEL = "exit_code:"

DETECTION_SCRIPT = (
    'if [ -n "$BASH_VERSION" ]; then echo "SHELL_TYPE=bash"; '
    'elif [ -n "$ZSH_VERSION" ]; then echo "SHELL_TYPE=zsh"; '
    'elif [ "$(basename -- "$0")" = "sh" ] || [ "$0" = "-sh" ] || [ "$0" = "/bin/sh" ] || [ -n "$PS1" ]; '
    'then echo "SHELL_TYPE=sh"; '
    'else echo "SHELL_TYPE=unknown"; fi; '
    'echo "PWD_PATH=$(pwd)"; '
    "if command -v uname >/dev/null 2>&1; "
    "then echo \"SYSTEM_INFO=$(uname -a 2>/dev/null || echo 'System information unavailable')\"; "
    'else echo "SYSTEM_INFO=System information unavailable"; fi'
)


def split_quote(marker: str) -> str:
    """Quote a marker as two adjacent single-quoted halves.

    The shell joins the halves back into the marker, but the literal marker
    never appears in the typed line.
    """
    if "'" in marker:
        raise ValueError(f"Marker must not contain single quotes: {marker!r}")
    mid = max(1, len(marker) // 2)
    return f"'{marker[:mid]}''{marker[mid:]}'"


# bash: PROMPT_COMMAND runs before each prompt; history 1 is the line just run.

_BASH_UNHOOK = 'PROMPT_COMMAND="${PROMPT_COMMAND//__pwh;/}"; unset __PW_START __PW_END __PW_ONCE;'


def _bash_setup(start_marker: str, end_marker: str) -> str:
    return (
        f"__PW_START={split_quote(start_marker)}; __PW_END={split_quote(end_marker)}; __PW_ONCE=0; "
        f"__pwc() {{ {_BASH_UNHOOK} }}; "
        "__pwh() { local e=$?; if [[ $__PW_ONCE -eq 0 ]]; then local c; "
        "c=$(HISTTIMEFORMAT= history 1); "
        'if [[ "$c" == *"$__PW_START"* ]]; then __PW_ONCE=1; '
        f'echo "$__PW_END"; echo "{EXIT_CODE_LABEL} $e"; __pwc; fi; fi; return $e; }}; '
        'PROMPT_COMMAND="__pwh;${PROMPT_COMMAND//__pwh;/}"'
    )


# zsh: precmd_functions run before each prompt; fc -ln -1 is the line just run.

_ZSH_UNHOOK = "precmd_functions=(${precmd_functions:#__pwh}); unset __PW_START __PW_END __PW_ONCE;"


def _zsh_setup(start_marker: str, end_marker: str) -> str:
    return (
        f"__PW_START={split_quote(start_marker)}; __PW_END={split_quote(end_marker)}; __PW_ONCE=0; "
        f"__pwc() {{ {_ZSH_UNHOOK} }}; "
        "__pwh() { local e=$?; if [[ $__PW_ONCE -eq 0 ]]; then local c; c=$(fc -ln -1); "
        'if [[ "$c" == *"$__PW_START"* ]]; then __PW_ONCE=1; '
        f'echo "$__PW_END"; echo "{EXIT_CODE_LABEL} $e"; __pwc; fi; fi; }}; '
        "precmd_functions=(${precmd_functions:#__pwh} __pwh)"
    )


# sh: no per-command hook. The command prefix touches a sentinel file; the
# hook runs from PS1 and from an EXIT trap and only fires while the file
# exists, deleting it so the next prefixed command re-arms it.

_SH_PREFIX = 'touch "$__PW_TF"; '


def _sh_setup(start_marker: str, end_marker: str) -> str:
    return (
        f"__PW_END={split_quote(end_marker)}; "
        '__PW_TF="/tmp/panewatch_cmd_$$"; rm -f "$__PW_TF" 2>/dev/null; '
        '__pwh() { __pw_e=$?; if [ -f "$__PW_TF" ]; then rm -f "$__PW_TF" 2>/dev/null; '
        f'echo "$__PW_END"; echo "{EXIT_CODE_LABEL} $__pw_e"; fi; return $__pw_e; }}; '
        "trap '__pwh' EXIT; "
        'if [ -n "${__PW_PS1+x}" ]; then PS1="$__PW_PS1"; fi; '
        "__PW_PS1=\"$PS1\"; PS1='$(__pwh)'\"$PS1\""
    )


_SH_CLEANUP = (
    'if [ -n "${__PW_PS1+x}" ]; then PS1="$__PW_PS1"; unset __PW_PS1; fi; '
    'trap - EXIT; rm -f "$__PW_TF" 2>/dev/null; unset __PW_TF __PW_END; unset -f __pwh 2>/dev/null;'
)


@dataclass(frozen=True)
class ShellDialect:
    """One shell family's completion hook.

    Attributes:
        shell_type: Normalized shell name.
        build_setup: Builds the setup script from a start/end marker pair.
        cleanup: Script removing the hook.
        prefix: Text that must precede each tracked command.
    """

    shell_type: ShellType
    build_setup: Callable[[str, str], str]
    cleanup: str
    prefix: str = ""

    def detection_script(self) -> str:
        return DETECTION_SCRIPT

    def setup_script(self, start_marker: str, end_marker: str) -> str:
        return self.build_setup(start_marker, end_marker)

    def cleanup_script(self) -> str:
        return self.cleanup

    def command_prefix(self) -> str:
        return self.prefix


BASH = ShellDialect(
    shell_type="bash",
    build_setup=_bash_setup,
    cleanup=f"{_BASH_UNHOOK} unset -f __pwh __pwc 2>/dev/null;",
)

ZSH = ShellDialect(
    shell_type="zsh",
    build_setup=_zsh_setup,
    cleanup=f"{_ZSH_UNHOOK} unfunction __pwh __pwc 2>/dev/null;",
)

SH = ShellDialect(shell_type="sh", build_setup=_sh_setup, cleanup=_SH_CLEANUP, prefix=_SH_PREFIX)

# Unrecognized shells get the sh mechanism: least precise, never blocks.
UNKNOWN = ShellDialect(shell_type="unknown", build_setup=_sh_setup, cleanup=_SH_CLEANUP, prefix=_SH_PREFIX)

DIALECTS: dict[str, ShellDialect] = {d.shell_type: d for d in (BASH, ZSH, SH, UNKNOWN)}


def get_dialect(shell_type: str | None) -> ShellDialect:
    """Look up a dialect by shell name.

    Args:
        shell_type: Shell name; surrounding whitespace and case are ignored.

    Returns:
        The matching dialect, or the unknown (sh-compatible) dialect.
    """
    if not shell_type:
        return UNKNOWN
    return DIALECTS.get(shell_type.strip().lower(), UNKNOWN)
