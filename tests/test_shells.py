"""Completion hooks and the tracker against real shells in a private tmux server.

Skipped when tmux or the shell under test is not installed.
"""

import shutil
import time
import uuid

import pytest

from panewatch.config import ConfigManager
from panewatch.shell import get_dialect
from panewatch.tmux import TmuxTransport, capture_last_n, run_tmux, tmux_call
from panewatch.tracking import ExecutionStatus, ExecutionTracker
from panewatch.tracking.markers import hooked_command, make_markers, scan

pytestmark = pytest.mark.skipif(shutil.which("tmux") is None, reason="tmux is not installed")

SHELLS = {
    "bash": ["env", "HISTFILE=/dev/null", "bash", "--norc", "--noprofile", "-i"],
    "zsh": ["env", "HISTFILE=/dev/null", "zsh", "-f", "-i"],
    "sh": ["env", "-u", "ENV", "sh", "-i"],
}


def wait_for(predicate, timeout: float = 10.0, interval: float = 0.05):
    """Return the first truthy value of ``predicate`` or fail the test."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        value = predicate()
        if value:
            return value
        time.sleep(interval)
    pytest.fail(f"Condition not met within {timeout}s")


def screen(pane: str) -> str:
    return capture_last_n(pane, 500)


def has_line(pane: str, text: str) -> bool:
    return text in [line.strip() for line in screen(pane).splitlines()]


@pytest.fixture
def tmux_server(tmp_path_factory, monkeypatch):
    """Point every tmux call at a server of its own, killed afterwards."""
    monkeypatch.setenv("TMUX_TMPDIR", str(tmp_path_factory.mktemp("tmux")))
    monkeypatch.delenv("TMUX", raising=False)
    monkeypatch.delenv("TMUX_PANE", raising=False)
    yield
    run_tmux(["kill-server"])


@pytest.fixture
def spawn_shell(tmux_server):
    """Start a shell in a new session and return its pane id once it prompts."""

    def spawn(shell: str) -> str:
        argv = SHELLS[shell]
        if shutil.which(shell) is None:
            pytest.skip(f"{shell} is not installed")
        pane = tmux_call(
            ["new-session", "-d", "-s", f"pw_{shell}", "-x", "200", "-y", "50", "-P", "-F", "#{pane_id}", *argv]
        ).strip()
        wait_for(lambda: screen(pane).strip())
        return pane

    return spawn


@pytest.mark.parametrize(
    "shell, dialect_name",
    [("bash", "bash"), ("zsh", "zsh"), ("sh", "sh"), ("sh", "unknown")],
)
def test_hook_fires_once_for_marked_command(spawn_shell, shell, dialect_name):
    pane = spawn_shell(shell)
    transport = TmuxTransport()
    dialect = get_dialect(dialect_name)
    start, end = make_markers(uuid.uuid4().hex)

    transport.send(pane, dialect.setup_script(start, end))
    transport.send(pane, "echo plain")
    wait_for(lambda: has_line(pane, "plain"))
    # The shell finished the prompt for the previous line before reading this one
    transport.send(pane, "echo next")
    wait_for(lambda: has_line(pane, "next"))
    assert end not in screen(pane)

    transport.send(pane, hooked_command("(exit 3)", start, dialect.command_prefix()))

    def resolved():
        result = scan(screen(pane), start, end)
        return result if result.exit_code is not None else None

    result = wait_for(resolved)
    assert result.exit_code == 3
    assert result.output == ""
    assert screen(pane).count(end) == 1

    transport.send(pane, "echo again")
    wait_for(lambda: has_line(pane, "again"))
    transport.send(pane, "echo last")
    wait_for(lambda: has_line(pane, "last"))
    assert screen(pane).count(end) == 1


@pytest.mark.parametrize("shell", ["bash", "zsh", "sh"])
def test_tracker_resolves_commands(spawn_shell, shell):
    pane = spawn_shell(shell)
    tracker = ExecutionTracker(
        transport=TmuxTransport(),
        config=ConfigManager(data={"default": {"grace_period": 30.0}}),
    )

    inline = tracker.wait(tracker.submit(pane, "echo inline; (exit 4)"), interval=0.1, timeout=10)
    assert inline.status == ExecutionStatus.ERROR
    assert inline.exit_code == 4
    assert inline.result_output == "inline"

    hooked_id = tracker.submit(pane, "echo hooked", detect_shell=True)
    hooked = tracker.wait(hooked_id, interval=0.1, timeout=10)
    assert hooked.protocol == "hooked"
    assert hooked.shell_type == shell
    assert hooked.status == ExecutionStatus.COMPLETED
    assert hooked.exit_code == 0
    assert hooked.result_output == "hooked"
    assert hooked.retry_count == 0

    tracker.close()
