"""Shared fixtures: a scripted pane transport and a controllable clock."""

import pytest

from panewatch.config import ConfigManager
from panewatch.tmux import TransportError
from panewatch.tracking import ExecutionRecord, ExecutionTracker
from panewatch.tracking.markers import inline_command


class FakeClock:
    """Manually advanced time source; ``sleep`` advances it."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def sleep(self, seconds: float) -> None:
        self.now += seconds


class FakeTransport:
    """In-memory pane transport.

    Typed lines are recorded but not echoed; tests write the pane screen
    explicitly with ``emit``.
    """

    def __init__(self):
        self.sent: list[tuple[str, str]] = []
        self.keys: list[tuple[str, tuple[str, ...]]] = []
        self.screens: dict[str, list[str]] = {}
        self.captures = 0
        self.fail_send = False
        self.fail_capture = False
        self.fail_keys = False
        self.on_send = None

    def send(self, pane_id: str, text: str) -> None:
        if self.fail_send:
            raise TransportError("Failed to execute tmux command: can't find pane")
        self.sent.append((pane_id, text))
        if self.on_send:
            self.on_send(pane_id, text)

    def send_keys(self, pane_id: str, *keys: str) -> None:
        if self.fail_keys:
            raise TransportError("Failed to execute tmux command: no server running")
        self.keys.append((pane_id, keys))

    def capture(self, pane_id: str, lines: int) -> str:
        if self.fail_capture:
            raise TransportError("Failed to execute tmux command: can't find pane")
        self.captures += 1
        return "\n".join(self.screens.get(pane_id, [])[-lines:])

    def emit(self, pane_id: str, *lines: str) -> None:
        self.screens.setdefault(pane_id, []).extend(lines)

    def finish(self, record: ExecutionRecord, *output: str, exit_code: int = 0) -> None:
        """Write a complete inline-protocol run of ``record`` to its pane."""
        typed = inline_command(record.command_text, record.start_marker, record.end_marker)
        self.emit(record.pane_target, f"$ {typed}", record.start_marker, *output, record.end_marker)
        self.emit(record.pane_target, f"exit_code: {exit_code}", "$ ")

    def sent_to(self, pane_id: str) -> list[str]:
        return [text for pane, text in self.sent if pane == pane_id]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def config():
    return ConfigManager(data={"default": {"max_retries": 2, "grace_period": 5.0}})


@pytest.fixture
def tracker(transport, config, clock):
    t = ExecutionTracker(transport=transport, config=config, clock=clock, sleep=clock.sleep)
    yield t
    t.close()
