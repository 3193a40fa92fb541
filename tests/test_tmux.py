"""Tests for tmux invocations, with the tmux binary replaced by a recorder."""

import subprocess
import typing as t

import pytest

from panewatch.tmux import (
    CurrentPaneError,
    SessionInfo,
    TmuxTransport,
    TransportError,
    capture_last_n,
    create_session,
    find_session,
    list_panes,
    list_sessions,
    list_windows,
    send_keys,
    send_literal,
    split_pane,
    tmux_call,
)
from panewatch.tmux.core import run_tmux


class TmuxRecorder:
    """Stands in for subprocess.run, replaying canned (code, stdout, stderr)."""

    def __init__(self):
        self.calls: list[list[str]] = []
        self.responses: list[tuple[int, str, str]] = []

    def __call__(self, cmd, **kwargs):
        assert cmd[0] == "tmux"
        self.calls.append(cmd[1:])
        code, out, err = self.responses.pop(0) if self.responses else (0, "", "")
        return subprocess.CompletedProcess(cmd, code, out, err)


@pytest.fixture
def tmux(monkeypatch):
    recorder = TmuxRecorder()
    monkeypatch.setattr("panewatch.tmux.core.subprocess.run", recorder)
    monkeypatch.delenv("TMUX", raising=False)
    return recorder


def test_send_literal_is_flag_safe(tmux):
    text = "-n; echo 'it''s' \"$HOME\" `id`"
    send_literal("%3", text, delay=0)
    assert tmux.calls == [
        ["send-keys", "-t", "%3", "-l", "--", text],
        ["send-keys", "-t", "%3", "Enter"],
    ]


def test_send_literal_without_enter(tmux):
    send_literal("%3", "ls", enter=False)
    assert tmux.calls == [["send-keys", "-t", "%3", "-l", "--", "ls"]]


def test_send_keys(tmux):
    send_keys("%3", "C-c")
    send_keys("%3")
    assert tmux.calls == [["send-keys", "-t", "%3", "C-c"]]


def test_refuses_current_pane(tmux, monkeypatch):
    monkeypatch.setenv("TMUX", "/tmp/tmux-1000/default,1,0")
    tmux.responses = [(0, "%3\n", "")]

    with pytest.raises(CurrentPaneError):
        send_literal("%3", "ls", delay=0)
    assert tmux.calls == [["display", "-p", "#{pane_id}"]]


def test_current_pane_error_is_transport_error():
    assert issubclass(CurrentPaneError, TransportError)


def test_tmux_call_failure(tmux):
    tmux.responses = [(1, "", "can't find pane: %9\n")]

    with pytest.raises(TransportError) as excinfo:
        tmux_call(["capture-pane", "-p", "-t", "%9"])

    assert excinfo.value.message == "Failed to execute tmux command: can't find pane: %9"
    assert excinfo.value.tmux_args == ["capture-pane", "-p", "-t", "%9"]


def test_missing_tmux_binary(monkeypatch):
    def missing(cmd, **kwargs):
        raise FileNotFoundError(2, "No such file or directory", "tmux")

    monkeypatch.setattr("panewatch.tmux.core.subprocess.run", missing)

    code, _, err = run_tmux(["list-sessions"])
    assert code == 127
    assert "No such file" in err
    with pytest.raises(TransportError):
        tmux_call(["list-sessions"])


def test_capture_last_n(tmux):
    tmux.responses = [(0, "one\n\ntwo\n\n\n", "")]

    assert capture_last_n("%3", 1000) == "one\n\ntwo\n"
    assert tmux.calls == [["capture-pane", "-p", "-J", "-t", "%3", "-S", "-1000"]]


def test_capture_last_n_rejects_non_positive(tmux):
    with pytest.raises(ValueError):
        capture_last_n("%3", 0)
    assert tmux.calls == []


class SessionFixture(t.NamedTuple):
    """Test fixture for test_list_sessions()."""

    test_id: str
    stdout: str
    expected: list[SessionInfo]


SESSION_FIXTURES: list[SessionFixture] = [
    SessionFixture(
        test_id="two_sessions",
        stdout="$0:main:1:3\n$1:build:0:1\n",
        expected=[SessionInfo("$0", "main", True, 3), SessionInfo("$1", "build", False, 1)],
    ),
    SessionFixture(test_id="empty", stdout="\n", expected=[]),
]


@pytest.mark.parametrize(
    list(SessionFixture._fields),
    SESSION_FIXTURES,
    ids=[f.test_id for f in SESSION_FIXTURES],
)
def test_list_sessions(tmux, test_id: str, stdout: str, expected: list[SessionInfo]) -> None:
    tmux.responses = [(0, stdout, "")]
    assert list_sessions() == expected


def test_list_sessions_without_server(tmux):
    tmux.responses = [(1, "", "no server running on /tmp/tmux-1000/default\n")]
    with pytest.raises(TransportError):
        list_sessions()


def test_find_session(tmux):
    tmux.responses = [(0, "$0:main:1:3\n$1:build:0:1\n", "")] * 2
    assert find_session("build") == SessionInfo("$1", "build", False, 1)
    assert find_session("nope") is None


def test_create_session(tmux):
    tmux.responses = [(0, "$4:work:0:1\n", "")]

    session = create_session("work", start_dir="/srv")

    assert session == SessionInfo("$4", "work", False, 1)
    assert tmux.calls[0][:4] == ["new-session", "-d", "-s", "work"]
    assert tmux.calls[0][-2:] == ["-c", "/srv"]


def test_list_windows_keeps_colons_in_names(tmux):
    tmux.responses = [(0, "@1:1:editor\n@2:0:logs:tail\n", "")]

    windows = list_windows("$0")

    assert [(w.id, w.name, w.active) for w in windows] == [("@1", "editor", True), ("@2", "logs:tail", False)]
    assert all(w.session_id == "$0" for w in windows)


def test_list_panes(tmux):
    tmux.responses = [(0, "%1\t@1\t1\t40\t120\tbash\n%2\t@1\t0\t40\t119\t\n", "")]

    panes = list_panes("@1")

    assert [p.pane_id for p in panes] == ["%1", "%2"]
    assert panes[0].active and not panes[1].active
    assert (panes[0].height, panes[0].width, panes[0].title) == (40, 120, "bash")


def test_list_panes_bad_format(tmux):
    tmux.responses = [(0, "%1\t@1\n", "")]
    with pytest.raises(TransportError):
        list_panes("@1")


def test_split_pane(tmux):
    tmux.responses = [(0, "%7\n", "")]

    assert split_pane("%1", vertical=True, start_dir="/srv") == "%7"
    assert tmux.calls == [["split-window", "-t", "%1", "-v", "-P", "-F", "#{pane_id}", "-c", "/srv"]]


def test_transport_send_and_capture(tmux):
    transport = TmuxTransport(enter_delay=0)
    tmux.responses = [(0, "", ""), (0, "", ""), (0, "out\n", "")]

    transport.send("%2", "echo out")
    assert transport.capture("%2", 50) == "out\n"
    assert tmux.calls[0] == ["send-keys", "-t", "%2", "-l", "--", "echo out"]
    assert tmux.calls[2] == ["capture-pane", "-p", "-J", "-t", "%2", "-S", "-50"]


def test_transport_structure_queries(tmux):
    transport = TmuxTransport(enter_delay=0)
    tmux.responses = [
        (0, "$0:main:1:2\n", ""),
        (0, "$0:main:1:2\n", ""),
        (0, "@1:1:editor\n", ""),
        (0, "%1\t@1\t1\t40\t120\tbash\n", ""),
    ]

    assert transport.list_sessions() == [SessionInfo("$0", "main", True, 2)]
    assert transport.find_session("main") == SessionInfo("$0", "main", True, 2)
    assert [w.id for w in transport.list_windows("$0")] == ["@1"]
    assert [p.pane_id for p in transport.list_panes("@1")] == ["%1"]
    assert [call[0] for call in tmux.calls] == ["list-sessions", "list-sessions", "list-windows", "list-panes"]


def test_transport_creates_structure(tmux):
    transport = TmuxTransport(enter_delay=0)
    tmux.responses = [(0, "$4:work:0:1\n", ""), (0, "@3:1:logs\n", ""), (0, "%9\n", "")]

    assert transport.create_session("work").id == "$4"
    window = transport.create_window("$4", "logs")
    assert (window.id, window.name, window.session_id) == ("@3", "logs", "$4")
    assert transport.split_pane("%1", vertical=True, start_dir="/srv") == "%9"

    assert tmux.calls[0][:4] == ["new-session", "-d", "-s", "work"]
    assert tmux.calls[1][:5] == ["new-window", "-t", "$4:", "-n", "logs"]
    assert tmux.calls[2] == ["split-window", "-t", "%1", "-v", "-P", "-F", "#{pane_id}", "-c", "/srv"]


def test_structure_failure_raises_transport_error(tmux):
    transport = TmuxTransport(enter_delay=0)
    tmux.responses = [(1, "", "can't find session: nope\n")]

    with pytest.raises(TransportError):
        transport.list_windows("nope")
