"""Tests for execution records and the registry."""

import pytest

from panewatch.tracking import (
    NO_SHELL_STATUS,
    ExecutionNotFoundError,
    ExecutionRecord,
    ExecutionRegistry,
    ExecutionStatus,
)


def make_record(execution_id: str = "abc", start_time: float = 100.0) -> ExecutionRecord:
    return ExecutionRecord(
        id=execution_id,
        pane_target="%1",
        command_text="true",
        start_marker=f"PANEWATCH_START_{execution_id}",
        end_marker=f"PANEWATCH_END_{execution_id}",
        start_time=start_time,
    )


def test_transition_forward_only():
    record = make_record()
    record.transition(ExecutionStatus.RUNNING)

    with pytest.raises(ValueError):
        record.transition(ExecutionStatus.PENDING)

    record.transition(ExecutionStatus.COMPLETED, exit_code=0, output="ok", now=103.0)
    assert record.end_time == 103.0
    assert record.duration == 3.0
    assert record.result_output == "ok"

    with pytest.raises(ValueError):
        record.transition(ExecutionStatus.ERROR, exit_code=1)
    assert record.status == ExecutionStatus.COMPLETED


@pytest.mark.parametrize(
    "status, expected_exit_code",
    [
        (ExecutionStatus.COMPLETED, 0),
        (ExecutionStatus.ERROR, 2),
        (ExecutionStatus.CANCELLED, None),
        (ExecutionStatus.TIMEOUT, None),
    ],
)
def test_exit_code_only_for_completed_and_error(status, expected_exit_code):
    record = make_record()
    record.transition(status, exit_code=0 if status == ExecutionStatus.COMPLETED else 2, now=101.0)
    assert record.exit_code == expected_exit_code
    assert record.end_time == 101.0


def test_error_without_shell_status():
    record = make_record()
    record.transition(ExecutionStatus.ERROR, now=101.0)
    assert record.exit_code == NO_SHELL_STATUS


def test_non_terminal_has_no_end_time():
    record = make_record()
    record.transition(ExecutionStatus.RUNNING)
    assert record.end_time is None
    assert record.duration is None
    assert not record.is_terminal


def test_deadline():
    record = make_record(start_time=100.0)
    assert record.deadline is None
    record.timeout = 30
    assert record.deadline == 130.0


def test_registry_insert_and_get():
    registry = ExecutionRegistry()
    record = make_record()
    registry.insert(record)

    assert registry.get("abc") is record
    assert "abc" in registry
    assert len(registry) == 1
    with pytest.raises(ValueError):
        registry.insert(make_record())


def test_registry_unknown_id():
    registry = ExecutionRegistry()

    with pytest.raises(ExecutionNotFoundError) as excinfo:
        registry.get("nope")
    assert isinstance(excinfo.value, KeyError)
    assert str(excinfo.value) == "Execution not found: nope"
    assert registry.find("nope") is None

    with pytest.raises(ExecutionNotFoundError):
        with registry.locked("nope"):
            pass


def test_registry_locked_yields_record():
    registry = ExecutionRegistry()
    registry.insert(make_record())

    with registry.locked("abc") as record:
        record.transition(ExecutionStatus.RUNNING)

    assert registry.get("abc").status == ExecutionStatus.RUNNING


def test_registry_list_newest_first():
    registry = ExecutionRegistry()
    registry.insert(make_record("old", start_time=1.0))
    registry.insert(make_record("new", start_time=2.0))
    registry.get("old").transition(ExecutionStatus.CANCELLED, now=3.0)

    assert [r.id for r in registry.list()] == ["new", "old"]
    assert [r.id for r in registry.list(active_only=True)] == ["new"]


def test_registry_evict():
    registry = ExecutionRegistry()
    registry.insert(make_record("done", start_time=0.0))
    registry.insert(make_record("live", start_time=0.0))
    registry.get("done").transition(ExecutionStatus.COMPLETED, exit_code=0, now=10.0)

    assert registry.evict(60, now=50.0) == []
    evicted = registry.evict(60, now=70.0)

    assert [r.id for r in evicted] == ["done"]
    assert "done" not in registry
    assert "live" in registry
    assert registry.evict(0, now=10_000.0) == []
