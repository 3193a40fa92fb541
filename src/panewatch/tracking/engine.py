"""Execution tracking engine.

Submits commands to panes, then resolves them by re-reading pane text on
each poll. Nothing here blocks on command completion: ``poll`` is a single
capture and scan, and callers choose their own cadence (``wait`` is a thin
loop over it).

PUBLIC API:
  - ExecutionTracker: submit, poll, cancel, list and evict executions
"""

import logging
import threading
import time
import uuid
from typing import Callable, Optional

from ..config import ConfigManager, ExecutionConfig, get_config_manager
from ..shell import DETECTION_SCRIPT, ShellDetection, detect_shell, get_dialect
from ..tmux import TmuxTransport, TransportError
from ..tmux.transport import PaneTransport
from ..types import Target
from .history import CommandHistory
from .markers import MarkerScan, hooked_command, inline_command, make_markers, scan
from .record import NO_SHELL_STATUS, Anomaly, ExecutionRecord, ExecutionStatus
from .registry import ExecutionRegistry

logger = logging.getLogger(__name__)


class ExecutionTracker:
    """Tracks commands injected into tmux panes.

    Each tracker owns its registry; two trackers never share state.

    Args:
        transport: Pane transport. Defaults to TmuxTransport.
        config: Configuration source. Defaults to the global config manager.
        registry: Registry to use. Defaults to a fresh one.
        clock: Time source, seconds since epoch.
        sleep: Sleep function used by blocking helpers.
    """

    def __init__(
        self,
        transport: Optional[PaneTransport] = None,
        config: Optional[ConfigManager] = None,
        registry: Optional[ExecutionRegistry] = None,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.transport = transport if transport is not None else TmuxTransport()
        self.config = config if config is not None else get_config_manager()
        self.registry = registry if registry is not None else ExecutionRegistry()
        self.history = CommandHistory(self.config.history_file) if self.config.history_file else None
        self._clock = clock
        self._sleep = sleep
        self._settings: dict[str, ExecutionConfig] = {}
        self._shells: dict[str, ShellDetection] = {}
        self._pane_locks: dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    def close(self) -> None:
        """Drop all tracked state."""
        self.registry.clear()
        self._settings.clear()
        self._shells.clear()

    def _pane_lock(self, pane: Target) -> threading.Lock:
        with self._lock:
            return self._pane_locks.setdefault(pane, threading.Lock())

    # Shell detection

    def detect(self, pane: Target, attempts: Optional[int] = None, interval: float = 0.15) -> Optional[ShellDetection]:
        """Run the detection script in a pane and wait for its tags.

        The result is cached per pane and reused by later submissions.

        Returns:
            ShellDetection, or None if the tags never appeared.

        Raises:
            TransportError: If sending or capturing fails.
        """
        attempts = attempts if attempts is not None else self.config.detect_attempts
        capture_lines = self.config.get_execution_config(pane).capture_lines

        with self._pane_lock(pane):
            self.transport.send(pane, DETECTION_SCRIPT)
            for _ in range(attempts):
                self._sleep(interval)
                detection = detect_shell(self.transport.capture(pane, capture_lines))
                if detection:
                    logger.info(f"Pane {pane} runs {detection.shell_type} in {detection.current_working_directory}")
                    self._shells[pane] = detection
                    return detection

        logger.warning(f"Shell detection failed for pane {pane} after {attempts} attempts")
        return None

    def detected_shell(self, pane: Target) -> Optional[ShellDetection]:
        return self._shells.get(pane)

    def reset_pane(self, pane: Target) -> None:
        """Remove an installed completion hook from a pane."""
        detection = self._shells.pop(pane, None)
        dialect = get_dialect(detection.shell_type if detection else None)
        with self._pane_lock(pane):
            self.transport.send(pane, dialect.cleanup_script())

    # Submission

    def _compose(self, record: ExecutionRecord) -> list[str]:
        """Lines to type for a record, in order."""
        if record.protocol == "hooked":
            dialect = get_dialect(record.shell_type)
            return [
                dialect.setup_script(record.start_marker, record.end_marker),
                hooked_command(record.command_text, record.start_marker, dialect.command_prefix()),
            ]
        return [inline_command(record.command_text, record.start_marker, record.end_marker)]

    def _send(self, record: ExecutionRecord) -> None:
        with self._pane_lock(record.pane_target):
            for line in self._compose(record):
                self.transport.send(record.pane_target, line)
        record.last_sent_at = self._clock()

    def submit(
        self,
        pane: Target,
        command: str,
        timeout: Optional[float] = None,
        detect_shell: Optional[bool] = None,
    ) -> str:
        """Send a command to a pane and start tracking it.

        Returns as soon as the keystrokes are sent.

        Args:
            pane: Target pane.
            command: Command line to run.
            timeout: Seconds until an unresolved execution becomes ``timeout``.
                Defaults to the configured timeout (none unless configured).
            detect_shell: Use the shell's own completion hook instead of
                inline markers. Detection runs once per pane.

        Returns:
            The execution id.

        Raises:
            ValueError: If the command is empty.
            TransportError: If the pane could not be reached. The record is
                kept with status ``error``.
        """
        if not command or not command.strip():
            raise ValueError("Command must not be empty")

        settings = self.config.get_execution_config(pane)
        if timeout is not None:
            settings.timeout = timeout
        use_hook = settings.detect_shell if detect_shell is None else detect_shell

        detection = None
        if use_hook:
            detection = self._shells.get(pane) or self.detect(pane)
            if detection is None:
                logger.warning(f"Falling back to inline markers for pane {pane}")

        execution_id = uuid.uuid4().hex
        start_marker, end_marker = make_markers(execution_id)
        record = ExecutionRecord(
            id=execution_id,
            pane_target=pane,
            command_text=command,
            start_marker=start_marker,
            end_marker=end_marker,
            protocol="hooked" if detection else "inline",
            start_time=self._clock(),
            timeout=settings.timeout,
        )
        if detection:
            record.shell_type = detection.shell_type
            record.current_working_directory = detection.current_working_directory
            record.system_info = detection.system_info

        self.registry.insert(record)
        self._settings[execution_id] = settings
        logger.info(f"Submitted {execution_id} to {pane}: {command[:50]}")

        try:
            self._send(record)
        except TransportError as e:
            with self.registry.locked(execution_id) as locked:
                locked.diagnostic = f"Failed to send command: {e}"
                locked.transition(ExecutionStatus.ERROR, exit_code=NO_SHELL_STATUS, now=self._clock())
            self._finish(record)
            raise

        return execution_id

    # Resolution

    def get(self, execution_id: str) -> ExecutionRecord:
        """Look up a record without polling the pane."""
        return self.registry.get(execution_id)

    def poll(self, execution_id: str) -> ExecutionRecord:
        """Re-read the pane and advance the execution if possible.

        Terminal records are returned untouched. A transport failure leaves
        the record as it was and propagates.

        Raises:
            ExecutionNotFoundError: Unknown id.
            TransportError: If the pane could not be captured.
        """
        with self.registry.locked(execution_id) as record:
            if record.is_terminal:
                return record

            settings = self._settings_for(record)
            text = self.transport.capture(record.pane_target, settings.capture_lines)
            result = scan(text, record.start_marker, record.end_marker)
            self._advance(record, result, settings)

        if record.is_terminal:
            self._finish(record)
        return record

    def _settings_for(self, record: ExecutionRecord) -> ExecutionConfig:
        settings = self._settings.get(record.id)
        if settings is None:
            settings = self.config.get_execution_config(record.pane_target)
            self._settings[record.id] = settings
        return settings

    def _advance(self, record: ExecutionRecord, result: MarkerScan, settings: ExecutionConfig) -> None:
        """Apply one scan to a locked, non-terminal record.

        Nothing on the record changes before a resend succeeds, so a failed
        resend leaves it exactly as the previous poll did.
        """
        now = self._clock()

        if result.finished and result.exit_code is not None:
            status = ExecutionStatus.COMPLETED if result.exit_code == 0 else ExecutionStatus.ERROR
            record.anomaly = None
            record.diagnostic = None
            record.transition(status, exit_code=result.exit_code, output=result.output, now=now)
            logger.info(f"Execution {record.id} {status.value} with exit code {result.exit_code}")
            return

        if result.finished:
            anomaly, message = Anomaly.PROTOCOL_ANOMALY, f"Markers found but {result.reason}"
        else:
            anomaly, message = Anomaly.DETECTION_FAILURE, f"Waiting for completion: {result.reason}"

        # A visible end marker means the command ran even if its start scrolled away
        seen = result.started or result.ended
        if (result.running or result.ended) and record.status == ExecutionStatus.PENDING:
            record.transition(ExecutionStatus.RUNNING)

        if record.deadline is not None and now >= record.deadline:
            record.transition(ExecutionStatus.TIMEOUT, output=result.output or result.partial_output, now=now)
            record.note(anomaly, f"Timed out after {record.timeout}s")
            logger.warning(f"Execution {record.id} timed out after {record.timeout}s")
            return

        due = record.last_sent_at is not None and now - record.last_sent_at >= settings.grace_period
        if not seen and record.status == ExecutionStatus.PENDING and due:
            if record.retry_count >= settings.max_retries:
                record.note(
                    Anomaly.RETRY_EXHAUSTED,
                    f"Start marker never appeared after {record.retry_count} retries",
                )
                record.transition(ExecutionStatus.ERROR, exit_code=NO_SHELL_STATUS, now=now)
                logger.warning(f"Execution {record.id}: {record.diagnostic}")
                return

            self._send(record)
            record.retry_count += 1
            logger.warning(f"Execution {record.id}: start marker missing, resent (retry {record.retry_count})")

        record.note(anomaly, message)
        if anomaly is Anomaly.PROTOCOL_ANOMALY:
            logger.warning(f"Execution {record.id}: {message}")
        else:
            logger.debug(f"Execution {record.id}: {message}")

    def _finish(self, record: ExecutionRecord) -> None:
        if self.history is not None:
            self.history.append(record)

    def wait(self, execution_id: str, interval: float = 0.5, timeout: Optional[float] = None) -> ExecutionRecord:
        """Poll until the execution is terminal or ``timeout`` seconds pass.

        Returns the record in whatever state it reached.
        """
        started = self._clock()
        record = self.poll(execution_id)
        while not record.is_terminal:
            if timeout is not None and self._clock() - started >= timeout:
                break
            self._sleep(interval)
            record = self.poll(execution_id)
        return record

    def sweep_timeouts(self) -> list[str]:
        """Time out every unresolved execution past its deadline.

        Returns:
            Ids that moved to ``timeout``.
        """
        now = self._clock()
        timed_out = []
        for candidate in self.registry.list(active_only=True):
            if candidate.deadline is None or now < candidate.deadline:
                continue
            with self.registry.locked(candidate.id) as record:
                if record.is_terminal:
                    continue
                record.transition(ExecutionStatus.TIMEOUT, now=now)
                record.diagnostic = f"Timed out after {record.timeout}s"
            self._finish(record)
            timed_out.append(record.id)

        if timed_out:
            logger.warning(f"Timed out {len(timed_out)} executions")
        return timed_out

    # Cancellation and housekeeping

    def cancel(self, execution_id: str) -> bool:
        """Cancel a pending or running execution.

        The state change is immediate. Ctrl+C is sent to the pane afterwards
        on a best-effort basis; the command itself may keep running.

        Returns:
            True if the execution was cancelled, False if it had already
            finished.

        Raises:
            ExecutionNotFoundError: Unknown id.
        """
        with self.registry.locked(execution_id) as record:
            if record.is_terminal:
                logger.debug(
                    f"Cancel of {execution_id} ignored ({Anomaly.CANCELLATION_RACE.value}): "
                    f"already {record.status.value}"
                )
                return False
            record.aborted = True
            record.transition(ExecutionStatus.CANCELLED, now=self._clock())
            record.diagnostic = "Cancelled by request"

        logger.info(f"Cancelled {execution_id}")
        self._finish(record)

        try:
            self.transport.send_keys(record.pane_target, "C-c")
        except TransportError as e:
            logger.warning(f"Could not interrupt pane {record.pane_target}: {e}")
        return True

    def list_active(self) -> list[ExecutionRecord]:
        """Pending and running executions, newest first."""
        return self.registry.list(active_only=True)

    def list_all(self) -> list[ExecutionRecord]:
        """All tracked executions, newest first."""
        return self.registry.list()

    def cleanup_old(self, max_age_minutes: Optional[float] = None) -> int:
        """Evict finished executions older than ``max_age_minutes``.

        Pending and running executions are never evicted.

        Returns:
            Number of evicted executions.
        """
        if max_age_minutes is None:
            max_age_minutes = self.config.max_age_minutes
        evicted = self.registry.evict(max_age_minutes * 60, now=self._clock())
        for record in evicted:
            self._settings.pop(record.id, None)
        return len(evicted)
