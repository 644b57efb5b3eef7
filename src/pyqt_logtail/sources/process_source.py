"""
Streaming subprocess source driven by QProcess.

Runs a long-lived log follower (journalctl by default), splits its
standard output into complete lines as it arrives and shuts the child
down with a bounded terminate-then-kill sequence. A process that exits
on its own is reported but never restarted.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence

from PyQt6.QtCore import QObject, QProcess

from pyqt_logtail.core.line_splitter import LineSplitter, decode_chunk
from pyqt_logtail.protocols.tail_config import TailSettings, get_tail_settings
from pyqt_logtail.sources.process_tracker import ProcessTracker, get_process_tracker
from pyqt_logtail.sources.base import LineSource

logger = logging.getLogger(__name__)


def build_journal_arguments(unit: Optional[str] = None, settings: Optional[TailSettings] = None) -> List[str]:
    """
    Build the follower invocation: follow mode, bounded history, no pager,
    fixed timestamp format and an optional unit filter.

    Args:
        unit: Unit name to restrict output to (empty/None for all units)
        settings: Tail settings (defaults to the global settings)

    Returns:
        List[str]: Arguments for the journal program
    """
    settings = settings or get_tail_settings()
    args = [
        "-f",
        "-n", str(settings.journal_history_lines),
        "--no-pager",
        f"--output={settings.journal_output_format}",
        *settings.journal_extra_args,
    ]
    if unit:
        args += ["-u", unit]
    return args


class ProcessSource(LineSource):
    """
    Stream lines from a child process's standard output.

    Usage:
        source = ProcessSource(unit="nginx.service")
        source.lines_ready.connect(on_lines)
        source.start()
        ...
        source.stop()  # terminate, wait, kill if needed

    A custom program and argument list can replace the journal invocation,
    e.g. for hosts without systemd.
    """

    def __init__(
        self,
        unit: Optional[str] = None,
        program: Optional[str] = None,
        arguments: Optional[Sequence[str]] = None,
        tracker: Optional[ProcessTracker] = None,
        settings: Optional[TailSettings] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._settings = settings or get_tail_settings()
        self.unit = unit or ""
        self.program = program or self._settings.journal_program
        if arguments is None:
            arguments = build_journal_arguments(self.unit, self._settings)
        self.arguments = list(arguments)
        self._tracker = tracker or get_process_tracker()
        self._splitter = LineSplitter()
        self._process: Optional[QProcess] = None
        self._pid: Optional[int] = None

    @property
    def label(self) -> str:
        name = Path(self.program).name
        return f"{name} -u {self.unit}" if self.unit else name

    @property
    def pid(self) -> Optional[int]:
        """PID of the running child, if it has started."""
        return self._pid

    @property
    def process_state(self) -> QProcess.ProcessState:
        if self._process is None:
            return QProcess.ProcessState.NotRunning
        return self._process.state()

    # ---- Lifecycle ----

    def _start(self) -> None:
        process = QProcess(self)
        process.started.connect(self._on_started)
        process.readyReadStandardOutput.connect(self._on_stdout)
        process.readyReadStandardError.connect(self._on_stderr)
        process.errorOccurred.connect(self._on_error)
        process.finished.connect(self._on_finished)
        self._process = process

        logger.debug(f"Launching {self.program} {' '.join(self.arguments)}")
        process.start(self.program, self.arguments)

    def _stop(self) -> None:
        process = self._process
        self._process = None
        if process is None:
            return

        # Nothing emitted by the dying process may reach the session
        process.blockSignals(True)
        pid = self._pid or int(process.processId()) or None

        if process.state() != QProcess.ProcessState.NotRunning:
            process.terminate()
            if not process.waitForFinished(self._settings.terminate_timeout_ms):
                logger.debug(f"{self.program} ignored terminate, killing")
                process.kill()
                process.waitForFinished(self._settings.kill_timeout_ms)

        self._tracker.ensure_terminated(pid, timeout=self._settings.kill_timeout_ms / 1000)
        self._pid = None
        self._splitter.reset()
        process.deleteLater()

    def _release_process(self) -> None:
        """Drop a process that is no longer running without waiting on it."""
        process = self._process
        self._process = None
        self._running = False
        if process is not None:
            process.blockSignals(True)
            process.deleteLater()
        self._tracker.unregister(self._pid)
        self._pid = None

    # ---- Output handling ----

    def feed(self, data: bytes) -> None:
        """Split a raw output chunk and emit the complete lines it finishes."""
        self._emit_texts(self._splitter.feed(data))

    def _on_started(self) -> None:
        if self._process is None:
            return
        self._pid = int(self._process.processId()) or None
        if self._pid:
            self._tracker.register(self._pid)
        logger.debug(f"{self.label} started with pid {self._pid}")

    def _on_stdout(self) -> None:
        if self._process is None:
            return
        self.feed(bytes(self._process.readAllStandardOutput()))

    def _on_stderr(self) -> None:
        if self._process is None:
            return
        text = decode_chunk(bytes(self._process.readAllStandardError())).strip()
        if text:
            logger.debug(f"{self.label} stderr: {text}")

    def _on_error(self, error: QProcess.ProcessError) -> None:
        if self._stopped:
            return
        if error == QProcess.ProcessError.FailedToStart:
            logger.warning(f"Failed to start {self.program}: {self._process.errorString() if self._process else error}")
            self._release_process()
            self._fail(self._settings.process_start_error_template.format(program=Path(self.program).name))
            return
        logger.debug(f"{self.label} reported {error.name}")

    def _on_finished(self, exit_code: int, exit_status: QProcess.ExitStatus) -> None:
        if self._stopped:
            return
        if self._process is not None:
            self.feed(bytes(self._process.readAllStandardOutput()))
        # A final line without trailing newline is complete once the process is gone
        self._emit_texts(self._splitter.flush())
        logger.warning(f"{self.label} exited unexpectedly (code={exit_code}, status={exit_status.name})")
        self._release_process()
        self.exited.emit(self.generation, exit_code)
