"""
Common interface for log line sources.

A source is a QObject living on the owner thread. OS notifications
(file-change events, process output) arrive through Qt's event loop and
the source re-emits them as ``lines_ready`` batches tagged with its
generation, so a session can recognise and drop callbacks from a source
it has already torn down.
"""

import itertools
import logging
from abc import ABCMeta, abstractmethod
from typing import Iterable, Optional

from PyQt6.QtCore import QObject, pyqtSignal

from pyqt_logtail.core.line_buffer import LogLine
from pyqt_logtail.core.severity import Severity

logger = logging.getLogger(__name__)

# Generations are unique per process so two sources can never share one
_generation_counter = itertools.count(1)


class _QtABCMeta(type(QObject), ABCMeta):
    """Metaclass for QObjects that need ABC support."""
    pass


class LineSource(QObject, metaclass=_QtABCMeta):
    """
    Abstract line source with explicit start/stop lifecycle.

    Subclasses implement _start/_stop and call _emit_texts or _emit_notice
    to deliver lines. Once stopped, a source never emits again.

    Signals:
        lines_ready(generation, List[LogLine]): new lines in production order
        rotated(generation): the underlying data restarted from scratch
        exited(generation, exit_code): the source ended on its own
    """

    lines_ready = pyqtSignal(int, object)
    rotated = pyqtSignal(int)
    exited = pyqtSignal(int, int)

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.generation = next(_generation_counter)
        self._running = False
        self._stopped = False
        self._failed = False

    @property
    def running(self) -> bool:
        """True between start() and stop() unless the source failed or exited."""
        return self._running

    @property
    def failed(self) -> bool:
        """True after a permanent open/launch failure."""
        return self._failed

    @property
    def stopped(self) -> bool:
        return self._stopped

    @property
    @abstractmethod
    def label(self) -> str:
        """Human-readable description of what this source follows."""

    def start(self) -> None:
        """Begin delivering lines. A source can only be started once."""
        if self._stopped:
            raise RuntimeError(f"{type(self).__name__} generation {self.generation} was already stopped")
        if self._running:
            return
        self._running = True
        logger.debug(f"Starting {type(self).__name__} #{self.generation}: {self.label}")
        self._start()

    def stop(self) -> None:
        """Stop delivering lines and release OS resources. Safe to call repeatedly."""
        if self._stopped:
            return
        self._stopped = True
        self._running = False
        self._stop()
        logger.debug(f"Stopped {type(self).__name__} #{self.generation}")

    @abstractmethod
    def _start(self) -> None:
        ...

    @abstractmethod
    def _stop(self) -> None:
        ...

    def _emit_texts(self, texts: Iterable[str]) -> None:
        """Classify and deliver already-trimmed line texts."""
        if self._stopped:
            return
        lines = [LogLine.classified(text) for text in texts]
        if lines:
            self.lines_ready.emit(self.generation, lines)

    def _emit_notice(self, text: str, severity: Severity) -> None:
        """Deliver a synthetic line with a fixed severity."""
        if self._stopped:
            return
        self.lines_ready.emit(self.generation, [LogLine(text, severity)])

    def _fail(self, message: str) -> None:
        """Report a permanent failure as an error line and go inert."""
        self._failed = True
        self._running = False
        self._emit_notice(message, Severity.ERROR)
