"""
Tail session orchestration.

A TailSession owns the line buffer, the current configuration and at
most one active source. Reconfiguring always tears the previous source
down completely before the next one starts, and every callback is
checked against the active generation so lines from a torn-down source
can never land in the fresh buffer.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from PyQt6.QtCore import QCoreApplication, QObject, pyqtSignal

from pyqt_logtail.core.configuration import SourceKind, TailConfiguration
from pyqt_logtail.core.line_buffer import BoundedLineBuffer, LogLine
from pyqt_logtail.protocols.tail_config import TailSettings, get_tail_settings
from pyqt_logtail.sources.base import LineSource
from pyqt_logtail.sources.file_source import FileSource
from pyqt_logtail.sources.process_source import ProcessSource
from pyqt_logtail.theming.color_scheme import LogTailColorScheme

logger = logging.getLogger(__name__)

NOT_CONFIGURED_LABEL = "not configured"

SourceFactory = Callable[[TailConfiguration], LineSource]


@dataclass(frozen=True)
class TailView:
    """What a consumer renders: the retained lines and a source label."""
    lines: Tuple[LogLine, ...]
    label: str


def describe_configuration(config: TailConfiguration, settings: Optional[TailSettings] = None) -> str:
    """
    Pure function: human-readable label for a configuration.

    Returns:
        str: File name, "<program>" / "<program> -u <unit>", or "not configured"
    """
    if config.source_kind is SourceKind.FILE:
        return Path(config.file_path).name
    if config.source_kind is SourceKind.PROCESS:
        program = Path((settings or get_tail_settings()).journal_program).name
        return f"{program} -u {config.process_filter}" if config.process_filter else program
    return NOT_CONFIGURED_LABEL


class TailSession(QObject):
    """
    Owner of one bounded buffer and at most one active line source.

    Usage:
        session = TailSession()
        session.buffer.line_appended.connect(on_line)
        session.configure(TailConfiguration.for_file("/var/log/syslog"))
        ...
        session.stop()

    Also usable as a context manager; stop() runs on exit and when the
    application is about to quit.
    """

    source_changed = pyqtSignal(str)    # label of the newly configured source
    source_finished = pyqtSignal(int)   # exit code of a process that ended on its own

    def __init__(
        self,
        configuration: Optional[TailConfiguration] = None,
        color_scheme: Optional[LogTailColorScheme] = None,
        settings: Optional[TailSettings] = None,
        source_factory: Optional[SourceFactory] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._settings = settings or get_tail_settings()
        self._source_factory = source_factory or self._create_source
        self._config = TailConfiguration.none(self._settings.default_capacity)
        self._buffer = BoundedLineBuffer(self._config.capacity, color_scheme, parent=self)
        self._source: Optional[LineSource] = None
        self._active_generation: Optional[int] = None
        self._dropped_batches = 0

        app = QCoreApplication.instance()
        if app is not None:
            app.aboutToQuit.connect(self.stop)

        if configuration is not None:
            self.configure(configuration)

    # ---- Accessors ----

    @property
    def buffer(self) -> BoundedLineBuffer:
        return self._buffer

    @property
    def configuration(self) -> TailConfiguration:
        return self._config

    @property
    def source(self) -> Optional[LineSource]:
        """The active source, or None when unconfigured."""
        return self._source

    @property
    def active_generation(self) -> Optional[int]:
        return self._active_generation

    @property
    def dropped_batches(self) -> int:
        """Number of late callbacks discarded because their source was torn down."""
        return self._dropped_batches

    @property
    def label(self) -> str:
        return describe_configuration(self._config, self._settings)

    def current_view(self) -> TailView:
        """Snapshot of the buffer plus the active source label."""
        return TailView(self._buffer.snapshot(), self.label)

    # ---- Configuration ----

    def configure(self, config: TailConfiguration) -> None:
        """
        Apply a configuration, replacing whatever source was running.

        The previous source is stopped and released before anything else
        happens, the buffer is cleared and resized, and the matching new
        source (if any) is started with its output routed into the buffer.
        """
        self._teardown_source()

        self._config = config
        self._buffer.clear()
        self._buffer.set_capacity(config.capacity)
        self.source_changed.emit(self.label)

        if config.source_kind is SourceKind.NONE:
            logger.debug("Tail session unconfigured")
            return

        source = self._source_factory(config)
        self._source = source
        self._active_generation = source.generation
        source.lines_ready.connect(self._on_source_lines)
        source.rotated.connect(self._on_source_rotated)
        source.exited.connect(self._on_source_exited)

        logger.info(f"Tail session following {source.label} (generation {source.generation})")
        source.start()

    def stop(self) -> None:
        """Stop the active source; equivalent to configuring no source. Idempotent."""
        if self._source is None and self._config.source_kind is SourceKind.NONE:
            return
        self.configure(TailConfiguration.none(self._config.capacity))

    def _create_source(self, config: TailConfiguration) -> LineSource:
        if config.source_kind is SourceKind.FILE:
            return FileSource(config.file_path, capacity=config.capacity, settings=self._settings, parent=self)
        if config.source_kind is SourceKind.PROCESS:
            return ProcessSource(unit=config.process_filter, settings=self._settings, parent=self)
        raise ValueError(f"No source for kind {config.source_kind}")

    def _teardown_source(self) -> None:
        source = self._source
        self._source = None
        self._active_generation = None
        if source is None:
            return

        for signal in (source.lines_ready, source.rotated, source.exited):
            try:
                signal.disconnect()
            except TypeError:
                pass
        source.stop()
        source.deleteLater()
        logger.debug(f"Tore down {source.label} (generation {source.generation})")

    # ---- Source callbacks ----

    def _is_current(self, generation: int) -> bool:
        if generation == self._active_generation:
            return True
        self._dropped_batches += 1
        logger.debug(f"Dropping late callback from generation {generation}")
        return False

    def _on_source_lines(self, generation: int, lines: List[LogLine]) -> None:
        if self._is_current(generation):
            self._buffer.extend(lines)

    def _on_source_rotated(self, generation: int) -> None:
        if self._is_current(generation):
            self._buffer.clear()

    def _on_source_exited(self, generation: int, exit_code: int) -> None:
        if self._is_current(generation):
            self.source_finished.emit(exit_code)

    # ---- Scoped acquisition ----

    def __enter__(self) -> "TailSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
