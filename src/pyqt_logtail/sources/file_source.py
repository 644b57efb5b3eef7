"""
Incremental file tail driven by QFileSystemWatcher.

Seeds from a bounded window at the end of the file, then reads only the
bytes appended since the last change notification. Truncation, or the
path now pointing at a different file, is treated as rotation: the read
offset restarts at zero and a marker line is emitted.
"""

import logging
import os
from pathlib import Path
from typing import BinaryIO, Optional, Tuple, Union

from PyQt6.QtCore import QFileSystemWatcher, QObject

from pyqt_logtail.core.line_splitter import split_lines
from pyqt_logtail.core.severity import Severity
from pyqt_logtail.exceptions import InvalidConfigurationError
from pyqt_logtail.protocols.tail_config import TailSettings, get_tail_settings
from pyqt_logtail.sources.base import LineSource

logger = logging.getLogger(__name__)

FileIdentity = Tuple[int, int]


def _identity_of(stat_result: os.stat_result) -> FileIdentity:
    return (stat_result.st_dev, stat_result.st_ino)


class FileSource(LineSource):
    """
    Tail a single file and emit its newly appended lines.

    Attributes:
        path: Absolute path of the watched file.
        capacity: Maximum number of lines delivered by the initial seed.
        byte_offset: Bytes of the file already handed to the line splitter.

    Example:
        >>> source = FileSource("/var/log/syslog", capacity=500)
        >>> source.lines_ready.connect(on_lines)
        >>> source.start()
    """

    def __init__(
        self,
        path: Union[str, Path],
        capacity: int = 500,
        settings: Optional[TailSettings] = None,
        parent: Optional[QObject] = None,
    ):
        if not isinstance(capacity, int) or capacity < 1:
            raise InvalidConfigurationError(f"capacity must be a positive integer, got {capacity!r}")
        super().__init__(parent)
        self.path = Path(path).expanduser().absolute()
        self.capacity = capacity
        self.byte_offset = 0
        self._settings = settings or get_tail_settings()
        self._identity: Optional[FileIdentity] = None
        # Identity of the file the watch was registered against
        self._watched_identity: Optional[FileIdentity] = None
        self._watcher: Optional[QFileSystemWatcher] = None

    @property
    def label(self) -> str:
        return self.path.name

    @property
    def is_watching(self) -> bool:
        """True while the file itself is registered with the watcher."""
        return self._watcher is not None and str(self.path) in self._watcher.files()

    # ---- Lifecycle ----

    def _start(self) -> None:
        try:
            with open(self.path, "rb") as f:
                stat_result = os.fstat(f.fileno())
                file_size = stat_result.st_size
                seed = self._read_seed(f, file_size)
        except OSError as e:
            logger.warning(f"Cannot open log file {self.path}: {e}")
            self.byte_offset = 0
            self._fail(self._settings.file_open_error_template.format(path=self.path))
            return

        self.byte_offset = file_size
        self._identity = _identity_of(stat_result)

        lines = split_lines(seed)
        if len(lines) > self.capacity:
            lines = lines[-self.capacity:]
        self._emit_texts(lines)

        self._start_watching()

    def _stop(self) -> None:
        if self._watcher is None:
            return
        watched = self._watcher.files() + self._watcher.directories()
        if watched:
            self._watcher.removePaths(watched)
        self._watcher.blockSignals(True)
        self._watcher.deleteLater()
        self._watcher = None
        logger.debug(f"Released watch on {self.path}")

    def _read_seed(self, f: BinaryIO, file_size: int) -> bytes:
        """Read the tail window of the file, dropping a line cut by the window."""
        window_start = max(0, file_size - self._settings.seed_window_bytes)
        if window_start == 0:
            f.seek(0)
            return f.read(file_size)

        # Read one byte earlier to know whether the window starts on a line boundary
        f.seek(window_start - 1)
        data = f.read(file_size - window_start + 1)
        newline = data.find(b"\n")
        if newline < 0:
            return b""
        return data[newline + 1:]

    def _start_watching(self) -> None:
        self._watcher = QFileSystemWatcher(self)
        self._watcher.fileChanged.connect(self.on_file_changed)
        self._watcher.directoryChanged.connect(self._on_directory_changed)

        if self._watcher.addPath(str(self.path)):
            self._watched_identity = self._identity
        else:
            logger.warning(f"Failed to add file to watcher: {self.path}")
        # The parent directory reveals a file recreated after rename-based rotation
        if not self._watcher.addPath(str(self.path.parent)):
            logger.debug(f"Failed to add directory to watcher: {self.path.parent}")
        logger.debug(f"Started watching {self.path} from offset {self.byte_offset}")

    # ---- Change handling ----

    def on_file_changed(self, changed_path: Optional[str] = None) -> None:
        """
        Handle a change notification for the watched file.

        Reads everything appended since byte_offset. A missing or unreadable
        file is ignored for this event; the next notification retries.
        """
        if not self._running:
            return

        try:
            self._read_appended()
        finally:
            self._ensure_watched()

    def _read_appended(self) -> None:
        try:
            with open(self.path, "rb") as f:
                stat_result = os.fstat(f.fileno())
                current_size = stat_result.st_size
                identity = _identity_of(stat_result)

                replaced = self._identity is not None and identity != self._identity
                if current_size < self.byte_offset or replaced:
                    self._handle_rotation(current_size, replaced)
                self._identity = identity

                if current_size == self.byte_offset:
                    return

                f.seek(self.byte_offset)
                data = f.read()
                # Post-read position covers bytes appended while reading
                self.byte_offset = f.tell()
        except OSError as e:
            logger.debug(f"Skipping change event for {self.path}: {e}")
            return

        self._emit_texts(split_lines(data))

    def _handle_rotation(self, current_size: int, replaced: bool) -> None:
        reason = "replaced" if replaced else f"truncated to {current_size} bytes"
        logger.info(f"Log rotation detected for {self.path} ({reason}, offset was {self.byte_offset})")
        self.byte_offset = 0
        if not self._stopped:
            self.rotated.emit(self.generation)
        self._emit_notice(self._settings.rotation_marker, Severity.INFO)

    def _current_identity(self) -> Optional[FileIdentity]:
        try:
            return _identity_of(os.stat(self.path))
        except OSError:
            return None

    def _ensure_watched(self) -> None:
        """
        Keep the watch bound to the file currently at the path.

        A watch is dropped by some edit patterns, and after an atomic
        replace it can stay listed while still tracking the old inode,
        so it is re-registered whenever the path names a different file.
        """
        if self._watcher is None or self._stopped:
            return
        identity = self._current_identity()
        if identity is None:
            return
        path_str = str(self.path)
        watched = path_str in self._watcher.files()
        if watched and identity == self._watched_identity:
            return
        if watched:
            self._watcher.removePath(path_str)
        if self._watcher.addPath(path_str):
            self._watched_identity = identity
            logger.debug(f"Re-registered watch on {self.path}")

    def _on_directory_changed(self, directory_path: str) -> None:
        """Pick the file up again when it reappears or is replaced in its directory."""
        if not self._running or self._watcher is None:
            return
        identity = self._current_identity()
        if identity is None:
            return
        if str(self.path) in self._watcher.files() and identity == self._watched_identity:
            return
        logger.debug(f"{self.path} reappeared in {directory_path}")
        self.on_file_changed(str(self.path))
