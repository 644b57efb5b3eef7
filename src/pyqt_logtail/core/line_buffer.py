"""
Bounded, ordered line buffer exposed as a Qt list model.

The buffer is the consumer-facing state of a tail session: it keeps the
newest ``capacity`` lines in arrival order and evicts from the head.
Any QListView can render it directly; colors come from the severity tag
via ForegroundRole.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Iterable, Optional, Tuple

from PyQt6.QtCore import QAbstractListModel, QModelIndex, QObject, Qt, pyqtSignal

from pyqt_logtail.core.severity import Severity, classify_line
from pyqt_logtail.exceptions import InvalidConfigurationError
from pyqt_logtail.theming.color_scheme import LogTailColorScheme

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LogLine:
    """One retained line and its severity tag."""
    text: str
    severity: Severity = Severity.DEFAULT

    @classmethod
    def classified(cls, text: str) -> "LogLine":
        return cls(text, classify_line(text))


class BoundedLineBuffer(QAbstractListModel):
    """Fixed-capacity FIFO of log lines backed by a deque.

    Mutations happen on the owner thread only; the session routes every
    source callback there before touching the buffer.
    """

    SeverityRole = Qt.ItemDataRole.UserRole + 1

    # (text, Severity, was_at_bottom) emitted after each append
    line_appended = pyqtSignal(str, object, bool)
    cleared = pyqtSignal()

    def __init__(
        self,
        capacity: int = 500,
        color_scheme: Optional[LogTailColorScheme] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._validate_capacity(capacity)
        self._capacity = capacity
        self._lines: Deque[LogLine] = deque()
        self._color_scheme = color_scheme or LogTailColorScheme()
        self._at_bottom_probe: Optional[Callable[[], bool]] = None

    @staticmethod
    def _validate_capacity(capacity: int) -> None:
        if not isinstance(capacity, int) or capacity < 1:
            raise InvalidConfigurationError(f"capacity must be a positive integer, got {capacity!r}")

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._lines)

    def set_at_bottom_probe(self, probe: Optional[Callable[[], bool]]) -> None:
        """Register the view callback that reports whether it shows the newest line."""
        self._at_bottom_probe = probe

    def _view_at_bottom(self) -> bool:
        if self._at_bottom_probe is None:
            return True
        return bool(self._at_bottom_probe())

    # ---- QAbstractListModel ----

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:  # type: ignore[override]
        if parent.isValid():
            return 0
        return len(self._lines)

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole):  # type: ignore[override]
        if not index.isValid():
            return None
        row = index.row()
        if row < 0 or row >= len(self._lines):
            return None
        line = self._lines[row]
        if role == Qt.ItemDataRole.DisplayRole:
            return line.text
        if role == Qt.ItemDataRole.ForegroundRole:
            return self._color_scheme.qcolor_for(line.severity)
        if role == self.SeverityRole:
            return line.severity
        return None

    # ---- Buffer contract ----

    def append(self, text: str, severity: Optional[Severity] = None) -> None:
        """Append one line at the tail, evicting the oldest line when full."""
        if severity is None:
            severity = classify_line(text)
        was_at_bottom = self._view_at_bottom()

        if len(self._lines) >= self._capacity:
            self._evict(len(self._lines) - self._capacity + 1)

        row = len(self._lines)
        self.beginInsertRows(QModelIndex(), row, row)
        self._lines.append(LogLine(text, severity))
        self.endInsertRows()

        self.line_appended.emit(text, severity, was_at_bottom)

    def extend(self, lines: Iterable[LogLine]) -> None:
        """Append several lines in order."""
        for line in lines:
            self.append(line.text, line.severity)

    def clear(self) -> None:
        """Remove all stored lines."""
        if self._lines:
            self.beginResetModel()
            self._lines.clear()
            self.endResetModel()
        self.cleared.emit()

    def snapshot(self) -> Tuple[LogLine, ...]:
        """Return the current lines, oldest first, as an immutable copy."""
        return tuple(self._lines)

    def set_capacity(self, capacity: int) -> None:
        """Change capacity, evicting the oldest lines immediately if needed."""
        self._validate_capacity(capacity)
        self._capacity = capacity
        overflow = len(self._lines) - capacity
        if overflow > 0:
            self._evict(overflow)
            logger.debug(f"Capacity reduced to {capacity}, evicted {overflow} lines")

    def _evict(self, count: int) -> None:
        """Drop ``count`` lines from the head."""
        if count <= 0:
            return
        self.beginRemoveRows(QModelIndex(), 0, count - 1)
        for _ in range(count):
            self._lines.popleft()
        self.endRemoveRows()
