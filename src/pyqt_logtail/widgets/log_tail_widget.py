"""
PyQt6 Log Tail Widget

Header with the active source label over a list view of the session's
buffer. Shows a placeholder page while unconfigured and keeps the view
pinned to the newest line only when the user has not scrolled away.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from PyQt6.QtCore import Qt, QTimer
from PyQt6.QtGui import QFont
from PyQt6.QtWidgets import (
    QAbstractItemView, QHBoxLayout, QLabel, QListView, QStackedWidget, QVBoxLayout, QWidget,
)

from pyqt_logtail.core.configuration import SourceKind, TailConfiguration
from pyqt_logtail.core.severity import Severity
from pyqt_logtail.services.tail_session import TailSession
from pyqt_logtail.theming.color_scheme import LogTailColorScheme

logger = logging.getLogger(__name__)

# --- Module-level constants ---
BOTTOM_TOLERANCE_PX = 4   # Scrollbar slack still treated as "at bottom"
HEADER_HEIGHT = 28
PLACEHOLDER_PAGE = 0
LOG_PAGE = 1


class LogTailWidget(QWidget):
    """
    Embeddable view of one tail session.

    Usage:
        widget = LogTailWidget()
        widget.load_config({"sourceType": "file", "filePath": "/var/log/syslog", "maxLines": 500})
        layout.addWidget(widget)

        # Persist between runs:
        record = widget.save_config()
    """

    def __init__(
        self,
        session: Optional[TailSession] = None,
        color_scheme: Optional[LogTailColorScheme] = None,
        parent: Optional[QWidget] = None,
    ):
        super().__init__(parent)
        self._color_scheme = color_scheme or LogTailColorScheme()
        self._session = session or TailSession(color_scheme=self._color_scheme, parent=self)
        self._scroll_pending = False

        self.setup_ui()
        self.setup_connections()
        self._on_source_changed(self._session.label)

    @property
    def session(self) -> TailSession:
        return self._session

    @property
    def source_label(self) -> str:
        return self._source_label.text()

    @property
    def showing_placeholder(self) -> bool:
        return self._stack.currentIndex() == PLACEHOLDER_PAGE

    def setup_ui(self) -> None:
        cs = self._color_scheme
        self.setStyleSheet(
            "QWidget { background: transparent; }"
            f"QListView {{ background: {cs.to_hex(cs.view_bg)}; color: {cs.hex_for(Severity.DEFAULT)};"
            "  border: none; font-family: monospace; font-size: 11px; }"
            f"QScrollBar:vertical {{ background: {cs.to_hex(cs.view_bg)}; width: 6px; border: none; }}"
            f"QScrollBar::handle:vertical {{ background: {cs.to_hex(cs.border_color)};"
            "  border-radius: 3px; min-height: 20px; }"
            "QScrollBar::add-line:vertical, QScrollBar::sub-line:vertical { height: 0; }"
        )

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        header = QWidget(self)
        header.setStyleSheet(
            f"background: {cs.to_hex(cs.header_bg)}; border-bottom: 1px solid {cs.to_hex(cs.border_color)};"
        )
        header.setFixedHeight(HEADER_HEIGHT)
        header_layout = QHBoxLayout(header)
        header_layout.setContentsMargins(8, 0, 4, 0)
        header_layout.setSpacing(4)

        self._source_label = QLabel(header)
        self._source_label.setStyleSheet(
            f"color: {cs.to_hex(cs.accent_color)}; font-size: 10px; font-weight: bold;"
            " font-family: monospace; background: transparent; border: none;"
        )
        header_layout.addWidget(self._source_label, 1)
        layout.addWidget(header)

        self._stack = QStackedWidget(self)
        layout.addWidget(self._stack, 1)

        placeholder = QWidget(self._stack)
        placeholder_layout = QVBoxLayout(placeholder)
        placeholder_label = QLabel("No log source configured.", placeholder)
        placeholder_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        placeholder_label.setStyleSheet(
            f"color: {cs.to_hex(cs.placeholder_text)}; font-size: 12px; background: transparent;"
        )
        placeholder_layout.addWidget(placeholder_label)
        self._stack.addWidget(placeholder)

        self._view = QListView(self._stack)
        self._view.setModel(self._session.buffer)
        self._view.setUniformItemSizes(True)
        self._view.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        self._view.setSelectionMode(QAbstractItemView.SelectionMode.ExtendedSelection)
        self._view.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAsNeeded)
        self._view.setFont(QFont("monospace"))
        self._stack.addWidget(self._view)

    def setup_connections(self) -> None:
        buffer = self._session.buffer
        buffer.set_at_bottom_probe(self.is_at_bottom)
        buffer.line_appended.connect(self._on_line_appended)
        self._session.source_changed.connect(self._on_source_changed)
        self._session.source_finished.connect(self._on_source_finished)

    # ---- Configuration (host serialize/deserialize) ----

    def apply_configuration(self, config: TailConfiguration) -> None:
        self._session.configure(config)

    def load_config(self, record: Optional[Mapping[str, Any]]) -> None:
        """Restore a configuration saved by save_config()."""
        self.apply_configuration(TailConfiguration.from_record(record))

    def save_config(self) -> Dict[str, Any]:
        return self._session.configuration.to_record()

    # ---- Scrolling ----

    def is_at_bottom(self) -> bool:
        scrollbar = self._view.verticalScrollBar()
        return scrollbar.value() >= scrollbar.maximum() - BOTTOM_TOLERANCE_PX

    def scroll_to_bottom(self) -> None:
        self._scroll_pending = False
        self._view.scrollToBottom()

    def _on_line_appended(self, text: str, severity: Severity, was_at_bottom: bool) -> None:
        if was_at_bottom and not self._scroll_pending:
            # Coalesce a burst of appends into one scroll after layout settles
            self._scroll_pending = True
            QTimer.singleShot(0, self.scroll_to_bottom)

    # ---- Session events ----

    def _on_source_changed(self, label: str) -> None:
        self._source_label.setText(label)
        configured = self._session.configuration.source_kind is not SourceKind.NONE
        self._stack.setCurrentIndex(LOG_PAGE if configured else PLACEHOLDER_PAGE)
        self._source_label.setToolTip("")

    def _on_source_finished(self, exit_code: int) -> None:
        self._source_label.setToolTip(f"Source exited with code {exit_code}")

    def closeEvent(self, event) -> None:
        """Stop the session so no watch or child process outlives the widget."""
        self._session.stop()
        super().closeEvent(event)
