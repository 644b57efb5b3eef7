"""
pyqt-logtail: follow a growing log file or a streaming subprocess in PyQt6.

Keeps a bounded, ordered window of the most recent lines for display,
coping with file rotation, subprocess failure and reconfiguration without
leaking file watches or child processes.

Architecture:
- Core: severity classification, line splitting, configuration, bounded buffer
- Sources: FileSource (QFileSystemWatcher) and ProcessSource (QProcess)
- Services: TailSession orchestration, child process tracking (psutil)
- Widgets: LogTailWidget presentation over a session
"""

__version__ = "0.1.0"

from .core import Severity, classify_line, SourceKind, TailConfiguration
from .core.line_buffer import BoundedLineBuffer, LogLine
from .exceptions import LogTailError, InvalidConfigurationError
from .protocols import TailSettings, get_tail_settings, set_tail_settings
from .sources import LineSource, FileSource, ProcessSource
from .services import TailSession, TailView

__all__ = [
    "__version__",
    "Severity",
    "classify_line",
    "SourceKind",
    "TailConfiguration",
    "BoundedLineBuffer",
    "LogLine",
    "LogTailError",
    "InvalidConfigurationError",
    "TailSettings",
    "get_tail_settings",
    "set_tail_settings",
    "LineSource",
    "FileSource",
    "ProcessSource",
    "TailSession",
    "TailView",
]
