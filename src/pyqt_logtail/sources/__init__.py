"""
Log line sources.

File and process sources share one lifecycle (start/stop) and one
emission channel (lines_ready) so a session can treat them uniformly.
"""

from .base import LineSource
from .file_source import FileSource
from .process_tracker import ProcessTracker, get_process_tracker
from .process_source import ProcessSource, build_journal_arguments

__all__ = [
    "LineSource",
    "FileSource",
    "ProcessTracker",
    "get_process_tracker",
    "ProcessSource",
    "build_journal_arguments",
]
