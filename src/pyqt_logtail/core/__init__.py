"""
Core log tail utilities.

Pure helpers with no source or session logic: severity classification,
newline splitting and the configuration value object. The Qt list model
backing the buffer lives in ``core.line_buffer``.
"""

from .severity import Severity, classify_line
from .line_splitter import LineSplitter, split_lines, decode_chunk
from .configuration import SourceKind, TailConfiguration, DEFAULT_CAPACITY

__all__ = [
    "Severity",
    "classify_line",
    "LineSplitter",
    "split_lines",
    "decode_chunk",
    "SourceKind",
    "TailConfiguration",
    "DEFAULT_CAPACITY",
]
