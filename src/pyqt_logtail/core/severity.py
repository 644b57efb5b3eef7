"""
Line severity classification.

Pure function mapping a log line to a coloring category. Only the head of
the line is inspected so megabyte-long lines cost the same as short ones.
"""

from enum import Enum
from typing import Tuple

# --- Module-level constants ---
HEAD_LENGTH = 40  # Characters inspected per line

_ERROR_MARKERS: Tuple[str, ...] = ("ERROR", "FATAL", "CRIT", "EMERG", "ALERT")
_WARN_MARKERS: Tuple[str, ...] = ("WARN",)
_DEBUG_MARKERS: Tuple[str, ...] = ("DEBUG", "TRACE", "VERBOSE")
_INFO_MARKERS: Tuple[str, ...] = ("INFO", "NOTICE")


class Severity(Enum):
    """Severity tags; colors are resolved from the color scheme at runtime."""
    ERROR = "error"
    WARN = "warn"
    DEBUG = "debug"
    INFO = "info"
    DEFAULT = "default"


def classify_line(line: str) -> Severity:
    """
    Classify a log line by the severity keyword near its start.

    Args:
        line: Line text (already trimmed)

    Returns:
        Severity: First matching category in error > warn > debug > info order
    """
    head = line[:HEAD_LENGTH].upper()
    if any(marker in head for marker in _ERROR_MARKERS):
        return Severity.ERROR
    if any(marker in head for marker in _WARN_MARKERS):
        return Severity.WARN
    if any(marker in head for marker in _DEBUG_MARKERS):
        return Severity.DEBUG
    if any(marker in head for marker in _INFO_MARKERS):
        return Severity.INFO
    return Severity.DEFAULT
