"""
Widgets presenting a tail session.
"""

from .log_tail_widget import LogTailWidget

__all__ = [
    "LogTailWidget",
]
