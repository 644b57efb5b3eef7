"""
Theming for the log tail view.

Severity colors and widget chrome colors.
"""

from .color_scheme import LogTailColorScheme

__all__ = [
    "LogTailColorScheme",
]
