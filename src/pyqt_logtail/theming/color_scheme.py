"""
PyQt6 Color Scheme for the log tail widget

Centralized color management for severity-colored log lines and the
widget chrome around them. Colors are stored as RGB tuples and converted
to QColor or hex strings on demand.
"""

from dataclasses import dataclass
from typing import Tuple

from PyQt6.QtGui import QColor

from pyqt_logtail.core.severity import Severity

Rgb = Tuple[int, int, int]


@dataclass
class LogTailColorScheme:
    """
    Color scheme for the log tail view with semantic color names.

    Severity colors follow a dark terminal palette by default; a light
    variant is available for hosts with light window backgrounds.
    """

    # ========== SEVERITY COLORS ==========

    severity_error: Rgb = (255, 85, 85)     # #ff5555
    severity_warn: Rgb = (255, 184, 108)    # #ffb86c
    severity_debug: Rgb = (98, 114, 164)    # #6272a4
    severity_info: Rgb = (139, 233, 253)    # #8be9fd
    severity_default: Rgb = (200, 206, 232) # #c8cee8

    # ========== WIDGET CHROME ==========

    view_bg: Rgb = (13, 17, 23)             # #0d1117 - Log view background
    header_bg: Rgb = (22, 27, 34)           # #161b22 - Header bar
    border_color: Rgb = (45, 55, 72)        # #2d3748 - Header border, scrollbar handle
    accent_color: Rgb = (85, 136, 204)      # #5588cc - Source label
    placeholder_text: Rgb = (64, 64, 96)    # #404060 - "not configured" hint

    def color_tuple_for(self, severity: Severity) -> Rgb:
        """Resolve a severity tag to its RGB tuple."""
        color_map = {
            Severity.ERROR: self.severity_error,
            Severity.WARN: self.severity_warn,
            Severity.DEBUG: self.severity_debug,
            Severity.INFO: self.severity_info,
            Severity.DEFAULT: self.severity_default,
        }
        return color_map[severity]

    def qcolor_for(self, severity: Severity) -> QColor:
        """Resolve a severity tag to a QColor."""
        return self.to_qcolor(self.color_tuple_for(severity))

    def hex_for(self, severity: Severity) -> str:
        """Resolve a severity tag to a hex string."""
        return self.to_hex(self.color_tuple_for(severity))

    def to_qcolor(self, color_tuple: Rgb) -> QColor:
        return QColor(*color_tuple)

    def to_hex(self, color_tuple: Rgb) -> str:
        """Format an RGB tuple as a lowercase ``#rrggbb`` string."""
        return "#" + "".join(f"{channel:02x}" for channel in color_tuple[:3])

    @classmethod
    def create_light_theme(cls) -> 'LogTailColorScheme':
        """
        Create a light theme variant with darker severity colors.

        Returns:
            LogTailColorScheme: Light theme color scheme with appropriate contrast
        """
        return cls(
            severity_error=(180, 20, 40),       # Darker red
            severity_warn=(200, 100, 0),        # Darker orange
            severity_debug=(90, 90, 120),       # Slate gray
            severity_info=(30, 80, 130),        # Darker steel blue
            severity_default=(40, 40, 40),      # Near black
            view_bg=(255, 255, 255),
            header_bg=(240, 240, 240),
            border_color=(180, 180, 180),
            accent_color=(0, 100, 200),
            placeholder_text=(160, 160, 160),
        )
