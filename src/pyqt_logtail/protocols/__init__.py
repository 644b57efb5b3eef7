"""
Application hooks.

Process-wide settings an embedding application can override.
"""

from .tail_config import TailSettings, set_tail_settings, get_tail_settings

__all__ = [
    "TailSettings",
    "set_tail_settings",
    "get_tail_settings",
]
