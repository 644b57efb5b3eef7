"""Process-wide tunables for log tailing.

Provides hooks for applications to customize how sources open, stream
and shut down without threading settings through every constructor.
"""

from typing import List, Optional
from dataclasses import dataclass, field


@dataclass
class TailSettings:
    """Base settings for source following behavior.

    Applications can subclass this to provide custom settings.

    Attributes:
        seed_window_bytes: How far back from the end of a file the initial read starts
        journal_program: Executable launched by the process source
        journal_history_lines: Lines of history requested when the process starts
        journal_output_format: Timestamp format passed to the journal reader
        terminate_timeout_ms: Grace period after a termination request
        kill_timeout_ms: Wait after a forced kill before giving up on the process
        default_capacity: Buffer capacity used when none is configured
        min_capacity: Smallest capacity accepted by the command line
        max_capacity: Largest capacity accepted by the command line
        rotation_marker: Text injected when a watched file is rotated
    """

    seed_window_bytes: int = 100 * 1024
    journal_program: str = "journalctl"
    journal_history_lines: int = 50
    journal_output_format: str = "short-iso"
    journal_extra_args: List[str] = field(default_factory=list)
    terminate_timeout_ms: int = 500
    kill_timeout_ms: int = 500
    default_capacity: int = 500
    min_capacity: int = 50
    max_capacity: int = 5000
    rotation_marker: str = "─── log rotated ───"
    file_open_error_template: str = "Cannot open: {path}"
    process_start_error_template: str = "{program}: failed to start — is systemd available?"


# Global settings instance (set by application)
_tail_settings: Optional[TailSettings] = None


def set_tail_settings(settings: Optional[TailSettings]) -> None:
    """Set the global tail settings.

    Args:
        settings: TailSettings instance, or None to restore defaults
    """
    global _tail_settings
    _tail_settings = settings


def get_tail_settings() -> TailSettings:
    """Get the current tail settings.

    Returns:
        Current TailSettings or default if not set
    """
    if _tail_settings is None:
        return TailSettings()
    return _tail_settings
