"""
Tail configuration value object.

Describes which source a session follows and how many lines it retains,
and maps that description to and from the flat record a host stores
between runs.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from pyqt_logtail.exceptions import InvalidConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 500


class SourceKind(Enum):
    """Kinds of log source; values double as the persisted sourceType."""
    NONE = ""
    FILE = "file"
    PROCESS = "journalctl"

    @classmethod
    def from_record_value(cls, value: Any) -> "SourceKind":
        """Map a persisted sourceType string to a kind (unknown → NONE)."""
        for kind in cls:
            if kind.value == value:
                return kind
        return cls.NONE


@dataclass(frozen=True)
class TailConfiguration:
    """
    Immutable description of what a TailSession should follow.

    Attributes:
        source_kind: NONE, FILE or PROCESS
        file_path: Path to tail, required when source_kind is FILE
        process_filter: Optional unit name restricting the process output
        capacity: Maximum number of retained lines (>= 1)
    """
    source_kind: SourceKind = SourceKind.NONE
    file_path: str = ""
    process_filter: str = ""
    capacity: int = DEFAULT_CAPACITY

    def __post_init__(self):
        if not isinstance(self.capacity, int) or self.capacity < 1:
            raise InvalidConfigurationError(f"capacity must be a positive integer, got {self.capacity!r}")
        if self.source_kind is SourceKind.FILE and not self.file_path:
            raise InvalidConfigurationError("file_path is required for a file source")

    @classmethod
    def none(cls, capacity: int = DEFAULT_CAPACITY) -> "TailConfiguration":
        return cls(source_kind=SourceKind.NONE, capacity=capacity)

    @classmethod
    def for_file(cls, path: str, capacity: int = DEFAULT_CAPACITY) -> "TailConfiguration":
        return cls(source_kind=SourceKind.FILE, file_path=str(path), capacity=capacity)

    @classmethod
    def for_process(cls, unit: Optional[str] = None, capacity: int = DEFAULT_CAPACITY) -> "TailConfiguration":
        return cls(source_kind=SourceKind.PROCESS, process_filter=unit or "", capacity=capacity)

    def with_capacity(self, capacity: int) -> "TailConfiguration":
        """Return a copy with a different capacity."""
        return replace(self, capacity=capacity)

    def to_record(self) -> Dict[str, Any]:
        """
        Serialize to the persisted record layout.

        Returns:
            Dict with sourceType, filePath, journalUnit and maxLines keys
        """
        return {
            "sourceType": self.source_kind.value,
            "filePath": self.file_path,
            "journalUnit": self.process_filter,
            "maxLines": self.capacity,
        }

    @classmethod
    def from_record(cls, record: Optional[Mapping[str, Any]]) -> "TailConfiguration":
        """
        Build a configuration from a persisted record.

        Missing or malformed fields fall back to defaults. A file record
        without a path degrades to an unconfigured source rather than
        failing, so a damaged record never prevents the host from loading.

        Args:
            record: Mapping produced by to_record(), possibly from an older version

        Returns:
            TailConfiguration reproducing the saved state
        """
        record = record or {}
        kind = SourceKind.from_record_value(record.get("sourceType", ""))
        file_path = str(record.get("filePath") or "").strip()
        unit = str(record.get("journalUnit") or "").strip()

        capacity = record.get("maxLines", DEFAULT_CAPACITY)
        if isinstance(capacity, bool) or not isinstance(capacity, (int, float)) or int(capacity) < 1:
            logger.debug(f"Ignoring invalid maxLines {capacity!r}, using {DEFAULT_CAPACITY}")
            capacity = DEFAULT_CAPACITY

        if kind is SourceKind.FILE and not file_path:
            logger.warning("File source record has no filePath; treating as unconfigured")
            kind = SourceKind.NONE

        return cls(source_kind=kind, file_path=file_path, process_filter=unit, capacity=int(capacity))
