"""Newline splitting for raw byte chunks read from files and processes."""

from typing import List


def decode_chunk(data: bytes) -> str:
    """Decode bytes from a log source, replacing invalid UTF-8 sequences."""
    return data.decode("utf-8", errors="replace")


def split_lines(data: bytes) -> List[str]:
    """
    Split a chunk on newlines, trim each piece, and drop empty ones.

    Every newline-separated segment is treated as a line, including a
    trailing segment with no terminating newline.
    """
    lines = []
    for raw in data.split(b"\n"):
        line = decode_chunk(raw).strip()
        if line:
            lines.append(line)
    return lines


class LineSplitter:
    """
    Incremental splitter that carries partial lines across chunks.

    Usage:
        splitter = LineSplitter()
        splitter.feed(b"line1\\nlin")   # -> ["line1"]
        splitter.feed(b"e2\\nline3\\n") # -> ["line2", "line3"]
    """

    def __init__(self):
        # Bytes after the last newline seen so far
        self._partial = b""

    @property
    def pending(self) -> bytes:
        """Fragment waiting for its terminating newline."""
        return self._partial

    def feed(self, data: bytes) -> List[str]:
        """
        Consume a chunk and return the complete lines it finishes.

        Args:
            data: Raw bytes in arrival order

        Returns:
            List[str]: Trimmed, non-empty complete lines
        """
        if not data:
            return []

        buffer = self._partial + data
        head, sep, tail = buffer.rpartition(b"\n")
        if not sep:
            # No newline yet, the whole buffer is still partial
            self._partial = buffer
            return []

        self._partial = tail
        return split_lines(head)

    def flush(self) -> List[str]:
        """Return the buffered fragment as a final line and reset."""
        remainder, self._partial = self._partial, b""
        return split_lines(remainder)

    def reset(self) -> None:
        """Discard any buffered fragment."""
        self._partial = b""
