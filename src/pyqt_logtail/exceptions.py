"""Log tail exceptions."""


class LogTailError(Exception):
    """Base class for errors raised by pyqt-logtail."""


class InvalidConfigurationError(LogTailError, ValueError):
    """Raised when a tail configuration cannot be applied."""
