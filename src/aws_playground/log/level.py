"""Severity levels understood by the trace log bridge."""

import enum
import logging


class TraceLogLevel(enum.IntEnum):
    """Closed set of tracing SDK log severities, ordered by severity.

    The text form is the lowercase name, so the enum can be used
    directly as an argparse ``type=``:

        parser.add_argument("--xray-log-level", type=TraceLogLevel.from_text)
    """

    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4

    @classmethod
    def from_text(cls, text: str | bytes) -> "TraceLogLevel":
        """Parse ``debug``, ``info``, ``warn`` or ``error`` in any case."""
        if isinstance(text, bytes):
            text = text.decode("utf-8", errors="replace")
        s = text.lower()
        for level in cls:
            if level.to_text() == s:
                return level
        msg = f"unknown log level: {s}"
        raise ValueError(msg)

    @classmethod
    def from_logging_level(cls, levelno: int) -> "TraceLogLevel":
        """Bucket a stdlib logging level number."""
        if levelno < logging.INFO:
            return cls.DEBUG
        if levelno < logging.WARNING:
            return cls.INFO
        if levelno < logging.ERROR:
            return cls.WARN
        return cls.ERROR

    def to_text(self) -> str:
        return self.name.lower()

    @property
    def logging_level(self) -> int:
        return _LOGGING_LEVELS[self]

    def __str__(self) -> str:
        return self.to_text()


_LOGGING_LEVELS = {
    TraceLogLevel.DEBUG: logging.DEBUG,
    TraceLogLevel.INFO: logging.INFO,
    TraceLogLevel.WARN: logging.WARNING,
    TraceLogLevel.ERROR: logging.ERROR,
}
