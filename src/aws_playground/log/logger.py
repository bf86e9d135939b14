"""Application logger with bound structured fields."""

import logging
import os
import sys
from collections.abc import Mapping, MutableMapping
from typing import Any, TextIO

from aws_playground.errors import ConfigError

LOGGER_NAME = "aws_playground"
DEFAULT_FORMAT = "%(asctime)s\t%(levelname)s\t%(message)s"


class FieldLogger(logging.LoggerAdapter):
    """Logger adapter carrying key/value fields on every record.

    Fields from ``bind()`` and from a call's ``extra=`` are merged and
    stored on the record as ``record.fields``.

    Example:
        log = FieldLogger(logging.getLogger("app"))
        log.bind(messageID="m-1").info("delete %s", handle)
    """

    def __init__(
        self,
        logger: logging.Logger,
        fields: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(logger, dict(fields or {}))

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        fields = {**self.extra, **(kwargs.pop("extra", None) or {})}
        kwargs["extra"] = {"fields": fields}
        return msg, kwargs

    def bind(self, **fields: Any) -> "FieldLogger":
        """Return a new adapter with ``fields`` added."""
        return FieldLogger(self.logger, {**self.extra, **fields})

    @property
    def fields(self) -> dict[str, Any]:
        return dict(self.extra)


class FieldsFormatter(logging.Formatter):
    """Formatter that appends ``key=value`` pairs from ``record.fields``."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = getattr(record, "fields", None)
        if not fields:
            return line
        pairs = " ".join(f"{k}={v}" for k, v in fields.items())
        return f"{line}\t{pairs}"


def level_from_env(default: str = "INFO") -> int:
    """Read the application log level from LOG_LEVEL."""
    name = (os.environ.get("LOG_LEVEL") or default).upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        msg = f"unknown LOG_LEVEL: {name}"
        raise ConfigError(msg)
    return level


def new_logger(
    level: int = logging.INFO,
    stream: TextIO | None = None,
    name: str = LOGGER_NAME,
) -> FieldLogger:
    """Configure the application logger and return an adapter for it.

    Replaces any handlers from an earlier call, so commands can call it
    once at startup without stacking output.
    """
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(FieldsFormatter(DEFAULT_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return FieldLogger(logger)
