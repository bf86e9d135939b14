"""Forward the tracing SDK's internal log records to the application logger."""

import logging
from dataclasses import dataclass

from aws_playground.log.level import TraceLogLevel
from aws_playground.log.logger import FieldLogger

TRACING_SDK_LOGGER = "opentelemetry"


@dataclass
class TraceLogOptions:
    """Options for TraceLogBridge."""

    fix_level: TraceLogLevel | None = None
    """Relabel every forwarded record to this level.

    The original level is kept in the ``original_level`` field, so all
    tracing SDK chatter can land in one severity bucket without losing
    information.
    """


class TraceLogBridge(logging.Handler):
    """Logging handler that filters and relabels tracing SDK records.

    Records below ``level`` are dropped. The rest are re-emitted through
    ``logger`` at their own level, or at ``options.fix_level`` if set.
    """

    def __init__(
        self,
        logger: FieldLogger,
        level: TraceLogLevel,
        options: TraceLogOptions | None = None,
    ) -> None:
        super().__init__(logging.NOTSET)
        self._logger = logger
        self._threshold = level
        self._options = options or TraceLogOptions()

    @property
    def threshold(self) -> TraceLogLevel:
        return self._threshold

    def emit(self, record: logging.LogRecord) -> None:
        level = TraceLogLevel.from_logging_level(record.levelno)
        if level < self._threshold:
            return

        try:
            message = record.getMessage()
        except Exception:
            self.handleError(record)
            return

        fix = self._options.fix_level
        if fix is None:
            self._logger.log(level.logging_level, message)
        else:
            self._logger.log(
                fix.logging_level,
                message,
                extra={"original_level": level.to_text()},
            )


def install_trace_log_bridge(
    logger: FieldLogger,
    level: TraceLogLevel,
    options: TraceLogOptions | None = None,
    sdk_logger_name: str = TRACING_SDK_LOGGER,
) -> TraceLogBridge:
    """Route the tracing SDK's logger through a TraceLogBridge.

    Earlier bridges on the same logger are replaced.
    """
    bridge = TraceLogBridge(logger, level, options)
    sdk_logger = logging.getLogger(sdk_logger_name)
    for handler in list(sdk_logger.handlers):
        if isinstance(handler, TraceLogBridge):
            sdk_logger.removeHandler(handler)
    sdk_logger.addHandler(bridge)
    sdk_logger.setLevel(logging.DEBUG)
    sdk_logger.propagate = False
    return bridge
