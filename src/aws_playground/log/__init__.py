"""Logging for the playground commands."""

from aws_playground.log.bridge import (
    TraceLogBridge,
    TraceLogOptions,
    install_trace_log_bridge,
)
from aws_playground.log.level import TraceLogLevel
from aws_playground.log.logger import (
    FieldLogger,
    FieldsFormatter,
    level_from_env,
    new_logger,
)

__all__ = [
    "FieldLogger",
    "FieldsFormatter",
    "TraceLogBridge",
    "TraceLogLevel",
    "TraceLogOptions",
    "install_trace_log_bridge",
    "level_from_env",
    "new_logger",
]
