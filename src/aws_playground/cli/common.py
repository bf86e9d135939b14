"""Startup and teardown shared by every command."""

import argparse
import os
import sys
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TextIO

import aioboto3
import anyio
from opentelemetry.trace import Tracer, TracerProvider

from aws_playground.config import AWSConfig, TracingConfig
from aws_playground.errors import ConfigError
from aws_playground.log import (
    FieldLogger,
    TraceLogLevel,
    TraceLogOptions,
    install_trace_log_bridge,
    level_from_env,
    new_logger,
)
from aws_playground.shutdown import run_until_interrupted
from aws_playground.tracing import configure_tracing, get_tracer, shutdown_tracing

Driver = Callable[[anyio.CancelScope], Awaitable[None]]


@dataclass
class CommandContext:
    """Everything a command builds once at startup."""

    name: str
    """Program name; used as the top-level segment name."""

    logger: FieldLogger
    tracer_provider: TracerProvider
    session: Any
    """aioboto3.Session (or a stand-in with the same ``client()``)."""

    aws: AWSConfig

    @property
    def tracer(self) -> Tracer:
        return get_tracer(self.tracer_provider)

    def client(self, service: str) -> Any:
        """Async context manager yielding a client for ``service``."""
        return self.session.client(service, endpoint_url=self.aws.endpoint_url)


def program_name(argv0: str | None = None) -> str:
    return os.path.basename(argv0 or sys.argv[0])


def log_level_arg(text: str) -> TraceLogLevel:
    try:
        return TraceLogLevel.from_text(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def build_base_parser(prog: str, description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=prog, description=description)
    parser.add_argument(
        "--xray-log-level",
        type=log_level_arg,
        default=TraceLogLevel.ERROR,
        metavar="LEVEL",
        help="debug|info|warn|error (default: error)",
    )
    parser.add_argument(
        "--xray",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="record trace segments (default: on)",
    )
    return parser


def tracing_config_from_args(args: argparse.Namespace) -> TracingConfig:
    return TracingConfig(enabled=args.xray, log_level=args.xray_log_level)


def bootstrap(
    name: str,
    tracing: TracingConfig,
    aws: AWSConfig,
    *,
    stream: TextIO | None = None,
) -> CommandContext:
    """Build the logger, the tracing SDK bridge, the tracer and the session."""
    logger = new_logger(level_from_env(), stream)
    install_trace_log_bridge(
        logger.bind(type="xray"),
        tracing.log_level,
        TraceLogOptions(fix_level=tracing.fix_log_level),
    )
    provider = configure_tracing(name, tracing)
    session = aioboto3.Session(region_name=aws.region)
    return CommandContext(
        name=name,
        logger=logger,
        tracer_provider=provider,
        session=session,
        aws=aws,
    )


def execute(ctx: CommandContext, driver: Driver) -> int:
    """Run ``driver`` until it finishes or the process is interrupted.

    Returns the process exit status. A failure is logged once here; that
    includes a signal interrupting a driver that does not handle shutdown
    itself.
    """
    try:
        anyio.run(run_until_interrupted, driver)
    except Exception as e:
        ctx.logger.error("%s", e)
        return 1
    finally:
        shutdown_tracing(ctx.tracer_provider)
    return 0


def launch(
    name: str,
    tracing: TracingConfig,
    aws: AWSConfig,
    make_driver: Callable[[CommandContext], Driver],
    *,
    stream: TextIO | None = None,
) -> int:
    """Bootstrap a command and execute its driver; returns the exit status.

    A startup failure (e.g. a bad LOG_LEVEL) is reported the same way as
    a driver failure: one error line and exit status 1.
    """
    try:
        ctx = bootstrap(name, tracing, aws, stream=stream)
    except ConfigError as e:
        new_logger(stream=stream).error("%s", e)
        return 1
    return execute(ctx, make_driver(ctx))
