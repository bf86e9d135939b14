"""sns-publish: publish one message to an SNS topic."""

import argparse
import sys
from collections.abc import Sequence
from functools import partial
from typing import TextIO

import anyio

from aws_playground.cli.common import (
    CommandContext,
    build_base_parser,
    launch,
    program_name,
    tracing_config_from_args,
)
from aws_playground.config import AWSConfig, PublishConfig, load_env
from aws_playground.output import output_as_yaml
from aws_playground.sns import publish
from aws_playground.tracing import format_trace_id, instrument_client, segment


def build_parser(prog: str | None = None) -> argparse.ArgumentParser:
    parser = build_base_parser(
        prog or "sns-publish",
        "Publish a message to an SNS topic and print the response as YAML.",
    )
    parser.add_argument("--topic", default="", help="topic arn")
    parser.add_argument("--message", default="", help="message to publish")
    return parser


def config_from_args(args: argparse.Namespace) -> PublishConfig:
    return PublishConfig(
        topic=args.topic,
        message=args.message,
        aws=AWSConfig.from_env(),
        tracing=tracing_config_from_args(args),
    )


async def run(
    config: PublishConfig,
    ctx: CommandContext,
    shutdown: anyio.CancelScope,
    *,
    stdout: TextIO | None = None,
) -> None:
    config.validate()

    async with ctx.client("sns") as client:
        instrument_client(client)
        with segment(ctx.tracer, ctx.name) as span:
            logger = ctx.logger.bind(traceID=format_trace_id(span))
            logger.info("publishing message")

            response = await publish(client, ctx.tracer, config.topic, config.message)
            output_as_yaml(response, stdout or sys.stdout)


def main(argv: Sequence[str] | None = None) -> int:
    load_env()
    name = program_name()
    args = build_parser(name).parse_args(argv)
    config = config_from_args(args)
    return launch(
        name, config.tracing, config.aws, lambda ctx: partial(run, config, ctx)
    )


if __name__ == "__main__":
    sys.exit(main())
