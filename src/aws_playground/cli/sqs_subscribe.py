"""sqs-subscribe: print and delete messages from an SQS queue until interrupted."""

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
from aws_playground.config import AWSConfig, SubscribeConfig, load_env
from aws_playground.sqs import QueueSubscriber
from aws_playground.tracing import instrument_client


def build_parser(prog: str | None = None) -> argparse.ArgumentParser:
    parser = build_base_parser(
        prog or "sqs-subscribe",
        "Long-poll an SQS queue, print each batch as YAML and delete the messages.",
    )
    parser.add_argument("--queue-url", default="", help="queue URL")
    parser.add_argument(
        "--wait-time-seconds",
        type=int,
        default=None,
        help="long polling wait time, 0-20 (default: the queue's setting)",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> SubscribeConfig:
    return SubscribeConfig(
        queue_url=args.queue_url,
        wait_time_s=args.wait_time_seconds,
        aws=AWSConfig.from_env(),
        tracing=tracing_config_from_args(args),
    )


async def run(
    config: SubscribeConfig,
    ctx: CommandContext,
    shutdown: anyio.CancelScope,
    *,
    stdout: TextIO | None = None,
) -> None:
    config.validate()

    async with ctx.client("sqs") as client:
        instrument_client(client)
        subscriber = QueueSubscriber(
            client,
            config.queue_url,
            tracer=ctx.tracer,
            logger=ctx.logger,
            name=ctx.name,
            max_messages=config.max_messages,
            wait_time_s=config.wait_time_s,
            stream=stdout,
        )
        await subscriber.poll(shutdown)


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
