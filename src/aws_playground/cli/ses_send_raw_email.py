"""ses-send-raw-email: send a plain text mail through SES SendRawEmail."""

import argparse
import sys
from collections.abc import Sequence
from functools import partial
from pathlib import Path
from typing import TextIO

import anyio

from aws_playground.cli.common import (
    CommandContext,
    build_base_parser,
    launch,
    program_name,
    tracing_config_from_args,
)
from aws_playground.config import AWSConfig, SendRawEmailConfig, load_env
from aws_playground.mail import OutboundMessage
from aws_playground.output import output_as_yaml
from aws_playground.ses import send_raw_email
from aws_playground.tracing import instrument_client, segment


def build_parser(prog: str | None = None) -> argparse.ArgumentParser:
    parser = build_base_parser(
        prog or "ses-send-raw-email",
        "Send a raw email via SES and print the response as YAML.",
    )
    parser.add_argument("--body", default="", help="/path/to/mail-body.txt")
    parser.add_argument("--from", dest="from_address", default="", help="From address")
    parser.add_argument("--to", action="append", default=[], help="To address")
    parser.add_argument("--cc", action="append", default=[], help="Cc address")
    parser.add_argument("--bcc", action="append", default=[], help="Bcc address")
    parser.add_argument("--subject", default="", help="Subject")
    parser.add_argument("--message-id", default="", help="Message-ID")
    parser.add_argument(
        "--configuration-set", default="", help="SES configuration set"
    )
    return parser


def config_from_args(args: argparse.Namespace) -> SendRawEmailConfig:
    return SendRawEmailConfig(
        body=args.body,
        from_address=args.from_address,
        to=args.to,
        cc=args.cc,
        bcc=args.bcc,
        subject=args.subject,
        message_id=args.message_id,
        configuration_set=args.configuration_set,
        aws=AWSConfig.from_env(),
        tracing=tracing_config_from_args(args),
    )


async def run(
    config: SendRawEmailConfig,
    ctx: CommandContext,
    shutdown: anyio.CancelScope,
    *,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> None:
    config.validate()

    body = Path(config.body).read_text(encoding="utf-8")
    message = OutboundMessage.build(
        config.from_address,
        body,
        to=config.to,
        cc=config.cc,
        bcc=config.bcc,
        subject=config.subject,
        message_id=config.message_id,
    )
    raw = message.as_bytes()

    preview = stderr or sys.stderr
    preview.write(raw.decode("utf-8", errors="replace"))
    preview.flush()

    async with ctx.client("ses") as client:
        instrument_client(client)
        with segment(ctx.tracer, ctx.name):
            response = await send_raw_email(
                client,
                ctx.tracer,
                raw,
                message.destinations,
                config.configuration_set,
            )
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
