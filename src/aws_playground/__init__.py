"""aws-playground: small command-line tools around AWS messaging APIs.

The package re-exports the building blocks the commands are made of.
"""

from aws_playground.config import (
    AWSConfig,
    PublishConfig,
    SendRawEmailConfig,
    SubscribeConfig,
    TracingConfig,
)
from aws_playground.errors import (
    AddressError,
    AWSCallError,
    ConfigError,
    PlaygroundError,
)
from aws_playground.mail import OutboundMessage, parse_address, parse_addresses
from aws_playground.output import marshal_yaml, output_as_yaml
from aws_playground.sqs import QueueSubscriber

__all__ = [
    "AWSCallError",
    "AWSConfig",
    "AddressError",
    "ConfigError",
    "OutboundMessage",
    "PlaygroundError",
    "PublishConfig",
    "QueueSubscriber",
    "SendRawEmailConfig",
    "SubscribeConfig",
    "TracingConfig",
    "marshal_yaml",
    "output_as_yaml",
    "parse_address",
    "parse_addresses",
]
