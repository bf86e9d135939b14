"""Configuration dataclasses for the playground commands."""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from dotenv import load_dotenv

from aws_playground.errors import ConfigError
from aws_playground.log.level import TraceLogLevel

# SQS caps a single ReceiveMessage at 10 messages
MAX_RECEIVE_MESSAGES = 10


def load_env(path: str | None = None) -> bool:
    """Load a ``.env`` file into the process environment.

    A missing file is not an error. Variables already set in the
    environment win over the file.
    """
    return load_dotenv(dotenv_path=path, override=False)


@dataclass
class AWSConfig:
    """Settings shared by every AWS client."""

    region: str | None = None
    """Service region (AWS_REGION). None lets botocore resolve it."""

    endpoint_url: str | None = None
    """Endpoint override, e.g. a localstack URL (AWS_ENDPOINT_URL)."""

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "AWSConfig":
        env = os.environ if environ is None else environ
        return cls(
            region=env.get("AWS_REGION") or None,
            endpoint_url=env.get("AWS_ENDPOINT_URL") or None,
        )


@dataclass
class TracingConfig:
    """Settings for trace segments and the tracing SDK's own logging."""

    enabled: bool = True
    """Wrap calls in trace segments. When False a no-op provider is used."""

    log_level: TraceLogLevel = TraceLogLevel.ERROR
    """Minimum severity of tracing SDK log records that get forwarded."""

    fix_log_level: TraceLogLevel | None = TraceLogLevel.INFO
    """Relabel every forwarded tracing SDK record to this level."""

    otlp_endpoint: str | None = field(
        default_factory=lambda: os.environ.get("OTEL_EXPORTER_OTLP_ENDPOINT") or None
    )
    """OTLP/HTTP collector endpoint. Spans are only exported when set."""


@dataclass
class SendRawEmailConfig:
    """Configuration for ses-send-raw-email."""

    body: str = ""
    """Path to the plain text body."""

    from_address: str = ""
    to: list[str] = field(default_factory=list)
    cc: list[str] = field(default_factory=list)
    bcc: list[str] = field(default_factory=list)
    subject: str = ""

    message_id: str = ""
    """Message-ID header. Generated from the From domain when empty."""

    configuration_set: str = ""
    """SES configuration set name. Omitted from the request when empty."""

    aws: AWSConfig = field(default_factory=AWSConfig)
    tracing: TracingConfig = field(default_factory=TracingConfig)

    def validate(self) -> None:
        if not self.body:
            msg = "--body must be specified"
            raise ConfigError(msg)
        if not self.from_address:
            msg = "--from must be specified"
            raise ConfigError(msg)


@dataclass
class PublishConfig:
    """Configuration for sns-publish."""

    topic: str = ""
    """Topic ARN."""

    message: str = ""
    aws: AWSConfig = field(default_factory=AWSConfig)
    tracing: TracingConfig = field(default_factory=TracingConfig)

    def validate(self) -> None:
        if not self.topic:
            msg = "--topic must be specified"
            raise ConfigError(msg)


@dataclass
class SubscribeConfig:
    """Configuration for sqs-subscribe."""

    queue_url: str = ""

    max_messages: int = MAX_RECEIVE_MESSAGES
    """Messages to fetch per poll (max 10)."""

    wait_time_s: int | None = None
    """Long polling wait time (max 20s). None uses the queue's setting."""

    aws: AWSConfig = field(default_factory=AWSConfig)
    tracing: TracingConfig = field(default_factory=TracingConfig)

    def validate(self) -> None:
        if not self.queue_url:
            msg = "--queue-url must be specified"
            raise ConfigError(msg)
        if not 1 <= self.max_messages <= MAX_RECEIVE_MESSAGES:
            msg = f"max messages must be between 1 and {MAX_RECEIVE_MESSAGES}"
            raise ConfigError(msg)
        if self.wait_time_s is not None and not 0 <= self.wait_time_s <= 20:
            msg = "--wait-time-seconds must be between 0 and 20"
            raise ConfigError(msg)
