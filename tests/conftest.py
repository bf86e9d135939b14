"""Test fixtures for aws-playground."""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

import aioboto3
import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from aws_playground.cli.common import CommandContext
from aws_playground.config import AWSConfig
from aws_playground.log import FieldLogger

try:
    import docker
    from testcontainers.localstack import LocalStackContainer

    TESTCONTAINERS_AVAILABLE = True
except ImportError:
    docker = None  # type: ignore[assignment]
    TESTCONTAINERS_AVAILABLE = False
    LocalStackContainer = None  # type: ignore[misc, assignment]


class Exhausted(Exception):
    """Raised by fake clients when they have nothing more to return."""


class FakeEvents:
    """Stands in for ``client.meta.events``."""

    def __init__(self) -> None:
        self.registered: list[tuple[str, Callable[..., Any]]] = []

    def register(self, event_name: str, handler: Callable[..., Any]) -> None:
        self.registered.append((event_name, handler))


class FakeMeta:
    def __init__(self) -> None:
        self.events = FakeEvents()


class FakeClient:
    """Base for in-process AWS client fakes; records every call in order."""

    def __init__(self) -> None:
        self.meta = FakeMeta()
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.on_call: Callable[[], Awaitable[None]] | None = None

    async def _record(self, operation: str, kwargs: dict[str, Any]) -> None:
        self.calls.append((operation, kwargs))
        if self.on_call is not None:
            await self.on_call()

    def calls_to(self, operation: str) -> list[dict[str, Any]]:
        return [kwargs for name, kwargs in self.calls if name == operation]


class FakeSQSClient(FakeClient):
    """SQS fake returning queued batches, then calling ``on_exhausted``."""

    def __init__(self, batches: list[list[dict[str, Any]]] | None = None) -> None:
        super().__init__()
        self.batches = list(batches or [])
        self.on_exhausted: Callable[[], Awaitable[None]] | None = None
        self.receive_error: BaseException | None = None
        self.delete_error: Exception | None = None

    async def receive_message(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("receive_message", kwargs))
        if self.receive_error is not None:
            raise self.receive_error
        if not self.batches:
            if self.on_exhausted is not None:
                await self.on_exhausted()
            raise Exhausted("no more batches")
        batch = self.batches.pop(0)
        response: dict[str, Any] = {"ResponseMetadata": {"HTTPStatusCode": 200}}
        if batch:
            response["Messages"] = batch
        return response

    async def delete_message(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("delete_message", kwargs))
        if self.delete_error is not None:
            raise self.delete_error
        return {"ResponseMetadata": {"HTTPStatusCode": 200}}


class FakeSESClient(FakeClient):
    async def send_raw_email(self, **kwargs: Any) -> dict[str, Any]:
        await self._record("send_raw_email", kwargs)
        return {
            "MessageId": "0100018c-test",
            "ResponseMetadata": {"HTTPStatusCode": 200},
        }


class FakeSNSClient(FakeClient):
    def __init__(self) -> None:
        super().__init__()
        self.error: Exception | None = None

    async def publish(self, **kwargs: Any) -> dict[str, Any]:
        await self._record("publish", kwargs)
        if self.error is not None:
            raise self.error
        return {
            "MessageId": "9b0b9e4e-test",
            "ResponseMetadata": {"HTTPStatusCode": 200},
        }


class _ClientContext:
    def __init__(self, client: FakeClient) -> None:
        self._client = client

    async def __aenter__(self) -> FakeClient:
        return self._client

    async def __aexit__(self, *exc_info: object) -> None:
        return None


class FakeSession:
    """Stands in for aioboto3.Session; hands out pre-built fake clients."""

    def __init__(self, **clients: FakeClient) -> None:
        self._clients = clients
        self.requested: list[str] = []

    def client(self, service: str, **kwargs: Any) -> _ClientContext:
        self.requested.append(service)
        return _ClientContext(self._clients[service])


def make_message(n: int, **attributes: str) -> dict[str, Any]:
    """Received SQS message record."""
    return {
        "MessageId": f"msg-{n}",
        "ReceiptHandle": f"handle-{n}",
        "Body": f"body {n}",
        "Attributes": dict(attributes),
    }


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def span_exporter():
    """Create an in-memory span exporter for testing."""
    return InMemorySpanExporter()


@pytest.fixture
def tracer_provider(span_exporter):
    """Create a tracer provider with in-memory exporter."""
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(span_exporter))
    return provider


@pytest.fixture
def tracer(tracer_provider):
    return tracer_provider.get_tracer("tests")


@pytest.fixture
def logger(caplog) -> FieldLogger:
    """Application logger whose records reach caplog."""
    caplog.set_level(logging.DEBUG, logger="tests.app")
    return FieldLogger(logging.getLogger("tests.app"))


@pytest.fixture
def make_context(tracer_provider, logger):
    def factory(session: FakeSession, name: str = "test-cmd") -> CommandContext:
        return CommandContext(
            name=name,
            logger=logger,
            tracer_provider=tracer_provider,
            session=session,
            aws=AWSConfig(),
        )

    return factory


def docker_available() -> bool:
    """Check if Docker is available."""
    if not TESTCONTAINERS_AVAILABLE or docker is None:
        return False
    try:
        client = docker.from_env()
        client.ping()
        return True
    except Exception:
        return False


@pytest.fixture(scope="session")
def localstack():
    """Start localstack container for the test session."""
    if not docker_available():
        pytest.skip("Docker not available")

    container = LocalStackContainer(image="localstack/localstack:latest")
    container.with_services("sqs", "sns")
    with container:
        yield container


@pytest.fixture
def endpoint_url(localstack) -> str:
    """Get the localstack endpoint URL."""
    return localstack.get_url()


@pytest.fixture
def session() -> aioboto3.Session:
    """Create an aioboto3 session for localstack."""
    return aioboto3.Session(
        aws_access_key_id="test",
        aws_secret_access_key="test",
        region_name="us-east-1",
    )
