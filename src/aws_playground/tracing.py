"""Trace segments on top of OpenTelemetry, with X-Ray compatible IDs.

A segment is an OpenTelemetry span that is always closed exactly once,
with its outcome (OK or ERROR) recorded. Trace context crosses process
boundaries in the X-Ray header format: it is injected into outgoing AWS
requests and extracted from the ``AWSTraceHeader`` attribute of received
SQS messages.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import anyio
from opentelemetry import trace
from opentelemetry.context import Context
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.propagators.aws import AwsXRayPropagator
from opentelemetry.sdk.extension.aws.trace import AwsXRayIdGenerator
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider as SDKTracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SpanExporter
from opentelemetry.trace import (
    Span,
    SpanKind,
    Status,
    StatusCode,
    Tracer,
    TracerProvider,
)
from opentelemetry.util.types import Attributes

from aws_playground.config import TracingConfig
from aws_playground.errors import AWSCallError
from aws_playground.shutdown import is_shutdown

INSTRUMENTATION_NAME = "aws_playground"

# SQS system attribute carrying the producer's trace header
TRACE_HEADER_ATTR = "AWSTraceHeader"
# HTTP header / carrier key used by the X-Ray propagator
XRAY_HEADER = "X-Amzn-Trace-Id"

OTLP_TRACES_PATH = "/v1/traces"

_propagator = AwsXRayPropagator()


def configure_tracing(
    service_name: str,
    config: TracingConfig,
    exporter: SpanExporter | None = None,
) -> TracerProvider:
    """Build the tracer provider for one command run.

    Args:
        service_name: Resource service name, normally the program name.
        config: Tracing settings. A disabled config yields a no-op provider.
        exporter: Span exporter to use. Defaults to OTLP/HTTP when
            ``config.otlp_endpoint`` is set; otherwise spans are not exported.
    """
    if not config.enabled:
        return trace.NoOpTracerProvider()

    provider = SDKTracerProvider(
        resource=Resource.create({SERVICE_NAME: service_name}),
        id_generator=AwsXRayIdGenerator(),
    )
    if exporter is None and config.otlp_endpoint:
        exporter = OTLPSpanExporter(endpoint=traces_endpoint(config.otlp_endpoint))
    if exporter is not None:
        provider.add_span_processor(BatchSpanProcessor(exporter))
    return provider


def traces_endpoint(base: str) -> str:
    """Full OTLP/HTTP traces URL for a collector base URL."""
    base = base.rstrip("/")
    if base.endswith(OTLP_TRACES_PATH):
        return base
    return base + OTLP_TRACES_PATH


def shutdown_tracing(provider: TracerProvider) -> None:
    """Flush and shut down an SDK provider; no-op providers are ignored."""
    if isinstance(provider, SDKTracerProvider):
        provider.shutdown()


def get_tracer(provider: TracerProvider) -> Tracer:
    return provider.get_tracer(INSTRUMENTATION_NAME)


@contextmanager
def segment(
    tracer: Tracer,
    name: str,
    *,
    context: Context | None = None,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: Attributes = None,
    shutdown: anyio.CancelScope | None = None,
) -> Iterator[Span]:
    """Open a span, make it current, and close it with the outcome.

    Args:
        tracer: Tracer to create the span with.
        name: Span name.
        context: Parent context. None means the current context.
        kind: Span kind.
        attributes: Initial span attributes.
        shutdown: Shutdown scope. A cancellation caused by it is recorded
            as success, not as a failure.

    Example:
        with segment(tracer, "sqs-subscribe-polling", shutdown=scope) as span:
            await receive()
    """
    with tracer.start_as_current_span(
        name,
        context=context,
        kind=kind,
        attributes=attributes,
        record_exception=False,
        set_status_on_exception=False,
    ) as span:
        try:
            yield span
        except BaseException as e:
            if is_shutdown(e, shutdown):
                span.set_status(Status(StatusCode.OK))
            else:
                span.set_status(Status(StatusCode.ERROR, str(e)))
                span.set_attribute("error.type", type(e).__name__)
                span.record_exception(e)
            raise
        else:
            span.set_status(Status(StatusCode.OK))


@contextmanager
def aws_call(
    tracer: Tracer,
    service: str,
    operation: str,
    *,
    shutdown: anyio.CancelScope | None = None,
) -> Iterator[Span]:
    """Client span around one AWS API call.

    Failures are re-raised as AWSCallError naming the call; cancellation
    passes through untouched.
    """
    name = f"{service}.{operation}"
    try:
        with segment(
            tracer,
            name,
            kind=SpanKind.CLIENT,
            attributes={
                "rpc.system": "aws-api",
                "rpc.service": service,
                "rpc.method": operation,
            },
            shutdown=shutdown,
        ) as span:
            yield span
    except Exception as e:
        raise AWSCallError(name, e) from e


def inject_trace_header(request: Any, **kwargs: Any) -> None:
    """botocore ``before-sign`` hook adding the current trace header."""
    headers = request.headers
    if XRAY_HEADER in headers:
        del headers[XRAY_HEADER]
    _propagator.inject(headers)


def instrument_client(client: Any) -> None:
    """Propagate the active trace on every request ``client`` sends."""
    client.meta.events.register("before-sign", inject_trace_header)


def context_from_trace_header(header: str) -> Context:
    """Extract the producer's trace context from an ``AWSTraceHeader`` value.

    Extraction starts from an empty context, so the result never inherits
    the currently active span. An unparseable header yields an empty
    context and a span started from it becomes a new root.
    """
    return _propagator.extract({XRAY_HEADER: header}, context=Context())


def format_trace_id(span: Span) -> str:
    """X-Ray textual trace ID (``1-<epoch hex>-<unique hex>``) of ``span``."""
    span_context = span.get_span_context()
    if not span_context.is_valid:
        return ""
    hex_id = format(span_context.trace_id, "032x")
    return f"1-{hex_id[:8]}-{hex_id[8:]}"
