"""SES raw email sending."""

from collections.abc import Sequence
from typing import Any

from opentelemetry.trace import Tracer

from aws_playground.tracing import aws_call


async def send_raw_email(
    client: Any,
    tracer: Tracer,
    raw: bytes,
    destinations: Sequence[str],
    configuration_set: str | None = None,
) -> dict[str, Any]:
    """Send a pre-built MIME message.

    Args:
        client: aioboto3 SES client.
        tracer: Tracer for the client span.
        raw: Serialized message, headers included.
        destinations: Envelope recipients (To, Cc and Bcc).
        configuration_set: SES configuration set; omitted when empty.

    Returns:
        The SendRawEmail response.
    """
    request: dict[str, Any] = {
        "RawMessage": {"Data": raw},
        "Destinations": list(destinations),
    }
    if configuration_set:
        request["ConfigurationSetName"] = configuration_set

    with aws_call(tracer, "SES", "SendRawEmail"):
        return await client.send_raw_email(**request)
