"""SNS topic publishing."""

from typing import Any

from opentelemetry.trace import Tracer

from aws_playground.tracing import aws_call


async def publish(
    client: Any,
    tracer: Tracer,
    topic_arn: str,
    message: str,
) -> dict[str, Any]:
    """Publish ``message`` to ``topic_arn`` and return the response.

    An interrupted publish is recorded as a failed call: the message may
    or may not have reached the topic.
    """
    with aws_call(tracer, "SNS", "Publish"):
        return await client.publish(TopicArn=topic_arn, Message=message)
