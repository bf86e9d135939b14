"""SQS long-polling subscriber."""

import sys
from typing import TYPE_CHECKING, Any, TextIO

import anyio
from opentelemetry.trace import SpanKind, Tracer

from aws_playground.config import MAX_RECEIVE_MESSAGES
from aws_playground.log import FieldLogger
from aws_playground.output import output_as_yaml
from aws_playground.shutdown import is_shutdown
from aws_playground.tracing import (
    TRACE_HEADER_ATTR,
    aws_call,
    context_from_trace_header,
    format_trace_id,
    segment,
)

if TYPE_CHECKING:
    from types_aiobotocore_sqs.type_defs import MessageTypeDef


class QueueSubscriber:
    """Receives messages from one queue, prints them, and deletes them.

    Each poll cycle runs in its own ``<name>-polling`` segment. Messages
    are handled one at a time in receive order; the first failure stops
    the loop. There are no retries.
    """

    def __init__(
        self,
        client: Any,
        queue_url: str,
        *,
        tracer: Tracer,
        logger: FieldLogger,
        name: str,
        max_messages: int = MAX_RECEIVE_MESSAGES,
        wait_time_s: int | None = None,
        stream: TextIO | None = None,
    ) -> None:
        """Initialize the subscriber.

        Args:
            client: aioboto3 SQS client.
            queue_url: Queue to poll.
            tracer: Tracer for segments.
            logger: Application logger.
            name: Segment name prefix, normally the program name.
            max_messages: Messages to fetch per poll (max 10).
            wait_time_s: Long polling wait time. None uses the queue's setting.
            stream: Where received batches are written as YAML.
        """
        self._client = client
        self._queue_url = queue_url
        self._tracer = tracer
        self._logger = logger
        self._name = name
        self._max_messages = max_messages
        self._wait_time_s = wait_time_s
        self._stream = stream or sys.stdout

    async def poll(self, shutdown: anyio.CancelScope) -> None:
        """Poll until ``shutdown`` is cancelled or an error occurs.

        Returns normally only when the shutdown scope cancelled the loop.
        """
        self._logger.info("polling messages from %s", self._queue_url)
        while True:
            try:
                await self.poll_once(shutdown)
            except anyio.get_cancelled_exc_class() as e:
                if is_shutdown(e, shutdown):
                    return
                raise

    async def poll_once(self, shutdown: anyio.CancelScope | None = None) -> None:
        """Run one receive/print/delete cycle."""
        with segment(
            self._tracer, f"{self._name}-polling", shutdown=shutdown
        ) as span:
            response = await self._receive(shutdown)
            output_as_yaml(response, self._stream)

            messages: list[MessageTypeDef] = response.get("Messages", [])
            # Message segments continue the producer's trace, so only this
            # line carries the polling trace ID
            self._logger.bind(traceID=format_trace_id(span)).info(
                "%d messages", len(messages)
            )

            for message in messages:
                await self.on_message(message, shutdown=shutdown)

    async def on_message(
        self,
        message: "MessageTypeDef",
        *,
        shutdown: anyio.CancelScope | None = None,
    ) -> None:
        """Delete one received message.

        If the message carries an ``AWSTraceHeader`` attribute, the delete
        runs in a new segment continuing that trace instead of under the
        polling segment.
        """
        message_id = message.get("MessageId")
        receipt_handle = message.get("ReceiptHandle")
        if not message_id or not receipt_handle:
            msg = "received message has no MessageId or ReceiptHandle"
            raise ValueError(msg)

        logger = self._logger.bind(messageID=message_id)
        trace_header = message.get("Attributes", {}).get(TRACE_HEADER_ATTR)
        if trace_header is None:
            await self._delete(receipt_handle, logger, shutdown)
            return

        with segment(
            self._tracer,
            self._name,
            context=context_from_trace_header(trace_header),
            kind=SpanKind.CONSUMER,
            attributes={
                "messaging.system": "aws_sqs",
                "messaging.operation.type": "process",
                "messaging.operation.name": "process",
                "messaging.message.id": message_id,
                "messaging.destination.name": self._queue_url,
            },
            shutdown=shutdown,
        ) as span:
            logger = logger.bind(traceID=format_trace_id(span))
            await self._delete(receipt_handle, logger, shutdown)

    async def _receive(self, shutdown: anyio.CancelScope | None) -> dict[str, Any]:
        request: dict[str, Any] = {
            "QueueUrl": self._queue_url,
            "AttributeNames": ["All"],
            "MaxNumberOfMessages": self._max_messages,
        }
        if self._wait_time_s is not None:
            request["WaitTimeSeconds"] = self._wait_time_s

        with aws_call(self._tracer, "SQS", "ReceiveMessage", shutdown=shutdown):
            return await self._client.receive_message(**request)

    async def _delete(
        self,
        receipt_handle: str,
        logger: FieldLogger,
        shutdown: anyio.CancelScope | None,
    ) -> None:
        logger.info("delete %s", receipt_handle)
        with aws_call(self._tracer, "SQS", "DeleteMessage", shutdown=shutdown):
            await self._client.delete_message(
                QueueUrl=self._queue_url,
                ReceiptHandle=receipt_handle,
            )
