"""Signal-driven cancellation for command drivers."""

import signal
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

import anyio
from anyio.abc import TaskStatus

from aws_playground.errors import Interrupted

T = TypeVar("T")

DEFAULT_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM)


def is_shutdown(exc: BaseException, scope: anyio.CancelScope | None) -> bool:
    """Whether ``exc`` is a cancellation caused by ``scope`` being cancelled.

    Both must hold: a cancellation that reaches us while the shutdown
    scope is still live is a real failure and is not treated as shutdown.
    """
    if scope is None or not scope.cancel_called:
        return False
    return isinstance(exc, anyio.get_cancelled_exc_class())


async def _cancel_on_signal(
    scope: anyio.CancelScope,
    signals: Sequence[signal.Signals],
    *,
    task_status: TaskStatus[None] = anyio.TASK_STATUS_IGNORED,
) -> None:
    with anyio.open_signal_receiver(*signals) as received:
        task_status.started()
        async for _ in received:
            scope.cancel()
            return


async def run_until_interrupted(
    func: Callable[[anyio.CancelScope], Awaitable[T]],
    *,
    signals: Sequence[signal.Signals] = DEFAULT_SIGNALS,
) -> T:
    """Run ``func(shutdown_scope)`` until it finishes or a signal arrives.

    The shutdown scope is cancelled on the first of ``signals``; every
    await inside ``func`` observes it. Returns ``func``'s result. A driver
    that treats shutdown as a normal end (the queue poller) catches the
    cancellation and returns; if the cancellation escapes ``func`` instead,
    Interrupted is raised. Exceptions raised by ``func`` propagate
    unwrapped.

    Example:
        async def work(shutdown: anyio.CancelScope) -> None:
            await subscriber.poll(shutdown)

        anyio.run(run_until_interrupted, work)
    """
    result: T
    error: Exception | None = None
    finished = False

    async with anyio.create_task_group() as tg:
        await tg.start(_cancel_on_signal, tg.cancel_scope, signals)
        try:
            result = await func(tg.cancel_scope)
        except Exception as e:
            error = e
        finished = True
        # Stop the signal watcher
        tg.cancel_scope.cancel()

    if error is not None:
        raise error
    if not finished:
        msg = "interrupted before completion"
        raise Interrupted(msg)
    return result
