"""Observable state cell and the controller lifetime base class."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Coroutine, Generic, TypeVar

import structlog

from moviestudio.domain.entities.subscription import Listener, Subscription

log = structlog.get_logger(__name__)

S = TypeVar("S")


class StateCell(Generic[S]):
    """Single-writer holder for an immutable state value.

    ``update()`` reads the current value, computes the next one and publishes
    it without suspending, so completions landing on the same event loop can
    never interleave inside a transition.
    """

    def __init__(self, initial: S) -> None:
        self._value = initial
        self._listeners: list[Listener[S]] = []

    @property
    def value(self) -> S:
        return self._value

    def set(self, value: S) -> S:
        return self.update(lambda _: value)

    def update(self, fn: Callable[[S], S]) -> S:
        new = fn(self._value)
        if new is self._value:
            return new
        self._value = new
        for listener in list(self._listeners):
            listener(new)
        return new

    def subscribe(self, listener: Listener[S]) -> Subscription:
        """Deliver the current value now and every published value after."""
        self._listeners.append(listener)
        listener(self._value)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return Subscription(_remove)


class Controller:
    """Lifetime scope shared by all screen controllers.

    Tracks background tasks started with :meth:`launch` and the store
    subscriptions registered with :meth:`own`; :meth:`close` cancels and
    disposes both.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()
        self._subscriptions: list[Subscription] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def own(self, subscription: Subscription) -> Subscription:
        if self._closed:
            subscription.dispose()
        else:
            self._subscriptions.append(subscription)
        return subscription

    def launch(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any] | None:
        """Run *coro* in the background for the lifetime of the controller."""
        if self._closed:
            coro.close()
            return None
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log.error(
                "controller_task_failed",
                controller=type(self).__name__,
                exc_info=exc,
            )

    async def join(self) -> None:
        """Wait until every launched task (including ones they spawn) is done."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        for subscription in self._subscriptions:
            subscription.dispose()
        self._subscriptions.clear()
        for task in list(self._tasks):
            task.cancel()
        log.debug("controller_closed", controller=type(self).__name__)
