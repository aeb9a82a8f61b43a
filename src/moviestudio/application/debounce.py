"""Debounce with supersession for text input."""

from __future__ import annotations

import asyncio
from typing import Callable, Generic, TypeVar

T = TypeVar("T")

_UNSET = object()


class Debouncer(Generic[T]):
    """Deliver a value once it has been stable for ``delay`` seconds.

    Each :meth:`submit` replaces the pending timer, so intermediate values
    are never delivered. A settled value equal to the previously delivered
    one is dropped.
    """

    def __init__(self, delay: float, callback: Callable[[T], None]) -> None:
        self._delay = delay
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None
        self._last_delivered: object = _UNSET

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def submit(self, value: T) -> None:
        if self._handle is not None:
            self._handle.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self._delay, self._fire, value)

    def _fire(self, value: T) -> None:
        self._handle = None
        if self._last_delivered is not _UNSET and self._last_delivered == value:
            return
        self._last_delivered = value
        self._callback(value)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
