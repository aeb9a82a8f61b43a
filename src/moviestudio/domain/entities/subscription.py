"""Disposable handle for reactive subscriptions."""

from __future__ import annotations

from typing import Callable, TypeVar

T = TypeVar("T")

Listener = Callable[[T], None]


class Subscription:
    """Returned by every ``subscribe*`` call.

    ``dispose()`` detaches the listener; calling it again is a no-op.
    """

    def __init__(self, on_dispose: Callable[[], None]) -> None:
        self._on_dispose: Callable[[], None] | None = on_dispose

    @property
    def disposed(self) -> bool:
        return self._on_dispose is None

    def dispose(self) -> None:
        on_dispose, self._on_dispose = self._on_dispose, None
        if on_dispose is not None:
            on_dispose()
