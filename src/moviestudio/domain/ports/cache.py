"""Cache Port - Interface for the TMDB response cache."""

from __future__ import annotations

from typing import Any, Protocol


class CachePort(Protocol):
    """Port for an async key-value cache with TTL support.

    Implemented by ``DiskcacheAdapter``. Adapters open lazily via
    async context-manager semantics:
        async with cache:
            await cache.set("tmdb:genres", rows, ttl=86_400)
    """

    async def get(self, key: str) -> Any:
        """Retrieve value. None = not found / expired."""
        ...

    async def set(self, key: str, value: Any, *, ttl: int | None = None) -> None:
        """Set value; ``ttl=None`` uses the adapter default, ``0`` never expires."""
        ...

    async def clear(self) -> int:
        """Drop every cached response; returns how many entries went."""
        ...

    async def aclose(self) -> None: ...

    async def __aenter__(self) -> CachePort: ...

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None: ...
