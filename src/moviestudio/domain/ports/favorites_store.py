"""Port for the persisted favorites store."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from moviestudio.domain.entities.movie import FavoriteRecord
from moviestudio.domain.entities.subscription import Listener, Subscription


@runtime_checkable
class FavoritesStorePort(Protocol):
    """Favorites keyed by movie id, with reactive subscriptions.

    Each ``subscribe_*`` call delivers the current value to the listener
    immediately, then again after every change that affects it.
    """

    async def upsert(self, record: FavoriteRecord) -> None:
        """Insert or replace the record for ``record.movie_id``."""
        ...

    async def remove(self, movie_id: int) -> None:
        """Delete the record (no-op when absent)."""
        ...

    async def get(self, movie_id: int) -> FavoriteRecord | None: ...

    def subscribe_is_favorite(
        self, movie_id: int, listener: Listener[bool]
    ) -> Subscription: ...

    def subscribe_ids(self, listener: Listener[frozenset[int]]) -> Subscription: ...

    def subscribe_all(
        self, listener: Listener[list[FavoriteRecord]]
    ) -> Subscription:
        """Listen to all records, ordered newest-first by ``added_at``."""
        ...
