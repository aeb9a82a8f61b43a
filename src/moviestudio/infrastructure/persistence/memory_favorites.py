"""Favorites store kept in process memory (tests, ephemeral sessions)."""

from __future__ import annotations

from moviestudio.domain.entities.movie import FavoriteRecord
from moviestudio.domain.entities.subscription import Listener, Subscription
from moviestudio.infrastructure.persistence.favorites_notifier import (
    FavoritesNotifier,
)


class InMemoryFavoritesStore:
    """Implements ``FavoritesStorePort`` without persistence."""

    def __init__(self, records: list[FavoriteRecord] | None = None) -> None:
        self._notifier = FavoritesNotifier()
        if records:
            self._notifier.replace_all(records)

    async def __aenter__(self) -> InMemoryFavoritesStore:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        return None

    async def upsert(self, record: FavoriteRecord) -> None:
        self._notifier.put(record)

    async def remove(self, movie_id: int) -> None:
        self._notifier.drop(movie_id)

    async def get(self, movie_id: int) -> FavoriteRecord | None:
        return self._notifier.lookup(movie_id)

    def subscribe_is_favorite(
        self, movie_id: int, listener: Listener[bool]
    ) -> Subscription:
        return self._notifier.subscribe_is_favorite(movie_id, listener)

    def subscribe_ids(self, listener: Listener[frozenset[int]]) -> Subscription:
        return self._notifier.subscribe_ids(listener)

    def subscribe_all(
        self, listener: Listener[list[FavoriteRecord]]
    ) -> Subscription:
        return self._notifier.subscribe_all(listener)

    @property
    def listener_count(self) -> int:
        return self._notifier.listener_count
