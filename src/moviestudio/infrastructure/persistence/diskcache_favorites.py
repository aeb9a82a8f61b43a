"""Favorites store persisted with diskcache (SQLite, no daemon)."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import structlog
from diskcache import Cache as DiskCache

from moviestudio.domain.entities.movie import FavoriteRecord
from moviestudio.domain.entities.subscription import Listener, Subscription
from moviestudio.domain.exceptions import FavoritesStoreError
from moviestudio.infrastructure.persistence.favorites_notifier import (
    FavoritesNotifier,
)

log = structlog.get_logger(__name__)

_KEY_PREFIX = "favorite:"


def _key(movie_id: int) -> str:
    return f"{_KEY_PREFIX}{movie_id}"


def _serialize_record(record: FavoriteRecord) -> str:
    """Serialize FavoriteRecord to JSON string."""
    return json.dumps(
        {
            "movie_id": record.movie_id,
            "title": record.title,
            "poster_path": record.poster_path,
            "vote_average": record.vote_average,
            "release_year": record.release_year,
            "added_at": record.added_at,
        }
    )


def _deserialize_record(data: str) -> FavoriteRecord:
    """Deserialize FavoriteRecord from JSON string."""
    d = json.loads(data)
    return FavoriteRecord(
        movie_id=int(d["movie_id"]),
        title=d.get("title") or "",
        poster_path=d.get("poster_path"),
        vote_average=d.get("vote_average"),
        release_year=d.get("release_year") or "",
        added_at=float(d.get("added_at", 0.0)),
    )


class DiskcacheFavoritesStore:
    """Implements ``FavoritesStorePort`` on top of ``diskcache.Cache``.

    - Blocking disk I/O runs via ``asyncio.to_thread``.
    - A semaphore bounds parallel writes (SQLite lock contention).
    - All records are loaded into the notifier on ``async with`` entry, so
      subscriptions can emit the current value without touching disk.

    Args:
        directory: SQLite DB path.
        max_concurrent: Max parallel disk ops.
    """

    def __init__(self, directory: str | Path, max_concurrent: int = 4) -> None:
        self.directory = Path(directory)
        self._cache: DiskCache | None = None
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._notifier = FavoritesNotifier()

    # --- Context Manager ---
    async def __aenter__(self) -> DiskcacheFavoritesStore:
        if self._cache is None:
            self._cache = await asyncio.to_thread(DiskCache, str(self.directory))
            records = await asyncio.to_thread(self._read_all)
            self._notifier.replace_all(records)
            log.info(
                "favorites_store_opened",
                path=str(self.directory),
                count=len(records),
            )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._cache is not None:
            await asyncio.to_thread(self._cache.close)
            self._cache = None
            log.info("favorites_store_closed", directory=str(self.directory))

    def _require_cache(self) -> DiskCache:
        if self._cache is None:
            raise FavoritesStoreError(
                "Favorites store not opened. Use 'async with store:'"
            )
        return self._cache

    def _read_all(self) -> list[FavoriteRecord]:
        cache = self._require_cache()
        records: list[FavoriteRecord] = []
        for key in list(cache.iterkeys()):
            if not isinstance(key, str) or not key.startswith(_KEY_PREFIX):
                continue
            data = cache.get(key)
            if data is None:
                continue
            try:
                records.append(_deserialize_record(data))
            except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
                log.error("favorite_deserialize_error", key=key, error=str(e))
        return records

    # --- FavoritesStorePort implementation ---
    async def upsert(self, record: FavoriteRecord) -> None:
        cache = self._require_cache()
        async with self._semaphore:
            try:
                await asyncio.to_thread(
                    cache.set, _key(record.movie_id), _serialize_record(record)
                )
            except Exception as e:
                raise FavoritesStoreError(
                    f"Failed to save favorite {record.movie_id}"
                ) from e
        log.debug("favorite_saved", movie_id=record.movie_id)
        self._notifier.put(record)

    async def remove(self, movie_id: int) -> None:
        cache = self._require_cache()
        async with self._semaphore:
            try:
                deleted = await asyncio.to_thread(cache.delete, _key(movie_id))
            except Exception as e:
                raise FavoritesStoreError(
                    f"Failed to delete favorite {movie_id}"
                ) from e
        log.debug("favorite_deleted", movie_id=movie_id, deleted=deleted)
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
