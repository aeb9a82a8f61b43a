"""In-memory favorites index with per-id and global listeners."""

from __future__ import annotations

from collections import defaultdict

import structlog

from moviestudio.domain.entities.movie import FavoriteRecord
from moviestudio.domain.entities.subscription import Listener, Subscription

log = structlog.get_logger(__name__)


class FavoritesNotifier:
    """Subscription registry shared by the favorites store implementations.

    Holds the current records and fans changes out to:
      - per-id listeners ("is this movie a favorite"),
      - id-set listeners,
      - full-list listeners (newest first).
    Listeners receive the current value on subscribe. A failing listener is
    logged and does not prevent delivery to the others.
    """

    def __init__(self) -> None:
        self._records: dict[int, FavoriteRecord] = {}
        self._by_id: defaultdict[int, list[Listener[bool]]] = defaultdict(list)
        self._ids: list[Listener[frozenset[int]]] = []
        self._all: list[Listener[list[FavoriteRecord]]] = []

    # --- snapshot ---
    def ids(self) -> frozenset[int]:
        return frozenset(self._records)

    def newest_first(self) -> list[FavoriteRecord]:
        return sorted(self._records.values(), key=lambda r: r.added_at, reverse=True)

    def lookup(self, movie_id: int) -> FavoriteRecord | None:
        return self._records.get(movie_id)

    # --- mutation (called by stores after a successful write) ---
    def replace_all(self, records: list[FavoriteRecord]) -> None:
        self._records = {r.movie_id: r for r in records}
        for movie_id in list(self._by_id):
            self._emit_for_id(movie_id)
        self._emit_global()

    def put(self, record: FavoriteRecord) -> None:
        self._records[record.movie_id] = record
        self._emit_for_id(record.movie_id)
        self._emit_global()

    def drop(self, movie_id: int) -> bool:
        if self._records.pop(movie_id, None) is None:
            return False
        self._emit_for_id(movie_id)
        self._emit_global()
        return True

    # --- subscriptions ---
    def subscribe_is_favorite(
        self, movie_id: int, listener: Listener[bool]
    ) -> Subscription:
        self._by_id[movie_id].append(listener)
        self._deliver(listener, movie_id in self._records)

        def _remove() -> None:
            listeners = self._by_id.get(movie_id)
            if listeners and listener in listeners:
                listeners.remove(listener)
                if not listeners:
                    del self._by_id[movie_id]

        return Subscription(_remove)

    def subscribe_ids(self, listener: Listener[frozenset[int]]) -> Subscription:
        self._ids.append(listener)
        self._deliver(listener, self.ids())
        return Subscription(lambda: self._discard(self._ids, listener))

    def subscribe_all(
        self, listener: Listener[list[FavoriteRecord]]
    ) -> Subscription:
        self._all.append(listener)
        self._deliver(listener, self.newest_first())
        return Subscription(lambda: self._discard(self._all, listener))

    @property
    def listener_count(self) -> int:
        return sum(len(v) for v in self._by_id.values()) + len(self._ids) + len(
            self._all
        )

    # --- internals ---
    @staticmethod
    def _discard(listeners: list, listener: object) -> None:
        if listener in listeners:
            listeners.remove(listener)

    @staticmethod
    def _deliver(listener: Listener, value: object) -> None:
        try:
            listener(value)
        except Exception:
            log.error("favorites_listener_failed", exc_info=True)

    def _emit_for_id(self, movie_id: int) -> None:
        is_favorite = movie_id in self._records
        for listener in list(self._by_id.get(movie_id, ())):
            self._deliver(listener, is_favorite)

    def _emit_global(self) -> None:
        ids = self.ids()
        for listener in list(self._ids):
            self._deliver(listener, ids)
        records = self.newest_first()
        for listener in list(self._all):
            self._deliver(listener, records)
