"""Favorites store factory - picks the adapter by configured backend."""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Union

import structlog

from moviestudio.infrastructure.persistence.diskcache_favorites import (
    DiskcacheFavoritesStore,
)
from moviestudio.infrastructure.persistence.memory_favorites import (
    InMemoryFavoritesStore,
)

log = structlog.get_logger(__name__)

FavoritesBackend = Literal["memory", "diskcache"]
FavoritesStore = Union[InMemoryFavoritesStore, DiskcacheFavoritesStore]


def create_favorites_store(
    backend: FavoritesBackend = "diskcache",
    *,
    directory: str | Path = "./.cache/moviestudio/favorites",
) -> FavoritesStore:
    """Create an unopened favorites store; enter it with ``async with``.

    Raises:
        ValueError: If ``backend`` is unknown.
    """
    if backend == "diskcache":
        log.info("favorites_store_create", backend=backend, directory=str(directory))
        return DiskcacheFavoritesStore(directory)
    if backend == "memory":
        log.info("favorites_store_create", backend=backend)
        return InMemoryFavoritesStore()
    raise ValueError(
        f"Unknown favorites backend: {backend!r}. Must be 'memory' or 'diskcache'."
    )
