"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from starlette.datastructures import State

from moviestudio.infrastructure.config import AppConfig

if TYPE_CHECKING:
    from moviestudio.application.movie_repository import MovieRepository
    from moviestudio.domain.ports import (
        CachePort,
        FavoritesStorePort,
        MovieDataSourcePort,
    )
    from moviestudio.interfaces.session import BrowseSession


class AppState(State):
    """FastAPI application state with all DI resources.

    Lifecycle managed by composition.py::lifespan().
    """

    # Configuration
    config: AppConfig

    # Infrastructure
    cache: CachePort | None
    http_client: httpx.AsyncClient

    # Domain Ports
    data_source: MovieDataSourcePort
    favorites_store: FavoritesStorePort

    # Application Services
    repository: MovieRepository

    # Screen controllers (single-user session)
    session: BrowseSession
