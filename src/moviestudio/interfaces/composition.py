"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

from contextlib import AsyncExitStack, asynccontextmanager
from typing import AsyncIterator, cast

import httpx
import structlog
from fastapi import FastAPI

from moviestudio.application.movie_repository import MovieRepository
from moviestudio.infrastructure.cache import DiskcacheAdapter
from moviestudio.infrastructure.persistence import create_favorites_store
from moviestudio.infrastructure.tmdb import HttpxTmdbDataSource, TmdbRetryTransport
from moviestudio.interfaces.app_state import AppState
from moviestudio.interfaces.session import BrowseSession

log = structlog.get_logger(__name__)


async def _close_http_client(client: httpx.AsyncClient) -> None:
    await client.aclose()
    log.info("http_client_closed")


async def _close_cache(cache: DiskcacheAdapter) -> None:
    await cache.aclose()
    log.info("cache_closed")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open every resource the routers need and close them on shutdown.

    Build order (teardown runs in reverse):
        1. Response cache (optional, used by the TMDB data source)
        2. HTTP client (429/503 retry transport)
        3. TMDB data source
        4. Favorites store (index loaded on entry)
        5. Repository
        6. Browse session (screen controllers)

    Each resource registers its close on the exit stack as soon as it is
    open, so a failure part-way through startup still releases the earlier
    ones.
    """
    state = cast(AppState, app.state)
    config = state.config

    async with AsyncExitStack() as resources:
        # 1) Response cache
        state.cache = None
        if config.cache_enabled:
            cache = DiskcacheAdapter(
                directory=config.cache_dir,
                ttl_seconds=config.cache_ttl_seconds,
            )
            await cache.__aenter__()
            resources.push_async_callback(_close_cache, cache)
            state.cache = cache
            log.info("cache_initialized", directory=str(config.cache_dir))

        # 2) HTTP client
        transport = TmdbRetryTransport(
            httpx.AsyncHTTPTransport(),
            max_retries=config.http_retry_max_attempts,
            backoff_base=config.http_retry_backoff_base,
        )
        state.http_client = httpx.AsyncClient(
            transport=transport,
            timeout=httpx.Timeout(config.tmdb_timeout_seconds),
            headers={
                "User-Agent": config.http_user_agent,
                "Accept": "application/json",
            },
        )
        resources.push_async_callback(_close_http_client, state.http_client)
        log.info(
            "http_client_initialized",
            retry_max_attempts=config.http_retry_max_attempts,
        )

        # 3) TMDB data source
        if not config.tmdb_api_key:
            log.warning(
                "tmdb_api_key_missing",
                hint="set MOVIESTUDIO_TMDB_API_KEY or tmdb.api_key",
            )
        state.data_source = HttpxTmdbDataSource(
            api_key=config.tmdb_api_key or "",
            http_client=state.http_client,
            cache=state.cache,
            base_url=config.tmdb_base_url,
            language=config.tmdb_language,
        )
        log.info("tmdb_data_source_initialized", language=config.tmdb_language)

        # 4) Favorites store
        store = create_favorites_store(
            config.favorites.backend,
            directory=config.favorites.directory,
        )
        await store.__aenter__()
        resources.push_async_callback(store.aclose)
        state.favorites_store = store

        # 5) Repository
        state.repository = MovieRepository(state.data_source, state.favorites_store)

        # 6) Screen controllers
        state.session = BrowseSession(state.repository, config.browse)
        resources.push_async_callback(state.session.aclose)
        state.session.start()
        log.info(
            "app_startup_complete",
            favorites_backend=config.favorites.backend,
            watch_region=config.browse.watch_region,
        )

        yield

    log.info("app_shutdown_complete")
