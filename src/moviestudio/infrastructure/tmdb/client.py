"""TMDB API client: async httpx implementation of MovieDataSourcePort."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from moviestudio.domain.entities.movie import MovieCategory
from moviestudio.domain.exceptions import MovieDataSourceError, MovieNotFoundError
from moviestudio.domain.ports.cache import CachePort
from moviestudio.domain.ports.movie_data_source import RawMoviePage

log = structlog.get_logger(__name__)

DEFAULT_BASE_URL = "https://api.themoviedb.org/3"

# Cache TTLs (seconds)
_TTL_LIST = 1_800  # 30 minutes
_TTL_GENRES = 86_400  # 24 hours
_TTL_SEARCH = 600  # 10 minutes


class HttpxTmdbDataSource:
    """Async TMDB client using httpx, with an optional CachePort.

    Implements ``MovieDataSourcePort`` from domain.ports.movie_data_source.
    Raises ``MovieNotFoundError`` on 404 and ``MovieDataSourceError`` for
    every other failure; callers decide how to surface them.
    """

    def __init__(
        self,
        *,
        api_key: str,
        http_client: httpx.AsyncClient,
        cache: CachePort | None = None,
        base_url: str = DEFAULT_BASE_URL,
        language: str = "en-US",
    ) -> None:
        self._api_key = api_key
        self._http = http_client
        self._cache = cache
        self._base_url = base_url.rstrip("/")
        self._language = language

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _params(self, **extra: Any) -> dict[str, Any]:
        """Build query params with api_key and locale."""
        return {"api_key": self._api_key, "language": self._language, **extra}

    async def _get(self, path: str, **extra: Any) -> dict[str, Any]:
        """GET request; returns the parsed JSON object or raises."""
        url = f"{self._base_url}{path}"
        try:
            resp = await self._http.get(url, params=self._params(**extra))
        except httpx.HTTPError as e:
            log.warning("tmdb_network_error", path=path, error=str(e))
            raise MovieDataSourceError(f"Network error: {e}") from e

        if resp.status_code == 401:
            log.error("tmdb_api_key_invalid", status=401)
            raise MovieDataSourceError("TMDB rejected the API key")
        if resp.status_code == 404:
            log.debug("tmdb_resource_not_found", path=path)
            raise MovieNotFoundError("Movie not found")
        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            log.warning("tmdb_http_error", path=path, status=resp.status_code)
            raise MovieDataSourceError(
                f"TMDB returned HTTP {resp.status_code}"
            ) from e

        try:
            data = resp.json()
        except ValueError as e:
            log.warning("tmdb_invalid_json", path=path)
            raise MovieDataSourceError("Invalid JSON from TMDB") from e
        if not isinstance(data, dict):
            raise MovieDataSourceError("Unexpected TMDB response shape")
        return data

    async def _cached(self, key: str) -> Any:
        if self._cache is None:
            return None
        return await self._cache.get(key)

    async def _store(self, key: str, value: Any, ttl: int) -> None:
        if self._cache is not None:
            await self._cache.set(key, value, ttl=ttl)

    @staticmethod
    def _to_page(data: dict[str, Any], requested_page: int) -> RawMoviePage:
        results = data.get("results")
        if not isinstance(results, list):
            raise MovieDataSourceError("TMDB response has no results list")
        return RawMoviePage(
            page=int(data.get("page") or requested_page),
            total_pages=int(data.get("total_pages") or 0),
            total_results=int(data.get("total_results") or 0),
            results=[r for r in results if isinstance(r, dict)],
        )

    async def _page(
        self, cache_key: str, ttl: int, path: str, page: int, **extra: Any
    ) -> RawMoviePage:
        cached = await self._cached(cache_key)
        if cached is not None:
            return cached
        data = await self._get(path, page=page, **extra)
        result = self._to_page(data, page)
        await self._store(cache_key, result, ttl)
        return result

    # ------------------------------------------------------------------
    # Public API (MovieDataSourcePort)
    # ------------------------------------------------------------------

    async def get_list(self, category: MovieCategory, page: int) -> RawMoviePage:
        return await self._page(
            f"tmdb:list:{category.path}:{self._language}:{page}",
            _TTL_LIST,
            f"/movie/{category.path}",
            page,
        )

    async def get_detail(self, movie_id: int) -> dict[str, Any]:
        """Details are never cached: provider availability changes often."""
        return await self._get(
            f"/movie/{movie_id}", append_to_response="watch/providers"
        )

    async def get_genres(self) -> list[dict[str, Any]]:
        cache_key = f"tmdb:genres:{self._language}"
        cached = await self._cached(cache_key)
        if cached is not None:
            return cached

        data = await self._get("/genre/movie/list")
        genres = [g for g in data.get("genres") or [] if isinstance(g, dict)]
        if genres:
            await self._store(cache_key, genres, _TTL_GENRES)
        return genres

    async def discover_by_genre(self, genre_ids_csv: str, page: int) -> RawMoviePage:
        return await self._page(
            f"tmdb:discover:{genre_ids_csv}:{self._language}:{page}",
            _TTL_LIST,
            "/discover/movie",
            page,
            with_genres=genre_ids_csv,
            sort_by="popularity.desc",
            include_adult="false",
            include_video="false",
        )

    async def search(self, query: str, page: int) -> RawMoviePage:
        return await self._page(
            f"tmdb:search:{query}:{self._language}:{page}",
            _TTL_SEARCH,
            "/search/movie",
            page,
            query=query,
            include_adult="false",
        )
