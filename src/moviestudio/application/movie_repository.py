"""Movie repository between the remote API and the favorites store."""

from __future__ import annotations

import time
from typing import Any, Awaitable, Callable, Iterable, TypeVar

import structlog

from moviestudio.domain.entities.movie import (
    FavoriteRecord,
    Genre,
    Movie,
    MovieCategory,
    MovieDetails,
)
from moviestudio.domain.entities.result import Failure, FailureKind, Result, Success
from moviestudio.domain.entities.subscription import Listener, Subscription
from moviestudio.domain.exceptions import MovieNotFoundError
from moviestudio.domain.ports.favorites_store import FavoritesStorePort
from moviestudio.domain.ports.movie_data_source import (
    MovieDataSourcePort,
    RawMoviePage,
)

log = structlog.get_logger(__name__)

T = TypeVar("T")


def _normalize_page(page: RawMoviePage) -> list[Movie]:
    return [Movie.from_api(row) for row in page.results]


class MovieRepository:
    """Typed, exception-free access to movie data and favorites.

    Every remote call returns ``Success`` or ``Failure``; nothing raised by
    the data source (or by normalization) escapes this class. Genres are
    cached in memory for the lifetime of the instance once a non-empty list
    has been fetched.
    """

    def __init__(
        self,
        data_source: MovieDataSourcePort,
        favorites: FavoritesStorePort,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._source = data_source
        self._favorites = favorites
        self._clock = clock
        self._genres: list[Genre] | None = None

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _guard(
        self,
        operation: str,
        call: Callable[[], Awaitable[T]],
        **context: Any,
    ) -> Result[T]:
        try:
            return Success(await call())
        except MovieNotFoundError as e:
            log.info("movie_not_found", operation=operation, **context)
            return Failure(str(e) or "Movie not found", FailureKind.NOT_FOUND)
        except Exception as e:
            log.warning(
                "repository_call_failed",
                operation=operation,
                exc_info=True,
                **context,
            )
            return Failure(str(e) or type(e).__name__)

    # ------------------------------------------------------------------
    # Remote lists
    # ------------------------------------------------------------------

    async def fetch_category(
        self, category: MovieCategory, page: int = 1
    ) -> Result[list[Movie]]:
        async def call() -> list[Movie]:
            return _normalize_page(await self._source.get_list(category, page))

        return await self._guard(
            "fetch_category", call, category=category.value, page=page
        )

    async def fetch_popular(self, page: int = 1) -> Result[list[Movie]]:
        return await self.fetch_category(MovieCategory.POPULAR, page)

    async def fetch_now_playing(self, page: int = 1) -> Result[list[Movie]]:
        return await self.fetch_category(MovieCategory.NOW_PLAYING, page)

    async def fetch_top_rated(self, page: int = 1) -> Result[list[Movie]]:
        return await self.fetch_category(MovieCategory.TOP_RATED, page)

    async def fetch_upcoming(self, page: int = 1) -> Result[list[Movie]]:
        return await self.fetch_category(MovieCategory.UPCOMING, page)

    async def fetch_detail(self, movie_id: int) -> Result[MovieDetails]:
        async def call() -> MovieDetails:
            return MovieDetails.from_api(await self._source.get_detail(movie_id))

        return await self._guard("fetch_detail", call, movie_id=movie_id)

    async def fetch_genres(self) -> Result[list[Genre]]:
        """Return the genre catalogue, from memory after the first success."""
        if self._genres:
            return Success(list(self._genres))

        async def call() -> list[Genre]:
            return [Genre.from_api(row) for row in await self._source.get_genres()]

        result = await self._guard("fetch_genres", call)
        if isinstance(result, Failure):
            return result
        if not result.value:
            log.warning("genres_empty")
            return Failure("No genres found")
        self._genres = list(result.value)
        log.debug("genres_cached", count=len(self._genres))
        return result

    async def discover_by_genres(
        self, genre_ids: Iterable[int], page: int = 1
    ) -> Result[list[Movie]]:
        csv = ",".join(str(g) for g in genre_ids)

        async def call() -> list[Movie]:
            return _normalize_page(await self._source.discover_by_genre(csv, page))

        return await self._guard("discover_by_genres", call, genres=csv, page=page)

    async def search(self, query: str, page: int = 1) -> Result[list[Movie]]:
        """Keyword search; a blank query succeeds with no results and no request."""
        if not query.strip():
            return Success([])

        async def call() -> list[Movie]:
            return _normalize_page(await self._source.search(query, page))

        return await self._guard("search", call, query=query, page=page)

    # ------------------------------------------------------------------
    # Favorites passthrough
    # ------------------------------------------------------------------

    async def add_favorite(
        self,
        movie_id: int,
        title: str,
        poster_path: str | None,
        vote_average: float | None,
        release_date: str | None,
    ) -> None:
        record = FavoriteRecord(
            movie_id=movie_id,
            title=title,
            poster_path=poster_path,
            vote_average=vote_average,
            release_year=(release_date or "")[:4],
            added_at=self._clock(),
        )
        await self._favorites.upsert(record)
        log.info("favorite_added", movie_id=movie_id)

    async def remove_favorite(self, movie_id: int) -> None:
        await self._favorites.remove(movie_id)
        log.info("favorite_removed", movie_id=movie_id)

    def is_favorite(self, movie_id: int, listener: Listener[bool]) -> Subscription:
        return self._favorites.subscribe_is_favorite(movie_id, listener)

    def all_favorite_ids(self, listener: Listener[frozenset[int]]) -> Subscription:
        return self._favorites.subscribe_ids(listener)

    def all_favorites(
        self, listener: Listener[list[FavoriteRecord]]
    ) -> Subscription:
        return self._favorites.subscribe_all(listener)
