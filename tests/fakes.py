"""Test doubles and raw TMDB payload builders shared across the suite."""

from __future__ import annotations

import asyncio
from typing import Any

from moviestudio.domain.entities.movie import MovieCategory
from moviestudio.domain.exceptions import MovieNotFoundError
from moviestudio.domain.ports.movie_data_source import RawMoviePage

# ---------------------------------------------------------------------------
# Raw TMDB rows
# ---------------------------------------------------------------------------


def movie_row(movie_id: int, title: str | None = None, **extra: Any) -> dict[str, Any]:
    """One ``results`` row the way TMDB list endpoints return it."""
    row: dict[str, Any] = {
        "id": movie_id,
        "title": title or f"Movie {movie_id}",
        "overview": f"Overview {movie_id}",
        "poster_path": f"/poster{movie_id}.jpg",
        "backdrop_path": f"/backdrop{movie_id}.jpg",
        "release_date": "2023-05-17",
        "vote_average": 7.4,
        "vote_count": 1200,
        "popularity": 88.5,
        "genre_ids": [28, 12],
        "original_title": title or f"Movie {movie_id}",
        "original_language": "en",
        "adult": False,
    }
    row.update(extra)
    return row


def movie_rows(start: int, count: int) -> list[dict[str, Any]]:
    return [movie_row(i) for i in range(start, start + count)]


def detail_payload(movie_id: int = 42, **extra: Any) -> dict[str, Any]:
    """A ``/movie/{id}?append_to_response=watch/providers`` body."""
    payload: dict[str, Any] = {
        "id": movie_id,
        "title": "The Answer",
        "overview": "Deep Thought computes.",
        "poster_path": "/answer.jpg",
        "backdrop_path": "/answer_bg.jpg",
        "release_date": "2005-04-28",
        "vote_average": 6.8,
        "vote_count": 4200,
        "popularity": 21.0,
        "runtime": 109,
        "genres": [{"id": 35, "name": "Comedy"}, {"id": 878, "name": "Science Fiction"}],
        "status": "Released",
        "tagline": "Don't panic.",
        "homepage": "https://example.com/answer",
        "imdb_id": "tt0371724",
        "watch/providers": {
            "results": {
                "US": {
                    "link": "https://www.themoviedb.org/movie/42/watch?locale=US",
                    "flatrate": [
                        {
                            "provider_id": 8,
                            "provider_name": "Netflix",
                            "logo_path": "/netflix.jpg",
                            "display_priority": 2,
                        },
                        {
                            "provider_id": 337,
                            "provider_name": "Disney Plus",
                            "logo_path": "/disney.jpg",
                            "display_priority": 1,
                        },
                    ],
                    "rent": [
                        {
                            "provider_id": 2,
                            "provider_name": "Apple TV",
                            "logo_path": "/apple.jpg",
                            "display_priority": 4,
                        }
                    ],
                }
            }
        },
    }
    payload.update(extra)
    return payload


# ---------------------------------------------------------------------------
# Fake data source
# ---------------------------------------------------------------------------


class FakeMovieDataSource:
    """In-memory ``MovieDataSourcePort`` with per-request gates.

    Pages are keyed ``"list:<path>"``, ``"discover:<csv>"`` or
    ``"search:<query>"``; a value is a list of raw rows or an exception to
    raise. ``block(key, page)`` returns an event the request waits on, which
    lets a test decide the order in which responses arrive.
    """

    def __init__(self) -> None:
        self.pages: dict[str, dict[int, Any]] = {}
        self.details: dict[int, Any] = {}
        self.genres: Any = [{"id": 28, "name": "Action"}, {"id": 12, "name": "Adventure"}]
        self.calls: list[tuple[str, Any]] = []
        self._gates: dict[tuple[str, Any], asyncio.Event] = {}

    # --- test helpers ---
    def set_page(self, key: str, page: int, value: Any) -> None:
        self.pages.setdefault(key, {})[page] = value

    def block(self, key: str, page: Any = 1) -> asyncio.Event:
        gate = asyncio.Event()
        self._gates[(key, page)] = gate
        return gate

    def calls_for(self, key: str) -> list[Any]:
        return [arg for k, arg in self.calls if k == key]

    async def _wait(self, key: str, page: Any) -> None:
        self.calls.append((key, page))
        gate = self._gates.get((key, page))
        if gate is not None:
            await gate.wait()

    async def _serve(self, key: str, page: int) -> RawMoviePage:
        # The response is fixed when the request is made, like a real server.
        value = self.pages.get(key, {}).get(page, [])
        total_pages = len(self.pages.get(key, {}))
        await self._wait(key, page)
        if isinstance(value, Exception):
            raise value
        return RawMoviePage(
            page=page,
            total_pages=total_pages,
            total_results=len(value),
            results=list(value),
        )

    # --- MovieDataSourcePort ---
    async def get_list(self, category: MovieCategory, page: int) -> RawMoviePage:
        return await self._serve(f"list:{category.path}", page)

    async def get_detail(self, movie_id: int) -> dict[str, Any]:
        value = self.details.get(movie_id)
        await self._wait("detail", movie_id)
        if value is None:
            raise MovieNotFoundError("Movie not found")
        if isinstance(value, Exception):
            raise value
        return value

    async def get_genres(self) -> list[dict[str, Any]]:
        value = self.genres
        await self._wait("genres", None)
        if isinstance(value, Exception):
            raise value
        return list(value)

    async def discover_by_genre(self, genre_ids_csv: str, page: int) -> RawMoviePage:
        return await self._serve(f"discover:{genre_ids_csv}", page)

    async def search(self, query: str, page: int) -> RawMoviePage:
        return await self._serve(f"search:{query}", page)


class FakeClock:
    """Monotonic fake ``time.time``; every call advances one second."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        self.now += 1.0
        return self.now
