"""Port for the remote movie metadata API."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from moviestudio.domain.entities.movie import MovieCategory


@dataclass(frozen=True)
class RawMoviePage:
    """One page of a list/discover/search response, rows not yet normalized."""

    page: int
    total_pages: int = 0
    total_results: int = 0
    results: list[dict[str, Any]] = field(default_factory=list)


@runtime_checkable
class MovieDataSourcePort(Protocol):
    """Async interface for TMDB-style movie lookups.

    Every method may raise ``DataSourceError`` (network, HTTP status or
    decoding failure); ``get_detail`` raises ``MovieNotFoundError`` for an
    unknown id.
    """

    async def get_list(self, category: MovieCategory, page: int) -> RawMoviePage:
        """Fetch one page of a category list."""
        ...

    async def get_detail(self, movie_id: int) -> dict[str, Any]:
        """Fetch movie details with appended watch providers."""
        ...

    async def get_genres(self) -> list[dict[str, Any]]:
        """Fetch the movie genre catalogue."""
        ...

    async def discover_by_genre(self, genre_ids_csv: str, page: int) -> RawMoviePage:
        """Discover movies matching all comma-separated genre ids."""
        ...

    async def search(self, query: str, page: int) -> RawMoviePage:
        """Keyword search."""
        ...
