"""Tests for MovieRepository (result mapping, genre cache, favorites)."""

from __future__ import annotations

import pytest
from fakes import FakeMovieDataSource, detail_payload, movie_rows

from moviestudio.application.movie_repository import MovieRepository
from moviestudio.domain.entities.movie import FavoriteRecord, MovieCategory
from moviestudio.domain.entities.result import Failure, FailureKind, Success
from moviestudio.domain.exceptions import MovieDataSourceError
from moviestudio.infrastructure.persistence.memory_favorites import (
    InMemoryFavoritesStore,
)

# ---------------------------------------------------------------------------
# Remote lists
# ---------------------------------------------------------------------------


class TestFetchLists:
    @pytest.mark.asyncio()
    @pytest.mark.parametrize(
        ("method", "path"),
        [
            ("fetch_popular", "popular"),
            ("fetch_now_playing", "now_playing"),
            ("fetch_top_rated", "top_rated"),
            ("fetch_upcoming", "upcoming"),
        ],
    )
    async def test_category_methods_hit_their_list(
        self,
        repository: MovieRepository,
        data_source: FakeMovieDataSource,
        method: str,
        path: str,
    ) -> None:
        data_source.set_page(f"list:{path}", 2, movie_rows(21, 3))

        result = await getattr(repository, method)(2)

        assert isinstance(result, Success)
        assert [m.id for m in result.value] == [21, 22, 23]
        assert data_source.calls_for(f"list:{path}") == [2]

    @pytest.mark.asyncio()
    async def test_data_source_error_becomes_failure(
        self, repository: MovieRepository, data_source: FakeMovieDataSource
    ) -> None:
        data_source.set_page("list:popular", 1, MovieDataSourceError("Network error: boom"))

        result = await repository.fetch_category(MovieCategory.POPULAR)

        assert result == Failure("Network error: boom", FailureKind.NETWORK)

    @pytest.mark.asyncio()
    async def test_malformed_row_becomes_failure(
        self, repository: MovieRepository, data_source: FakeMovieDataSource
    ) -> None:
        data_source.set_page("list:popular", 1, [{"title": "no id"}])

        result = await repository.fetch_popular()

        assert isinstance(result, Failure)
        assert result.kind is FailureKind.NETWORK

    @pytest.mark.asyncio()
    async def test_empty_page_is_success(
        self, repository: MovieRepository, data_source: FakeMovieDataSource
    ) -> None:
        result = await repository.fetch_top_rated(5)

        assert result == Success([])


# ---------------------------------------------------------------------------
# Detail
# ---------------------------------------------------------------------------


class TestFetchDetail:
    @pytest.mark.asyncio()
    async def test_success(
        self, repository: MovieRepository, data_source: FakeMovieDataSource
    ) -> None:
        data_source.details[42] = detail_payload(42)

        result = await repository.fetch_detail(42)

        assert isinstance(result, Success)
        assert result.value.title == "The Answer"
        assert result.value.runtime == 109

    @pytest.mark.asyncio()
    async def test_unknown_id_is_not_found(self, repository: MovieRepository) -> None:
        result = await repository.fetch_detail(999)

        assert isinstance(result, Failure)
        assert result.kind is FailureKind.NOT_FOUND

    @pytest.mark.asyncio()
    async def test_other_errors_are_network(
        self, repository: MovieRepository, data_source: FakeMovieDataSource
    ) -> None:
        data_source.details[42] = MovieDataSourceError("TMDB returned HTTP 500")

        result = await repository.fetch_detail(42)

        assert result == Failure("TMDB returned HTTP 500", FailureKind.NETWORK)


# ---------------------------------------------------------------------------
# Genres
# ---------------------------------------------------------------------------


class TestFetchGenres:
    @pytest.mark.asyncio()
    async def test_cached_after_first_success(
        self, repository: MovieRepository, data_source: FakeMovieDataSource
    ) -> None:
        first = await repository.fetch_genres()
        second = await repository.fetch_genres()

        assert isinstance(first, Success)
        assert first == second
        assert [g.name for g in first.value] == ["Action", "Adventure"]
        assert len(data_source.calls_for("genres")) == 1

    @pytest.mark.asyncio()
    async def test_empty_list_fails_and_is_not_cached(
        self, repository: MovieRepository, data_source: FakeMovieDataSource
    ) -> None:
        data_source.genres = []

        result = await repository.fetch_genres()

        assert result == Failure("No genres found")

        data_source.genres = [{"id": 18, "name": "Drama"}]
        retried = await repository.fetch_genres()

        assert isinstance(retried, Success)
        assert len(data_source.calls_for("genres")) == 2

    @pytest.mark.asyncio()
    async def test_error_is_not_cached(
        self, repository: MovieRepository, data_source: FakeMovieDataSource
    ) -> None:
        data_source.genres = MovieDataSourceError("down")

        assert isinstance(await repository.fetch_genres(), Failure)

        data_source.genres = [{"id": 18, "name": "Drama"}]
        assert isinstance(await repository.fetch_genres(), Success)


# ---------------------------------------------------------------------------
# Discover / search
# ---------------------------------------------------------------------------


class TestDiscoverAndSearch:
    @pytest.mark.asyncio()
    async def test_discover_joins_ids_as_csv(
        self, repository: MovieRepository, data_source: FakeMovieDataSource
    ) -> None:
        data_source.set_page("discover:28,12", 1, movie_rows(1, 2))

        result = await repository.discover_by_genres([28, 12], 1)

        assert isinstance(result, Success)
        assert len(result.value) == 2

    @pytest.mark.asyncio()
    @pytest.mark.parametrize("query", ["", "   ", "\t\n"])
    async def test_blank_search_makes_no_request(
        self,
        repository: MovieRepository,
        data_source: FakeMovieDataSource,
        query: str,
    ) -> None:
        result = await repository.search(query)

        assert result == Success([])
        assert data_source.calls == []

    @pytest.mark.asyncio()
    async def test_search(
        self, repository: MovieRepository, data_source: FakeMovieDataSource
    ) -> None:
        data_source.set_page("search:matrix", 1, movie_rows(603, 1))

        result = await repository.search("matrix")

        assert isinstance(result, Success)
        assert result.value[0].id == 603


# ---------------------------------------------------------------------------
# Favorites passthrough
# ---------------------------------------------------------------------------


class TestFavorites:
    @pytest.mark.asyncio()
    async def test_add_favorite_snapshots_movie(
        self,
        repository: MovieRepository,
        favorites_store: InMemoryFavoritesStore,
    ) -> None:
        await repository.add_favorite(42, "The Answer", "/answer.jpg", 6.8, "2005-04-28")

        record = await favorites_store.get(42)
        assert record == FavoriteRecord(
            movie_id=42,
            title="The Answer",
            poster_path="/answer.jpg",
            vote_average=6.8,
            release_year="2005",
            added_at=1_700_000_001.0,
        )

    @pytest.mark.asyncio()
    async def test_refavoriting_refreshes_added_at(
        self,
        repository: MovieRepository,
        favorites_store: InMemoryFavoritesStore,
    ) -> None:
        await repository.add_favorite(42, "Old title", None, None, "")
        await repository.add_favorite(42, "New title", None, None, None)

        record = await favorites_store.get(42)
        assert record is not None
        assert record.title == "New title"
        assert record.release_year == ""
        assert record.added_at == 1_700_000_002.0

    @pytest.mark.asyncio()
    async def test_reactive_passthroughs(self, repository: MovieRepository) -> None:
        flags: list[bool] = []
        ids: list[frozenset[int]] = []
        lists: list[list[int]] = []
        repository.is_favorite(42, flags.append)
        repository.all_favorite_ids(ids.append)
        repository.all_favorites(lambda rs: lists.append([r.movie_id for r in rs]))

        await repository.add_favorite(42, "A", None, None, None)
        await repository.add_favorite(7, "B", None, None, None)
        await repository.remove_favorite(42)

        assert flags == [False, True, False]
        assert ids[-1] == frozenset({7})
        assert lists == [[], [42], [7, 42], [7]]
