"""Shared test fixtures for the MovieStudio test suite."""

from __future__ import annotations

import pytest
from fakes import FakeClock, FakeMovieDataSource, movie_row

from moviestudio.application.movie_repository import MovieRepository
from moviestudio.domain.entities.movie import FavoriteRecord, Movie
from moviestudio.infrastructure.persistence.memory_favorites import (
    InMemoryFavoritesStore,
)

# ---------------------------------------------------------------------------
# Ports
# ---------------------------------------------------------------------------


@pytest.fixture()
def data_source() -> FakeMovieDataSource:
    return FakeMovieDataSource()


@pytest.fixture()
def favorites_store() -> InMemoryFavoritesStore:
    return InMemoryFavoritesStore()


# ---------------------------------------------------------------------------
# Application fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def repository(
    data_source: FakeMovieDataSource,
    favorites_store: InMemoryFavoritesStore,
    clock: FakeClock,
) -> MovieRepository:
    return MovieRepository(data_source, favorites_store, clock=clock)


# ---------------------------------------------------------------------------
# Domain entity fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def movie() -> Movie:
    return Movie.from_api(movie_row(42, "The Answer"))


@pytest.fixture()
def favorite_record() -> FavoriteRecord:
    return FavoriteRecord(
        movie_id=42,
        title="The Answer",
        poster_path="/answer.jpg",
        vote_average=6.8,
        release_year="2005",
        added_at=1_700_000_000.0,
    )
