"""Integration tests: real TMDB adapter, response cache and favorites store.

TMDB is mocked via respx; everything from the repository down is real.
"""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest
import respx
from fakes import detail_payload, movie_rows

from moviestudio.application.movie_repository import MovieRepository
from moviestudio.application.use_cases.home import HOME_CATEGORIES, HomeAggregator
from moviestudio.application.use_cases.movie_detail import (
    DetailSuccess,
    MovieDetailController,
)
from moviestudio.domain.entities.result import Success
from moviestudio.infrastructure.cache.diskcache_adapter import DiskcacheAdapter
from moviestudio.infrastructure.persistence.diskcache_favorites import (
    DiskcacheFavoritesStore,
)
from moviestudio.infrastructure.tmdb.client import HttpxTmdbDataSource

pytestmark = pytest.mark.integration

_BASE = "https://api.themoviedb.org/3"


@pytest.fixture()
def data_source(
    http_client: httpx.AsyncClient, diskcache: DiskcacheAdapter
) -> HttpxTmdbDataSource:
    return HttpxTmdbDataSource(api_key="k", http_client=http_client, cache=diskcache)


@pytest.fixture()
async def store(tmp_path: Path) -> DiskcacheFavoritesStore:
    async with DiskcacheFavoritesStore(tmp_path / "favorites") as s:
        yield s


class TestResponseCache:
    async def test_second_list_request_is_served_from_disk(
        self,
        data_source: HttpxTmdbDataSource,
        store: DiskcacheFavoritesStore,
        respx_mock: respx.MockRouter,
    ) -> None:
        route = respx_mock.get(f"{_BASE}/movie/popular").respond(
            json={"page": 1, "total_pages": 3, "results": movie_rows(1, 4)}
        )
        repository = MovieRepository(data_source, store)

        first = await repository.fetch_popular()
        second = await repository.fetch_popular()

        assert isinstance(first, Success)
        assert first == second
        assert route.call_count == 1

    async def test_home_loads_all_rows(
        self,
        data_source: HttpxTmdbDataSource,
        store: DiskcacheFavoritesStore,
        respx_mock: respx.MockRouter,
    ) -> None:
        for offset, category in enumerate(HOME_CATEGORIES):
            respx_mock.get(f"{_BASE}/movie/{category.path}").respond(
                json={"page": 1, "results": movie_rows(offset * 10, 2)}
            )
        home = HomeAggregator(MovieRepository(data_source, store))

        await home.load()

        state = home.state.value
        assert all(len(state.feed(c).items) == 2 for c in HOME_CATEGORIES)
        assert not state.is_all_errored


class TestFavoritesPersistence:
    async def test_detail_favorite_survives_restart(
        self,
        tmp_path: Path,
        data_source: HttpxTmdbDataSource,
        respx_mock: respx.MockRouter,
    ) -> None:
        respx_mock.get(f"{_BASE}/movie/42").respond(json=detail_payload(42))

        async with DiskcacheFavoritesStore(tmp_path / "fav") as store:
            controller = MovieDetailController(MovieRepository(data_source, store), 42)
            await controller.load()
            await controller.toggle_favorite()
            controller.close()

        async with DiskcacheFavoritesStore(tmp_path / "fav") as store:
            controller = MovieDetailController(MovieRepository(data_source, store), 42)
            await controller.load()

            state = controller.state.value
            assert isinstance(state, DetailSuccess)
            assert state.is_favorite
            record = await store.get(42)
            assert record is not None
            assert record.title == "The Answer"
            controller.close()
