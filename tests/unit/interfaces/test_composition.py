"""Tests for build_app() and the lifespan composition root."""

from __future__ import annotations

from pathlib import Path
from typing import cast

import pytest
import respx
from fakes import movie_rows
from fastapi.testclient import TestClient

from moviestudio.application.use_cases.home import HOME_CATEGORIES
from moviestudio.domain.exceptions import FavoritesStoreError
from moviestudio.infrastructure.cache import DiskcacheAdapter
from moviestudio.infrastructure.config import AppConfig
from moviestudio.infrastructure.persistence import (
    DiskcacheFavoritesStore,
    InMemoryFavoritesStore,
)
from moviestudio.infrastructure.tmdb import HttpxTmdbDataSource
from moviestudio.interfaces import composition
from moviestudio.interfaces.app_state import AppState
from moviestudio.interfaces.main import build_app
from moviestudio.interfaces.session import BrowseSession

_BASE = "https://api.themoviedb.org/3"


def _config(**overrides: object) -> AppConfig:
    data: dict[str, object] = {
        "tmdb_api_key": "k",
        "cache_enabled": False,
        "favorites": {"backend": "memory"},
    }
    data.update(overrides)
    return AppConfig.model_validate(data)


def _mock_tmdb(router: respx.MockRouter) -> None:
    router.get(f"{_BASE}/genre/movie/list").respond(
        json={"genres": [{"id": 28, "name": "Action"}]}
    )
    for offset, category in enumerate(HOME_CATEGORIES):
        router.get(f"{_BASE}/movie/{category.path}").respond(
            json={"page": 1, "results": movie_rows(offset * 10, 2)}
        )


class TestBuildApp:
    def test_healthz(self) -> None:
        with respx.mock(assert_all_called=False) as router:
            _mock_tmdb(router)
            with TestClient(build_app(_config())) as client:
                resp = client.get("/healthz")

        assert resp.status_code == 200
        assert resp.json() == {
            "status": "ok",
            "tmdb_api_key": True,
            "response_cache": False,
            "favorites_backend": "memory",
        }

    def test_request_id_is_echoed_or_generated(self) -> None:
        with respx.mock(assert_all_called=False) as router:
            _mock_tmdb(router)
            with TestClient(build_app(_config())) as client:
                given = client.get("/healthz", headers={"X-Request-ID": "abc123"})
                generated = client.get("/healthz")

        assert given.headers["x-request-id"] == "abc123"
        assert len(generated.headers["x-request-id"]) == 12

    def test_lifespan_wires_resources(self) -> None:
        app = build_app(_config())
        with respx.mock(assert_all_called=False) as router:
            _mock_tmdb(router)
            with TestClient(app):
                state = cast(AppState, app.state)
                assert state.cache is None
                assert isinstance(state.data_source, HttpxTmdbDataSource)
                assert isinstance(state.favorites_store, InMemoryFavoritesStore)
                assert state.session.half_star_threshold == 0.25

    def test_home_goes_through_tmdb_client(self) -> None:
        with respx.mock(assert_all_called=False) as router:
            _mock_tmdb(router)
            with TestClient(build_app(_config())) as client:
                body = client.get("/home").json()

            request = router.calls.last.request

        assert all(len(feed["items"]) == 2 for feed in body["feeds"])
        assert request.url.params["api_key"] == "k"
        assert request.headers["user-agent"] == "MovieStudio/0.1.0"

    def test_diskcache_backends(self, tmp_path: Path) -> None:
        config = _config(
            cache_enabled=True,
            cache_dir=str(tmp_path / "responses"),
            favorites={"backend": "diskcache", "dir": str(tmp_path / "favorites")},
        )
        app = build_app(config)
        with respx.mock(assert_all_called=False) as router:
            _mock_tmdb(router)
            with TestClient(app):
                state = cast(AppState, app.state)
                assert state.cache is not None
                assert isinstance(state.favorites_store, DiskcacheFavoritesStore)

        assert (tmp_path / "favorites").exists()


class _UnopenableStore:
    async def __aenter__(self) -> _UnopenableStore:
        raise FavoritesStoreError("favorites directory is read-only")

    async def aclose(self) -> None:
        pass


class TestLifespanStartupFailure:
    def test_store_failure_closes_client_and_cache(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(
            composition,
            "create_favorites_store",
            lambda backend, directory: _UnopenableStore(),
        )
        config = _config(cache_enabled=True, cache_dir=str(tmp_path / "responses"))
        app = build_app(config)

        with pytest.raises(FavoritesStoreError):
            with TestClient(app):
                pass

        state = cast(AppState, app.state)
        assert state.http_client.is_closed
        assert isinstance(state.cache, DiskcacheAdapter)
        assert state.cache._cache is None

    def test_session_failure_closes_opened_resources(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def refuse(self: BrowseSession) -> None:
            raise RuntimeError("no event loop for controllers")

        monkeypatch.setattr(BrowseSession, "start", refuse)
        app = build_app(_config())

        with pytest.raises(RuntimeError, match="no event loop"):
            with TestClient(app):
                pass

        state = cast(AppState, app.state)
        assert state.http_client.is_closed
        assert state.session.home.closed
        assert state.session.search.closed
