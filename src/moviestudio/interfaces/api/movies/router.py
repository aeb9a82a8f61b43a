"""Movie detail and favorites endpoints."""

from __future__ import annotations

from typing import cast

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from moviestudio.application.use_cases import MovieDetailController
from moviestudio.application.use_cases.movie_detail import DetailError
from moviestudio.interfaces.api.presenter import render_detail, render_favorites
from moviestudio.interfaces.app_state import AppState
from moviestudio.interfaces.session import BrowseSession

log = structlog.get_logger(__name__)

router = APIRouter(tags=["movies"])


def _session(request: Request) -> BrowseSession:
    return cast(AppState, request.app.state).session


def _detail_response(
    session: BrowseSession, controller: MovieDetailController
) -> JSONResponse:
    state = controller.state.value
    status_code = 404 if isinstance(state, DetailError) and state.not_found else 200
    return JSONResponse(
        status_code=status_code,
        content=render_detail(state, half_star_threshold=session.half_star_threshold),
    )


async def _loaded_detail(
    session: BrowseSession, movie_id: int
) -> MovieDetailController:
    controller, created = session.detail_for(movie_id)
    if created:
        await controller.load()
    return controller


@router.get("/movies/{movie_id}")
async def movie_detail(request: Request, movie_id: int) -> JSONResponse:
    session = _session(request)
    controller = await _loaded_detail(session, movie_id)
    return _detail_response(session, controller)


@router.post("/movies/{movie_id}/retry")
async def movie_retry(request: Request, movie_id: int) -> JSONResponse:
    session = _session(request)
    controller, created = session.detail_for(movie_id)
    if created:
        await controller.load()
    else:
        await controller.retry()
    return _detail_response(session, controller)


@router.post("/movies/{movie_id}/favorite/toggle")
async def movie_toggle_favorite(request: Request, movie_id: int) -> JSONResponse:
    """Flip the favorite flag; the response reflects the store's new value."""
    session = _session(request)
    controller = await _loaded_detail(session, movie_id)
    await controller.toggle_favorite()
    return _detail_response(session, controller)


@router.get("/favorites")
async def favorites(request: Request) -> JSONResponse:
    session = _session(request)
    return JSONResponse(content=render_favorites(session.favorites.state.value))


@router.delete("/favorites/{movie_id}")
async def favorites_remove(request: Request, movie_id: int) -> JSONResponse:
    session = _session(request)
    await session.favorites.remove(movie_id)
    log.debug("favorite_removed_via_api", movie_id=movie_id)
    return JSONResponse(content=render_favorites(session.favorites.state.value))
