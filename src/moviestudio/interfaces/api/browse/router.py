"""Home feed and paginated list endpoints."""

from __future__ import annotations

from typing import cast

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from moviestudio.application.use_cases import MovieListController
from moviestudio.domain.entities.movie import MovieCategory
from moviestudio.interfaces.api.presenter import render_home, render_movie_list
from moviestudio.interfaces.app_state import AppState
from moviestudio.interfaces.session import BrowseSession

log = structlog.get_logger(__name__)

router = APIRouter(tags=["browse"])


def _session(request: Request) -> BrowseSession:
    return cast(AppState, request.app.state).session


def _home_response(session: BrowseSession) -> JSONResponse:
    return JSONResponse(
        content=render_home(
            session.home.state.value,
            half_star_threshold=session.half_star_threshold,
        )
    )


def _list_response(
    session: BrowseSession, controller: MovieListController
) -> JSONResponse:
    return JSONResponse(
        content=render_movie_list(
            controller.state.value,
            half_star_threshold=session.half_star_threshold,
        )
    )


async def _opened_list(session: BrowseSession, route: str) -> MovieListController:
    controller, created = session.list_for(route)
    if created:
        await controller.open_route(route)
    return controller


@router.get("/home")
async def home(request: Request) -> JSONResponse:
    """Home rows; the first call triggers the initial load."""
    session = _session(request)
    if session.home.state.value.should_fetch:
        await session.home.load()
    return _home_response(session)


@router.post("/home/refresh")
async def home_refresh(request: Request) -> JSONResponse:
    session = _session(request)
    await session.home.refresh()
    return _home_response(session)


@router.get("/lists/{route}")
async def list_open(request: Request, route: str) -> JSONResponse:
    """Open (or reuse) the list for a category name or ``genre_<ids>_<title>``."""
    session = _session(request)
    controller = await _opened_list(session, route)
    return _list_response(session, controller)


@router.post("/lists/{route}/more")
async def list_more(request: Request, route: str) -> JSONResponse:
    session = _session(request)
    controller, created = session.list_for(route)
    if created:
        await controller.open_route(route)
    else:
        await controller.load_more()
    return _list_response(session, controller)


@router.post("/lists/{route}/category/{category}")
async def list_select_category(
    request: Request, route: str, category: str
) -> JSONResponse:
    parsed = MovieCategory.parse(category)
    if parsed is None:
        log.info("list_unknown_category", route=route, category=category)
        return JSONResponse(
            status_code=400,
            content={"error": "unknown_category", "category": category},
        )
    session = _session(request)
    controller = await _opened_list(session, route)
    await controller.select_category(parsed)
    return _list_response(session, controller)


@router.post("/lists/{route}/movies/{movie_id}/favorite/toggle")
async def list_toggle_favorite(
    request: Request, route: str, movie_id: int
) -> JSONResponse:
    session = _session(request)
    controller = await _opened_list(session, route)
    movie = next((m for m in controller.state.value.items if m.id == movie_id), None)
    if movie is None:
        return JSONResponse(
            status_code=404,
            content={"error": "movie_not_in_list", "movie_id": movie_id},
        )
    await controller.toggle_favorite(movie)
    return _list_response(session, controller)
