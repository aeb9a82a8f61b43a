"""Search screen endpoints (debounced keyword input, genre filter)."""

from __future__ import annotations

from typing import cast

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from moviestudio.interfaces.api.presenter import render_search
from moviestudio.interfaces.app_state import AppState
from moviestudio.interfaces.session import BrowseSession

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/search", tags=["search"])


class QueryInput(BaseModel):
    text: str


def _session(request: Request) -> BrowseSession:
    return cast(AppState, request.app.state).session


def _search_response(session: BrowseSession, status_code: int = 200) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=render_search(
            session.search.state.value,
            half_star_threshold=session.half_star_threshold,
        ),
    )


@router.get("")
async def search_state(request: Request) -> JSONResponse:
    return _search_response(_session(request))


@router.post("/query")
async def search_query(request: Request, body: QueryInput) -> JSONResponse:
    """Feed raw text input; the search runs once the text settles.

    Answers 202 with the current state; poll ``GET /search`` for results.
    """
    session = _session(request)
    session.search.on_query_changed(body.text)
    return _search_response(session, status_code=202)


@router.post("/genres/{genre_id}/toggle")
async def search_toggle_genre(request: Request, genre_id: int) -> JSONResponse:
    session = _session(request)
    session.search.toggle_genre(genre_id)
    return _search_response(session)


@router.post("/genres/apply")
async def search_apply_genres(request: Request) -> JSONResponse:
    session = _session(request)
    await session.search.run_genre_search()
    return _search_response(session)


@router.post("/more")
async def search_more(request: Request) -> JSONResponse:
    session = _session(request)
    await session.search.on_near_end()
    return _search_response(session)


@router.post("/movies/{movie_id}/favorite/toggle")
async def search_toggle_favorite(request: Request, movie_id: int) -> JSONResponse:
    session = _session(request)
    active = session.search.state.value.active
    items = active.items if active is not None else ()
    movie = next((m for m in items if m.id == movie_id), None)
    if movie is None:
        return JSONResponse(
            status_code=404,
            content={"error": "movie_not_in_results", "movie_id": movie_id},
        )
    await session.search.toggle_favorite(movie)
    return _search_response(session)
