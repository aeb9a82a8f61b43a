"""JSON presenter for controller state.

Turns the frozen state dataclasses into plain dicts for ``JSONResponse``.
Every movie row carries its favorite flag and star rating so clients do not
have to join against the favorites list themselves.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from moviestudio.application.paging import PageState
from moviestudio.application.use_cases.favorites import FavoritesState
from moviestudio.application.use_cases.home import HOME_CATEGORIES, HomeState
from moviestudio.application.use_cases.movie_detail import (
    DetailError,
    DetailState,
    DetailSuccess,
)
from moviestudio.application.use_cases.movie_list import MovieListState
from moviestudio.application.use_cases.search import SearchState
from moviestudio.domain.entities.movie import Movie
from moviestudio.domain.rating import DEFAULT_HALF_STAR_THRESHOLD, star_rating


def render_rating(
    vote_average: float | None, half_star_threshold: float
) -> dict[str, Any]:
    rating = star_rating(vote_average, half_star_threshold=half_star_threshold)
    return {**asdict(rating), "description": rating.description}


def render_movie(
    movie: Movie,
    favorite_ids: frozenset[int] = frozenset(),
    *,
    half_star_threshold: float = DEFAULT_HALF_STAR_THRESHOLD,
) -> dict[str, Any]:
    data = asdict(movie)
    data["genre_ids"] = list(movie.genre_ids)
    data["release_year"] = movie.release_year
    data["is_favorite"] = movie.id in favorite_ids
    data["rating"] = render_rating(movie.vote_average, half_star_threshold)
    return data


def render_page(
    page: PageState,
    favorite_ids: frozenset[int],
    *,
    half_star_threshold: float,
) -> dict[str, Any]:
    return {
        "items": [
            render_movie(m, favorite_ids, half_star_threshold=half_star_threshold)
            for m in page.items
        ],
        "page": page.page,
        "is_loading": page.is_loading,
        "is_loading_more": page.is_loading_more,
        "is_last_page": page.is_last_page,
        "error": page.error,
    }


def render_home(state: HomeState, *, half_star_threshold: float) -> dict[str, Any]:
    feeds = []
    for category in HOME_CATEGORIES:
        feed = state.feed(category)
        feeds.append(
            {
                "category": category.value,
                "title": category.display_title,
                "items": [
                    render_movie(m, half_star_threshold=half_star_threshold)
                    for m in feed.items
                ],
                "loading": feed.loading,
                "errored": feed.errored,
                "error": feed.error,
            }
        )
    return {
        "feeds": feeds,
        "should_fetch": state.should_fetch,
        "is_all_loading": state.is_all_loading,
        "is_all_errored": state.is_all_errored,
    }


def render_movie_list(
    state: MovieListState, *, half_star_threshold: float
) -> dict[str, Any]:
    category = state.selected_category
    genre_ids = list(state.query.genre_ids) if state.query else []
    return {
        "title": state.screen_title,
        "category": category.value if category else None,
        "genre_ids": genre_ids,
        **render_page(
            state.page,
            state.favorite_ids,
            half_star_threshold=half_star_threshold,
        ),
    }


def render_search(state: SearchState, *, half_star_threshold: float) -> dict[str, Any]:
    return {
        "mode": state.mode.value,
        "query": state.query,
        "genres": [
            {"id": g.id, "name": g.name, "selected": g.id in state.selected_genre_ids}
            for g in state.genres
        ],
        "is_loading_genres": state.is_loading_genres,
        "genre_catalog_error": state.genre_catalog_error,
        "selected_genre_ids": sorted(state.selected_genre_ids),
        "last_searched_genres": sorted(state.last_searched_genres),
        "keyword": render_page(
            state.keyword,
            state.favorite_ids,
            half_star_threshold=half_star_threshold,
        ),
        "genre": render_page(
            state.genre,
            state.favorite_ids,
            half_star_threshold=half_star_threshold,
        ),
    }


def render_detail(state: DetailState, *, half_star_threshold: float) -> dict[str, Any]:
    if isinstance(state, DetailError):
        return {
            "status": "error",
            "message": state.message,
            "not_found": state.not_found,
        }
    if not isinstance(state, DetailSuccess):
        return {"status": "loading"}

    details = asdict(state.details)
    # Region-resolved providers are already in "watch_providers".
    details.pop("raw_watch_providers", None)
    details["release_year"] = state.details.release_year
    return {
        "status": "success",
        "is_favorite": state.is_favorite,
        "rating": render_rating(state.details.vote_average, half_star_threshold),
        "details": details,
    }


def render_favorites(state: FavoritesState) -> dict[str, Any]:
    return {
        "is_loading": state.is_loading,
        "favorites": [asdict(record) for record in state.favorites],
    }
