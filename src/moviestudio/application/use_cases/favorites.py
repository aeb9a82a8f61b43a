"""Favorites screen and the shared favorite-toggle helper."""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from moviestudio.application.movie_repository import MovieRepository
from moviestudio.application.state import Controller, StateCell
from moviestudio.domain.entities.movie import FavoriteRecord, Movie

log = structlog.get_logger(__name__)


async def toggle_movie_favorite(
    repository: MovieRepository, movie: Movie, *, is_favorite: bool
) -> None:
    """Remove *movie* from favorites if it is one, else add a snapshot of it.

    Store failures are logged, not raised: the favorite flag shown on screen
    comes from the store subscription, so there is nothing to roll back.
    """
    try:
        if is_favorite:
            await repository.remove_favorite(movie.id)
        else:
            await repository.add_favorite(
                movie.id,
                movie.title,
                movie.poster_path,
                movie.vote_average,
                movie.release_date,
            )
    except Exception:
        log.warning("favorite_toggle_failed", movie_id=movie.id, exc_info=True)


@dataclass(frozen=True)
class FavoritesState:
    is_loading: bool = True
    favorites: tuple[FavoriteRecord, ...] = ()


class FavoritesController(Controller):
    """Newest-first list of favorite records, kept live from the store."""

    def __init__(self, repository: MovieRepository) -> None:
        super().__init__()
        self._repo = repository
        self.state: StateCell[FavoritesState] = StateCell(FavoritesState())

    def start(self) -> None:
        self.own(self._repo.all_favorites(self._on_favorites))

    def _on_favorites(self, records: list[FavoriteRecord]) -> None:
        self.state.set(FavoritesState(is_loading=False, favorites=tuple(records)))

    async def remove(self, movie_id: int) -> None:
        try:
            await self._repo.remove_favorite(movie_id)
        except Exception:
            log.warning("favorite_remove_failed", movie_id=movie_id, exc_info=True)
