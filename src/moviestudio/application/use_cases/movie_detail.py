"""Movie detail screen: details, watch providers and live favorite status."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Union

import structlog

from moviestudio.application.movie_repository import MovieRepository
from moviestudio.application.state import Controller, StateCell
from moviestudio.application.use_cases.favorites import toggle_movie_favorite
from moviestudio.domain.entities.movie import MovieDetails
from moviestudio.domain.entities.result import Failure, FailureKind
from moviestudio.domain.entities.subscription import Subscription
from moviestudio.domain.watch_providers import resolve_watch_providers

log = structlog.get_logger(__name__)

NOT_FOUND_MESSAGE = "Movie not found"


@dataclass(frozen=True)
class DetailLoading:
    pass


@dataclass(frozen=True)
class DetailSuccess:
    details: MovieDetails
    is_favorite: bool = False


@dataclass(frozen=True)
class DetailError:
    message: str
    not_found: bool = False


DetailState = Union[DetailLoading, DetailSuccess, DetailError]


class MovieDetailController(Controller):
    """Loads one movie and mirrors its favorite status from the store.

    The favorite flag is never flipped locally: :meth:`toggle_favorite`
    writes to the store and the subscription re-emits ``DetailSuccess``.
    """

    def __init__(
        self,
        repository: MovieRepository,
        movie_id: int,
        *,
        region: str = "US",
        region_fallback: bool = True,
    ) -> None:
        super().__init__()
        self._repo = repository
        self.movie_id = movie_id
        self._region = region
        self._region_fallback = region_fallback
        self.state: StateCell[DetailState] = StateCell(DetailLoading())
        self._favorite_sub: Subscription | None = None
        self._attempt = 0

    async def load(self) -> None:
        self._attempt += 1
        attempt = self._attempt
        self._release_favorite_sub()
        self.state.set(DetailLoading())

        result = await self._repo.fetch_detail(self.movie_id)
        if attempt != self._attempt or self.closed:
            return

        if isinstance(result, Failure):
            not_found = result.kind is FailureKind.NOT_FOUND
            message = NOT_FOUND_MESSAGE if not_found else result.reason
            log.info(
                "movie_detail_failed",
                movie_id=self.movie_id,
                not_found=not_found,
                reason=result.reason,
            )
            self.state.set(DetailError(message=message, not_found=not_found))
            return

        providers = resolve_watch_providers(
            result.value.raw_watch_providers,
            self._region,
            fallback_to_first=self._region_fallback,
        )
        details = replace(result.value, watch_providers=providers)
        log.debug(
            "movie_detail_loaded",
            movie_id=self.movie_id,
            provider_region=providers.region,
        )

        def on_favorite(is_favorite: bool) -> None:
            self.state.set(DetailSuccess(details=details, is_favorite=is_favorite))

        self._favorite_sub = self.own(self._repo.is_favorite(self.movie_id, on_favorite))

    async def retry(self) -> None:
        await self.load()

    async def toggle_favorite(self) -> None:
        current = self.state.value
        if not isinstance(current, DetailSuccess):
            return
        await toggle_movie_favorite(
            self._repo, current.details.summary(), is_favorite=current.is_favorite
        )

    def _release_favorite_sub(self) -> None:
        if self._favorite_sub is not None:
            self._favorite_sub.dispose()
            if self._favorite_sub in self._subscriptions:
                self._subscriptions.remove(self._favorite_sub)
            self._favorite_sub = None
