"""Home feed: the four category rows fetched side by side."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field, replace

import structlog

from moviestudio.application.movie_repository import MovieRepository
from moviestudio.application.state import Controller, StateCell
from moviestudio.domain.entities.movie import Movie, MovieCategory
from moviestudio.domain.entities.result import Failure

log = structlog.get_logger(__name__)

HOME_CATEGORIES: tuple[MovieCategory, ...] = (
    MovieCategory.POPULAR,
    MovieCategory.NOW_PLAYING,
    MovieCategory.TOP_RATED,
    MovieCategory.UPCOMING,
)


@dataclass(frozen=True)
class CategoryFeed:
    items: tuple[Movie, ...] = ()
    loading: bool = False
    errored: bool = False
    error: str | None = None


def _all_loading() -> dict[MovieCategory, CategoryFeed]:
    return {c: CategoryFeed(loading=True) for c in HOME_CATEGORIES}


@dataclass(frozen=True)
class HomeState:
    """Every row starts out loading; ``started`` flips once a load has begun."""

    feeds: dict[MovieCategory, CategoryFeed] = field(default_factory=_all_loading)
    started: bool = False

    @property
    def should_fetch(self) -> bool:
        """True until at least one load has been started."""
        return not self.started

    @property
    def is_all_loading(self) -> bool:
        return bool(self.feeds) and all(f.loading for f in self.feeds.values())

    @property
    def is_all_errored(self) -> bool:
        return bool(self.feeds) and all(f.errored for f in self.feeds.values())

    def feed(self, category: MovieCategory) -> CategoryFeed:
        return self.feeds.get(category, CategoryFeed())

    def with_feed(self, category: MovieCategory, feed: CategoryFeed) -> HomeState:
        return replace(self, feeds={**self.feeds, category: feed})


class HomeAggregator(Controller):
    """Loads page 1 of every home category concurrently.

    Each category writes only its own key as soon as its fetch resolves, so
    a slow category never holds back the others. A new :meth:`load` resets
    all rows to loading; completions from an older load are dropped.
    """

    def __init__(self, repository: MovieRepository) -> None:
        super().__init__()
        self._repo = repository
        self.state: StateCell[HomeState] = StateCell(HomeState())
        self._generation = 0

    async def load(self) -> None:
        self._generation += 1
        generation = self._generation
        self.state.set(HomeState(started=True))
        log.debug("home_load_started", generation=generation)
        await asyncio.gather(
            *(self._load_category(c, generation) for c in HOME_CATEGORIES)
        )

    async def refresh(self) -> None:
        """Retry-all: identical to a fresh :meth:`load`."""
        await self.load()

    async def _load_category(self, category: MovieCategory, generation: int) -> None:
        result = await self._repo.fetch_category(category, page=1)
        if generation != self._generation:
            log.debug("home_stale_result_dropped", category=category.value)
            return

        def apply(state: HomeState) -> HomeState:
            previous = state.feed(category)
            if isinstance(result, Failure):
                feed = replace(
                    previous, loading=False, errored=True, error=result.reason
                )
            else:
                feed = CategoryFeed(items=tuple(result.value))
            return state.with_feed(category, feed)

        self.state.update(apply)
