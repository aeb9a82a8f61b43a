"""Paginated category / genre list screen."""

from __future__ import annotations

from dataclasses import dataclass, replace

import structlog

from moviestudio.application.movie_repository import MovieRepository
from moviestudio.application.paging import (
    PageState,
    apply_error,
    apply_page,
    begin_fresh,
    begin_more,
)
from moviestudio.application.state import Controller, StateCell
from moviestudio.application.use_cases.favorites import toggle_movie_favorite
from moviestudio.domain.entities.movie import Movie, MovieCategory
from moviestudio.domain.entities.result import Failure, Result

log = structlog.get_logger(__name__)

_GENRE_ROUTE_PREFIX = "genre_"


@dataclass(frozen=True)
class ListQuery:
    """What a list shows: one category, or movies matching a genre filter."""

    category: MovieCategory | None = None
    genre_ids: tuple[int, ...] = ()
    title: str = ""

    @classmethod
    def for_category(cls, category: MovieCategory) -> ListQuery:
        return cls(category=category, title=category.display_title)

    @classmethod
    def for_genres(cls, genre_ids: tuple[int, ...], title: str = "") -> ListQuery:
        return cls(genre_ids=tuple(genre_ids), title=title)

    @classmethod
    def from_route(cls, route: str | None) -> ListQuery:
        """Parse a navigation argument.

        ``genre_<ids>_<title>`` (ids comma-separated) selects a genre list;
        anything else is a category name, unknown names fall back to POPULAR.
        """
        if route and route.startswith(_GENRE_ROUTE_PREFIX):
            parts = route[len(_GENRE_ROUTE_PREFIX):].split("_", 1)
            try:
                ids = tuple(int(g) for g in parts[0].split(",") if g)
            except ValueError:
                ids = ()
            if ids:
                title = parts[1] if len(parts) > 1 else ""
                return cls.for_genres(ids, title=title)
        category = MovieCategory.parse(route) or MovieCategory.POPULAR
        return cls.for_category(category)


@dataclass(frozen=True)
class MovieListState:
    query: ListQuery | None = None
    page: PageState = PageState()
    favorite_ids: frozenset[int] = frozenset()

    @property
    def items(self) -> tuple[Movie, ...]:
        return self.page.items

    @property
    def screen_title(self) -> str:
        return self.query.title if self.query else ""

    @property
    def selected_category(self) -> MovieCategory | None:
        return self.query.category if self.query else None

    @property
    def favorite_item_ids(self) -> frozenset[int]:
        """Displayed items that are currently favorites."""
        return self.page.item_ids & self.favorite_ids


class MovieListController(Controller):
    """Page-by-page loading of one list with stale-response protection.

    Each :meth:`load` opens a new session; any page result that resolves
    after its session was replaced is dropped on arrival.
    """

    def __init__(self, repository: MovieRepository) -> None:
        super().__init__()
        self._repo = repository
        self.state: StateCell[MovieListState] = StateCell(MovieListState())
        self._session = 0

    def start(self) -> None:
        """Begin tracking favorite ids for the displayed items."""
        self.own(self._repo.all_favorite_ids(self._on_favorite_ids))

    def _on_favorite_ids(self, ids: frozenset[int]) -> None:
        self.state.update(lambda s: replace(s, favorite_ids=frozenset(ids)))

    async def open_route(self, route: str | None) -> None:
        await self.load(ListQuery.from_route(route))

    async def load(self, query: ListQuery) -> None:
        self._session += 1
        session = self._session
        self.state.update(
            lambda s: replace(s, query=query, page=begin_fresh(s.page))
        )
        await self._fetch(query, session, page=1)

    async def select_category(self, category: MovieCategory) -> None:
        if self.state.value.selected_category == category:
            return
        await self.load(ListQuery.for_category(category))

    async def load_more(self) -> None:
        current = self.state.value
        if current.query is None or not current.page.can_load_more():
            return
        next_page = current.page.page + 1
        self.state.update(lambda s: replace(s, page=begin_more(s.page)))
        await self._fetch(current.query, self._session, page=next_page)

    async def toggle_favorite(self, movie: Movie) -> None:
        is_favorite = movie.id in self.state.value.favorite_ids
        await toggle_movie_favorite(self._repo, movie, is_favorite=is_favorite)

    async def _request(self, query: ListQuery, page: int) -> Result[list[Movie]]:
        if query.category is not None:
            return await self._repo.fetch_category(query.category, page)
        return await self._repo.discover_by_genres(query.genre_ids, page)

    async def _fetch(self, query: ListQuery, session: int, page: int) -> None:
        result = await self._request(query, page)

        def apply(state: MovieListState) -> MovieListState:
            if session != self._session or state.query != query:
                log.debug("movie_list_stale_page_dropped", page=page)
                return state
            if isinstance(result, Failure):
                return replace(state, page=apply_error(state.page, result.reason))
            return replace(state, page=apply_page(state.page, page, result.value))

        self.state.update(apply)
