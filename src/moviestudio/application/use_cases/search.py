"""Search screen: debounced keyword search and explicit genre filtering."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

import structlog

from moviestudio.application.debounce import Debouncer
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
from moviestudio.domain.entities.movie import Genre, Movie
from moviestudio.domain.entities.result import Failure

log = structlog.get_logger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.5


class SearchMode(str, Enum):
    NONE = "none"
    KEYWORD = "keyword"
    GENRE = "genre"


@dataclass(frozen=True)
class SearchState:
    mode: SearchMode = SearchMode.NONE

    # Genre catalogue
    genres: tuple[Genre, ...] = ()
    is_loading_genres: bool = False
    genre_catalog_error: str | None = None
    selected_genre_ids: frozenset[int] = frozenset()

    # Keyword results
    query: str = ""
    keyword: PageState = PageState()

    # Genre results
    last_searched_genres: frozenset[int] = frozenset()
    genre: PageState = PageState()

    favorite_ids: frozenset[int] = frozenset()

    @property
    def active(self) -> PageState | None:
        if self.mode is SearchMode.KEYWORD:
            return self.keyword
        if self.mode is SearchMode.GENRE:
            return self.genre
        return None

    @property
    def favorite_item_ids(self) -> frozenset[int]:
        active = self.active
        if active is None:
            return frozenset()
        return active.item_ids & self.favorite_ids


def _mode_without_keyword(state: SearchState) -> SearchMode:
    if state.last_searched_genres and state.selected_genre_ids:
        return SearchMode.GENRE
    return SearchMode.NONE


class SearchController(Controller):
    """Dual-mode search with independent pagination per mode.

    Text input goes through :meth:`on_query_changed` and is debounced;
    genre results are fetched only on :meth:`run_genre_search`. Every fresh
    search opens a new session for its mode; a page result is applied only
    if its session is still current and the query (or genre set) still
    matches when it arrives.
    """

    def __init__(
        self,
        repository: MovieRepository,
        *,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ) -> None:
        super().__init__()
        self._repo = repository
        self.state: StateCell[SearchState] = StateCell(SearchState())
        self._debouncer: Debouncer[str] = Debouncer(
            debounce_seconds, self._on_query_settled
        )
        self._keyword_session = 0
        self._genre_session = 0

    def start(self) -> None:
        """Track favorite ids and load the genre catalogue in the background."""
        self.own(self._repo.all_favorite_ids(self._on_favorite_ids))
        self.launch(self.load_genres())

    def close(self) -> None:
        self._debouncer.cancel()
        super().close()

    def _on_favorite_ids(self, ids: frozenset[int]) -> None:
        self.state.update(lambda s: replace(s, favorite_ids=frozenset(ids)))

    # ------------------------------------------------------------------
    # Genre catalogue
    # ------------------------------------------------------------------

    async def load_genres(self) -> None:
        current = self.state.value
        if current.is_loading_genres or current.genres:
            return
        self.state.update(
            lambda s: replace(s, is_loading_genres=True, genre_catalog_error=None)
        )
        result = await self._repo.fetch_genres()
        if isinstance(result, Failure):
            self.state.update(
                lambda s: replace(
                    s, is_loading_genres=False, genre_catalog_error=result.reason
                )
            )
            return
        self.state.update(
            lambda s: replace(s, is_loading_genres=False, genres=tuple(result.value))
        )

    def toggle_genre(self, genre_id: int) -> None:
        def apply(state: SearchState) -> SearchState:
            selected = state.selected_genre_ids
            if genre_id in selected:
                return replace(state, selected_genre_ids=selected - {genre_id})
            return replace(state, selected_genre_ids=selected | {genre_id})

        self.state.update(apply)

    # ------------------------------------------------------------------
    # Keyword search
    # ------------------------------------------------------------------

    def on_query_changed(self, text: str) -> None:
        """Raw text input; only a value stable for the debounce window is searched."""
        self._debouncer.submit(text)

    def _on_query_settled(self, text: str) -> None:
        if self.closed:
            return
        if not text.strip():
            self._keyword_session += 1
            self.state.update(
                lambda s: replace(
                    s,
                    query="",
                    keyword=replace(
                        s.keyword,
                        items=(),
                        error=None,
                        is_loading=False,
                        is_loading_more=False,
                    ),
                    mode=_mode_without_keyword(s),
                )
            )
            log.debug("search_query_cleared")
            return
        self.launch(self.search_keyword(text))

    async def search_keyword(self, query: str) -> None:
        """Start a fresh keyword search (page 1)."""
        if not query.strip():
            return
        self._keyword_session += 1
        session = self._keyword_session
        self.state.update(
            lambda s: replace(
                s,
                mode=SearchMode.KEYWORD,
                query=query,
                keyword=begin_fresh(s.keyword),
            )
        )
        log.debug("search_keyword_started", query=query, session=session)
        await self._fetch_keyword(query, session, 1)

    async def load_more_keyword(self) -> None:
        current = self.state.value
        if not current.query.strip() or not current.keyword.can_load_more():
            return
        next_page = current.keyword.page + 1
        self.state.update(lambda s: replace(s, keyword=begin_more(s.keyword)))
        await self._fetch_keyword(current.query, self._keyword_session, next_page)

    async def _fetch_keyword(self, query: str, session: int, page: int) -> None:
        result = await self._repo.search(query, page)

        def apply(state: SearchState) -> SearchState:
            if session != self._keyword_session or state.query != query:
                log.debug("search_keyword_stale_dropped", query=query, page=page)
                return state
            if isinstance(result, Failure):
                return replace(state, keyword=apply_error(state.keyword, result.reason))
            return replace(
                state, keyword=apply_page(state.keyword, page, result.value)
            )

        self.state.update(apply)

    # ------------------------------------------------------------------
    # Genre search
    # ------------------------------------------------------------------

    async def run_genre_search(self) -> None:
        """Fetch page 1 for the selected genres (explicit "apply" action)."""
        current = self.state.value
        selected = current.selected_genre_ids

        if not selected:
            self._genre_session += 1
            self.state.update(
                lambda s: replace(
                    s,
                    last_searched_genres=frozenset(),
                    genre=PageState(),
                    mode=(
                        SearchMode.KEYWORD
                        if s.mode is SearchMode.KEYWORD
                        else SearchMode.NONE
                    ),
                )
            )
            return

        if selected == current.last_searched_genres and current.genre.items:
            self.state.update(
                lambda s: replace(
                    s,
                    mode=SearchMode.GENRE,
                    genre=replace(s.genre, is_loading=False),
                )
            )
            log.debug("search_genre_unchanged", genres=sorted(selected))
            return

        self._genre_session += 1
        session = self._genre_session
        self.state.update(
            lambda s: replace(
                s,
                mode=SearchMode.GENRE,
                last_searched_genres=selected,
                genre=begin_fresh(s.genre),
            )
        )
        log.debug("search_genre_started", genres=sorted(selected), session=session)
        await self._fetch_genre(selected, session, 1)

    async def load_more_genre(self) -> None:
        current = self.state.value
        if not current.last_searched_genres or not current.genre.can_load_more():
            return
        next_page = current.genre.page + 1
        self.state.update(lambda s: replace(s, genre=begin_more(s.genre)))
        await self._fetch_genre(
            current.last_searched_genres, self._genre_session, next_page
        )

    async def _fetch_genre(
        self, genre_ids: frozenset[int], session: int, page: int
    ) -> None:
        result = await self._repo.discover_by_genres(sorted(genre_ids), page)

        def apply(state: SearchState) -> SearchState:
            if (
                session != self._genre_session
                or state.last_searched_genres != genre_ids
            ):
                log.debug("search_genre_stale_dropped", page=page)
                return state
            if isinstance(result, Failure):
                return replace(state, genre=apply_error(state.genre, result.reason))
            return replace(state, genre=apply_page(state.genre, page, result.value))

        self.state.update(apply)

    # ------------------------------------------------------------------
    # Shared
    # ------------------------------------------------------------------

    async def on_near_end(self) -> None:
        """The visible list is close to its end: page the active mode only."""
        mode = self.state.value.mode
        if mode is SearchMode.KEYWORD:
            await self.load_more_keyword()
        elif mode is SearchMode.GENRE:
            await self.load_more_genre()

    async def toggle_favorite(self, movie: Movie) -> None:
        is_favorite = movie.id in self.state.value.favorite_ids
        await toggle_movie_favorite(self._repo, movie, is_favorite=is_favorite)
