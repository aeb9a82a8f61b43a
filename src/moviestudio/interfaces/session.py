"""Controller registry for the single-user browsing session."""

from __future__ import annotations

import asyncio
from collections import OrderedDict
from typing import Generic, Hashable, TypeVar

import structlog

from moviestudio.application.movie_repository import MovieRepository
from moviestudio.application.state import Controller
from moviestudio.application.use_cases import (
    FavoritesController,
    HomeAggregator,
    MovieDetailController,
    MovieListController,
    SearchController,
)
from moviestudio.application.use_cases.movie_list import ListQuery
from moviestudio.infrastructure.config import BrowseConfig

log = structlog.get_logger(__name__)

MAX_OPEN_LISTS = 8
MAX_OPEN_DETAILS = 16

K = TypeVar("K", bound=Hashable)
C = TypeVar("C", bound=Controller)


class _ControllerLRU(Generic[K, C]):
    """Most recently used controllers; evicted ones are closed."""

    def __init__(self, kind: str, capacity: int) -> None:
        self._kind = kind
        self._capacity = capacity
        self._entries: OrderedDict[K, C] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: K) -> C | None:
        controller = self._entries.get(key)
        if controller is not None:
            self._entries.move_to_end(key)
        return controller

    def put(self, key: K, controller: C) -> None:
        self._entries[key] = controller
        while len(self._entries) > self._capacity:
            evicted_key, evicted = self._entries.popitem(last=False)
            evicted.close()
            log.debug("controller_evicted", kind=self._kind, key=str(evicted_key))

    def drain(self) -> list[C]:
        controllers = list(self._entries.values())
        self._entries.clear()
        return controllers


class BrowseSession:
    """Owns every screen controller of one user.

    Home, search and favorites live as long as the session. List controllers
    (keyed by the parsed route) and detail controllers (keyed by movie id) are
    created on first use and reused while they are among the most recently
    used; older ones are closed, which releases their store subscriptions.
    """

    def __init__(
        self,
        repository: MovieRepository,
        browse: BrowseConfig,
        *,
        max_open_lists: int = MAX_OPEN_LISTS,
        max_open_details: int = MAX_OPEN_DETAILS,
    ) -> None:
        self._repo = repository
        self._browse = browse
        self.home = HomeAggregator(repository)
        self.search = SearchController(
            repository, debounce_seconds=browse.search_debounce_seconds
        )
        self.favorites = FavoritesController(repository)
        self._lists: _ControllerLRU[ListQuery, MovieListController] = _ControllerLRU(
            "list", max_open_lists
        )
        self._details: _ControllerLRU[int, MovieDetailController] = _ControllerLRU(
            "detail", max_open_details
        )

    @property
    def half_star_threshold(self) -> float:
        return self._browse.half_star_threshold

    @property
    def open_lists(self) -> int:
        return len(self._lists)

    @property
    def open_details(self) -> int:
        return len(self._details)

    def start(self) -> None:
        """Subscribe the long-lived controllers; needs a running event loop."""
        self.search.start()
        self.favorites.start()

    def list_for(self, route: str) -> tuple[MovieListController, bool]:
        """Return the list controller for *route* and whether it was just created.

        Routes that parse to the same list (unknown names all mean POPULAR)
        share one controller.
        """
        query = ListQuery.from_route(route)
        controller = self._lists.get(query)
        if controller is not None:
            return controller, False
        controller = MovieListController(self._repo)
        controller.start()
        self._lists.put(query, controller)
        log.debug("list_controller_created", route=route)
        return controller, True

    def detail_for(self, movie_id: int) -> tuple[MovieDetailController, bool]:
        """Return the detail controller for *movie_id* and whether it was just created."""
        controller = self._details.get(movie_id)
        if controller is not None:
            return controller, False
        controller = MovieDetailController(
            self._repo,
            movie_id,
            region=self._browse.watch_region,
            region_fallback=self._browse.watch_region_fallback,
        )
        self._details.put(movie_id, controller)
        log.debug("detail_controller_created", movie_id=movie_id)
        return controller, True

    async def aclose(self) -> None:
        controllers: list[Controller] = [
            self.home,
            self.search,
            self.favorites,
            *self._lists.drain(),
            *self._details.drain(),
        ]
        for controller in controllers:
            controller.close()
        # Let cancelled tasks unwind before the HTTP client goes away.
        await asyncio.gather(*(c.join() for c in controllers))
        log.info("browse_session_closed", controllers=len(controllers))
