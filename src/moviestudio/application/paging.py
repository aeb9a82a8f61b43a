"""Pagination state shared by the list and search controllers.

All transitions are pure functions ``PageState -> PageState`` so callers can
apply them inside ``StateCell.update``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from moviestudio.domain.entities.movie import Movie


@dataclass(frozen=True)
class PageState:
    items: tuple[Movie, ...] = ()
    page: int = 1
    is_loading: bool = False
    is_loading_more: bool = False
    is_last_page: bool = False
    error: str | None = None

    @property
    def is_busy(self) -> bool:
        return self.is_loading or self.is_loading_more

    @property
    def item_ids(self) -> frozenset[int]:
        return frozenset(m.id for m in self.items)

    def can_load_more(self) -> bool:
        return not (self.is_loading or self.is_loading_more or self.is_last_page)


def begin_fresh(state: PageState) -> PageState:
    """Reset to page 1 and mark the initial load in flight."""
    return PageState(is_loading=True)


def begin_more(state: PageState) -> PageState:
    return replace(state, is_loading_more=True)


def apply_page(state: PageState, page: int, movies: list[Movie]) -> PageState:
    """Apply a successful page: page 1 replaces, later pages append."""
    items = tuple(movies) if page == 1 else state.items + tuple(movies)
    return replace(
        state,
        items=items,
        page=page,
        is_loading=False,
        is_loading_more=False,
        is_last_page=not movies,
        error=None,
    )


def apply_error(state: PageState, reason: str) -> PageState:
    """Record a failure; already loaded items are kept."""
    return replace(state, is_loading=False, is_loading_more=False, error=reason)
