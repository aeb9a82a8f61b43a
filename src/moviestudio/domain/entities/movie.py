"""Domain entities for movie browsing.

Pure value objects without framework dependencies or I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class MovieCategory(str, Enum):
    """Remote list categories shown on the home feed and list screen."""

    POPULAR = "POPULAR"
    NOW_PLAYING = "NOW_PLAYING"
    TOP_RATED = "TOP_RATED"
    UPCOMING = "UPCOMING"

    @property
    def display_title(self) -> str:
        return _CATEGORY_TITLES[self]

    @property
    def path(self) -> str:
        """TMDB path segment, e.g. ``now_playing``."""
        return self.value.lower()

    @classmethod
    def parse(cls, name: str | None) -> MovieCategory | None:
        """Look up a category by name (case-insensitive). None if unknown."""
        if not name:
            return None
        try:
            return cls(name.upper())
        except ValueError:
            return None


_CATEGORY_TITLES: dict[MovieCategory, str] = {
    MovieCategory.POPULAR: "Popular Movies",
    MovieCategory.NOW_PLAYING: "Now Playing",
    MovieCategory.TOP_RATED: "Top Rated",
    MovieCategory.UPCOMING: "Upcoming",
}


def _str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _opt_str(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


def _float(value: Any) -> float:
    try:
        return float(value) if value is not None else 0.0
    except (TypeError, ValueError):
        return 0.0


def _opt_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    return None


@dataclass(frozen=True)
class Genre:
    """Genre id + display name (e.g. ``28`` / ``"Action"``)."""

    id: int
    name: str

    @classmethod
    def from_api(cls, row: dict[str, Any]) -> Genre:
        return cls(id=int(row["id"]), name=_str(row.get("name")))


@dataclass(frozen=True)
class Movie:
    """Movie summary as shown in lists and search results."""

    id: int
    title: str
    overview: str = ""
    poster_path: str | None = None
    backdrop_path: str | None = None
    release_date: str = ""  # "YYYY-MM-DD" or ""
    vote_average: float = 0.0
    vote_count: int = 0
    popularity: float = 0.0
    genre_ids: tuple[int, ...] = ()
    original_title: str = ""
    original_language: str = ""
    adult: bool = False

    @property
    def release_year(self) -> str:
        return self.release_date[:4]

    @classmethod
    def from_api(cls, row: dict[str, Any]) -> Movie:
        """Normalize one ``results`` row of a TMDB list response.

        Raises:
            KeyError/ValueError: If the row has no usable ``id``.
        """
        return cls(
            id=int(row["id"]),
            title=_str(row.get("title")) or _str(row.get("original_title")),
            overview=_str(row.get("overview")),
            poster_path=_opt_str(row.get("poster_path")),
            backdrop_path=_opt_str(row.get("backdrop_path")),
            release_date=_str(row.get("release_date")),
            vote_average=_float(row.get("vote_average")),
            vote_count=_opt_int(row.get("vote_count")) or 0,
            popularity=_float(row.get("popularity")),
            genre_ids=tuple(int(g) for g in row.get("genre_ids") or ()),
            original_title=_str(row.get("original_title")),
            original_language=_str(row.get("original_language")),
            adult=bool(row.get("adult", False)),
        )


@dataclass(frozen=True)
class WatchProvider:
    """A streaming/rental/purchase service offering the movie."""

    provider_id: int
    provider_name: str
    logo_path: str
    display_priority: int | None = None

    @classmethod
    def from_api(cls, row: dict[str, Any]) -> WatchProvider | None:
        """Build from a provider row; None if id, name or logo is missing."""
        provider_id = _opt_int(row.get("provider_id"))
        name = _opt_str(row.get("provider_name"))
        logo = _opt_str(row.get("logo_path"))
        if provider_id is None or name is None or logo is None:
            return None
        return cls(
            provider_id=provider_id,
            provider_name=name,
            logo_path=logo,
            display_priority=_opt_int(row.get("display_priority")),
        )


@dataclass(frozen=True)
class WatchProviderSet:
    """Providers for one region, each category sorted by display priority."""

    stream: tuple[WatchProvider, ...] = ()
    rent: tuple[WatchProvider, ...] = ()
    buy: tuple[WatchProvider, ...] = ()
    link: str | None = None
    region: str | None = None

    @property
    def is_empty(self) -> bool:
        return not (self.stream or self.rent or self.buy)


@dataclass(frozen=True)
class CollectionInfo:
    id: int | None = None
    name: str = ""
    poster_path: str | None = None
    backdrop_path: str | None = None


@dataclass(frozen=True)
class ProductionCompany:
    id: int | None = None
    name: str = ""
    logo_path: str | None = None
    origin_country: str = ""


@dataclass(frozen=True)
class MovieDetails:
    """Full movie record for the detail screen.

    ``raw_watch_providers`` keeps the per-region provider bundles exactly as
    returned by the API (``{"US": {"link": ..., "flatrate": [...]}, ...}``);
    ``watch_providers`` is filled in once a region has been resolved.
    """

    id: int
    title: str
    overview: str = ""
    poster_path: str | None = None
    backdrop_path: str | None = None
    release_date: str = ""
    vote_average: float = 0.0
    vote_count: int = 0
    popularity: float = 0.0
    genre_ids: tuple[int, ...] = ()
    original_title: str = ""
    original_language: str = ""
    adult: bool = False
    runtime: int | None = None
    genres: tuple[Genre, ...] = ()
    budget: int | None = None
    revenue: int | None = None
    status: str = ""
    tagline: str = ""
    homepage: str = ""
    imdb_id: str | None = None
    origin_country: tuple[str, ...] = ()
    spoken_languages: tuple[str, ...] = ()
    production_countries: tuple[str, ...] = ()
    production_companies: tuple[ProductionCompany, ...] = ()
    collection: CollectionInfo | None = None
    raw_watch_providers: dict[str, Any] = field(default_factory=dict)
    watch_providers: WatchProviderSet = field(default_factory=WatchProviderSet)

    @property
    def release_year(self) -> str:
        return self.release_date[:4]

    def summary(self) -> Movie:
        """The list-row view of this movie, as stored in a favorite snapshot."""
        return Movie(
            id=self.id,
            title=self.title,
            overview=self.overview,
            poster_path=self.poster_path,
            backdrop_path=self.backdrop_path,
            release_date=self.release_date,
            vote_average=self.vote_average,
            vote_count=self.vote_count,
            popularity=self.popularity,
            genre_ids=self.genre_ids,
            original_title=self.original_title,
            original_language=self.original_language,
            adult=self.adult,
        )

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> MovieDetails:
        """Normalize a ``/movie/{id}`` response (with appended providers)."""
        genres = tuple(
            Genre.from_api(g) for g in raw.get("genres") or () if "id" in g
        )
        collection_raw = raw.get("belongs_to_collection")
        collection = None
        if isinstance(collection_raw, dict):
            collection = CollectionInfo(
                id=_opt_int(collection_raw.get("id")),
                name=_str(collection_raw.get("name")),
                poster_path=_opt_str(collection_raw.get("poster_path")),
                backdrop_path=_opt_str(collection_raw.get("backdrop_path")),
            )
        providers = raw.get("watch/providers") or {}
        return cls(
            id=int(raw["id"]),
            title=_str(raw.get("title")) or _str(raw.get("original_title")),
            overview=_str(raw.get("overview")),
            poster_path=_opt_str(raw.get("poster_path")),
            backdrop_path=_opt_str(raw.get("backdrop_path")),
            release_date=_str(raw.get("release_date")),
            vote_average=_float(raw.get("vote_average")),
            vote_count=_opt_int(raw.get("vote_count")) or 0,
            popularity=_float(raw.get("popularity")),
            genre_ids=tuple(g.id for g in genres),
            original_title=_str(raw.get("original_title")),
            original_language=_str(raw.get("original_language")),
            adult=bool(raw.get("adult", False)),
            runtime=_opt_int(raw.get("runtime")),
            genres=genres,
            budget=_opt_int(raw.get("budget")),
            revenue=_opt_int(raw.get("revenue")),
            status=_str(raw.get("status")),
            tagline=_str(raw.get("tagline")),
            homepage=_str(raw.get("homepage")),
            imdb_id=_opt_str(raw.get("imdb_id")),
            origin_country=tuple(raw.get("origin_country") or ()),
            spoken_languages=tuple(
                _str(lang.get("english_name")) or _str(lang.get("name"))
                for lang in raw.get("spoken_languages") or ()
            ),
            production_countries=tuple(
                _str(c.get("name")) for c in raw.get("production_countries") or ()
            ),
            production_companies=tuple(
                ProductionCompany(
                    id=_opt_int(c.get("id")),
                    name=_str(c.get("name")),
                    logo_path=_opt_str(c.get("logo_path")),
                    origin_country=_str(c.get("origin_country")),
                )
                for c in raw.get("production_companies") or ()
            ),
            collection=collection,
            raw_watch_providers=dict(providers.get("results") or {}),
        )


@dataclass(frozen=True)
class FavoriteRecord:
    """Snapshot of a movie taken when the user marked it as favorite."""

    movie_id: int
    title: str = ""
    poster_path: str | None = None
    vote_average: float | None = None
    release_year: str = ""
    added_at: float = 0.0  # epoch seconds
