from .favorites import FavoritesController
from .home import HomeAggregator
from .movie_detail import MovieDetailController
from .movie_list import MovieListController
from .search import SearchController

__all__ = [
    "FavoritesController",
    "HomeAggregator",
    "MovieDetailController",
    "MovieListController",
    "SearchController",
]
