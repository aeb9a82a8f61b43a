from .cache import CachePort
from .favorites_store import FavoritesStorePort
from .movie_data_source import MovieDataSourcePort, RawMoviePage

__all__ = [
    "CachePort",
    "FavoritesStorePort",
    "MovieDataSourcePort",
    "RawMoviePage",
]
