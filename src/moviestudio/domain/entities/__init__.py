from .movie import (
    CollectionInfo,
    FavoriteRecord,
    Genre,
    Movie,
    MovieCategory,
    MovieDetails,
    ProductionCompany,
    WatchProvider,
    WatchProviderSet,
)
from .result import Failure, FailureKind, Result, Success
from .subscription import Listener, Subscription

__all__ = [
    "CollectionInfo",
    "Failure",
    "FailureKind",
    "FavoriteRecord",
    "Genre",
    "Listener",
    "Movie",
    "MovieCategory",
    "MovieDetails",
    "ProductionCompany",
    "Result",
    "Subscription",
    "Success",
    "WatchProvider",
    "WatchProviderSet",
]
