from .diskcache_favorites import DiskcacheFavoritesStore
from .favorites_notifier import FavoritesNotifier
from .memory_favorites import InMemoryFavoritesStore
from .store_factory import create_favorites_store

__all__ = [
    "DiskcacheFavoritesStore",
    "FavoritesNotifier",
    "InMemoryFavoritesStore",
    "create_favorites_store",
]
