from __future__ import annotations

from .load import load_config
from .schema import AppConfig, BrowseConfig, EnvOverrides, FavoritesConfig

__all__ = [
    "AppConfig",
    "BrowseConfig",
    "EnvOverrides",
    "FavoritesConfig",
    "load_config",
]
