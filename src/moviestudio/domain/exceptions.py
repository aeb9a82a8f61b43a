"""Exceptions raised by port implementations."""

from __future__ import annotations


class DataSourceError(Exception):
    """Base class for all remote movie data source errors."""


class MovieDataSourceError(DataSourceError):
    """Raised on transport errors, unexpected HTTP status or undecodable bodies."""


class MovieNotFoundError(DataSourceError):
    """Raised when the requested movie id does not exist."""


class FavoritesStoreError(Exception):
    """Raised when the favorites store cannot read or write a record."""
