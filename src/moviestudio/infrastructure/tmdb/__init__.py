from .client import HttpxTmdbDataSource
from .transport import TmdbRetryTransport

__all__ = ["HttpxTmdbDataSource", "TmdbRetryTransport"]
