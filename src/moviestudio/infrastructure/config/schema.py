"""Pydantic configuration models with validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]
FavoritesBackend = Literal["memory", "diskcache"]


def _normalize_path(value: Any) -> Path:
    # Only expands "~"; directories are created later by the stores that use them.
    if isinstance(value, Path):
        return value.expanduser()
    if isinstance(value, str):
        return Path(value).expanduser()
    raise TypeError(f"expected a str or Path, got {type(value).__name__}")


class FavoritesConfig(BaseModel):
    """Where favorite movies are kept."""

    model_config = ConfigDict(populate_by_name=True)

    backend: FavoritesBackend = Field(
        default="diskcache",
        description="'diskcache' (SQLite on disk) or 'memory' (lost on exit).",
    )
    directory: Path = Field(
        default=Path("./.cache/moviestudio/favorites"),
        alias="dir",
        description="Diskcache directory for favorites (backend=diskcache).",
    )

    @field_validator("directory", mode="before")
    @classmethod
    def _validate_directory(cls, v: Any) -> Path:
        return _normalize_path(v)


class BrowseConfig(BaseModel):
    """Behaviour knobs for the browsing controllers."""

    search_debounce_ms: int = Field(
        default=500,
        description="Quiet window before a typed query is searched.",
    )
    watch_region: str = Field(
        default="US",
        description="Region code used to pick watch providers.",
    )
    watch_region_fallback: bool = Field(
        default=True,
        description="Use the first available region when watch_region is missing.",
    )
    half_star_threshold: float = Field(
        default=0.25,
        description="Fractional star part at which a half star is shown.",
    )

    @field_validator("search_debounce_ms")
    @classmethod
    def _validate_debounce(cls, v: int) -> int:
        if v < 0:
            raise ValueError("search_debounce_ms must be >= 0")
        return v

    @field_validator("watch_region")
    @classmethod
    def _validate_region(cls, v: str) -> str:
        v = v.strip().upper()
        if len(v) != 2 or not v.isalpha():
            raise ValueError("watch_region must be a two-letter region code")
        return v

    @field_validator("half_star_threshold")
    @classmethod
    def _validate_threshold(cls, v: float) -> float:
        if not 0 < v < 1:
            raise ValueError("half_star_threshold must be between 0 and 1")
        return v

    @property
    def search_debounce_seconds(self) -> float:
        return self.search_debounce_ms / 1000


class AppConfig(BaseModel):
    """Validated settings for one process.

    Fields are flat; ``validation_alias`` lets the sectioned YAML shape
    (``tmdb.api_key``) and the flat env/CLI names (``tmdb_api_key``) both
    populate them. Merging order lives in ``load.py``.
    """

    # General
    app_name: str = Field(default="moviestudio", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # TMDB (YAML section: tmdb.*)
    tmdb_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices(
            "tmdb_api_key",
            AliasPath("tmdb", "api_key"),
        ),
        description="TMDB v3 API key.",
    )
    tmdb_base_url: str = Field(
        default="https://api.themoviedb.org/3",
        validation_alias=AliasChoices(
            "tmdb_base_url",
            AliasPath("tmdb", "base_url"),
        ),
        description="TMDB API base URL.",
    )
    tmdb_language: str = Field(
        default="en-US",
        validation_alias=AliasChoices(
            "tmdb_language",
            AliasPath("tmdb", "language"),
        ),
        description="Language sent with every TMDB request.",
    )
    tmdb_timeout_seconds: float = Field(
        default=15.0,
        validation_alias=AliasChoices(
            "tmdb_timeout_seconds",
            AliasPath("tmdb", "timeout_seconds"),
        ),
        description="HTTP timeout in seconds for TMDB requests.",
    )

    # HTTP client (YAML section: http.*)
    http_retry_max_attempts: int = Field(
        default=2,
        validation_alias=AliasChoices(
            "http_retry_max_attempts",
            AliasPath("http", "retry_max_attempts"),
        ),
        description="Retries for HTTP 429/503 responses.",
    )
    http_retry_backoff_base: float = Field(
        default=0.5,
        validation_alias=AliasChoices(
            "http_retry_backoff_base",
            AliasPath("http", "retry_backoff_base"),
        ),
        description="Base delay in seconds for exponential retry backoff.",
    )
    http_user_agent: str = Field(
        default="MovieStudio/0.1.0",
        validation_alias=AliasChoices(
            "http_user_agent",
            AliasPath("http", "user_agent"),
        ),
        description="User-Agent for outgoing HTTP requests.",
    )

    # Logging (YAML section: logging.*)
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
        description="Log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )

    # Response cache (YAML section: cache.*)
    cache_enabled: bool = Field(
        default=True,
        validation_alias=AliasChoices(
            "cache_enabled",
            AliasPath("cache", "enabled"),
        ),
        description="Cache TMDB list/genre/search responses on disk.",
    )
    cache_dir: Path = Field(
        default=Path("./.cache/moviestudio/responses"),
        validation_alias=AliasChoices(
            "cache_dir",
            AliasPath("cache", "dir"),
        ),
        description="Cache directory (disk).",
    )
    cache_ttl_seconds: int = Field(
        default=1800,
        validation_alias=AliasChoices(
            "cache_ttl_seconds",
            AliasPath("cache", "ttl_seconds"),
        ),
        description="Default cache TTL in seconds.",
    )

    favorites: FavoritesConfig = Field(default_factory=FavoritesConfig)
    browse: BrowseConfig = Field(default_factory=BrowseConfig)

    @field_validator("cache_dir", mode="before")
    @classmethod
    def _validate_paths(cls, v: Any) -> Path:
        return _normalize_path(v)

    @field_validator("tmdb_timeout_seconds")
    @classmethod
    def _validate_tmdb_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("tmdb_timeout_seconds must be > 0")
        return v

    @field_validator("http_retry_max_attempts")
    @classmethod
    def _validate_retry_attempts(cls, v: int) -> int:
        if v < 0:
            raise ValueError("http_retry_max_attempts must be >= 0")
        return v

    @field_validator("cache_ttl_seconds")
    @classmethod
    def _validate_cache_ttl(cls, v: int) -> int:
        if v < 0:
            raise ValueError("cache_ttl_seconds must be >= 0")
        return v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """
        Dump configuration in the sectioned shape used by config.yaml/docs.

        The API key is masked.
        """
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "tmdb": {
                "api_key": "***" if self.tmdb_api_key else None,
                "base_url": self.tmdb_base_url,
                "language": self.tmdb_language,
                "timeout_seconds": self.tmdb_timeout_seconds,
            },
            "http": {
                "retry_max_attempts": self.http_retry_max_attempts,
                "retry_backoff_base": self.http_retry_backoff_base,
                "user_agent": self.http_user_agent,
            },
            "logging": {"level": self.log_level, "format": self.log_format},
            "cache": {
                "enabled": self.cache_enabled,
                "dir": str(self.cache_dir),
                "ttl_seconds": self.cache_ttl_seconds,
            },
            "favorites": {
                "backend": self.favorites.backend,
                "dir": str(self.favorites.directory),
            },
            "browse": self.browse.model_dump(),
        }


class EnvOverrides(BaseSettings):
    """``MOVIESTUDIO_*`` variables, e.g. ``MOVIESTUDIO_TMDB_API_KEY`` or
    ``MOVIESTUDIO_BROWSE_WATCH_REGION=DE``. Unset variables stay ``None`` and
    are left out of the merge.
    """

    model_config = SettingsConfigDict(
        env_prefix="MOVIESTUDIO_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    tmdb_api_key: Optional[str] = None
    tmdb_base_url: Optional[str] = None
    tmdb_language: Optional[str] = None
    tmdb_timeout_seconds: Optional[float] = None

    http_retry_max_attempts: Optional[int] = None
    http_retry_backoff_base: Optional[float] = None
    http_user_agent: Optional[str] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    cache_enabled: Optional[bool] = None
    cache_dir: Optional[Path] = None
    cache_ttl_seconds: Optional[int] = None

    favorites_backend: Optional[FavoritesBackend] = None
    favorites_dir: Optional[Path] = None

    browse_search_debounce_ms: Optional[int] = None
    browse_watch_region: Optional[str] = None
    browse_watch_region_fallback: Optional[bool] = None
    browse_half_star_threshold: Optional[float] = None

    @field_validator("cache_dir", "favorites_dir", mode="before")
    @classmethod
    def _validate_paths(cls, v: Any) -> Any:
        if v is None:
            return None
        return _normalize_path(v)

    def to_update_dict(self) -> dict[str, Any]:
        """Flat dict of the variables that were set."""
        return self.model_dump(exclude_none=True)
