"""Layered configuration loading.

Layers are applied in order, later ones winning key by key:

    built-in defaults -> YAML file -> environment (.env included) -> CLI flags

YAML and the defaults use the sectioned shape (``tmdb.api_key``); env and CLI
overrides use flat names (``tmdb_api_key``). Both are folded into the
sectioned shape before merging, so a CLI flag only replaces the one key it
names inside its section.
"""

from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Any, Iterator, Mapping

import yaml
from dotenv import load_dotenv

from .defaults import DEFAULT_CONFIG
from .schema import AppConfig, EnvOverrides

# flat name -> (section, key)
_FLAT_KEYS: dict[str, tuple[str, str]] = {
    "tmdb_api_key": ("tmdb", "api_key"),
    "tmdb_base_url": ("tmdb", "base_url"),
    "tmdb_language": ("tmdb", "language"),
    "tmdb_timeout_seconds": ("tmdb", "timeout_seconds"),
    "http_retry_max_attempts": ("http", "retry_max_attempts"),
    "http_retry_backoff_base": ("http", "retry_backoff_base"),
    "http_user_agent": ("http", "user_agent"),
    "log_level": ("logging", "level"),
    "log_format": ("logging", "format"),
    "cache_enabled": ("cache", "enabled"),
    "cache_dir": ("cache", "dir"),
    "cache_ttl_seconds": ("cache", "ttl_seconds"),
    "favorites_backend": ("favorites", "backend"),
    "favorites_dir": ("favorites", "dir"),
    "browse_search_debounce_ms": ("browse", "search_debounce_ms"),
    "browse_watch_region": ("browse", "watch_region"),
    "browse_watch_region_fallback": ("browse", "watch_region_fallback"),
    "browse_half_star_threshold": ("browse", "half_star_threshold"),
}
_SECTIONS = frozenset(section for section, _ in _FLAT_KEYS.values())
_TOP_LEVEL = ("app_name", "environment")


def _merge_into(target: dict[str, Any], layer: Mapping[str, Any]) -> None:
    for key, value in layer.items():
        current = target.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            _merge_into(current, value)
        else:
            target[key] = value


def _sectioned(layer: Mapping[str, Any]) -> dict[str, Any]:
    """Fold flat keys into sections and drop anything unknown."""
    out: dict[str, Any] = {key: layer[key] for key in _TOP_LEVEL if key in layer}
    for section in _SECTIONS:
        block = layer.get(section)
        if isinstance(block, Mapping):
            out[section] = dict(block)
    for flat, (section, key) in _FLAT_KEYS.items():
        if flat in layer:
            out.setdefault(section, {})[key] = layer[flat]
    return out


def _yaml_layer(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(path)
    parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ValueError(
            f"{path}: top level of the config file must be a mapping, "
            f"got {type(parsed).__name__}"
        )
    return parsed


def _layers(
    config_path: Path | None, cli_overrides: Mapping[str, Any]
) -> Iterator[Mapping[str, Any]]:
    yield deepcopy(DEFAULT_CONFIG)
    if config_path is not None:
        yield _yaml_layer(config_path)
    # EnvOverrides reads os.environ when constructed, so .env must be loaded first.
    yield EnvOverrides().to_update_dict()
    yield cli_overrides


def load_config(
    *,
    config_path: Path | None = None,
    dotenv_path: Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> AppConfig:
    """Build and validate the AppConfig. Never touches the filesystem beyond reads.

    Raises:
        FileNotFoundError: ``config_path`` or ``dotenv_path`` was given but is missing.
        ValueError: the YAML file is not a mapping.
        pydantic.ValidationError: the merged values fail validation.
    """
    if dotenv_path is not None:
        if not dotenv_path.exists():
            raise FileNotFoundError(dotenv_path)
        # Real environment variables keep priority over .env entries.
        load_dotenv(dotenv_path, override=False)

    merged: dict[str, Any] = {}
    for layer in _layers(config_path, cli_overrides or {}):
        _merge_into(merged, _sectioned(layer))
    return AppConfig.model_validate(merged)
