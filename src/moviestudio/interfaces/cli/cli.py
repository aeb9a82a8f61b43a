from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import structlog
import uvicorn

from moviestudio.infrastructure.cache import DiskcacheAdapter
from moviestudio.infrastructure.config import AppConfig, load_config
from moviestudio.infrastructure.logging.setup import configure_logging
from moviestudio.interfaces.main import build_app

log = structlog.get_logger(__name__)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8787

# argparse dest -> flat config key
_OVERRIDE_FLAGS: dict[str, str] = {
    "log_level": "log_level",
    "log_format": "log_format",
    "region": "browse_watch_region",
    "language": "tmdb_language",
    "favorites": "favorites_backend",
}


def _parse_args(argv: Iterable[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="moviestudio",
        description="Browse TMDB movie lists, search and keep favorites.",
    )

    server = parser.add_argument_group("server")
    server.add_argument("--host", help=f"Bind host (env HOST, default {DEFAULT_HOST}).")
    server.add_argument(
        "--port", type=int, help=f"Bind port (env PORT, default {DEFAULT_PORT})."
    )

    sources = parser.add_argument_group("config sources")
    sources.add_argument("--config", type=Path, help="YAML config file.")
    sources.add_argument("--dotenv", type=Path, help=".env file to load first.")
    sources.add_argument(
        "--print-config",
        action="store_true",
        help="Print the effective config (API key masked) and exit.",
    )
    sources.add_argument(
        "--clear-cache",
        action="store_true",
        help="Delete cached TMDB responses and exit.",
    )

    overrides = parser.add_argument_group("overrides")
    overrides.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    overrides.add_argument("--log-format", choices=["json", "console"])
    overrides.add_argument("--region", help="Watch-provider region, e.g. US or DE.")
    overrides.add_argument("--language", help="TMDB response language, e.g. de-DE.")
    overrides.add_argument(
        "--favorites",
        choices=["diskcache", "memory"],
        help="Favorites backend.",
    )
    overrides.add_argument(
        "--no-cache",
        dest="cache_enabled",
        action="store_false",
        default=None,
        help="Disable the on-disk TMDB response cache.",
    )

    return parser.parse_args(list(argv) if argv is not None else None)


def build_cli_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Flat config overrides for the flags that were given."""
    overrides: dict[str, Any] = {
        key: getattr(args, dest)
        for dest, key in _OVERRIDE_FLAGS.items()
        if getattr(args, dest)
    }
    if args.cache_enabled is not None:
        overrides["cache_enabled"] = args.cache_enabled
    return overrides


async def _clear_response_cache(config: AppConfig) -> int:
    async with DiskcacheAdapter(
        directory=config.cache_dir, ttl_seconds=config.cache_ttl_seconds
    ) as cache:
        return await cache.clear()


def start(argv: Iterable[str] | None = None) -> int:
    """Load config once, configure logging and serve the API with uvicorn."""
    args = _parse_args(sys.argv[1:] if argv is None else argv)

    config = load_config(
        config_path=args.config,
        dotenv_path=args.dotenv,
        cli_overrides=build_cli_overrides(args),
    )
    if args.print_config:
        print(json.dumps(config.to_sectioned_dict(), indent=2, default=str))
        return 0
    if args.clear_cache:
        configure_logging(config)
        removed = asyncio.run(_clear_response_cache(config))
        print(f"Removed {removed} cached responses from {config.cache_dir}")
        return 0

    host = args.host or os.getenv("HOST", DEFAULT_HOST)
    port = args.port or int(os.getenv("PORT", str(DEFAULT_PORT)))

    log_config = configure_logging(config)
    log.info(
        "server_starting",
        host=host,
        port=port,
        environment=config.environment,
        region=config.browse.watch_region,
    )
    uvicorn.run(build_app(config), host=host, port=port, log_config=log_config)
    return 0


if __name__ == "__main__":
    raise SystemExit(start())
