from __future__ import annotations

import time
import uuid
from typing import Any, cast

import structlog
from fastapi import FastAPI, Request

from moviestudio.infrastructure.config import AppConfig
from moviestudio.interfaces.app_state import AppState
from moviestudio.interfaces.composition import lifespan

log = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def build_app(config: AppConfig) -> FastAPI:
    """Create the app and attach the config. No I/O happens here.

    Everything that opens files or sockets is built by ``lifespan()``.
    """
    app = FastAPI(
        title="MovieStudio",
        description="TMDB movie browsing session with favorites",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state = AppState()
    app.state.config = config

    from moviestudio.interfaces.api.browse.router import router as browse_router
    from moviestudio.interfaces.api.movies.router import router as movies_router
    from moviestudio.interfaces.api.search.router import router as search_router

    for router in (browse_router, search_router, movies_router):
        app.include_router(router)

    @app.get("/healthz")
    async def healthz(request: Request) -> dict[str, Any]:
        state = cast(AppState, request.app.state)
        return {
            "status": "ok",
            "tmdb_api_key": bool(state.config.tmdb_api_key),
            "response_cache": state.cache is not None,
            "favorites_backend": state.config.favorites.backend,
        }

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
        started = time.perf_counter()
        status_code = 500
        with structlog.contextvars.bound_contextvars(request_id=request_id):
            try:
                response = await call_next(request)
                status_code = response.status_code
                response.headers[REQUEST_ID_HEADER] = request_id
                return response
            finally:
                log.info(
                    "http_request",
                    method=request.method,
                    path=request.url.path,
                    status_code=status_code,
                    duration_ms=round((time.perf_counter() - started) * 1000.0, 2),
                )

    return app
