"""
Status Proxy Application

Builds the FastAPI app from a ProxyConfig. The cache store and upstream
fetcher are constructed here and passed into the request router, so
request handling never looks anything up from module globals.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .cache_manager import CacheStore
from .config import ProxyConfig
from .routes_fastapi import RequestRouter, create_router
from .upstream import UpstreamFetcher

logger = logging.getLogger(__name__)


def create_app(
    config: ProxyConfig,
    fetcher: Optional[UpstreamFetcher] = None,
    store: Optional[CacheStore] = None,
) -> FastAPI:
    """
    Create the proxy application.

    Args:
        config: Process settings
        fetcher: Upstream fetcher to use instead of one built from config
        store: Cache store to use instead of one built from config

    Raises:
        CacheIOError: the cache directory could not be created.
    """
    store = store or CacheStore(config.cache_dir)
    fetcher = fetcher or UpstreamFetcher(config.upstream_base_url)
    request_router = RequestRouter(store, fetcher)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            f"[StatusProxy] Serving {len(store.keys())} cached images from {store.cache_dir}"
        )
        logger.info(f"[StatusProxy] Upstream: {fetcher.base_url}")
        yield
        await fetcher.close()
        logger.info("[StatusProxy] Shutdown complete")

    app = FastAPI(
        title="Status Image Proxy",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.config = config
    app.state.request_router = request_router

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # Methods the route never binds still go through key validation
        if exc.status_code == 405:
            return await request_router.handle(
                request.method, request.url.path, request.body
            )
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"[StatusProxy] Unhandled error on {request.method} {request.url.path}")
        return PlainTextResponse("Internal Server Error", status_code=500)

    app.include_router(create_router(request_router))
    return app
