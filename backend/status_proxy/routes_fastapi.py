"""
Status Proxy API Routes

Single resource pattern /{code}:
- GET    /{code}  - Serve from cache, fetching upstream on a miss
- PUT    /{code}  - Store the request body as the image for {code}
- DELETE /{code}  - Evict the cached image for {code}

Anything else on /{code} is answered with 405.
"""

import logging
import re
from typing import Awaitable, Callable

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse, Response
from starlette.requests import ClientDisconnect

from .cache_manager import CacheStore
from .exceptions import (
    CacheNotFoundError,
    EmptyBodyError,
    InvalidCacheKeyError,
    MethodNotSupportedError,
    ProxyError,
    RequestBodyError,
    UpstreamError,
)
from .upstream import UpstreamFetcher

logger = logging.getLogger(__name__)

# ============================================
# Constants
# ============================================

IMAGE_CONTENT_TYPE = "image/jpeg"
ALLOWED_METHODS = ("GET", "PUT", "DELETE")
ALLOW_HEADER = ", ".join(ALLOWED_METHODS)

# Every method the route binds; the rest are rejected by the router itself
ROUTED_METHODS = ["GET", "HEAD", "POST", "PUT", "DELETE", "PATCH", "OPTIONS", "TRACE"]

_INT_SEGMENT = re.compile(r"^[+-]?[0-9]+$")


# ============================================
# Key parsing
# ============================================

def parse_cache_key(path: str) -> str:
    """
    Extract the cache key from a request path.

    Takes the first segment after the leading slash and returns its
    canonical integer form ("/0200/x" -> "200"). Canonicalisation is
    done on the digit string, so arbitrarily long keys are accepted.

    Raises:
        InvalidCacheKeyError: segment is empty or not an integer.
    """
    segment = path.lstrip("/").split("/", 1)[0]
    if not _INT_SEGMENT.match(segment):
        raise InvalidCacheKeyError(segment)
    sign = "-" if segment[0] == "-" else ""
    digits = segment.lstrip("+-").lstrip("0") or "0"
    if digits == "0":
        sign = ""
    return f"{sign}{digits}"


def error_response(error: ProxyError) -> PlainTextResponse:
    """Render a proxy error as a plain-text response."""
    headers = {}
    if isinstance(error, MethodNotSupportedError):
        headers["Allow"] = ALLOW_HEADER
    return PlainTextResponse(error.message, status_code=error.status_code, headers=headers)


def image_response(data: bytes, cache_status: str) -> Response:
    return Response(
        content=data,
        media_type=IMAGE_CONTENT_TYPE,
        headers={
            "Content-Length": str(len(data)),
            "X-Cache": cache_status,
        },
    )


# ============================================
# Request router
# ============================================

class RequestRouter:
    """
    Maps verb + path to a cache operation.

    Stateless across requests: one pass per call. Every failure is
    converted into exactly one response here.
    """

    def __init__(self, store: CacheStore, fetcher: UpstreamFetcher):
        self.store = store
        self.fetcher = fetcher

    async def handle(
        self,
        method: str,
        path: str,
        read_body: Callable[[], Awaitable[bytes]],
    ) -> Response:
        """
        Handle one request.

        Args:
            method: HTTP verb
            path: URL path, starting with "/"
            read_body: coroutine function returning the full request body
        """
        try:
            key = parse_cache_key(path)

            if method == "GET":
                return await self._get(key)
            if method == "PUT":
                return await self._put(key, read_body)
            if method == "DELETE":
                return await self._delete(key)
            raise MethodNotSupportedError(method)

        except ProxyError as e:
            if e.status_code >= 500:
                logger.error(f"[StatusProxy] {method} {path} failed: {e.message}")
            else:
                logger.info(f"[StatusProxy] {method} {path} -> {e.status_code}")
            return error_response(e)

    async def _get(self, key: str) -> Response:
        try:
            data = await self.store.get(key)
        except CacheNotFoundError:
            return await self._handle_cache_miss(key)

        logger.info(f"[StatusProxy] Cache hit: {key}")
        return image_response(data, "HIT")

    async def _handle_cache_miss(self, key: str) -> Response:
        """Fetch from upstream, populate the cache and serve the bytes."""
        logger.info(f"[StatusProxy] Cache miss: {key}")
        try:
            data = await self.fetcher.fetch(key)
        except UpstreamError as e:
            logger.warning(f"[StatusProxy] No upstream image for {key}: {e.reason}")
            return error_response(e)

        # A failed write is a server fault, not a miss
        await self.store.put(key, data)
        return image_response(data, "MISS")

    async def _put(self, key: str, read_body: Callable[[], Awaitable[bytes]]) -> Response:
        try:
            body = await read_body()
        except ClientDisconnect as e:
            raise RequestBodyError(e)

        if not body:
            raise EmptyBodyError()

        await self.store.put(key, body)
        return PlainTextResponse(f"Image for {key} cached successfully.", status_code=201)

    async def _delete(self, key: str) -> Response:
        await self.store.delete(key)
        return PlainTextResponse(f"Image for {key} deleted from cache.", status_code=200)


# ============================================
# FastAPI binding
# ============================================

def create_router(request_router: RequestRouter) -> APIRouter:
    """Bind a RequestRouter to a catch-all FastAPI route."""
    router = APIRouter(tags=["Status Proxy"])

    @router.api_route("/{path:path}", methods=ROUTED_METHODS, include_in_schema=False)
    async def status_image(request: Request):
        return await request_router.handle(
            request.method, request.url.path, request.body
        )

    return router
