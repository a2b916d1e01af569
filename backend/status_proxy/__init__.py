"""
Status Proxy Module

Caching proxy for HTTP status-code images.
Serves images from a local directory and falls back to the upstream
image service (https://http.cat) on a cache miss.

Features:
- One <code>.jpeg file per cached status code
- GET / PUT / DELETE on /{code}
- Upstream fetch-and-populate on a cache miss
"""

from .app import create_app
from .cache_manager import CacheStore
from .config import ProxyConfig
from .routes_fastapi import RequestRouter
from .upstream import UpstreamFetcher

__all__ = ["create_app", "CacheStore", "ProxyConfig", "RequestRouter", "UpstreamFetcher"]
