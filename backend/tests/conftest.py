"""
Status proxy test configuration

Fixtures build a real CacheStore on a temporary directory and an
UpstreamFetcher whose HTTP client is backed by httpx.MockTransport,
so no test ever reaches the network.

Key fixtures:
- cache_dir: empty temporary cache root
- store: CacheStore on cache_dir
- upstream: fake image service, records every request it receives
- fetcher: UpstreamFetcher wired to the fake upstream
- client: FastAPI TestClient for the full application
"""

import asyncio
import sys
from pathlib import Path
from typing import Dict, List, Union

import httpx
import pytest
from fastapi.testclient import TestClient

# Add backend directory to the Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from status_proxy.app import create_app
from status_proxy.cache_manager import CacheStore
from status_proxy.config import ProxyConfig
from status_proxy.upstream import UpstreamFetcher

UPSTREAM_URL = "https://upstream.test"

# Not a valid JPEG, but the proxy never inspects image bytes
FAKE_JPEG = b"\xff\xd8\xff\xe0" + bytes(range(256)) + b"\xff\xd9"


# ============================================
# Fake upstream
# ============================================

class FakeUpstream:
    """
    In-memory image service.

    Known codes answer 200 with their bytes, unknown codes answer 404.
    A code mapped to an exception class raises it as a transport error.
    """

    def __init__(self):
        self.images: Dict[str, Union[bytes, type]] = {}
        self.requests: List[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        code = request.url.path.lstrip("/")
        image = self.images.get(code)

        if image is None:
            return httpx.Response(404, content=b"not found", headers={"Content-Type": "text/plain"})
        if isinstance(image, type) and issubclass(image, Exception):
            raise image("upstream unreachable", request=request)
        return httpx.Response(200, content=image, headers={"Content-Type": "image/jpeg"})

    @property
    def call_count(self) -> int:
        return len(self.requests)


# ============================================
# Component fixtures
# ============================================

@pytest.fixture
def cache_dir(tmp_path):
    return tmp_path / "cache"


@pytest.fixture
def store(cache_dir):
    return CacheStore(cache_dir)


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def fetcher(upstream):
    """Fetcher on the fake upstream. The injected client is closed on teardown."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler))
    yield UpstreamFetcher(UPSTREAM_URL, client=client)
    loop = asyncio.new_event_loop()
    try:
        loop.run_until_complete(client.aclose())
    finally:
        loop.close()


@pytest.fixture
def config(cache_dir):
    return ProxyConfig(
        host="127.0.0.1",
        port=8080,
        cache_dir=cache_dir,
        upstream_base_url=UPSTREAM_URL,
    )


@pytest.fixture
def client(config, store, fetcher):
    """
    TestClient for the full application.

    Used as a context manager so the app lifespan runs.
    """
    app = create_app(config, fetcher=fetcher, store=store)
    with TestClient(app) as test_client:
        yield test_client


# ============================================
# Helper Functions
# ============================================

def cache_file(cache_dir: Path, key: str) -> Path:
    """Path the store uses for a key."""
    return cache_dir / f"{key}.jpeg"


def assert_plain_text_error(response, status_code: int, contains: str = None):
    """Assert a plain-text error response with the given status."""
    assert response.status_code == status_code, response.text
    assert response.headers["content-type"].startswith("text/plain")
    if contains:
        assert contains.lower() in response.text.lower(), \
            f"Error body should contain '{contains}', got: {response.text}"
