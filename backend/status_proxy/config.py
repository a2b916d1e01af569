"""
Proxy Configuration

Immutable settings built once at startup and handed to the app factory.
"""

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_UPSTREAM_URL = "https://http.cat"
DEFAULT_LOG_LEVEL = "INFO"

UPSTREAM_URL_ENV = "STATUS_PROXY_UPSTREAM_URL"
LOG_LEVEL_ENV = "STATUS_PROXY_LOG_LEVEL"


@dataclass(frozen=True)
class ProxyConfig:
    """Settings for one proxy process."""
    host: str
    port: int
    cache_dir: Path
    upstream_base_url: str = DEFAULT_UPSTREAM_URL
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_args(cls, host: str, port: int, cache: str) -> "ProxyConfig":
        """
        Build config from command-line values plus optional environment.

        The cache directory is resolved to an absolute path here, so the
        rest of the process never depends on the working directory.
        """
        return cls(
            host=host,
            port=port,
            cache_dir=Path(cache).expanduser().resolve(),
            upstream_base_url=os.getenv(UPSTREAM_URL_ENV, DEFAULT_UPSTREAM_URL).rstrip("/"),
            log_level=os.getenv(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).upper(),
        )
