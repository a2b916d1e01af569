"""
Status Image Cache

File-based store for status-code images:
- One file per key, named <key>.jpeg, flat inside the cache root
- No manifest; the directory listing is the only index
- Writes land in a temporary sibling and are renamed into place
- Typed not-found vs. I/O failure at the interface boundary
"""

import asyncio
import os
import re
import tempfile
from pathlib import Path
from typing import List, Union
import logging

from .exceptions import CacheIOError, CacheNotFoundError, InvalidCacheKeyError

logger = logging.getLogger(__name__)

CACHE_FILE_EXTENSION = ".jpeg"

_CANONICAL_KEY = re.compile(r"^-?(0|[1-9][0-9]*)$")


class CacheStore:
    """
    Directory-backed byte store keyed by status code.

    Cache structure:
    cache_dir/
    ├── 200.jpeg
    ├── 404.jpeg
    └── ...

    Blocking file calls run in a worker thread so a slow disk never
    stalls other requests on the event loop.
    """

    def __init__(self, cache_dir: Union[str, Path]):
        self.cache_dir = Path(cache_dir).expanduser().resolve()
        self._init_cache_dir()

    def _init_cache_dir(self) -> None:
        """Create the cache root (and parents) if it doesn't exist."""
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CacheIOError("initialization", original_error=e)
        logger.info(f"[StatusCache] Cache directory ready at: {self.cache_dir}")

    def path_for(self, key: str) -> Path:
        """Get the file path for a cache key."""
        if not _CANONICAL_KEY.match(key):
            raise InvalidCacheKeyError(key)
        return self.cache_dir / f"{key}{CACHE_FILE_EXTENSION}"

    def exists(self, key: str) -> bool:
        """Check whether an entry is cached, without reading it."""
        return self.path_for(key).is_file()

    def keys(self) -> List[str]:
        """List cached keys from the directory contents."""
        return sorted(
            p.stem
            for p in self.cache_dir.glob(f"*{CACHE_FILE_EXTENSION}")
            if _CANONICAL_KEY.match(p.stem)
        )

    async def get(self, key: str) -> bytes:
        """
        Read a cached image.

        Raises:
            CacheNotFoundError: no file exists for the key.
            CacheIOError: any other read failure.
        """
        path = self.path_for(key)
        try:
            data = await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError as e:
            logger.debug(f"[StatusCache] Miss: {key}")
            raise CacheNotFoundError(key, e)
        except OSError as e:
            logger.error(f"[StatusCache] Failed to read {key}: {e}")
            raise CacheIOError("read", key, e)

        logger.debug(f"[StatusCache] Hit: {key} ({len(data)} bytes)")
        return data

    async def put(self, key: str, data: bytes) -> None:
        """
        Store an image, fully replacing any previous content for the key.

        Raises:
            CacheIOError: the write or rename failed.
        """
        path = self.path_for(key)
        try:
            await asyncio.to_thread(self._write_replace, path, data)
        except OSError as e:
            logger.error(f"[StatusCache] Failed to cache {key}: {e}")
            raise CacheIOError("write", key, e)

        logger.info(f"[StatusCache] Cached: {key} ({len(data)} bytes)")

    async def delete(self, key: str) -> None:
        """
        Remove a cached image.

        Raises:
            CacheNotFoundError: no file exists for the key.
            CacheIOError: any other removal failure.
        """
        path = self.path_for(key)
        try:
            await asyncio.to_thread(path.unlink)
        except FileNotFoundError as e:
            raise CacheNotFoundError(key, e)
        except OSError as e:
            logger.error(f"[StatusCache] Failed to remove {key}: {e}")
            raise CacheIOError("delete", key, e)

        logger.info(f"[StatusCache] Removed: {key}")

    def _write_replace(self, path: Path, data: bytes) -> None:
        fd, tmp_name = tempfile.mkstemp(
            dir=self.cache_dir, prefix=".tmp-", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_name, path)
        except BaseException:
            # drop the partial temp file
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise
