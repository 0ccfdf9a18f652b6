"""Redis-based storage transport.

Provides a Redis backend for deployments where the conversion service
reads uploads from and writes results to a shared Redis instance instead
of an object store.

Data Structures:
- {prefix}:object:{key} (STRING): Uploaded content
- {prefix}:meta:{key} (HASH): acl, digest and upload time of the content
- <listing url> (LIST): Keys written by the conversion service; the
  signed listing URLs of the configuration are used as list names

Key Features:
- Poll checks are a single LINDEX, O(1)
- Upload writes content and metadata in one MULTI/EXEC
- Connection pooling: redis-py connection pool for concurrent jobs

Design: Adapter Pattern
Implements StorageApi for Redis, adapting the key-value store to the
upload/poll interface.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

try:
    import redis.asyncio as redis
except ImportError:
    raise ImportError("redis-py is required for RedisStorage. Install with: pip install redis")

from pylayoutexport.core.errors import StorageError, UploadError
from pylayoutexport.models import UploadDestination
from pylayoutexport.storage.base import (
    DEFAULT_POLL_TIMEOUT_MS,
    ProgressCallback,
    StorageApi,
    content_digest,
)

logger = logging.getLogger(__name__)


class RedisStorage(StorageApi):
    """Redis storage transport using connection pooling.

    All dependencies (Redis connection) passed explicitly.

    Usage:
        storage = RedisStorage("redis://localhost:6379")
        await storage.connect()
        try:
            await storage.upload(content, destination, is_private=True)
            key = await storage.poll(list_url, sleep_period=2500)
        finally:
            await storage.close()
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379",
        max_connections: int = 16,
        prefix: str = "layoutexport",
        poll_timeout: int = DEFAULT_POLL_TIMEOUT_MS,
    ):
        """Initialize Redis storage (connection not opened yet).

        Args:
            redis_url: Redis connection URL
            max_connections: Maximum pool size
            prefix: Namespace for object and metadata keys
            poll_timeout: Milliseconds before poll() gives up
        """
        super().__init__(poll_timeout)
        self._redis_url = redis_url
        self._max_connections = max_connections
        self._prefix = prefix
        self._redis: redis.Redis | None = None

    def __repr__(self) -> str:
        return f"RedisStorage({self._redis_url})"

    async def connect(self) -> None:
        """Establish Redis connection pool."""
        if self._redis is not None:
            return
        self._redis = redis.from_url(
            self._redis_url,
            encoding="utf-8",
            decode_responses=True,
            max_connections=self._max_connections,
        )

    async def close(self) -> None:
        """Close Redis connection pool."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None

    def _check_connected(self) -> None:
        """Ensure connection established.

        Raises immediately if not connected.
        """
        if self._redis is None:
            raise StorageError("not-connected")

    def _object_key(self, key: str) -> str:
        """Build Redis key for uploaded content."""
        return f"{self._prefix}:object:{key}"

    def _meta_key(self, key: str) -> str:
        """Build Redis key for upload metadata."""
        return f"{self._prefix}:meta:{key}"

    async def upload(
        self,
        content: str,
        destination: UploadDestination,
        *,
        is_private: bool = False,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        """Store content and its metadata atomically."""
        self._check_connected()

        if on_progress is not None:
            on_progress("0%")

        metadata = {
            "acl": "private" if is_private else "public-read",
            "digest": content_digest(content),
            "uploaded_at": datetime.now(UTC).isoformat(),
        }

        try:
            async with self._redis.pipeline(transaction=True) as pipe:
                pipe.set(self._object_key(destination.key), content)
                pipe.hset(self._meta_key(destination.key), mapping=metadata)
                await pipe.execute()
        except redis.RedisError as e:
            logger.warning(f"Redis upload of {destination.key!r} failed: {e}")
            raise UploadError("network-error") from e

        if on_progress is not None:
            on_progress("100%")

    async def check(self, url: str) -> str | None:
        """Return the first key of the Redis list named url."""
        self._check_connected()
        try:
            return await self._redis.lindex(url, 0)
        except redis.RedisError as e:
            raise StorageError("network-error") from e

    async def publish(self, url: str, key: str) -> None:
        """Append a key to a listing (what the conversion service does)."""
        self._check_connected()
        await self._redis.rpush(url, key)

    async def get_content(self, key: str) -> str | None:
        """Read uploaded content back."""
        self._check_connected()
        return await self._redis.get(self._object_key(key))
