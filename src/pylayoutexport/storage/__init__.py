"""Storage transports for uploading exports and polling for results.

Provides multiple implementations behind a common interface:
    - StorageApi: Abstract interface (upload, check, poll)
    - InMemoryStorage: In-memory storage for testing
    - RedisStorage: Redis-backed storage
    - S3Storage: Amazon S3 over signed URLs

Design: Adapter Pattern + Dependency Inversion (SOLID)
    All storage implementations adapt to the StorageApi interface.
    The controller depends on the abstraction, not concrete stores.
"""

from pylayoutexport.storage.base import StorageApi, content_digest

# Lazy imports: each adapter module (and its client library) loads on first access


def __getattr__(name: str):
    """Lazy import storage implementations."""
    if name == "InMemoryStorage":
        from pylayoutexport.storage.memory import InMemoryStorage

        return InMemoryStorage
    elif name == "RedisStorage":
        from pylayoutexport.storage.redis import RedisStorage

        return RedisStorage
    elif name == "S3Storage":
        from pylayoutexport.storage.s3 import S3Storage

        return S3Storage
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "StorageApi",
    "content_digest",
    "InMemoryStorage",
    "RedisStorage",
    "S3Storage",
]
