"""In-memory storage implementation for pylayoutexport.

Design Pattern: Adapter Pattern
InMemoryStorage adapts in-memory dictionaries to the StorageApi interface.

Instance is immediately usable after __init__.
"""

from __future__ import annotations

import asyncio
from collections import Counter
from dataclasses import dataclass

from pylayoutexport.core.errors import UploadError
from pylayoutexport.models import UploadDestination
from pylayoutexport.storage.base import (
    DEFAULT_POLL_TIMEOUT_MS,
    ProgressCallback,
    StorageApi,
    content_digest,
)


@dataclass(frozen=True)
class StoredObject:
    """Content stored by an upload."""

    key: str
    content: str
    is_private: bool
    digest: str


class InMemoryStorage(StorageApi):
    """In-memory storage for testing and demos.

    Can be substituted for S3Storage or RedisStorage without changing
    client code. publish() plays the conversion service: it adds a key to
    a listing URL, which the next check of that URL finds.

    Usage:
        storage = InMemoryStorage()
        await storage.upload(content, destination, is_private=True)
        storage.publish(config.signed_output_list_url, "out/F1.pdf")
    """

    def __init__(
        self,
        poll_timeout: int = DEFAULT_POLL_TIMEOUT_MS,
        progress_events: tuple[str | None, ...] = (),
    ):
        """Initialize empty storage.

        Args:
            poll_timeout: Milliseconds before poll() gives up
            progress_events: Progress events reported by every upload
        """
        super().__init__(poll_timeout)
        self.progress_events = progress_events
        self.upload_error: BaseException | None = None
        self.check_error: BaseException | None = None

        # Storage: {key: StoredObject}
        self._objects: dict[str, StoredObject] = {}

        # Listings: {url: [key, ...]}
        self._listings: dict[str, list[str]] = {}

        # Number of checks issued per url
        self._checks: Counter[str] = Counter()

        self._lock = asyncio.Lock()

    def __repr__(self) -> str:
        """Return string representation of storage instance."""
        return "InMemoryStorage"

    async def upload(
        self,
        content: str,
        destination: UploadDestination,
        *,
        is_private: bool = False,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        """Store content under destination.key."""
        if self.upload_error is not None:
            raise self.upload_error
        if not destination.key:
            raise UploadError("invalid-destination")

        for event in self.progress_events:
            if on_progress is not None:
                on_progress(event)
            await asyncio.sleep(0)

        async with self._lock:
            self._objects[destination.key] = StoredObject(
                key=destination.key,
                content=content,
                is_private=is_private,
                digest=content_digest(content),
            )

    async def check(self, url: str) -> str | None:
        """Return the first key listed at url."""
        self._checks[url] += 1
        if self.check_error is not None:
            raise self.check_error
        async with self._lock:
            keys = self._listings.get(url)
            return keys[0] if keys else None

    def publish(self, url: str, key: str) -> None:
        """Add a key to the listing at url."""
        self._listings.setdefault(url, []).append(key)

    def get_object(self, key: str) -> StoredObject | None:
        """Return the object stored under key, if any."""
        return self._objects.get(key)

    def objects(self) -> list[StoredObject]:
        """All stored objects, in upload order."""
        return list(self._objects.values())

    def check_count(self, url: str) -> int:
        """Number of checks issued against url."""
        return self._checks[url]

    async def reset(self) -> None:
        """Clear all data (for testing/demos).

        After reset, storage is empty but functional.
        """
        async with self._lock:
            self._objects.clear()
            self._listings.clear()
            self._checks.clear()
            self.upload_error = None
            self.check_error = None
