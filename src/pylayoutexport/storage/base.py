"""
StorageApi - Abstract interface for upload/poll transports.

Design Pattern: Adapter Pattern
StorageApi defines the target interface that all storage adapters implement.
Different stores (in-memory, Redis, S3) adapt to this common interface.

Design Pattern: Template Method
poll() owns the waiting discipline (sleep period, stop semaphore, timeout);
adapters only implement check(), a single look at an endpoint.

Design Principle: Dependency Inversion (SOLID)
ExportController depends on this abstraction, not on concrete stores.
This allows easy testing with InMemoryStorage.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable

import xxhash

from pylayoutexport.core.errors import PollStoppedError, PollTimeoutError
from pylayoutexport.models import UploadDestination

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], object]
StoppedSemaphore = Callable[[], bool]

__all__ = [
    "StorageApi",
    "ProgressCallback",
    "StoppedSemaphore",
    "content_digest",
    "DEFAULT_POLL_TIMEOUT_MS",
    "DEFAULT_SLEEP_PERIOD_MS",
]

DEFAULT_POLL_TIMEOUT_MS = 120000
DEFAULT_SLEEP_PERIOD_MS = 1000


def content_digest(content: str | bytes) -> str:
    """Fast non-cryptographic digest of uploaded content.

    Recorded with every stored upload so conversions can be traced back
    to the exact payload.
    """
    if isinstance(content, str):
        content = content.encode("utf-8")
    return xxhash.xxh64_hexdigest(content)


class StorageApi(ABC):
    """
    Abstract storage transport used by the export workflow.

    Contract:
    - upload() stores content at a destination, reporting zero or more
      progress events, and raises on failure.
    - poll() resolves with the first key found at a listing URL, raises
      PollTimeoutError after poll_timeout milliseconds, raises
      PollStoppedError once the stop semaphore is true and never checks
      again after that.

    Args:
        poll_timeout: Milliseconds before poll() gives up
    """

    def __init__(self, poll_timeout: int = DEFAULT_POLL_TIMEOUT_MS):
        self.poll_timeout = poll_timeout

    @abstractmethod
    async def upload(
        self,
        content: str,
        destination: UploadDestination,
        *,
        is_private: bool = False,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        """
        Upload content to a destination.

        Args:
            content: Serialized content
            destination: Where to store it
            is_private: Store with owner-only access
            on_progress: Called with human readable progress ("42%")

        Raises:
            UploadError: If the store rejected the upload
        """
        ...

    @abstractmethod
    async def check(self, url: str) -> str | None:
        """
        Look at a listing endpoint once.

        Args:
            url: Signed listing URL (or adapter specific locator)

        Returns:
            First key found, or None if the listing is empty

        Raises:
            StorageError: If the endpoint could not be read
        """
        ...

    async def poll(
        self,
        url: str,
        *,
        stopped_semaphore: StoppedSemaphore | None = None,
        sleep_period: int = DEFAULT_SLEEP_PERIOD_MS,
    ) -> str:
        """
        Check an endpoint periodically until something appears.

        The first check happens immediately. The stop semaphore is consulted
        before every check and after every response, so a stopped poll
        issues no further checks and a result that arrives after stopping
        is discarded.

        Args:
            url: Listing URL to check
            stopped_semaphore: Returns True when polling should stop
            sleep_period: Milliseconds between checks

        Returns:
            The first key found at url

        Raises:
            PollStoppedError: If stopped_semaphore turned true
            PollTimeoutError: If nothing appeared within poll_timeout
            StorageError: If a check failed
        """
        stopped = stopped_semaphore or (lambda: False)
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.poll_timeout / 1000.0

        while True:
            if stopped():
                raise PollStoppedError()

            found = await self.check(url)

            if stopped():
                logger.debug(f"Discarding poll result for {url}, poll stopped")
                raise PollStoppedError()

            if found is not None:
                logger.debug(f"Poll found {found!r} at {url}")
                return found

            if loop.time() >= deadline:
                logger.debug(f"Poll timed out after {self.poll_timeout}ms: {url}")
                raise PollTimeoutError()

            await asyncio.sleep(sleep_period / 1000.0)
