"""Amazon S3 storage transport over signed URLs.

Uploads use the browser-style S3 form POST with the signed fields issued
by the configuration generator; polls GET a signed bucket listing URL and
read the first ``Contents/Key`` of the XML response.

Error reasons follow the license API conventions:
- "file-too-large": S3 rejected the upload with EntityTooLarge
- "network-error": anything else that prevented the upload or a check

Design: Adapter Pattern
Implements StorageApi on top of httpx.AsyncClient.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ElementTree

import httpx

from pylayoutexport.core.errors import StorageError, UploadError
from pylayoutexport.models import UploadDestination
from pylayoutexport.storage.base import (
    DEFAULT_POLL_TIMEOUT_MS,
    ProgressCallback,
    StorageApi,
)

logger = logging.getLogger(__name__)

SIGNED_FIELDS = ("key", "AWSAccessKeyId", "policy", "signature")


class S3Storage(StorageApi):
    """S3 transport for signed uploads and listings.

    Usage:
        async with httpx.AsyncClient(timeout=30.0) as client:
            storage = S3Storage(client)
            await storage.upload(content, config.destination, is_private=True)
            key = await storage.poll(config.signed_output_list_url)

    When no client is given, a short-lived client is created per request.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        content_type: str = "text/plain",
        poll_timeout: int = DEFAULT_POLL_TIMEOUT_MS,
    ):
        """Initialize S3 storage.

        Args:
            client: Shared HTTP client (owned by the caller)
            content_type: Content-Type recorded for uploaded objects
            poll_timeout: Milliseconds before poll() gives up
        """
        super().__init__(poll_timeout)
        self._client = client
        self._content_type = content_type

    def __repr__(self) -> str:
        return "S3Storage"

    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        if self._client is not None:
            return await self._client.request(method, url, **kwargs)
        async with httpx.AsyncClient(timeout=30.0) as client:
            return await client.request(method, url, **kwargs)

    async def upload(
        self,
        content: str,
        destination: UploadDestination,
        *,
        is_private: bool = False,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        """POST content to the bucket with the signed form fields."""
        form = {name: destination.fields[name] for name in SIGNED_FIELDS if name in destination.fields}
        form.setdefault("key", destination.key)
        form["acl"] = "bucket-owner-read" if is_private else "public-read"
        form["Content-Type"] = self._content_type

        if on_progress is not None:
            on_progress("0%")

        try:
            response = await self._send(
                "POST",
                destination.url,
                data=form,
                files={"file": ("file", content.encode("utf-8"), self._content_type)},
            )
        except httpx.HTTPError as e:
            logger.warning(f"S3 upload to {destination.url} failed: {e!r}")
            raise UploadError("network-error") from e

        if response.status_code >= 300:
            if "EntityTooLarge" in response.text:
                raise UploadError("file-too-large")
            logger.warning(f"S3 upload rejected with HTTP {response.status_code}")
            raise UploadError("network-error")

        if on_progress is not None:
            on_progress("100%")

    async def check(self, url: str) -> str | None:
        """GET the signed listing and return its first key."""
        try:
            response = await self._send("GET", url)
        except httpx.HTTPError as e:
            raise StorageError("network-error") from e

        if response.status_code != 200:
            raise StorageError("network-error")

        return first_listed_key(response.text)


def first_listed_key(listing_xml: str) -> str | None:
    """Return the first ``Contents/Key`` of an S3 ListBucketResult.

    Namespaces are ignored so both v1 and v2 listings parse.

    Raises:
        StorageError: If the body is not XML
    """
    try:
        root = ElementTree.fromstring(listing_xml)
    except ElementTree.ParseError as e:
        raise StorageError("network-error") from e

    for element in root.iter():
        if _local_name(element.tag) != "Contents":
            continue
        for child in element:
            if _local_name(child.tag) == "Key" and child.text:
                return child.text
    return None


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]
