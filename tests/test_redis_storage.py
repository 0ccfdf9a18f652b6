"""
Tests for RedisStorage.

Tests that need a server run only when REDIS_URL points at one, e.g.
REDIS_URL=redis://localhost:6379/15 pytest tests/test_redis_storage.py
"""

import os
from uuid import uuid4

import pytest

from pylayoutexport.core import StorageError
from pylayoutexport.models import UploadDestination
from pylayoutexport.storage import RedisStorage, content_digest

REDIS_URL = os.getenv("REDIS_URL")

requires_redis = pytest.mark.skipif(REDIS_URL is None, reason="REDIS_URL not set")


@pytest.fixture
async def redis_storage():
    storage = RedisStorage(REDIS_URL, prefix=f"test-{uuid4().hex[:8]}", poll_timeout=200)
    await storage.connect()
    yield storage
    await storage.close()


@pytest.mark.asyncio
async def test_redis_requires_connect():
    storage = RedisStorage("redis://localhost:6379")

    with pytest.raises(StorageError) as exc_info:
        await storage.check("list")

    assert exc_info.value.reason == "not-connected"


def test_redis_key_layout():
    storage = RedisStorage(prefix="exports")

    assert storage._object_key("in/F1.json") == "exports:object:in/F1.json"
    assert storage._meta_key("in/F1.json") == "exports:meta:in/F1.json"
    assert repr(storage) == "RedisStorage(redis://localhost:6379)"


@requires_redis
@pytest.mark.asyncio
async def test_redis_upload_and_read_back(redis_storage):
    events = []
    key = f"in/{uuid4()}.json"

    await redis_storage.upload(
        '{"a": 1}', UploadDestination("redis://", key), is_private=True, on_progress=events.append
    )

    assert await redis_storage.get_content(key) == '{"a": 1}'
    meta = await redis_storage._redis.hgetall(redis_storage._meta_key(key))
    assert meta["acl"] == "private"
    assert meta["digest"] == content_digest('{"a": 1}')
    assert events == ["0%", "100%"]


@requires_redis
@pytest.mark.asyncio
async def test_redis_poll_finds_published_key(redis_storage):
    listing = f"test-list-{uuid4()}"
    try:
        assert await redis_storage.check(listing) is None
        await redis_storage.publish(listing, "out/F1.pdf")

        assert await redis_storage.poll(listing, sleep_period=10) == "out/F1.pdf"
    finally:
        await redis_storage._redis.delete(listing)
