"""Tests for S3Storage using httpx.MockTransport."""

import httpx
import pytest

from pylayoutexport.core import PollTimeoutError, StorageError, UploadError
from pylayoutexport.models import ExportConfiguration, UploadDestination
from pylayoutexport.storage.s3 import S3Storage, first_listed_key

BUCKET = "https://exports.s3.amazonaws.com/"
LIST_URL = "https://exports.s3.amazonaws.com/?prefix=out/F1&X-Amz-Signature=abc"

DESTINATION = UploadDestination(
    url=BUCKET,
    key="in/F1.json",
    fields={"key": "in/F1.json", "AWSAccessKeyId": "AKIA", "policy": "cG9s", "signature": "c2ln"},
)

EMPTY_LISTING = """<?xml version="1.0" encoding="UTF-8"?>
<ListBucketResult xmlns="http://s3.amazonaws.com/doc/2006-03-01/">
  <Name>exports</Name><Prefix>out/F1</Prefix><KeyCount>0</KeyCount>
</ListBucketResult>"""

LISTING = """<?xml version="1.0" encoding="UTF-8"?>
<ListBucketResult xmlns="http://s3.amazonaws.com/doc/2006-03-01/">
  <Name>exports</Name>
  <Contents><Key>out/F1.pdf</Key><Size>1024</Size></Contents>
  <Contents><Key>out/F1.log</Key><Size>10</Size></Contents>
</ListBucketResult>"""


def s3_storage(handler, **kwargs) -> S3Storage:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return S3Storage(client, **kwargs)


@pytest.mark.asyncio
async def test_s3_upload_posts_signed_form():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(204)

    storage = s3_storage(handler)
    events = []
    await storage.upload('{"a": 1}', DESTINATION, is_private=True, on_progress=events.append)

    assert len(requests) == 1
    request = requests[0]
    body = request.read().decode()
    assert request.method == "POST"
    assert str(request.url) == BUCKET
    assert 'name="acl"\r\n\r\nbucket-owner-read' in body
    assert 'name="AWSAccessKeyId"\r\n\r\nAKIA' in body
    assert 'name="key"\r\n\r\nin/F1.json' in body
    assert 'name="Content-Type"\r\n\r\ntext/plain' in body
    assert '{"a": 1}' in body
    assert events == ["0%", "100%"]


@pytest.mark.asyncio
async def test_s3_public_upload_acl():
    bodies = []

    def handler(request):
        bodies.append(request.read().decode())
        return httpx.Response(204)

    await s3_storage(handler).upload("x", DESTINATION)

    assert 'name="acl"\r\n\r\npublic-read' in bodies[0]


@pytest.mark.asyncio
async def test_s3_entity_too_large():
    def handler(request):
        return httpx.Response(
            400, text="<Error><Code>EntityTooLarge</Code><Message>too big</Message></Error>"
        )

    with pytest.raises(UploadError) as exc_info:
        await s3_storage(handler).upload("x" * 100, DESTINATION)

    assert exc_info.value.reason == "file-too-large"


@pytest.mark.asyncio
async def test_s3_upload_rejected():
    def handler(request):
        return httpx.Response(403, text="<Error><Code>AccessDenied</Code></Error>")

    with pytest.raises(UploadError) as exc_info:
        await s3_storage(handler).upload("x", DESTINATION)

    assert exc_info.value.reason == "network-error"


@pytest.mark.asyncio
async def test_s3_upload_connection_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UploadError) as exc_info:
        await s3_storage(handler).upload("x", DESTINATION)

    assert exc_info.value.reason == "network-error"
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


@pytest.mark.asyncio
async def test_s3_check_reads_first_key():
    storage = s3_storage(lambda request: httpx.Response(200, text=LISTING))

    assert await storage.check(LIST_URL) == "out/F1.pdf"


@pytest.mark.asyncio
async def test_s3_check_empty_listing():
    storage = s3_storage(lambda request: httpx.Response(200, text=EMPTY_LISTING))

    assert await storage.check(LIST_URL) is None


@pytest.mark.asyncio
async def test_s3_check_http_error():
    storage = s3_storage(lambda request: httpx.Response(403, text="denied"))

    with pytest.raises(StorageError):
        await storage.check(LIST_URL)


@pytest.mark.asyncio
async def test_s3_poll_until_listing_has_key():
    responses = iter([EMPTY_LISTING, EMPTY_LISTING, LISTING])
    storage = s3_storage(lambda request: httpx.Response(200, text=next(responses)))

    assert await storage.poll(LIST_URL, sleep_period=1) == "out/F1.pdf"


@pytest.mark.asyncio
async def test_s3_poll_timeout():
    storage = s3_storage(lambda request: httpx.Response(200, text=EMPTY_LISTING), poll_timeout=30)

    with pytest.raises(PollTimeoutError):
        await storage.poll(LIST_URL, sleep_period=5)


def test_first_listed_key_without_namespace():
    assert first_listed_key("<r><Contents><Key>a</Key></Contents></r>") == "a"


def test_first_listed_key_rejects_non_xml():
    with pytest.raises(StorageError):
        first_listed_key("not xml")


def test_configuration_from_license_api_response():
    config = ExportConfiguration.from_mapping(
        {
            "s3UploadIdentifier": "F1",
            "s3BucketName": "exports",
            "key": "in/F1.json",
            "AWSAccessKeyId": "AKIA",
            "policy": "cG9s",
            "signature": "c2ln",
            "signedOutputUrl": "https://exports.s3.amazonaws.com/out/F1.pdf?sig",
            "signedErrorListUrl": "https://exports.s3.amazonaws.com/?prefix=err/F1",
            "signedOutputListUrl": "https://exports.s3.amazonaws.com/?prefix=out/F1",
        }
    )

    assert config.file_id == "F1"
    assert config.destination == DESTINATION
    assert config.signed_output_url.endswith("out/F1.pdf?sig")


def test_configuration_from_mapping_requires_identifier():
    with pytest.raises(KeyError):
        ExportConfiguration.from_mapping({"signedOutputUrl": "u"})
