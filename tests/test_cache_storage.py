from __future__ import annotations

import io
import json
from datetime import UTC, date, datetime, timedelta, timezone
from unittest.mock import MagicMock

import boto3
import pytest
from botocore.response import StreamingBody
from botocore.stub import Stubber

from newsdigest.core.exceptions import CacheReadError, CacheWriteError
from newsdigest.storage.cache import DigestCache, cache_key, cache_key_for

BUCKET = "digest-test-bucket"
KEY = "news-cache/2024-01-03.json"
PAYLOAD = [
    {"source": "A", "title": "a3", "link": "https://example.com/a3", "date": 1704240000000},
    {"source": "B", "date": 1704153600000},
]


@pytest.fixture
def s3_client():
    return boto3.client(
        "s3",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


def _body(raw: bytes) -> StreamingBody:
    return StreamingBody(io.BytesIO(raw), len(raw))


def test_cache_key_uses_iso_date() -> None:
    assert cache_key(date(2024, 1, 3)) == "news-cache/2024-01-03.json"
    assert cache_key(date(2024, 1, 3), prefix="custom") == "custom/2024-01-03.json"


def test_cache_key_for_converts_to_utc_day() -> None:
    # 23:30 in UTC-5 is already the next day in UTC
    eastern = timezone(timedelta(hours=-5))
    assert cache_key_for(datetime(2024, 1, 2, 23, 30, tzinfo=eastern)) == "news-cache/2024-01-03.json"
    assert cache_key_for(datetime(2024, 1, 3, 0, 0, tzinfo=UTC)) == "news-cache/2024-01-03.json"
    assert cache_key_for(datetime(2024, 1, 3, 23, 59, 59, tzinfo=UTC)) == "news-cache/2024-01-03.json"


@pytest.mark.asyncio
async def test_read_returns_cached_payload(s3_client) -> None:
    with Stubber(s3_client) as stubber:
        stubber.add_response(
            "get_object",
            {"Body": _body(json.dumps(PAYLOAD).encode("utf-8"))},
        )
        payload = await DigestCache(s3_client, bucket=BUCKET).read(KEY)
        stubber.assert_no_pending_responses()

    assert payload == PAYLOAD


@pytest.mark.asyncio
async def test_read_missing_key_returns_none(s3_client) -> None:
    with Stubber(s3_client) as stubber:
        stubber.add_client_error("get_object", service_error_code="NoSuchKey", http_status_code=404)
        payload = await DigestCache(s3_client, bucket=BUCKET).read(KEY)

    assert payload is None


@pytest.mark.asyncio
async def test_read_bare_404_returns_none(s3_client) -> None:
    with Stubber(s3_client) as stubber:
        stubber.add_client_error("get_object", service_error_code="Unknown", http_status_code=404)
        payload = await DigestCache(s3_client, bucket=BUCKET).read(KEY)

    assert payload is None


@pytest.mark.asyncio
async def test_read_access_denied_raises(s3_client) -> None:
    with Stubber(s3_client) as stubber:
        stubber.add_client_error(
            "get_object",
            service_error_code="AccessDenied",
            service_message="Access Denied",
            http_status_code=403,
        )
        with pytest.raises(CacheReadError, match="AccessDenied"):
            await DigestCache(s3_client, bucket=BUCKET).read(KEY)


@pytest.mark.asyncio
async def test_read_invalid_json_raises(s3_client) -> None:
    with Stubber(s3_client) as stubber:
        stubber.add_response("get_object", {"Body": _body(b"[{not json")})
        with pytest.raises(CacheReadError, match="not valid JSON"):
            await DigestCache(s3_client, bucket=BUCKET).read(KEY)


@pytest.mark.asyncio
async def test_read_non_array_payload_raises(s3_client) -> None:
    with Stubber(s3_client) as stubber:
        stubber.add_response("get_object", {"Body": _body(b'{"error": "nope"}')})
        with pytest.raises(CacheReadError, match="not a JSON array"):
            await DigestCache(s3_client, bucket=BUCKET).read(KEY)


@pytest.mark.asyncio
async def test_read_malformed_item_raises(s3_client) -> None:
    with Stubber(s3_client) as stubber:
        stubber.add_response("get_object", {"Body": _body(b'[{"title": "no source", "date": 1}]')})
        with pytest.raises(CacheReadError, match="malformed"):
            await DigestCache(s3_client, bucket=BUCKET).read(KEY)


@pytest.mark.asyncio
async def test_read_empty_array_raises(s3_client) -> None:
    with Stubber(s3_client) as stubber:
        stubber.add_response("get_object", {"Body": _body(b"[]")})
        with pytest.raises(CacheReadError, match="is empty"):
            await DigestCache(s3_client, bucket=BUCKET).read(KEY)


@pytest.mark.asyncio
async def test_write_puts_json_array() -> None:
    client = MagicMock()

    await DigestCache(client, bucket=BUCKET).write(KEY, PAYLOAD)

    client.put_object.assert_called_once_with(
        Bucket=BUCKET,
        Key=KEY,
        Body=json.dumps(PAYLOAD, ensure_ascii=False).encode("utf-8"),
        ContentType="application/json",
    )


@pytest.mark.asyncio
async def test_write_failure_raises(s3_client) -> None:
    with Stubber(s3_client) as stubber:
        stubber.add_client_error("put_object", service_error_code="InternalError", http_status_code=500)
        with pytest.raises(CacheWriteError):
            await DigestCache(s3_client, bucket=BUCKET).write(KEY, PAYLOAD)


@pytest.mark.asyncio
async def test_check_access_failure_raises(s3_client) -> None:
    with Stubber(s3_client) as stubber:
        stubber.add_client_error("head_bucket", service_error_code="403", http_status_code=403)
        with pytest.raises(CacheReadError, match=BUCKET):
            await DigestCache(s3_client, bucket=BUCKET).check_access()


@pytest.mark.asyncio
async def test_check_access_ok() -> None:
    client = MagicMock()

    await DigestCache(client, bucket=BUCKET).check_access()

    client.head_bucket.assert_called_once_with(Bucket=BUCKET)
