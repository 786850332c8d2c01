from __future__ import annotations

import asyncio
import json
import logging
from datetime import UTC, date, datetime
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from newsdigest.core.config import CACHE_BUCKET, Settings
from newsdigest.core.exceptions import CacheReadError, CacheWriteError
from newsdigest.news.models import NewsItem

LOGGER = logging.getLogger(__name__)

DEFAULT_PREFIX = "news-cache"
NOT_FOUND_CODES = frozenset({"NoSuchKey", "404", "NotFound"})


def cache_key(day: date, prefix: str = DEFAULT_PREFIX) -> str:
    return f"{prefix}/{day.isoformat()}.json"


def cache_key_for(moment: datetime, prefix: str = DEFAULT_PREFIX) -> str:
    """Key for the UTC calendar day containing ``moment``."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return cache_key(moment.astimezone(UTC).date(), prefix=prefix)


def build_s3_client(settings: Settings) -> Any:
    return boto3.client("s3", region_name=settings.aws_region)


def _is_not_found(exc: ClientError) -> bool:
    error = exc.response.get("Error", {})
    status = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    return error.get("Code") in NOT_FOUND_CODES or status == 404


class DigestCache:
    def __init__(self, client: Any, bucket: str = CACHE_BUCKET) -> None:
        self.client = client
        self.bucket = bucket

    def _read_sync(self, key: str) -> list[dict[str, Any]] | None:
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
            raw = response["Body"].read()
        except ClientError as exc:
            if _is_not_found(exc):
                return None
            raise CacheReadError(f"Cache read failed for {key}: {exc}") from exc
        except BotoCoreError as exc:
            raise CacheReadError(f"Cache read failed for {key}: {exc}") from exc

        try:
            payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as exc:
            raise CacheReadError(f"Cached digest at {key} is not valid JSON: {exc}") from exc

        if not isinstance(payload, list):
            raise CacheReadError(f"Cached digest at {key} is not a JSON array")
        if not payload:
            raise CacheReadError(f"Cached digest at {key} is empty")
        try:
            for entry in payload:
                NewsItem.from_dict(entry)
        except ValueError as exc:
            raise CacheReadError(f"Cached digest at {key} is malformed: {exc}") from exc
        return payload

    def _write_sync(self, key: str, payload: list[dict[str, Any]]) -> None:
        body = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=body,
                ContentType="application/json",
            )
        except (BotoCoreError, ClientError) as exc:
            raise CacheWriteError(f"Cache write failed for {key}: {exc}") from exc

    def _check_access_sync(self) -> None:
        try:
            self.client.head_bucket(Bucket=self.bucket)
        except (BotoCoreError, ClientError) as exc:
            raise CacheReadError(f"Bucket {self.bucket} is not accessible: {exc}") from exc

    async def read(self, key: str) -> list[dict[str, Any]] | None:
        """Return the cached payload, or None when no entry exists for ``key``."""
        return await asyncio.to_thread(self._read_sync, key)

    async def write(self, key: str, payload: list[dict[str, Any]]) -> None:
        await asyncio.to_thread(self._write_sync, key, payload)
        LOGGER.info("Stored %d items at s3://%s/%s", len(payload), self.bucket, key)

    async def check_access(self) -> None:
        await asyncio.to_thread(self._check_access_sync)
