from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from newsdigest.core.clock import Clock, utc_now
from newsdigest.core.config import Settings
from newsdigest.core.exceptions import AllSourcesFailedError, CacheReadError, CacheWriteError
from newsdigest.news.aggregator import aggregate
from newsdigest.news.feeds import FEEDS
from newsdigest.news.models import FeedDescriptor, NewsItem, digest_to_payload
from newsdigest.storage.cache import DigestCache, cache_key_for

LOGGER = logging.getLogger(__name__)

AggregateFn = Callable[..., Awaitable[list[NewsItem]]]


@dataclass(slots=True)
class GatewayResult:
    status_code: int
    body: Any

    @property
    def ok(self) -> bool:
        return self.status_code == 200


class DigestGateway:
    """Serve today's digest from the cache, filling it on a miss.

    Read outcomes:
      hit        -> 200 with the stored payload, storage untouched
      miss       -> aggregate, store, 200 with the fresh digest
      read error -> 500 without aggregating
    An aggregation that yields nothing is a 500 and nothing is stored.
    """

    def __init__(
        self,
        cache: DigestCache,
        feeds: Sequence[FeedDescriptor] = FEEDS,
        settings: Settings | None = None,
        clock: Clock = utc_now,
        aggregate_fn: AggregateFn = aggregate,
    ) -> None:
        self.cache = cache
        self.feeds = tuple(feeds)
        self.settings = settings or Settings()
        self.clock = clock
        self.aggregate_fn = aggregate_fn

    def key_for(self, request_time: datetime) -> str:
        return cache_key_for(request_time, prefix=self.settings.cache_prefix)

    async def handle(self, request_time: datetime | None = None) -> GatewayResult:
        key = self.key_for(request_time or self.clock())

        try:
            cached = await self.cache.read(key)
        except CacheReadError as exc:
            LOGGER.error("Cache read error for %s: %s", key, exc)
            return GatewayResult(500, {"error": str(exc)})

        if cached is not None:
            LOGGER.info("Cache hit: serving %s", key)
            return GatewayResult(200, cached)

        LOGGER.info("Cache miss: aggregating %d feeds for %s", len(self.feeds), key)
        return await self._fill(key)

    async def _fill(self, key: str) -> GatewayResult:
        try:
            items = await self.aggregate_fn(
                self.feeds,
                timeout_seconds=self.settings.feed_timeout_seconds,
                max_items=self.settings.max_items_per_feed,
                clock=self.clock,
            )
        except AllSourcesFailedError as exc:
            LOGGER.error("Aggregation for %s produced nothing: %s", key, exc)
            return GatewayResult(500, {"error": str(exc)})

        payload = digest_to_payload(items)
        try:
            await self.cache.write(key, payload)
        except CacheWriteError as exc:
            # the digest is still valid; the next request re-aggregates
            LOGGER.error("Serving uncached digest: %s", exc)

        return GatewayResult(200, payload)
