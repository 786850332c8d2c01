from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from operator import attrgetter

import httpx

from newsdigest.core.clock import Clock, utc_now
from newsdigest.core.exceptions import AllSourcesFailedError
from newsdigest.news.fetcher import FEED_TIMEOUT_SECONDS, MAX_ITEMS_PER_FEED, build_http_client, fetch_feed
from newsdigest.news.models import FeedDescriptor, NewsItem

LOGGER = logging.getLogger(__name__)

FetchFn = Callable[..., Awaitable[list[NewsItem]]]


async def aggregate(
    feeds: Sequence[FeedDescriptor],
    *,
    client: httpx.AsyncClient | None = None,
    timeout_seconds: float = FEED_TIMEOUT_SECONDS,
    max_items: int = MAX_ITEMS_PER_FEED,
    clock: Clock = utc_now,
    fetch: FetchFn = fetch_feed,
) -> list[NewsItem]:
    """Fetch every feed concurrently and merge the results newest-first.

    Raises AllSourcesFailedError when no feed contributed a single item, so
    that callers never persist an empty digest.
    """
    if client is None:
        async with build_http_client(timeout_seconds) as owned_client:
            return await aggregate(
                feeds,
                client=owned_client,
                timeout_seconds=timeout_seconds,
                max_items=max_items,
                clock=clock,
                fetch=fetch,
            )

    tasks = [
        fetch(feed, client=client, timeout_seconds=timeout_seconds, max_items=max_items, clock=clock)
        for feed in feeds
    ]
    results = await asyncio.gather(*tasks, return_exceptions=True)

    merged: list[NewsItem] = []
    for feed, result in zip(feeds, results):
        if isinstance(result, BaseException):
            LOGGER.warning("Feed %s fetch rejected: %r", feed.name, result)
            continue
        merged.extend(result)

    if not merged:
        raise AllSourcesFailedError("All feeds failed or timed out. Aborting cache write.")

    # stable: equal dates keep feed-list order
    merged.sort(key=attrgetter("date"), reverse=True)
    return merged
