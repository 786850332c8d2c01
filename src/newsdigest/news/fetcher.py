from __future__ import annotations

import asyncio
import calendar
import logging
from datetime import datetime
from typing import Any

import feedparser
import httpx
from dateutil import parser as dtparser

from newsdigest import __version__
from newsdigest.core.clock import Clock, to_epoch_millis, utc_now
from newsdigest.core.exceptions import FeedFetchError, FeedTimeoutError
from newsdigest.news.models import FeedDescriptor, NewsItem

LOGGER = logging.getLogger(__name__)

FEED_TIMEOUT_SECONDS = 5.0
MAX_ITEMS_PER_FEED = 3
USER_AGENT = f"newsdigest/{__version__}"

# date parts absent from a publish string come out differently under each
_FILL_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


def build_http_client(timeout_seconds: float = FEED_TIMEOUT_SECONDS) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=timeout_seconds,
        follow_redirects=True,
        headers={"User-Agent": USER_AGENT},
    )


def _parse_filled(raw: str) -> tuple[datetime, datetime] | None:
    """Parse ``raw`` against two unrelated defaults; None when unparseable."""
    try:
        first = dtparser.parse(raw, default=_FILL_DEFAULTS[0])
        second = dtparser.parse(raw, default=_FILL_DEFAULTS[1])
    except (ValueError, OverflowError):
        return None
    return first, second


def _entry_date(entry: Any, fetched_at: datetime) -> int:
    """Publish time in epoch millis, falling back to the fetch time.

    A string that names only part of a date ("Tuesday", "10:30") counts as
    missing: whatever fills the gaps would be the wall clock, not the feed.
    """
    raw = str(entry.get("published") or entry.get("updated") or "").strip()
    filled = _parse_filled(raw) if raw else None
    if filled is not None and filled[0] != filled[1]:
        LOGGER.debug("Incomplete publish date %r", raw)
        return to_epoch_millis(fetched_at)

    parsed = entry.get("published_parsed") or entry.get("updated_parsed")
    if parsed:
        return calendar.timegm(parsed) * 1000

    if filled is not None:
        return to_epoch_millis(filled[0])
    if raw:
        LOGGER.debug("Unparseable publish date %r", raw)
    return to_epoch_millis(fetched_at)


def _to_item(feed: FeedDescriptor, entry: Any, fetched_at: datetime) -> NewsItem:
    title = str(entry.get("title") or "").strip()
    link = str(entry.get("link") or "").strip()
    return NewsItem(
        source=feed.name,
        date=_entry_date(entry, fetched_at),
        title=title or None,
        link=link or None,
    )


def _parse_entries(feed: FeedDescriptor, content: bytes) -> list[Any]:
    parsed = feedparser.parse(content)
    if parsed.bozo and not parsed.entries:
        raise FeedFetchError(feed.name, f"unparseable feed ({parsed.get('bozo_exception')})")
    return list(parsed.entries)


async def _download(feed: FeedDescriptor, client: httpx.AsyncClient) -> bytes:
    try:
        response = await client.get(feed.url)
        response.raise_for_status()
    except httpx.HTTPError as exc:
        raise FeedFetchError(feed.name, f"request failed ({exc})") from exc
    return response.content


async def _fetch_items(
    feed: FeedDescriptor,
    client: httpx.AsyncClient,
    max_items: int,
    clock: Clock,
) -> list[NewsItem]:
    content = await _download(feed, client)
    entries = await asyncio.to_thread(_parse_entries, feed, content)
    fetched_at = clock()
    return [_to_item(feed, entry, fetched_at) for entry in entries[:max_items]]


async def _fetch_with_deadline(
    feed: FeedDescriptor,
    client: httpx.AsyncClient,
    timeout_seconds: float,
    max_items: int,
    clock: Clock,
) -> list[NewsItem]:
    # wait_for cancels the pending download when the deadline wins
    try:
        return await asyncio.wait_for(_fetch_items(feed, client, max_items, clock), timeout=timeout_seconds)
    except TimeoutError as exc:
        raise FeedTimeoutError(feed.name, f"no response within {timeout_seconds:g}s") from exc


async def fetch_feed(
    feed: FeedDescriptor,
    *,
    client: httpx.AsyncClient,
    timeout_seconds: float = FEED_TIMEOUT_SECONDS,
    max_items: int = MAX_ITEMS_PER_FEED,
    clock: Clock = utc_now,
) -> list[NewsItem]:
    """Fetch the first ``max_items`` entries of one feed.

    Never raises for ordinary failures: a network error, an unparseable
    document or a missed deadline is logged with the feed name and yields an
    empty list.
    """
    try:
        items = await _fetch_with_deadline(feed, client, timeout_seconds, max_items, clock)
    except Exception as exc:
        LOGGER.warning("Feed %s failed or timed out: %s", feed.name, exc)
        return []

    LOGGER.info("Feed %s returned %d items", feed.name, len(items))
    return items
