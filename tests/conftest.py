from __future__ import annotations

from datetime import UTC, datetime
from email.utils import format_datetime
from typing import Any

import pytest

from newsdigest.core.config import get_settings
from newsdigest.core.exceptions import CacheReadError, CacheWriteError


def rss_document(items: list[dict[str, Any]], title: str = "Test feed") -> bytes:
    """Render a minimal RSS 2.0 document.

    ``date`` values are aware datetimes; ``pub_date`` is written verbatim.
    """
    parts = [f"<?xml version='1.0' encoding='UTF-8'?><rss version='2.0'><channel><title>{title}</title>"]
    for item in items:
        parts.append("<item>")
        if item.get("title"):
            parts.append(f"<title>{item['title']}</title>")
        if item.get("link"):
            parts.append(f"<link>{item['link']}</link>")
        if item.get("date"):
            parts.append(f"<pubDate>{format_datetime(item['date'], usegmt=True)}</pubDate>")
        elif item.get("pub_date"):
            parts.append(f"<pubDate>{item['pub_date']}</pubDate>")
        parts.append("</item>")
    parts.append("</channel></rss>")
    return "".join(parts).encode("utf-8")


def millis(*args: int) -> int:
    return int(datetime(*args, tzinfo=UTC).timestamp() * 1000)


class FakeCache:
    def __init__(
        self,
        stored: dict[str, list[dict[str, Any]]] | None = None,
        read_error: str | None = None,
        write_error: str | None = None,
    ) -> None:
        self.stored = dict(stored or {})
        self.read_error = read_error
        self.write_error = write_error
        self.reads: list[str] = []
        self.writes: list[tuple[str, list[dict[str, Any]]]] = []

    async def read(self, key: str) -> list[dict[str, Any]] | None:
        self.reads.append(key)
        if self.read_error:
            raise CacheReadError(self.read_error)
        return self.stored.get(key)

    async def write(self, key: str, payload: list[dict[str, Any]]) -> None:
        self.writes.append((key, payload))
        if self.write_error:
            raise CacheWriteError(self.write_error)
        self.stored[key] = payload


@pytest.fixture
def fake_cache_factory():
    return FakeCache


@pytest.fixture
def rss():
    return rss_document


@pytest.fixture
def to_millis():
    return millis


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
