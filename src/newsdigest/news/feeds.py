from __future__ import annotations

from newsdigest.news.models import FeedDescriptor

FEEDS: tuple[FeedDescriptor, ...] = (
    FeedDescriptor(
        name="Cursor",
        url="https://any-feeds.com/api/feeds/custom/cmkoaiogm0000lf04qmtirq2g/rss.xml",
    ),
    FeedDescriptor(name="InfoQ", url="https://feed.infoq.com/"),
    FeedDescriptor(name="HackerNews", url="https://news.ycombinator.com/rss"),
)


def get_feed(name: str) -> FeedDescriptor:
    wanted = name.strip().lower()
    for feed in FEEDS:
        if feed.name.lower() == wanted:
            return feed
    raise KeyError(name)
