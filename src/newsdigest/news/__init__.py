"""Feed retrieval and digest aggregation."""

from newsdigest.news.aggregator import aggregate
from newsdigest.news.feeds import FEEDS, get_feed
from newsdigest.news.fetcher import fetch_feed
from newsdigest.news.models import Digest, FeedDescriptor, NewsItem, digest_to_payload

__all__ = [
    "FEEDS",
    "Digest",
    "FeedDescriptor",
    "NewsItem",
    "aggregate",
    "digest_to_payload",
    "fetch_feed",
    "get_feed",
]
