class DigestError(Exception):
    """Base application exception."""


class FeedFetchError(DigestError):
    """Raised when a single feed cannot be downloaded or parsed."""

    def __init__(self, feed_name: str, message: str) -> None:
        super().__init__(f"{feed_name}: {message}")
        self.feed_name = feed_name


class FeedTimeoutError(FeedFetchError):
    """Raised when a feed does not answer within its deadline."""


class AllSourcesFailedError(DigestError):
    """Raised when aggregation yields no items at all."""


class CacheReadError(DigestError):
    """Raised when the cached digest cannot be read for a reason other than absence."""


class CacheWriteError(DigestError):
    """Raised when a freshly aggregated digest cannot be stored."""
