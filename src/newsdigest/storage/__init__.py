"""Object-storage cache for the daily digest."""

from newsdigest.storage.cache import DigestCache, build_s3_client, cache_key, cache_key_for

__all__ = ["DigestCache", "build_s3_client", "cache_key", "cache_key_for"]
