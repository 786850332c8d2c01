"""Daily news digest: merged RSS feeds cached per UTC day."""

__version__ = "0.1.0"
