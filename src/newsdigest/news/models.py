from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class FeedDescriptor:
    name: str
    url: str


@dataclass(slots=True)
class NewsItem:
    source: str
    date: int
    title: str | None = None
    link: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the cached payload shape, omitting absent title/link."""
        out: dict[str, Any] = {"source": self.source, "date": self.date}
        if self.title:
            out["title"] = self.title
        if self.link:
            out["link"] = self.link
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NewsItem:
        if not isinstance(data, dict):
            raise ValueError(f"news item is not an object: {data!r}")
        source = data.get("source")
        date = data.get("date")
        if not isinstance(source, str) or not source:
            raise ValueError(f"news item without a source: {data!r}")
        # bool is an int subclass
        if isinstance(date, bool) or not isinstance(date, int):
            raise ValueError(f"news item without an integer date: {data!r}")
        return cls(source=source, date=date, title=data.get("title") or None, link=data.get("link") or None)


Digest = list[NewsItem]


def digest_to_payload(items: Iterable[NewsItem]) -> list[dict[str, Any]]:
    return [item.to_dict() for item in items]
