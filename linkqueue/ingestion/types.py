"""Transient records rebuilt on every refresh cycle."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple


@dataclass(frozen=True)
class Link:
    """An outbound hyperlink discovered in an article body.

    ``queued`` and ``queued_at`` are only ever set by reconciliation.
    """

    url: str
    domain: str
    context: str
    id: Optional[int] = None
    queued: bool = False
    queued_at: Optional[datetime] = None


@dataclass(frozen=True)
class Article:
    title: str
    url: str
    feed: str
    date: Optional[datetime]
    links: Tuple[Link, ...] = ()
    id: Optional[int] = None


@dataclass(frozen=True)
class RawFeedItem:
    """A feed entry as delivered by the feed source."""

    title: str
    link: str
    content: str
    published: Optional[datetime] = None


@dataclass(frozen=True)
class FetchedFeed:
    title: str
    host: str
    items: Tuple[RawFeedItem, ...] = field(default_factory=tuple)


__all__ = ["Article", "FetchedFeed", "Link", "RawFeedItem"]
