"""Feed fetching and assembly of feed items into link-bearing articles."""
from __future__ import annotations

import logging
import calendar
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional

import feedparser

from linkqueue.ingestion.extractor import find_links, url_host
from linkqueue.ingestion.tree import DocumentParseError
from linkqueue.ingestion.types import Article, FetchedFeed, Link, RawFeedItem
from linkqueue.telemetry import metrics

logger = logging.getLogger(__name__)

TitleFilter = Callable[[str], bool]


class FeedFetchError(RuntimeError):
    """Raised when a feed cannot be downloaded or parsed."""


def title_contains(substring: str) -> TitleFilter:
    """Build a filter accepting titles that contain ``substring`` in any case."""
    needle = substring.lower()

    def _matches(title: str) -> bool:
        return needle in (title or "").lower()

    return _matches


def _parse_datetime(entry: feedparser.FeedParserDict) -> Optional[datetime]:
    parsed = entry.get("published_parsed") or entry.get("updated_parsed")
    if not parsed:
        return None
    try:
        return datetime.fromtimestamp(calendar.timegm(parsed), tz=timezone.utc)
    except (OverflowError, ValueError):  # pragma: no cover - out of range timestamps
        return None


def _entry_content(entry: feedparser.FeedParserDict) -> str:
    contents = entry.get("content") or []
    for content in contents:
        value = content.get("value")
        if value:
            return value
    return entry.get("summary") or entry.get("description") or ""


class FeedSource:
    """Download a feed with feedparser and normalise its entries."""

    def __init__(self, user_agent: Optional[str] = None) -> None:
        self._user_agent = user_agent

    def fetch(self, feed_url: str) -> FetchedFeed:
        logger.info(
            "Fetching feed %s",
            feed_url,
            extra={"event": "feed.fetch", "url": feed_url},
        )
        if self._user_agent:
            parsed = feedparser.parse(feed_url, agent=self._user_agent)
        else:
            parsed = feedparser.parse(feed_url)

        entries = parsed.get("entries") or []
        if parsed.get("bozo"):
            if not entries:
                raise FeedFetchError(f"unable to fetch {feed_url}: {parsed.get('bozo_exception')}")
            logger.warning(
                "Feed parsing issues encountered for %s: %s",
                feed_url,
                parsed.get("bozo_exception"),
                extra={"event": "feed.parse_warning", "url": feed_url},
            )

        channel = parsed.get("feed") or {}
        feed_link = channel.get("link") or ""
        try:
            host = url_host(feed_link)
        except ValueError as exc:
            raise FeedFetchError(f"feed {feed_url} has an invalid link {feed_link!r}") from exc

        items = tuple(
            RawFeedItem(
                title=entry.get("title") or "",
                link=entry.get("link") or "",
                content=_entry_content(entry),
                published=_parse_datetime(entry),
            )
            for entry in entries
        )
        return FetchedFeed(title=channel.get("title") or "", host=host, items=items)


class ArticleAssembler:
    """Turn feed items into articles carrying their outbound links.

    An item is kept when its title passes ``title_filter`` and its body holds
    at least one link. Links pointing back at the feed's own host are removed
    afterwards, so a kept article may end up with no links at all.
    """

    def __init__(self, title_filter: TitleFilter) -> None:
        self._title_filter = title_filter

    def assemble(self, feed: FetchedFeed) -> List[Article]:
        articles: List[Article] = []
        for item in feed.items:
            if not self._title_filter(item.title):
                continue

            links = self._extract(item)
            if not links:
                continue

            outbound = _without_self_links(links, feed.host)
            metrics.record_links(extracted=len(links), kept=len(outbound))
            articles.append(
                Article(
                    title=item.title,
                    url=item.link,
                    feed=feed.title,
                    date=item.published,
                    links=tuple(outbound),
                )
            )
        return articles

    def _extract(self, item: RawFeedItem) -> List[Link]:
        try:
            return find_links(item.content)
        except DocumentParseError as exc:
            logger.warning(
                "%s: %s",
                item.title,
                exc,
                extra={"event": "article.extract_error", "article_url": item.link},
            )
            return []


def _without_self_links(links: Iterable[Link], feed_host: str) -> List[Link]:
    return [link for link in links if link.domain != feed_host]


__all__ = [
    "ArticleAssembler",
    "FeedFetchError",
    "FeedSource",
    "TitleFilter",
    "title_contains",
]
