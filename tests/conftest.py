from __future__ import annotations

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from linkqueue.config.settings import AppSettings, FeedSettings
from linkqueue.db.base import Base
from linkqueue.db.store import LinkStore
from linkqueue.ingestion.refresh import RefreshService
from linkqueue.ingestion.rss import ArticleAssembler, FeedFetchError, title_contains
from linkqueue.ingestion.types import FetchedFeed, RawFeedItem
from linkqueue.services import Services
from linkqueue.state.snapshot import BatchHolder
from linkqueue.telemetry import metrics

FEED_URL = "http://example.com/feed"


class StubFeedSource:
    """Feed source returning a canned feed, or failing on demand."""

    def __init__(self, feed: FetchedFeed) -> None:
        self.feed = feed
        self.fail = False
        self.calls: list[str] = []

    def fetch(self, feed_url: str) -> FetchedFeed:
        self.calls.append(feed_url)
        if self.fail:
            raise FeedFetchError(f"unable to fetch {feed_url}")
        return self.feed


def make_item(title: str, link: str, content: str, published=None) -> RawFeedItem:
    return RawFeedItem(title=title, link=link, content=content, published=published)


@pytest.fixture(autouse=True)
def _reset_metrics() -> None:
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture()
def session_factory() -> sessionmaker[Session]:
    engine = create_engine(
        "sqlite://",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, class_=Session, expire_on_commit=False, future=True)
    yield factory
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture()
def store(session_factory) -> LinkStore:
    return LinkStore(session_factory)


@pytest.fixture()
def feed_source() -> StubFeedSource:
    return StubFeedSource(
        FetchedFeed(
            title="Marginal Revolution",
            host="example.com",
            items=(
                make_item(
                    "Tuesday assorted links",
                    "http://example.com/2021/01/links",
                    '<p><a href="http://other.com/y">Other story</a> and '
                    '<a href="http://example.com/x">our archive</a></p>',
                ),
                make_item(
                    "A long essay",
                    "http://example.com/2021/01/essay",
                    '<p><a href="http://elsewhere.org/z">cited</a></p>',
                ),
            ),
        )
    )


@pytest.fixture()
def services(store, feed_source) -> Services:
    holder = BatchHolder()
    refresher = RefreshService(
        feed_url=FEED_URL,
        source=feed_source,
        assembler=ArticleAssembler(title_contains("link")),
        holder=holder,
    )
    return Services(
        settings=AppSettings(feed=FeedSettings(url=FEED_URL)),
        store=store,
        holder=holder,
        refresher=refresher,
    )
