"""Shared builders for feed pipeline tests."""

import asyncio
from datetime import datetime, timezone
from email.utils import format_datetime

from dashboard_feeds.errors import FetchError
from dashboard_feeds.feeds.models import FeedItem, SourceBatch


def make_item(title: str, day: int, feed_title: str = "Feed") -> FeedItem:
    """Helper to create a FeedItem dated 2024-01-<day>."""
    return FeedItem(
        feed_title=feed_title,
        title=title,
        link=f"https://example.com/{title}",
        pub_date=datetime(2024, 1, day, 12, 0, tzinfo=timezone.utc),
    )


def make_batch(source: str, *items: FeedItem) -> SourceBatch:
    return SourceBatch(source=source, items=list(items))


def rss_payload(feed_title: str, days: list[int]) -> bytes:
    """Build an RSS document with one item per day, in the given order."""
    items = "".join(
        f"<item><title>{feed_title} {day:02d}</title>"
        f"<link>https://example.com/{day}</link>"
        f"<pubDate>{format_datetime(datetime(2024, 1, day, 12, tzinfo=timezone.utc))}</pubDate>"
        "</item>"
        for day in days
    )
    return (
        f'<rss version="2.0"><channel><title>{feed_title}</title>{items}</channel></rss>'
    ).encode()


class FakeFetcher:
    """In-memory fetcher: maps URL to bytes, an exception, or a delay."""

    def __init__(self, responses: dict, delays: dict | None = None):
        self.responses = responses
        self.delays = delays or {}
        self.calls: list[str] = []

    async def fetch(self, url: str) -> bytes:
        self.calls.append(url)
        if url in self.delays:
            await asyncio.sleep(self.delays[url])
        response = self.responses.get(url)
        if response is None:
            raise FetchError(url, "HTTP 404")
        if isinstance(response, Exception):
            raise response
        return response
