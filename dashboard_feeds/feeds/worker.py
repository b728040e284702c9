"""Per-source worker: fetch, parse, and locally reduce one feed."""

from typing import Protocol

from dashboard_feeds.errors import FetchError, ParseError, WorkerError

from .models import FeedItem, SourceBatch
from .parser import parse_feed


class SupportsFetch(Protocol):
    async def fetch(self, url: str) -> bytes: ...


def newest_first(items: list[FeedItem], limit: int) -> list[FeedItem]:
    """Sort by pub_date descending and keep the first ``limit`` items.

    The sort is stable, so items with equal timestamps keep their
    incoming order.
    """
    return sorted(items, key=lambda i: i.pub_date, reverse=True)[:limit]


async def run_source(fetcher: SupportsFetch, source: str, limit: int) -> SourceBatch:
    """Produce the batch for one source.

    Each source can contribute at most ``limit`` items to the final list,
    so the batch is cut down here, before the global merge.

    Raises:
        WorkerError: Wrapping the FetchError or ParseError that stopped
            this source
    """
    try:
        payload = await fetcher.fetch(source)
    except FetchError as exc:
        raise WorkerError(source, "fetch", exc) from exc

    try:
        items = parse_feed(payload, source)
    except ParseError as exc:
        raise WorkerError(source, "parse", exc) from exc

    return SourceBatch(source=source, items=newest_first(items, limit))
