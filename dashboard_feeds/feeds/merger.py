"""Global merge of per-source batches."""

from collections.abc import Iterable

from .models import FeedItem, SourceBatch
from .worker import newest_first


def merge(batches: Iterable[SourceBatch], limit: int) -> list[FeedItem]:
    """Merge source batches into the final list of at most ``limit`` items.

    This is the second half of a two-stage top-K reduce: every batch was
    already cut to ``limit`` by its worker, so the result equals the top
    ``limit`` items across the complete feeds.

    Args:
        batches: Batches in arrival order
        limit: Maximum number of items to return

    Returns:
        Items sorted by pub_date descending; ties keep arrival order
    """
    # Flatten all batches into a single list
    items = [i for b in batches for i in b.items]
    return newest_first(items, limit)
