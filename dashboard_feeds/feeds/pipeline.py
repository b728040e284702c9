"""The aggregate operation: fan out over sources, then merge."""

import asyncio
import logging
from collections.abc import Sequence

from dashboard_feeds.errors import InvalidLimitError, MissingFeedsError

from .fetcher import Fetcher
from .merger import merge
from .models import AggregateResult, FeedItem
from .orchestrator import run_all
from .worker import SupportsFetch

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20


def _check_inputs(sources: Sequence[str], limit: int) -> None:
    if not sources:
        raise MissingFeedsError()
    if limit < 0:
        raise InvalidLimitError(limit)


async def aggregate_with_failures(
    sources: Sequence[str],
    limit: int = DEFAULT_LIMIT,
    fetcher: SupportsFetch | None = None,
    deadline: float | None = None,
    stop: asyncio.Event | None = None,
) -> AggregateResult:
    """Fetch every source and return the merged items with failure records.

    Configuration problems (no sources, negative limit) are raised before
    any fetch starts. Per-source failures never are; with no usable source
    the result is simply empty. Setting ``stop`` (e.g. on Ctrl-C) merges
    whatever batches finished so far.

    Raises:
        MissingFeedsError: If ``sources`` is empty
        InvalidLimitError: If ``limit`` is negative
    """
    _check_inputs(sources, limit)

    if fetcher is None:
        async with Fetcher() as owned:
            collected = await run_all(owned, sources, limit, deadline, stop)
    else:
        collected = await run_all(fetcher, sources, limit, deadline, stop)

    items = merge(collected.batches, limit)
    logger.info(
        "Merged %d items from %d/%d sources",
        len(items),
        len(collected.batches),
        len(sources),
    )
    return AggregateResult(items=items, failures=collected.failures)


async def aggregate(
    sources: Sequence[str],
    limit: int = DEFAULT_LIMIT,
    fetcher: SupportsFetch | None = None,
    deadline: float | None = None,
) -> list[FeedItem]:
    """Return the ``limit`` most recent items across all ``sources``."""
    result = await aggregate_with_failures(sources, limit, fetcher, deadline)
    return result.items
