"""Concurrent fan-out over all sources and unordered fan-in of results."""

import asyncio
import logging
from collections.abc import Sequence

from dashboard_feeds.errors import WorkerError

from .models import CollectedResults, SourceBatch, SourceFailure
from .worker import SupportsFetch, run_source

logger = logging.getLogger(__name__)


def _record(task: asyncio.Task, source: str, results: CollectedResults) -> None:
    try:
        batch: SourceBatch = task.result()
    except WorkerError as exc:
        logger.info(
            "Skipping %s (%s): %s", source, exc.stage, exc.cause, extra={"source": source}
        )
        results.failures.append(
            SourceFailure(source=source, stage=exc.stage, reason=str(exc.cause))
        )
        return
    logger.debug(
        "Collected %d items from %s", len(batch.items), source, extra={"source": source}
    )
    results.batches.append(batch)


async def run_all(
    fetcher: SupportsFetch,
    sources: Sequence[str],
    limit: int,
    deadline: float | None = None,
    stop: asyncio.Event | None = None,
) -> CollectedResults:
    """Run one worker per source concurrently and collect what they produce.

    Batches are appended in completion order, which varies from run to run.
    A worker that fails is recorded in ``failures`` and never aborts the
    others.

    Args:
        fetcher: Shared fetcher used by every worker
        sources: Feed URLs, one worker each
        limit: Per-source item limit
        deadline: Optional seconds for the whole fan-out
        stop: Optional event, set on interrupt, that ends the fan-out early

    Workers still pending when the deadline expires or ``stop`` is set are
    cancelled and recorded as "cancelled" failures; batches already
    collected are returned as usual.

    Returns:
        CollectedResults with successful batches and failure records
    """
    results = CollectedResults()
    tasks = {
        asyncio.create_task(run_source(fetcher, source, limit), name=source): source
        for source in sources
    }
    pending: set[asyncio.Task] = set(tasks)
    stop_waiter = asyncio.create_task(stop.wait()) if stop is not None else None

    loop = asyncio.get_running_loop()
    stop_at = loop.time() + deadline if deadline is not None else None
    reason = "run deadline reached"

    try:
        while pending:
            timeout = None if stop_at is None else max(stop_at - loop.time(), 0)
            waiting = pending | {stop_waiter} if stop_waiter is not None else pending
            done, _ = await asyncio.wait(
                waiting, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
            )
            pending -= done

            # Read every finished task before raising anything unexpected
            errors = []
            for task in done:
                if task is stop_waiter:
                    continue
                try:
                    _record(task, tasks[task], results)
                except Exception as exc:
                    errors.append(exc)
            if errors:
                raise errors[0]

            if stop_waiter is not None and stop_waiter in done:
                reason = "run interrupted"
                break
            if not done:
                break
    finally:
        # Runs on deadline, interrupt, and when this coroutine itself is cancelled
        if stop_waiter is not None:
            stop_waiter.cancel()
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    for task in pending:
        source = tasks[task]
        logger.info("Cancelled %s: %s", source, reason, extra={"source": source})
        results.failures.append(
            SourceFailure(source=source, stage="cancelled", reason=reason)
        )

    return results
