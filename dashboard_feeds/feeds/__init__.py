"""Feed fetching, parsing and merging for dashboard-feeds."""

from .fetcher import Fetcher
from .merger import merge
from .models import AggregateResult, FeedItem, SourceBatch, SourceFailure
from .orchestrator import run_all
from .parser import parse_feed
from .pipeline import aggregate, aggregate_with_failures
from .worker import run_source

__all__ = [
    "AggregateResult",
    "FeedItem",
    "Fetcher",
    "SourceBatch",
    "SourceFailure",
    "aggregate",
    "aggregate_with_failures",
    "merge",
    "parse_feed",
    "run_all",
    "run_source",
]
