"""Loading and validating the feed list configuration file."""

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import HttpUrl, TypeAdapter, ValidationError

from dashboard_feeds.errors import (
    ConfigNotFoundError,
    ConfigParseError,
    ConfigReadError,
    InvalidFeedEntryError,
    InvalidLimitError,
    MissingFeedsError,
)

_url_adapter = TypeAdapter(HttpUrl)


@dataclass(frozen=True)
class FeedConfig:
    """Feed sources from the configuration file, in file order."""

    sources: list[str]
    limit: int | None = None
    path: Path | None = None


def _validate_source(index: int, entry: Any, path: Path | None) -> str:
    if not isinstance(entry, dict) or not isinstance(entry.get("url"), str):
        raise InvalidFeedEntryError(index, entry, path)
    url = entry["url"].strip()
    try:
        _url_adapter.validate_python(url)
    except ValidationError as exc:
        raise InvalidFeedEntryError(index, entry, path) from exc
    return url


def parse_feed_config(data: dict[str, Any], path: Path | None = None) -> FeedConfig:
    """Validate an already-decoded configuration document.

    Raises:
        MissingFeedsError: If there is no non-empty "feeds" list
        InvalidFeedEntryError: If an entry is not a table with an http(s) "url"
        InvalidLimitError: If "limit" is present but not a non-negative integer
    """
    feeds = data.get("feeds")
    if not isinstance(feeds, list) or not feeds:
        raise MissingFeedsError(path)

    sources = [_validate_source(i, entry, path) for i, entry in enumerate(feeds)]

    limit = data.get("limit")
    # bool is an int subclass; "limit = true" is a mistake, not 1
    if limit is not None and (
        isinstance(limit, bool) or not isinstance(limit, int) or limit < 0
    ):
        raise InvalidLimitError(limit, path)

    return FeedConfig(sources=sources, limit=limit, path=path)


def load_feed_config(path: Path) -> FeedConfig:
    """Read the TOML feed list at ``path``.

    All problems are reported as ConfigurationError subclasses carrying the
    path, before any network activity starts.
    """
    if not path.exists():
        raise ConfigNotFoundError(path)

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigReadError(path, exc) from exc

    try:
        data = tomllib.loads(content)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigParseError(path, exc) from exc

    return parse_feed_config(data, path)
