"""Exception hierarchy for dashboard-feeds."""

from pathlib import Path
from typing import Any, Literal

FEEDS_HELP = """Add feeds like this:

    [[feeds]]
    url = "https://blog.rust-lang.org/feed.xml\""""

ENTRY_HELP = """Feed entries should look like this:

    [[feeds]]
    url = "https://blog.rust-lang.org/feed.xml\""""


class DashboardFeedsError(Exception):
    """Base class for all errors raised by dashboard-feeds."""


# Configuration stage: fatal to the whole run, raised before any fetch.


class ConfigurationError(DashboardFeedsError):
    """Problem with the configuration file or its contents."""

    help: str | None = None

    def __init__(self, message: str, path: Path | None = None):
        super().__init__(message)
        self.path = path


class ConfigNotFoundError(ConfigurationError):
    help = FEEDS_HELP

    def __init__(self, path: Path):
        super().__init__(f"Config file not found at {path}", path)


class ConfigReadError(ConfigurationError):
    def __init__(self, path: Path, cause: OSError):
        super().__init__(f"Could not read configuration file at {path}: {cause}", path)
        self.__cause__ = cause


class ConfigParseError(ConfigurationError):
    def __init__(self, path: Path, cause: Exception):
        super().__init__(f"Could not parse configuration file at {path}: {cause}", path)
        self.__cause__ = cause


class MissingFeedsError(ConfigurationError):
    """The "feeds" list is missing or empty."""

    help = FEEDS_HELP

    def __init__(self, path: Path | None = None):
        where = f" in {path}" if path else ""
        super().__init__(
            f'Configuration key "feeds" is missing or doesn\'t have any entries{where}',
            path,
        )


class InvalidFeedEntryError(ConfigurationError):
    """A single feed entry is not a table with a valid URL."""

    help = ENTRY_HELP

    def __init__(self, index: int, entry: Any, path: Path | None = None):
        where = f" in {path}" if path else ""
        super().__init__(
            f"Configured list of feeds has a bad entry{where}: feeds[{index}] = {entry!r}",
            path,
        )
        self.index = index
        self.entry = entry


class InvalidLimitError(ConfigurationError):
    def __init__(self, value: Any, path: Path | None = None):
        super().__init__(
            f"Configured limit must be a non-negative integer, got {value!r}", path
        )
        self.value = value


# Per-source errors: fatal only to the Worker that produced them.


class FetchError(DashboardFeedsError):
    """Connection, timeout, HTTP status or body read failure for one URL."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Could not fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class ParseError(DashboardFeedsError):
    """Feed payload could not be decoded into items."""


class UnknownFormatError(ParseError):
    """Payload is well-formed XML but neither RSS nor Atom."""


class MissingOrInvalidDateError(ParseError):
    """An item has no publish date, or one that cannot be parsed."""


class WorkerError(DashboardFeedsError):
    """Failure of one per-source worker, wrapping a FetchError or ParseError."""

    def __init__(
        self,
        source: str,
        stage: Literal["fetch", "parse"],
        cause: FetchError | ParseError,
    ):
        super().__init__(f"{stage} failed for {source}: {cause}")
        self.source = source
        self.stage = stage
        self.cause = cause
        self.__cause__ = cause
