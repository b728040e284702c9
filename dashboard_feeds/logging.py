"""Logging configuration for dashboard-feeds."""

import json
import logging
import sys

from dashboard_feeds.config import get_settings


class JsonFormatter(logging.Formatter):
    """JSON formatter for production logging.

    Records logged with ``extra={"source": url}`` carry the feed URL.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        base = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "msg": record.getMessage(),
            "logger": record.name,
        }
        if source := getattr(record, "source", None):
            base["source"] = source
        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(base)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on environment.

    Logs go to stderr; stdout carries the item list.
    """
    settings = get_settings()
    handler = logging.StreamHandler(sys.stderr)

    if settings.env == "prod":
        handler.setFormatter(JsonFormatter())
    else:
        # Pretty format for development
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    if verbose:
        root.setLevel(logging.INFO)
    else:
        root.setLevel(getattr(logging, settings.log_level.upper(), logging.WARNING))
