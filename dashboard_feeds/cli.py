"""Command-line interface for dashboard-feeds."""

import asyncio
import signal
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from dashboard_feeds import __version__
from dashboard_feeds.config import Settings, get_settings
from dashboard_feeds.errors import ConfigurationError
from dashboard_feeds.feed_config import load_feed_config
from dashboard_feeds.feeds import FeedItem, Fetcher, aggregate_with_failures
from dashboard_feeds.feeds.cache import FeedCache
from dashboard_feeds.logging import setup_logging
from dashboard_feeds.presenter import print_items

app = typer.Typer(help="Show the most recent entries across your RSS and Atom feeds.")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"dashboard-feeds {__version__}")
        raise typer.Exit()


def _report_config_error(exc: ConfigurationError) -> None:
    console = Console(stderr=True, highlight=False, soft_wrap=True)
    console.print(f"[bold red]Configuration error[/bold red]: {escape(str(exc))}")
    if exc.help:
        console.print(exc.help, markup=False)


def _make_fetcher(settings: Settings) -> Fetcher:
    cache = None
    if settings.redis_url:
        cache = FeedCache.from_url(
            settings.redis_url,
            ttl_seconds=settings.feed_ttl_seconds,
            splay_max=settings.feed_ttl_splay_max,
        )
    return Fetcher(cache=cache, timeout=settings.http_timeout_seconds)


@contextmanager
def interrupt_event() -> Iterator[asyncio.Event]:
    """Yield an event that Ctrl-C sets, instead of raising KeyboardInterrupt.

    Must be entered inside a running event loop. Where the loop cannot
    install signal handlers (Windows, non-main threads) the event is
    simply never set.
    """
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, stop.set)
        installed = True
    except (NotImplementedError, RuntimeError):
        installed = False
    try:
        yield stop
    finally:
        if installed:
            loop.remove_signal_handler(signal.SIGINT)


async def collect(
    sources: list[str], limit: int, deadline: float | None, settings: Settings
) -> list[FeedItem]:
    """Run the pipeline with a fetcher built from settings.

    Ctrl-C stops waiting on slow feeds and prints what has arrived.
    """
    with interrupt_event() as stop:
        async with _make_fetcher(settings) as fetcher:
            result = await aggregate_with_failures(
                sources, limit, fetcher, deadline, stop
            )
    return result.items


@app.command()
def run(
    limit: int | None = typer.Option(
        None, "--limit", "-n", min=0, help="How many entries to return [default: 20]"
    ),
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to the feed list (TOML)"
    ),
    deadline: float | None = typer.Option(
        None, "--deadline", min=0, help="Give up on feeds still loading after this many seconds"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log per-feed progress and failures"),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
):
    """Fetch all configured feeds and print the newest entries."""
    settings = get_settings()
    setup_logging(verbose)

    try:
        feed_config = load_feed_config(config or settings.config_path)
    except ConfigurationError as exc:
        _report_config_error(exc)
        raise typer.Exit(code=1)

    if limit is None:
        limit = feed_config.limit if feed_config.limit is not None else settings.default_limit
    if deadline is None:
        deadline = settings.run_timeout_seconds

    items = asyncio.run(collect(feed_config.sources, limit, deadline, settings))
    print_items(items)


def main() -> None:
    """Entry point for the dashboard-feeds command."""
    app()
