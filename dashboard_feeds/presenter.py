"""Terminal rendering of the merged item list."""

import os
import sys
import textwrap
from collections.abc import Iterable, Mapping
from typing import TextIO

from rich.console import Console
from rich.style import Style
from rich.text import Text

from dashboard_feeds.feeds.models import FeedItem

INITIAL_INDENT = "- "
SUBSEQUENT_INDENT = "    "

HYPERLINK_TERM_PROGRAMS = {"Hyper", "iTerm.app", "terminology", "WezTerm", "vscode", "ghostty"}
HYPERLINK_TERMS = {"terminology", "alacritty", "xterm-kitty"}


def supports_hyperlinks(
    stream: TextIO | None = None, env: Mapping[str, str] | None = None
) -> bool:
    """Guess whether the terminal behind ``stream`` renders OSC 8 hyperlinks.

    FORCE_HYPERLINK overrides everything ("0" disables). Otherwise the
    stream must be a TTY outside CI, in a terminal known to support them.
    """
    env = os.environ if env is None else env
    stream = sys.stdout if stream is None else stream

    if "FORCE_HYPERLINK" in env:
        return env["FORCE_HYPERLINK"].strip() != "0"
    if not stream.isatty() or "CI" in env:
        return False

    if "DOMTERM" in env or "WT_SESSION" in env or "KONSOLE_VERSION" in env:
        return True
    vte = env.get("VTE_VERSION", "")
    if vte.isdigit() and int(vte) >= 5000:
        return True
    if env.get("TERM_PROGRAM") in HYPERLINK_TERM_PROGRAMS:
        return True
    if env.get("TERM") in HYPERLINK_TERMS:
        return True
    return env.get("COLORTERM") == "xfce4-terminal"


def wrap_item(item: FeedItem, width: int) -> str:
    """Word-wrap ``"<feed_title>: <title>"`` with a "- " bullet."""
    return textwrap.fill(
        f"{item.feed_title}: {item.title}",
        width=width,
        initial_indent=INITIAL_INDENT,
        subsequent_indent=SUBSEQUENT_INDENT,
    )


def _title_end(wrapped: str, feed_title: str) -> int:
    """Index in ``wrapped`` just past the feed title.

    textwrap only ever changes whitespace, so the feed title ends after as
    many non-space characters as it contains itself.
    """
    remaining = sum(1 for c in feed_title if not c.isspace())
    pos = len(INITIAL_INDENT)
    while remaining and pos < len(wrapped):
        if not wrapped[pos].isspace():
            remaining -= 1
        pos += 1
    return pos


def render_item(item: FeedItem, width: int, hyperlinks: bool = False) -> Text:
    """Build the styled text for one item: dimmed feed title, optional link."""
    wrapped = wrap_item(item, width)
    text = Text(wrapped)
    if item.feed_title.strip():
        text.stylize("dim", len(INITIAL_INDENT), _title_end(wrapped, item.feed_title))
    if hyperlinks and item.link:
        text.stylize(Style(link=item.link))
    return text


def print_items(
    items: Iterable[FeedItem],
    console: Console | None = None,
    hyperlinks: bool | None = None,
) -> None:
    """Print each item, wrapped to the console width. Prints nothing for no items."""
    console = console or Console(soft_wrap=True, highlight=False)
    if hyperlinks is None:
        hyperlinks = supports_hyperlinks(console.file)

    for item in items:
        console.print(render_item(item, console.width, hyperlinks))
