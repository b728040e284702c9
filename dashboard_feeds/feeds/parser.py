"""Decode RSS and Atom payloads into normalized feed items."""

import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime

from dashboard_feeds.errors import (
    MissingOrInvalidDateError,
    ParseError,
    UnknownFormatError,
)

from .models import FeedItem

ATOM_NS = "http://www.w3.org/2005/Atom"
NAMESPACES = {"atom": ATOM_NS}


def _text(elem: ET.Element | None) -> str:
    """Return the stripped text content of an element, or "" if absent."""
    if elem is None:
        return ""
    return "".join(elem.itertext()).strip()


def parse_rfc2822(value: str) -> datetime:
    """Parse an RSS pubDate. A "-0000" zone is read as UTC."""
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"not an RFC 2822 date: {value!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_rfc3339(value: str) -> datetime:
    """Parse an Atom timestamp. An offset (or "Z") is required."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        raise ValueError(f"timestamp has no UTC offset: {value!r}")
    return parsed


def _describe(title: str, position: int) -> str:
    return f"item {title!r}" if title else f"item #{position + 1}"


def _parse_rss(root: ET.Element, feed_label: str) -> list[FeedItem]:
    channel = root.find("channel")
    if channel is None:
        raise UnknownFormatError("RSS document has no <channel> element")

    feed_title = _text(channel.find("title")) or feed_label

    items = []
    for position, item in enumerate(channel.findall("item")):
        title = _text(item.find("title"))
        raw_date = _text(item.find("pubDate"))
        if not raw_date:
            raise MissingOrInvalidDateError(
                f"{_describe(title, position)} has no pubDate"
            )
        try:
            pub_date = parse_rfc2822(raw_date)
        except ValueError as exc:
            raise MissingOrInvalidDateError(
                f"{_describe(title, position)} has an invalid pubDate: {exc}"
            ) from exc

        items.append(
            FeedItem(
                feed_title=feed_title,
                title=title,
                link=_text(item.find("link")),
                pub_date=pub_date,
            )
        )
    return items


def _parse_atom(root: ET.Element, feed_label: str) -> list[FeedItem]:
    feed_title = _text(root.find("atom:title", NAMESPACES)) or feed_label

    items = []
    for position, entry in enumerate(root.findall("atom:entry", NAMESPACES)):
        title = _text(entry.find("atom:title", NAMESPACES))
        link_elem = entry.find("atom:link", NAMESPACES)
        link = link_elem.attrib.get("href", "").strip() if link_elem is not None else ""

        raw_date = _text(entry.find("atom:updated", NAMESPACES))
        if not raw_date:
            raise MissingOrInvalidDateError(
                f"{_describe(title, position)} has no updated timestamp"
            )
        try:
            pub_date = parse_rfc3339(raw_date)
        except ValueError as exc:
            raise MissingOrInvalidDateError(
                f"{_describe(title, position)} has an invalid updated timestamp: {exc}"
            ) from exc

        items.append(
            FeedItem(feed_title=feed_title, title=title, link=link, pub_date=pub_date)
        )
    return items


def parse_feed(payload: bytes, feed_label: str) -> list[FeedItem]:
    """Parse raw feed bytes into a list of FeedItem objects.

    The format is detected from the document root: ``<rss>`` is RSS and
    ``<atom:feed>`` is Atom. Items come back in document order.

    If any item lacks a usable publish date the whole feed is rejected
    rather than returning the remaining items.

    Args:
        payload: Raw response body, decoded according to its XML declaration
        feed_label: Source label, used as the feed title when the feed has none

    Returns:
        List of FeedItem objects

    Raises:
        UnknownFormatError: If the document is neither RSS nor Atom
        MissingOrInvalidDateError: If an item has no parseable publish date
        ParseError: If the payload is not well-formed XML
    """
    try:
        root = ET.fromstring(payload)
    except (ET.ParseError, LookupError) as exc:
        # LookupError: the XML declaration names an unknown encoding
        raise ParseError(f"could not parse XML: {exc}") from exc

    if root.tag == "rss":
        return _parse_rss(root, feed_label)
    if root.tag == f"{{{ATOM_NS}}}feed":
        return _parse_atom(root, feed_label)

    raise UnknownFormatError(f"unrecognized feed format with root <{root.tag}>")
