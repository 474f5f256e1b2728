"""XML escaping and RSS 2.0 document serialization."""

import re
from datetime import UTC, date, datetime
from email.utils import format_datetime, parsedate_to_datetime

from dateutil import parser as date_parser

from .constants import (
    RSS_CLOSE,
    RSS_CONFIG,
    RSS_ERRORS,
    RSS_OPEN,
    XML_DECLARATION,
    XML_UNSAFE_PATTERN,
)
from .models import FeedDocument, RSSItem

_XML_UNSAFE_RE = re.compile(XML_UNSAFE_PATTERN)

# Fill components missing from partial date strings. Two defaults with
# different years expose strings that never name a year.
_DEFAULT_DATE = datetime(1970, 1, 1)
_CHECK_DATE = datetime(1971, 1, 1)

# Order matters: "&" first so entities produced by later rules survive intact
_XML_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#39;"),
)


def escape_xml(text: str | None) -> str:
    """Escape special characters for XML output.

    Args:
        text: Text to escape

    Returns:
        XML-safe text with control characters removed
    """
    if not text:
        return ""

    text = str(text)
    for raw, entity in _XML_ESCAPES:
        text = text.replace(raw, entity)

    return _XML_UNSAFE_RE.sub("", text)


def parse_date(value: datetime | date | str | None) -> datetime:
    """Parse a post date into a timezone-aware datetime.

    Naive values are treated as UTC.

    Raises:
        ValueError: If the value is empty, cannot be parsed, or names no year
    """
    if value is None or value == "":
        raise ValueError("empty date")

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        try:
            parsed = date_parser.parse(value, default=_DEFAULT_DATE)
            check = date_parser.parse(value, default=_CHECK_DATE)
        except (ValueError, OverflowError) as e:
            raise ValueError(f"unparseable date {value!r}") from e
        if parsed.year != check.year:
            raise ValueError(f"date without a year {value!r}")
    else:
        raise ValueError(f"unsupported date type {type(value).__name__}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def format_rfc2822(value: datetime | date | str) -> str:
    """Format a date as an RFC 2822 GMT timestamp (e.g. 'Mon, 01 Jan 2024 00:00:00 GMT')."""
    return format_datetime(parse_date(value).astimezone(UTC), usegmt=True)


def get_last_build_date(items: list[RSSItem], fallback: str) -> str:
    """Return the newest item pubDate, or fallback when there are no items."""
    if not items:
        return fallback

    newest = max(
        item.published_at
        if item.published_at is not None
        else parsedate_to_datetime(item.pub_date)
        for item in items
    )
    return format_datetime(newest.astimezone(UTC), usegmt=True)


def _render_item(item: RSSItem) -> str:
    return "\n".join(
        [
            "    <item>",
            f"      <title>{item.title}</title>",
            f"      <description>{item.description}</description>",
            f"      <link>{item.link}</link>",
            f'      <guid isPermaLink="true">{item.guid}</guid>',
            f"      <pubDate>{item.pub_date}</pubDate>",
            f"      <author>{item.author}</author>",
            f"      <category>{item.category or ''}</category>",
            "    </item>",
        ]
    )


def render_feed(document: FeedDocument, self_link: str) -> str:
    """Serialize a feed document to RSS 2.0 XML.

    Text fields of the document and its items must already be escaped.
    Channel elements are emitted in a fixed order, followed by the items in
    the order given.

    Args:
        document: Channel metadata and items
        self_link: Absolute URL of the feed, used for the atom:link element

    Returns:
        XML document string
    """
    channel_elements = "\n    ".join(
        [
            f"<title>{document.title}</title>",
            f"<description>{document.description}</description>",
            f"<link>{document.link}</link>",
            f'<atom:link href="{escape_xml(self_link)}" rel="self" '
            'type="application/rss+xml"/>',
            f"<language>{document.language}</language>",
            f"<managingEditor>{document.managing_editor}</managingEditor>",
            f"<webMaster>{document.web_master}</webMaster>",
            f"<lastBuildDate>{document.last_build_date}</lastBuildDate>",
            f"<pubDate>{document.pub_date}</pubDate>",
            f"<ttl>{document.ttl}</ttl>",
            f"<generator>{document.generator}</generator>",
            f"<docs>{RSS_CONFIG['SPEC_URL']}</docs>",
        ]
    )
    items_xml = "\n".join(_render_item(item) for item in document.items)

    return (
        f"{XML_DECLARATION}\n"
        f"{RSS_OPEN}\n"
        "  <channel>\n"
        f"    {channel_elements}\n"
        "\n"
        f"{items_xml}\n"
        "  </channel>\n"
        f"{RSS_CLOSE}"
    )


def render_error_feed(error: str | None, link: str | None = None) -> str:
    """Build a minimal, well-formed RSS document describing a failure."""
    message = escape_xml(error or RSS_ERRORS["GENERATION_FAILED"])
    return "\n".join(
        [
            XML_DECLARATION,
            '<rss version="2.0">',
            "  <channel>",
            "    <title>RSS Feed Error</title>",
            f"    <description>Error generating RSS feed: {message}</description>",
            f"    <link>{escape_xml(link) or '/'}</link>",
            "  </channel>",
            RSS_CLOSE,
        ]
    )
