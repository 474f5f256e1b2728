"""Data models for the RSS feed generator."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from .constants import RSS_CONFIG


def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first key present in data (camelCase or snake_case)."""
    for key in keys:
        if key in data:
            return data[key]
    return default


@dataclass
class SiteConfig:
    """Site-level metadata used for the channel."""

    url: str
    title: str
    description: str
    author: str
    language: str = RSS_CONFIG["DEFAULT_LANGUAGE"]


@dataclass
class FeedConfig:
    """Feed-level settings."""

    version: str = RSS_CONFIG["VERSION"]
    ttl: int = RSS_CONFIG["TTL"]  # minutes
    path: str = RSS_CONFIG["FEED_PATH"]
    max_items: int | None = RSS_CONFIG["MAX_ITEMS"]


@dataclass
class ContentConfig:
    """Excerpt and category settings."""

    max_excerpt_length: int = RSS_CONFIG["MAX_EXCERPT_LENGTH"]
    min_excerpt_length: int = RSS_CONFIG["MIN_EXCERPT_LENGTH"]
    default_category: str = RSS_CONFIG["DEFAULT_CATEGORY"]


@dataclass
class RSSConfig:
    """Complete generator configuration."""

    site: SiteConfig | None
    feed: FeedConfig = field(default_factory=FeedConfig)
    content: ContentConfig = field(default_factory=ContentConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "RSSConfig":
        """Build a config from a plain mapping.

        Missing feed/content blocks fall back to defaults. A missing site
        block is kept as None so validation can reject it.
        """
        data = data or {}

        site = None
        site_data = data.get("site")
        if isinstance(site_data, Mapping):
            site = SiteConfig(
                url=site_data.get("url"),
                title=site_data.get("title"),
                description=site_data.get("description"),
                author=site_data.get("author"),
                language=site_data.get("language", RSS_CONFIG["DEFAULT_LANGUAGE"]),
            )

        feed_data = data.get("feed")
        if not isinstance(feed_data, Mapping):
            feed_data = {}
        feed = FeedConfig(
            version=feed_data.get("version", RSS_CONFIG["VERSION"]),
            ttl=feed_data.get("ttl", RSS_CONFIG["TTL"]),
            path=feed_data.get("path", RSS_CONFIG["FEED_PATH"]),
            max_items=_pick(
                feed_data, "maxItems", "max_items", default=RSS_CONFIG["MAX_ITEMS"]
            ),
        )

        content_data = data.get("content")
        if not isinstance(content_data, Mapping):
            content_data = {}
        content = ContentConfig(
            max_excerpt_length=_pick(
                content_data,
                "maxExcerptLength",
                "max_excerpt_length",
                default=RSS_CONFIG["MAX_EXCERPT_LENGTH"],
            ),
            min_excerpt_length=_pick(
                content_data,
                "minExcerptLength",
                "min_excerpt_length",
                default=RSS_CONFIG["MIN_EXCERPT_LENGTH"],
            ),
            default_category=_pick(
                content_data,
                "defaultCategory",
                "default_category",
                default=RSS_CONFIG["DEFAULT_CATEGORY"],
            ),
        )

        return cls(site=site, feed=feed, content=content)


@dataclass
class PostData:
    """Front matter of a content entry."""

    title: str | None = None
    date: datetime | date | str | None = None
    description: str | None = None
    draft: bool = False
    slug: str | None = None  # overrides the entry slug in item URLs


@dataclass
class Post:
    """A content entry supplied by the content loader. Read-only here."""

    slug: str | None
    data: PostData | None
    body: str | None = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Post":
        """Build a Post from the loader's JSON shape, tolerating gaps."""
        data = raw.get("data")
        post_data = None
        if isinstance(data, Mapping):
            post_data = PostData(
                title=data.get("title"),
                date=data.get("date"),
                description=data.get("description"),
                draft=bool(data.get("draft", False)),
                slug=data.get("slug"),
            )
        return cls(slug=raw.get("slug"), data=post_data, body=raw.get("body"))


@dataclass
class RSSItem:
    """One <item> of the feed. All text fields are already XML-escaped."""

    title: str
    description: str
    link: str
    guid: str
    pub_date: str  # RFC 2822
    author: str
    category: str | None = None
    published_at: datetime | None = None  # parsed pub_date, not rendered


@dataclass
class FeedDocument:
    """Channel metadata plus the ordered items."""

    title: str
    description: str
    link: str
    language: str
    managing_editor: str
    web_master: str
    last_build_date: str
    pub_date: str
    ttl: int
    generator: str
    items: list[RSSItem] = field(default_factory=list)


@dataclass
class ValidationResult:
    """Outcome of a config or post validation."""

    valid: bool
    error: str | None = None


@dataclass
class GenerationOptions:
    """Per-call options for feed generation."""

    post_filter: Callable[[Post], bool] | None = None
    max_items: int | None = None
    category: str | None = None
    include_full_content: bool = False
    is_production_build: bool = True


@dataclass
class GenerationResult:
    """Result of a generate_feed call."""

    success: bool
    xml: str | None = None
    error: str | None = None
    item_count: int = 0
    skipped_count: int = 0


@dataclass
class EndpointResponse:
    """HTTP response produced by the endpoint handler."""

    status: int
    headers: dict[str, str]
    body: str
    result: GenerationResult | None = None
