"""Configuration management for the RSS feed generator."""

import copy
import json
import os
from collections.abc import Mapping
from dataclasses import replace
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from .constants import RSS_CONFIG, RSS_ERRORS
from .exceptions import ConfigurationError
from .models import ContentConfig, FeedConfig, Post, RSSConfig, SiteConfig, ValidationResult

_SITE_FIELDS = {
    "url": "url",
    "title": "title",
    "description": "description",
    "author": "author",
    "language": "language",
}
_FEED_FIELDS = {
    "version": "version",
    "ttl": "ttl",
    "path": "path",
    "maxItems": "max_items",
    "max_items": "max_items",
}
_CONTENT_FIELDS = {
    "maxExcerptLength": "max_excerpt_length",
    "max_excerpt_length": "max_excerpt_length",
    "minExcerptLength": "min_excerpt_length",
    "min_excerpt_length": "min_excerpt_length",
    "defaultCategory": "default_category",
    "default_category": "default_category",
}


def _is_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _is_non_negative_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _is_absolute_http_url(value: str) -> bool:
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def validate_rss_config(config: RSSConfig | Mapping[str, Any] | None) -> ValidationResult:
    """Validate site, feed and content configuration.

    Args:
        config: Typed config or a plain mapping

    Returns:
        ValidationResult with the first problem found
    """
    if not isinstance(config, RSSConfig):
        if config is not None and not isinstance(config, Mapping):
            return ValidationResult(False, RSS_ERRORS["INVALID_SITE_CONFIG"])
        config = RSSConfig.from_dict(config)

    site = config.site
    if site is None:
        return ValidationResult(False, RSS_ERRORS["INVALID_SITE_CONFIG"])

    if not _is_non_empty_string(site.url):
        return ValidationResult(False, RSS_ERRORS["INVALID_SITE_URL"])

    if not _is_absolute_http_url(site.url):
        return ValidationResult(False, f"{RSS_ERRORS['INVALID_SITE_URL']}: {site.url}")

    if not _is_non_empty_string(site.title):
        return ValidationResult(False, RSS_ERRORS["MISSING_SITE_TITLE"])

    if not _is_non_empty_string(site.description):
        return ValidationResult(False, RSS_ERRORS["MISSING_SITE_DESCRIPTION"])

    if not _is_non_empty_string(site.author):
        return ValidationResult(False, RSS_ERRORS["MISSING_SITE_AUTHOR"])

    if not _is_non_empty_string(site.language):
        return ValidationResult(False, RSS_ERRORS["MISSING_SITE_LANGUAGE"])

    feed = config.feed
    if not _is_non_negative_int(feed.ttl):
        return ValidationResult(False, RSS_ERRORS["INVALID_TTL"])

    if not isinstance(feed.path, str) or not feed.path.startswith("/"):
        return ValidationResult(False, RSS_ERRORS["INVALID_FEED_PATH"])

    if feed.max_items is not None and not _is_non_negative_int(feed.max_items):
        return ValidationResult(False, RSS_ERRORS["INVALID_MAX_ITEMS"])

    content = config.content
    if not (
        _is_non_negative_int(content.min_excerpt_length)
        and _is_non_negative_int(content.max_excerpt_length)
        and content.min_excerpt_length <= content.max_excerpt_length
    ):
        return ValidationResult(False, RSS_ERRORS["INVALID_EXCERPT_LENGTHS"])

    return ValidationResult(True)


def _merge_block(block: Any, updates: Any, field_names: dict[str, str]) -> Any:
    if updates is None:
        return block
    if isinstance(updates, (SiteConfig, FeedConfig, ContentConfig)):
        return copy.deepcopy(updates)
    if not isinstance(updates, Mapping):
        raise ConfigurationError(
            f"Configuration block must be a mapping, got {type(updates).__name__}"
        )
    changes = {
        field_names[key]: value for key, value in updates.items() if key in field_names
    }
    return replace(block, **changes)


def merge_rss_config(
    base: RSSConfig, partial: RSSConfig | Mapping[str, Any]
) -> RSSConfig:
    """Merge a partial update into a copy of base, field by field per block.

    The result is not validated; callers decide what to do with it.
    """
    if isinstance(partial, RSSConfig):
        return copy.deepcopy(partial)

    merged = copy.deepcopy(base)
    site_updates = partial.get("site")
    if site_updates is not None:
        if merged.site is None and isinstance(site_updates, Mapping):
            merged.site = RSSConfig.from_dict({"site": site_updates}).site
        else:
            merged.site = _merge_block(merged.site, site_updates, _SITE_FIELDS)
    merged.feed = _merge_block(merged.feed, partial.get("feed"), _FEED_FIELDS)
    merged.content = _merge_block(merged.content, partial.get("content"), _CONTENT_FIELDS)
    return merged


def create_rss_config(site_config: Mapping[str, Any]) -> RSSConfig:
    """Build an RSSConfig from a loose site description with default feed settings.

    Accepts either a nested ``site`` block or flat top-level keys.
    """
    site = site_config.get("site") or {}

    def lookup(key: str, default: str) -> str:
        return site.get(key) or site_config.get(key) or default

    return RSSConfig(
        site=SiteConfig(
            url=lookup("url", ""),
            title=lookup("title", "RSS Feed"),
            description=lookup("description", "RSS feed description"),
            author=lookup("author", "RSS Author"),
            language=lookup("language", RSS_CONFIG["DEFAULT_LANGUAGE"]),
        ),
        feed=FeedConfig(),
        content=ContentConfig(),
    )


def setup_rss_feed(site_config: Mapping[str, Any]) -> RSSConfig:
    """Build and validate an RSSConfig from a site description.

    Raises:
        ConfigurationError: If the resulting configuration is invalid
    """
    rss_config = create_rss_config(site_config)
    validation = validate_rss_config(rss_config)
    if not validation.valid:
        raise ConfigurationError(f"RSS setup failed: {validation.error}")
    return rss_config


class Config:
    """Environment-backed configuration for the deployed feed endpoint."""

    # Default posts file path
    POSTS_FILE = "posts.json"
    PRODUCTION = "production"

    def __init__(self):
        """Initialize configuration from environment variables."""
        self.site_url = os.getenv("SITE_URL", "")
        self.site_title = os.getenv("SITE_TITLE", "")
        self.site_description = os.getenv("SITE_DESCRIPTION", "")
        self.site_author = os.getenv("SITE_AUTHOR", "")
        self.site_language = os.getenv("SITE_LANGUAGE", RSS_CONFIG["DEFAULT_LANGUAGE"])
        self.feed_ttl = self._get_int("FEED_TTL", RSS_CONFIG["TTL"])
        self.feed_path = os.getenv("FEED_PATH", RSS_CONFIG["FEED_PATH"])
        self.feed_max_items = self._get_int("FEED_MAX_ITEMS", RSS_CONFIG["MAX_ITEMS"])
        self.excerpt_max_length = self._get_int(
            "EXCERPT_MAX_LENGTH", RSS_CONFIG["MAX_EXCERPT_LENGTH"]
        )
        self.excerpt_min_length = self._get_int(
            "EXCERPT_MIN_LENGTH", RSS_CONFIG["MIN_EXCERPT_LENGTH"]
        )
        self.default_category = os.getenv(
            "DEFAULT_CATEGORY", RSS_CONFIG["DEFAULT_CATEGORY"]
        )
        self.endpoint_max_items = self._get_int("ENDPOINT_MAX_ITEMS", 20)
        self.posts_file = os.getenv("POSTS_FILE", self.POSTS_FILE)
        self.environment = os.getenv("ENVIRONMENT", "")
        self.aws_region = os.getenv(
            "CURRENT_AWS_REGION", os.getenv("AWS_DEFAULT_REGION", "us-east-1")
        )
        self.metrics_enabled = os.getenv("METRICS_ENABLED", "true").lower() in (
            "1",
            "true",
            "yes",
        )

    @staticmethod
    def _get_int(name: str, default: int) -> int:
        raw = os.getenv(name)
        if raw is None or not raw.strip():
            return default
        try:
            return int(raw)
        except ValueError:
            raise ValueError(f"Invalid integer for {name}: {raw!r}")

    @property
    def is_production_build(self) -> bool:
        """True when the host build mode is production (drafts hidden)."""
        return self.environment.strip().lower() == self.PRODUCTION

    def get_rss_config(self) -> RSSConfig:
        """Get the generator configuration. Validation happens in the generator."""
        return RSSConfig(
            site=SiteConfig(
                url=self.site_url,
                title=self.site_title,
                description=self.site_description,
                author=self.site_author,
                language=self.site_language,
            ),
            feed=FeedConfig(
                ttl=self.feed_ttl,
                path=self.feed_path,
                max_items=self.feed_max_items,
            ),
            content=ContentConfig(
                max_excerpt_length=self.excerpt_max_length,
                min_excerpt_length=self.excerpt_min_length,
                default_category=self.default_category,
            ),
        )

    def get_posts(self) -> list[Post]:
        """Load posts from the content index written by the content loader."""
        posts_file = Path(self.posts_file)
        if not posts_file.exists():
            # Try in Lambda root directory
            posts_file = Path("/var/task") / self.posts_file

        if not posts_file.exists():
            raise FileNotFoundError(f"Posts file not found: {self.posts_file}")

        try:
            with open(posts_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in posts file: {e}")

        raw_posts = data.get("posts", []) if isinstance(data, dict) else data
        if not isinstance(raw_posts, list):
            raise ValueError("Posts file must contain a list of posts")

        return [Post.from_dict(raw) for raw in raw_posts if isinstance(raw, dict)]
