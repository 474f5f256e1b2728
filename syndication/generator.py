"""RSS feed generation: turns posts into an RSS 2.0 document."""

import copy
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from email.utils import format_datetime
from typing import Any

from .config import create_rss_config, merge_rss_config, validate_rss_config
from .constants import RSS_CONFIG, RSS_ERRORS
from .exceptions import ConfigurationError, GenerationError, ItemError
from .excerpt import generate_excerpt, strip_html
from .filters import get_valid_posts, validate_post_data
from .logging_config import create_execution_logger
from .models import (
    FeedDocument,
    GenerationOptions,
    GenerationResult,
    Post,
    RSSConfig,
    RSSItem,
)
from .serializer import (
    escape_xml,
    format_rfc2822,
    get_last_build_date,
    parse_date,
    render_feed,
)


def coerce_post(raw: Any) -> Post | None:
    """Accept Post objects or loader dicts; anything else becomes None."""
    if isinstance(raw, Post):
        return raw
    if isinstance(raw, Mapping):
        return Post.from_dict(raw)
    return None


def _post_sort_key(post: Post | None) -> tuple[bool, float]:
    try:
        return True, parse_date(post.data.date).timestamp()
    except (AttributeError, ValueError, OverflowError):
        return False, 0.0


def sort_posts_by_date(posts: Iterable[Post | None]) -> list[Post | None]:
    """Sort posts newest first. Posts without a usable date go last."""
    return sorted(posts, key=_post_sort_key, reverse=True)


class RSSGenerator:
    """Builds RSS 2.0 feeds from posts using a validated configuration."""

    def __init__(
        self, config: RSSConfig | Mapping[str, Any], execution_id: str | None = None
    ):
        """Validate the configuration and create the generator.

        Args:
            config: Typed config or a plain mapping
            execution_id: Execution ID for logging context

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        self.logger = create_execution_logger("feed_generator", execution_id)

        validation = validate_rss_config(config)
        if not validation.valid:
            self.logger.error(
                f"Invalid RSS configuration: {validation.error}",
                reason=validation.error,
            )
            raise ConfigurationError(validation.error)

        if not isinstance(config, RSSConfig):
            config = RSSConfig.from_dict(config)
        self._config = copy.deepcopy(config)

        self.logger.info(
            "RSSGenerator initialized",
            site_url=self._config.site.url,
            feed_path=self._config.feed.path,
        )

    def get_config(self) -> RSSConfig:
        """Return a copy of the current configuration."""
        return copy.deepcopy(self._config)

    def update_config(self, partial: RSSConfig | Mapping[str, Any]) -> None:
        """Merge and re-validate configuration; keep the old one on failure.

        Raises:
            ConfigurationError: If the merged configuration is invalid
        """
        merged = merge_rss_config(self._config, partial)
        validation = validate_rss_config(merged)
        if not validation.valid:
            self.logger.error(
                f"Rejected configuration update: {validation.error}",
                reason=validation.error,
            )
            raise ConfigurationError(validation.error)

        self._config = merged
        self.logger.info("Configuration updated")

    def resolve_max_items(
        self, options: GenerationOptions, config: RSSConfig | None = None
    ) -> int:
        """Effective item cap: call-site option, then config, then default."""
        config = config or self._config
        if options.max_items is not None:
            max_items = options.max_items
        elif config.feed.max_items is not None:
            max_items = config.feed.max_items
        else:
            max_items = RSS_CONFIG["MAX_ITEMS"]

        if max_items < 0:
            raise GenerationError(f"maxItems must be non-negative, got {max_items}")
        return max_items

    def generate_feed(
        self,
        posts: Iterable[Post | Mapping[str, Any]],
        options: GenerationOptions | None = None,
    ) -> GenerationResult:
        """Generate the complete RSS feed.

        Posts are used in the order given. A post that cannot become an item
        is skipped and counted; only a failure of the batch as a whole yields
        an unsuccessful result.

        Args:
            posts: Posts to publish
            options: Generation options

        Returns:
            GenerationResult with the XML document and item counts
        """
        options = options or GenerationOptions()
        config = self._config
        logger = create_execution_logger("feed_generator", self.logger.execution_id)
        logger.log_execution_start(is_production_build=options.is_production_build)

        try:
            candidates = [coerce_post(post) for post in posts]
            valid_posts = get_valid_posts(
                candidates,
                options.is_production_build,
                options.post_filter,
                logger=create_execution_logger("post_filter", logger.execution_id),
            )

            max_items = self.resolve_max_items(options, config)
            limited_posts = valid_posts[:max_items]

            items: list[RSSItem] = []
            skipped_count = 0

            for post in limited_posts:
                try:
                    item = self._build_item(post, options, config)
                except Exception as e:
                    skipped_count += 1
                    logger.log_item_processing(
                        post.slug, "skipped", success=False, reason=str(e)
                    )
                    continue

                items.append(item)
                logger.log_item_processing(post.slug, "added")

            document = self._build_document(items, config)
            xml = render_feed(document, self._self_link(config))

        except Exception as e:
            error = str(e) or RSS_ERRORS["GENERATION_FAILED"]
            logger.error(f"RSS feed generation failed: {error}", reason=error)
            logger.log_execution_end(success=False)
            return GenerationResult(success=False, error=error)

        metrics = {
            "posts_received": len(candidates),
            "posts_valid": len(valid_posts),
            "items_published": len(items),
            "items_skipped": skipped_count,
        }
        logger.log_metrics(metrics)
        logger.log_execution_end(success=True)

        return GenerationResult(
            success=True,
            xml=xml,
            item_count=len(items),
            skipped_count=skipped_count,
        )

    def _resolve_description(
        self, post: Post, options: GenerationOptions, config: RSSConfig
    ) -> str:
        if options.include_full_content:
            full_content = strip_html(post.body)
            if full_content:
                return full_content

        description = post.data.description
        if isinstance(description, str) and description.strip():
            return description

        excerpt = generate_excerpt(
            post.body,
            config.content.max_excerpt_length,
            config.content.min_excerpt_length,
        )
        if not excerpt.strip():
            raise ItemError(f"{RSS_ERRORS['EMPTY_DESCRIPTION']}: {post.slug}", post.slug)
        return excerpt

    def _build_item(
        self, post: Post, options: GenerationOptions, config: RSSConfig
    ) -> RSSItem:
        validation = validate_post_data(post)
        if not validation.valid:
            raise ItemError(validation.error, post.slug)

        description = self._resolve_description(post, options, config)
        published = parse_date(post.data.date)

        site = config.site
        slug = post.data.slug or post.slug
        post_url = escape_xml(
            f"{site.url.rstrip('/')}{RSS_CONFIG['POSTS_PATH']}/{slug}"
        )

        return RSSItem(
            title=escape_xml(post.data.title),
            description=escape_xml(description),
            link=post_url,
            guid=post_url,
            pub_date=format_rfc2822(published),
            author=escape_xml(site.author),
            category=escape_xml(options.category or config.content.default_category),
            published_at=published,
        )

    def _build_document(self, items: list[RSSItem], config: RSSConfig) -> FeedDocument:
        site, feed = config.site, config.feed
        build_date = format_datetime(datetime.now(UTC), usegmt=True)

        return FeedDocument(
            title=escape_xml(site.title),
            description=escape_xml(site.description),
            link=escape_xml(site.url),
            language=escape_xml(site.language),
            managing_editor=escape_xml(site.author),
            web_master=escape_xml(site.author),
            last_build_date=get_last_build_date(items, build_date),
            pub_date=build_date,
            ttl=feed.ttl,
            generator=RSS_CONFIG["GENERATOR"],
            items=items,
        )

    @staticmethod
    def _self_link(config: RSSConfig) -> str:
        return f"{config.site.url.rstrip('/')}{config.feed.path}"


def generate_rss_feed(
    posts: Iterable[Post | Mapping[str, Any]],
    config: RSSConfig | Mapping[str, Any],
    options: GenerationOptions | None = None,
) -> GenerationResult:
    """Create a generator for config and run it once.

    Raises:
        ConfigurationError: If the configuration is invalid
    """
    return RSSGenerator(config).generate_feed(posts, options)


def quick_generate_rss(
    posts: Iterable[Post | Mapping[str, Any]],
    site_config: Mapping[str, Any],
    options: GenerationOptions | None = None,
) -> str | None:
    """Generate feed XML from a loose site description, or None on failure."""
    logger = create_execution_logger("feed_generator")
    try:
        result = generate_rss_feed(posts, create_rss_config(site_config), options)
    except ConfigurationError as e:
        logger.error(f"Quick RSS generation failed: {e}", reason=str(e))
        return None
    return result.xml if result.success else None


def prepare_posts_for_rss(
    posts: Iterable[Post | Mapping[str, Any]], is_production_build: bool
) -> list[Post]:
    """Return the publishable posts, newest first."""
    valid_posts = get_valid_posts(
        [coerce_post(post) for post in posts], is_production_build
    )
    return sort_posts_by_date(valid_posts)
