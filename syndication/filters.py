"""Post validation and filtering for the RSS feed generator."""

from collections.abc import Callable

from .constants import RSS_ERRORS
from .logging_config import ExecutionLogger, create_execution_logger
from .models import Post, ValidationResult
from .serializer import parse_date


def _is_non_empty_string(value) -> bool:
    return isinstance(value, str) and bool(value.strip())


def is_valid_post(post: Post | None) -> bool:
    """Check that a post has the fields every feed item needs.

    Args:
        post: Post to check

    Returns:
        True if slug, title and date are present
    """
    return bool(
        isinstance(post, Post)
        and post.slug
        and post.data
        and post.data.title
        and post.data.date
    )


def should_include_post(post: Post, is_production_build: bool) -> bool:
    """Drafts are hidden in production builds and shown everywhere else."""
    if is_production_build:
        return not post.data.draft
    return True


def validate_post_data(post: Post) -> ValidationResult:
    """Validate a post before building a feed item from it.

    Args:
        post: Post to validate

    Returns:
        ValidationResult whose error names the failing field and the slug
    """
    data = post.data
    if data is None or not _is_non_empty_string(data.title):
        return ValidationResult(False, f"{RSS_ERRORS['MISSING_TITLE']}: {post.slug}")

    if data.date is None or data.date == "":
        return ValidationResult(False, f"{RSS_ERRORS['MISSING_DATE']}: {post.slug}")

    try:
        parse_date(data.date)
    except ValueError:
        return ValidationResult(
            False, f"{RSS_ERRORS['INVALID_DATE']}: {post.slug} - {data.date}"
        )

    if not _is_non_empty_string(post.slug):
        return ValidationResult(False, f"{RSS_ERRORS['MISSING_SLUG']}: {post.slug}")

    return ValidationResult(True)


def get_valid_posts(
    posts: list[Post | None],
    is_production_build: bool,
    post_filter: Callable[[Post], bool] | None = None,
    logger: ExecutionLogger | None = None,
) -> list[Post]:
    """Filter posts down to the ones eligible for the feed.

    Stages run in order: structural validity, environment inclusion, then the
    optional caller predicate. A post failing any stage is dropped; no single
    post can make this raise.

    Args:
        posts: Candidate posts
        is_production_build: Whether drafts must be hidden
        post_filter: Optional caller predicate
        logger: Logger for dropped posts

    Returns:
        Posts that passed every stage, in input order
    """
    logger = logger or create_execution_logger("post_filter")
    valid_posts = []

    for post in posts:
        slug = getattr(post, "slug", None) or "unknown"

        if not is_valid_post(post):
            logger.warning(
                f"Skipping invalid post: {slug}",
                post_slug=slug,
                reason="missing slug, title or date",
            )
            continue

        if not should_include_post(post, is_production_build):
            logger.debug(f"Excluding draft post: {slug}", post_slug=slug)
            continue

        if post_filter is not None:
            try:
                keep = post_filter(post)
            except Exception as e:
                logger.warning(
                    f"Post filter failed for {slug}: {e}",
                    post_slug=slug,
                    reason=str(e),
                )
                continue
            if not keep:
                logger.debug(f"Post filtered out: {slug}", post_slug=slug)
                continue

        valid_posts.append(post)

    return valid_posts
