"""Excerpt generation for feed item descriptions."""

import re

from .constants import HTML_TAG_PATTERN, RSS_CONFIG

_HTML_TAG_RE = re.compile(HTML_TAG_PATTERN)
_WHITESPACE_RE = re.compile(r"\s+")

ELLIPSIS = "..."


def strip_html(content: str | None) -> str:
    """Remove HTML tags and collapse whitespace runs to single spaces.

    Args:
        content: Raw content that may contain HTML

    Returns:
        Plain text, trimmed
    """
    if not content or not isinstance(content, str):
        return ""

    text = _HTML_TAG_RE.sub("", content)
    return _WHITESPACE_RE.sub(" ", text).strip()


def generate_excerpt(
    content: str | None,
    max_length: int = RSS_CONFIG["MAX_EXCERPT_LENGTH"],
    min_length: int = RSS_CONFIG["MIN_EXCERPT_LENGTH"],
) -> str:
    """Generate a plain-text excerpt of at most max_length + 3 characters.

    Text that fits is returned unchanged. Longer text is cut at the last
    space inside the limit when that space lies beyond min_length, otherwise
    at max_length exactly. Truncated output ends with "...".

    Args:
        content: Full content, possibly HTML
        max_length: Maximum length in characters before the ellipsis
        min_length: Shortest acceptable cut when breaking at a word boundary

    Returns:
        Generated excerpt
    """
    clean_content = strip_html(content)

    if len(clean_content) <= max_length:
        return clean_content

    truncated = clean_content[:max_length]
    last_space_index = truncated.rfind(" ")

    if last_space_index > min_length:
        return truncated[:last_space_index] + ELLIPSIS

    return truncated + ELLIPSIS
