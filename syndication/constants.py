"""Constants for RSS feed generation."""

RSS_CONFIG = {
    "VERSION": "2.0",
    "TTL": 60,
    "DEFAULT_CATEGORY": "Blog",
    "SPEC_URL": "https://www.rssboard.org/rss-specification",
    "ATOM_NAMESPACE": "http://www.w3.org/2005/Atom",
    "FEED_PATH": "/rss.xml",
    "POSTS_PATH": "/blog",
    "MAX_EXCERPT_LENGTH": 500,
    "MIN_EXCERPT_LENGTH": 50,
    "MAX_ITEMS": 50,
    "DEFAULT_LANGUAGE": "en-US",
    "GENERATOR": "Syndication RSS Feed Generator",
}

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'
RSS_OPEN = (
    f'<rss version="{RSS_CONFIG["VERSION"]}" '
    f'xmlns:atom="{RSS_CONFIG["ATOM_NAMESPACE"]}">'
)
RSS_CLOSE = "</rss>"

RSS_ERRORS = {
    "INVALID_SITE_CONFIG": "Site configuration is invalid for RSS generation",
    "INVALID_SITE_URL": "Site URL is required and must be a valid URL",
    "MISSING_SITE_TITLE": "Site title is required",
    "MISSING_SITE_DESCRIPTION": "Site description is required",
    "MISSING_SITE_AUTHOR": "Site author is required",
    "MISSING_SITE_LANGUAGE": "Site language is required",
    "INVALID_TTL": "Feed ttl must be a non-negative integer",
    "INVALID_FEED_PATH": "Feed path must start with '/'",
    "INVALID_MAX_ITEMS": "Feed maxItems must be a non-negative integer",
    "INVALID_EXCERPT_LENGTHS": (
        "Excerpt lengths must be non-negative integers with min <= max"
    ),
    "INVALID_POST_DATA": "Post data is invalid",
    "MISSING_TITLE": "Post is missing required title",
    "MISSING_DATE": "Post is missing required date",
    "INVALID_DATE": "Post has invalid date",
    "MISSING_SLUG": "Post has invalid slug",
    "EMPTY_DESCRIPTION": "Post has no description and empty content",
    "GENERATION_FAILED": "RSS feed generation failed",
}

# Characters illegal in XML 1.0 regardless of encoding
XML_UNSAFE_PATTERN = r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]"
HTML_TAG_PATTERN = r"</?[^>]+(>|$)"

RSS_CONTENT_TYPE = "application/rss+xml; charset=utf-8"
SUCCESS_CACHE_CONTROL = "public, max-age=3600"
ERROR_CACHE_CONTROL = "no-cache"
ALLOWED_METHODS = "GET, OPTIONS"
