"""Exception types for the RSS feed generator."""


class SyndicationError(Exception):
    """Base class for feed generation errors."""


class ConfigurationError(SyndicationError):
    """Raised when site/feed/content configuration is invalid."""


class ItemError(SyndicationError):
    """Raised when a single post cannot be turned into a feed item."""

    def __init__(self, message: str, slug: str | None = None):
        super().__init__(message)
        self.slug = slug


class GenerationError(SyndicationError):
    """Raised when the feed as a whole cannot be assembled."""
