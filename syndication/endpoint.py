"""HTTP endpoint handling for the RSS feed."""

import copy
from collections.abc import Iterable, Mapping
from typing import Any

from .config import merge_rss_config, validate_rss_config
from .constants import (
    ALLOWED_METHODS,
    ERROR_CACHE_CONTROL,
    RSS_CONTENT_TYPE,
    RSS_ERRORS,
    SUCCESS_CACHE_CONTROL,
)
from .exceptions import ConfigurationError
from .generator import RSSGenerator, coerce_post, sort_posts_by_date
from .logging_config import create_execution_logger
from .models import EndpointResponse, GenerationOptions, Post, RSSConfig
from .serializer import render_error_feed


def success_headers() -> dict[str, str]:
    return {
        "Content-Type": RSS_CONTENT_TYPE,
        "Cache-Control": SUCCESS_CACHE_CONTROL,
        "X-Content-Type-Options": "nosniff",
    }


def error_headers() -> dict[str, str]:
    return {
        "Content-Type": RSS_CONTENT_TYPE,
        "Cache-Control": ERROR_CACHE_CONTROL,
    }


def preflight_headers() -> dict[str, str]:
    return {
        **success_headers(),
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Methods": ALLOWED_METHODS,
        "Access-Control-Allow-Headers": "Content-Type",
    }


class RSSEndpointHandler:
    """Maps feed generation onto HTTP status, headers and body."""

    def __init__(
        self, config: RSSConfig | Mapping[str, Any], execution_id: str | None = None
    ):
        """Initialize the handler.

        The configuration is validated per request, so an invalid one turns
        into a 500 response instead of an exception.
        """
        self.config = config
        self.execution_id = execution_id
        self.logger = create_execution_logger("endpoint", execution_id)

    def handle_request(
        self,
        posts: Iterable[Post | Mapping[str, Any]],
        options: GenerationOptions | None = None,
    ) -> EndpointResponse:
        """Handle a GET for the feed.

        Posts are sorted newest first here; the generator keeps the order it
        receives.

        Args:
            posts: Posts supplied by the content loader
            options: Generation options

        Returns:
            EndpointResponse with the feed or a well-formed error feed
        """
        try:
            sorted_posts = sort_posts_by_date(coerce_post(post) for post in posts)

            generator = RSSGenerator(self.config, execution_id=self.execution_id)
            result = generator.generate_feed(sorted_posts, options)

            if not result.success:
                self.logger.error(
                    f"RSS generation failed: {result.error}", reason=result.error
                )
                response = self.create_error_response(
                    result.error or RSS_ERRORS["GENERATION_FAILED"]
                )
                response.result = result
                return response

            self.logger.info(
                "RSS feed served",
                item_count=result.item_count,
                skipped_count=result.skipped_count,
            )
            response = self.create_success_response(result.xml)
            response.result = result
            return response

        except Exception as e:
            self.logger.error(f"RSS endpoint error: {e}", reason=str(e))
            return self.create_error_response(str(e) or "Unknown error")

    def handle_options(self) -> EndpointResponse:
        """Answer a CORS preflight request."""
        return EndpointResponse(status=204, headers=preflight_headers(), body="")

    def create_success_response(self, xml: str) -> EndpointResponse:
        return EndpointResponse(status=200, headers=success_headers(), body=xml)

    def create_error_response(self, error: str, status: int = 500) -> EndpointResponse:
        """Build an error response whose body is still a parseable RSS document."""
        return EndpointResponse(
            status=status,
            headers=error_headers(),
            body=render_error_feed(error, self._site_url()),
        )

    def update_config(self, partial: RSSConfig | Mapping[str, Any]) -> None:
        """Merge a partial configuration; keep the old one if the result is invalid.

        Raises:
            ConfigurationError: If the merged configuration is invalid
        """
        base = self.config
        if not isinstance(base, RSSConfig):
            base = RSSConfig.from_dict(base)

        merged = merge_rss_config(base, partial)
        validation = validate_rss_config(merged)
        if not validation.valid:
            raise ConfigurationError(validation.error)
        self.config = merged

    def get_config(self) -> RSSConfig | Mapping[str, Any]:
        return copy.deepcopy(self.config)

    def _site_url(self) -> str | None:
        config = self.config
        if isinstance(config, Mapping):
            config = RSSConfig.from_dict(config)
        if isinstance(config, RSSConfig) and config.site is not None:
            url = config.site.url
            if isinstance(url, str) and url:
                return url
        return None


def handle_rss_request(
    posts: Iterable[Post | Mapping[str, Any]],
    config: RSSConfig | Mapping[str, Any],
    options: GenerationOptions | None = None,
) -> EndpointResponse:
    """Convenience wrapper: build a handler and serve one request."""
    return RSSEndpointHandler(config).handle_request(posts, options)
