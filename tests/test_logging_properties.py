"""Property-based tests for logging functionality."""

import json
import logging
from io import StringIO
from unittest.mock import Mock, patch

from hypothesis import given, settings
from hypothesis import strategies as st

from syndication.lambda_handler import lambda_handler
from syndication.logging_config import (
    ExecutionLogger,
    StructuredFormatter,
    create_execution_logger,
)
from syndication.models import Post, PostData, RSSConfig, SiteConfig

RSS_CONFIG = RSSConfig(
    site=SiteConfig(
        url="https://test.dev",
        title="Test Blog",
        description="Test blog description",
        author="Test Author",
    )
)

slugs = st.text(alphabet="abcdefghijklmnopqrstuvwxyz-", min_size=3, max_size=20)


def capture_root_logs():
    log_capture = StringIO()
    handler = logging.StreamHandler(log_capture)
    handler.setFormatter(StructuredFormatter())

    root_logger = logging.getLogger()
    saved = (root_logger.level, root_logger.handlers[:])
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.INFO)
    return log_capture, handler, saved


def restore_root_logs(handler, saved):
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.handlers.extend(saved[1])
    root_logger.setLevel(saved[0])
    handler.close()


class TestLoggingProperties:
    """Property-based tests for logging functionality."""

    @settings(max_examples=20, deadline=None)
    @given(st.lists(st.tuples(slugs, st.booleans()), min_size=1, max_size=5))
    def test_complete_logging_property(self, post_specs):
        """
        Property: Complete execution logging

        For any request, the logs record the start, every item outcome, the
        metrics and the end, each as a JSON line.
        """
        posts = [
            Post(
                slug=slug,
                data=PostData(title="Title" if buildable else "  ", date="2024-01-01"),
                body="Body content.",
            )
            for slug, buildable in post_specs
        ]

        log_capture, handler, saved = capture_root_logs()
        try:
            with patch("syndication.lambda_handler.Config") as mock_config_class:
                mock_config = Mock()
                mock_config.get_rss_config.return_value = RSS_CONFIG
                mock_config.get_posts.return_value = posts
                mock_config.endpoint_max_items = 20
                mock_config.is_production_build = False
                mock_config.metrics_enabled = False
                mock_config_class.return_value = mock_config

                result = lambda_handler({"httpMethod": "GET"}, Mock(aws_request_id="req"))

            lines = [line for line in log_capture.getvalue().splitlines() if line]
        finally:
            restore_root_logs(handler, saved)

        assert result["statusCode"] == 200

        entries = [json.loads(line) for line in lines]
        messages = [entry["message"] for entry in entries]

        assert any(m.startswith("Starting") for m in messages)
        assert any(m.startswith("Completed") for m in messages)
        assert "Execution metrics" in messages

        item_entries = [e for e in entries if e["message"].startswith("Item ")]
        assert len(item_entries) == len(posts)
        for entry in item_entries:
            assert entry["post_slug"] in {slug for slug, _ in post_specs}
            assert entry["level"] in ("INFO", "WARNING")

        for entry in entries:
            assert "timestamp" in entry
            assert entry["logger"].startswith("syndication.")

    @given(slugs, st.text(max_size=100))
    def test_skipped_items_log_warning_property(self, slug, reason):
        """
        Property: Skipped items are warnings

        A failed item logs at WARNING level with its slug and reason attached.
        """
        logger = create_execution_logger("feed_generator", "exec-test")

        with patch.object(logger.logger, "log") as mock_log:
            logger.log_item_processing(slug, "skipped", success=False, reason=reason)

        level, message = mock_log.call_args.args
        extra = mock_log.call_args.kwargs["extra"]
        assert level == logging.WARNING
        assert slug in message
        assert extra["post_slug"] == slug
        assert extra["reason"] == reason
        assert extra["execution_id"] == "exec-test"
        assert extra["component"] == "feed_generator"

    @given(st.sampled_from(["_log_with_context", "info", "warning", "error", "debug"]))
    def test_context_methods_documented_property(self, method_name):
        """
        Property: Logging helpers carry docstrings

        Every context-logging method on ExecutionLogger is documented.
        """
        method = getattr(ExecutionLogger, method_name)
        assert method.__doc__ and method.__doc__.strip()
