"""AWS Lambda entry point serving the RSS feed over API Gateway."""

import os
from datetime import UTC, datetime
from typing import Any

import boto3

from .config import Config
from .constants import ALLOWED_METHODS
from .endpoint import RSSEndpointHandler
from .logging_config import create_execution_logger, setup_structured_logging
from .models import EndpointResponse, GenerationOptions

# Setup structured logging
setup_structured_logging(os.getenv("LOG_LEVEL", "INFO"))

METRICS_NAMESPACE = "RSS-Feed-Generator"


def get_http_method(event: dict[str, Any]) -> str:
    """Extract the HTTP method from a REST (v1) or HTTP API (v2) event."""
    method = event.get("httpMethod")
    if not method:
        http = (event.get("requestContext") or {}).get("http") or {}
        method = http.get("method")
    return (method or "GET").upper()


def to_lambda_response(response: EndpointResponse) -> dict[str, Any]:
    return {
        "statusCode": response.status,
        "headers": response.headers,
        "body": response.body,
    }


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """
    Serve the RSS feed for GET and CORS preflight for OPTIONS.

    Args:
        event: API Gateway proxy event
        context: Lambda context object

    Returns:
        API Gateway proxy response
    """
    execution_id = f"lambda_{datetime.now(UTC).strftime('%Y%m%d_%H%M%S_%f')}"
    main_logger = create_execution_logger("main", execution_id)
    method = get_http_method(event or {})

    main_logger.log_execution_start(
        lambda_request_id=getattr(context, "aws_request_id", "unknown"),
        http_method=method,
    )

    metrics = {
        "posts_received": 0,
        "items_published": 0,
        "items_skipped": 0,
        "errors": [],
    }
    config = None
    handler = None

    try:
        config = Config()
        handler = RSSEndpointHandler(config.get_rss_config(), execution_id=execution_id)

        if method == "OPTIONS":
            main_logger.log_execution_end(success=True, status_code=204)
            return to_lambda_response(handler.handle_options())

        if method != "GET":
            response = handler.create_error_response(
                f"Method {method} not allowed", status=405
            )
            response.headers["Allow"] = ALLOWED_METHODS
            main_logger.warning(f"Rejected {method} request", http_method=method)
            main_logger.log_execution_end(success=False, status_code=405)
            return to_lambda_response(response)

        posts = config.get_posts()
        metrics["posts_received"] = len(posts)
        main_logger.info(f"Loaded {len(posts)} posts", posts_count=len(posts))

        # Build mode is resolved once here and passed down explicitly
        options = GenerationOptions(
            max_items=config.endpoint_max_items,
            is_production_build=config.is_production_build,
        )
        response = handler.handle_request(posts, options)

        if response.result is not None and response.result.success:
            metrics["items_published"] = response.result.item_count
            metrics["items_skipped"] = response.result.skipped_count
        else:
            metrics["errors"].append(f"Feed generation returned {response.status}")

    except Exception as e:
        error_msg = f"Critical error in Lambda handler: {str(e)}"
        main_logger.error(error_msg, reason=str(e))
        metrics["errors"].append(error_msg)

        if handler is None:
            handler = RSSEndpointHandler({}, execution_id=execution_id)
        response = handler.create_error_response(str(e))

    main_logger.log_metrics(metrics)
    if config is not None and config.metrics_enabled:
        send_cloudwatch_metrics(metrics, config.aws_region, execution_id)

    main_logger.log_execution_end(
        success=response.status == 200, status_code=response.status
    )
    return to_lambda_response(response)


def send_cloudwatch_metrics(
    metrics: dict[str, Any], aws_region: str, execution_id: str
) -> None:
    """
    Send custom metrics to CloudWatch.

    Args:
        metrics: Dictionary containing execution metrics
        aws_region: AWS region for CloudWatch client
        execution_id: Execution ID for logging context
    """
    metrics_logger = create_execution_logger("cloudwatch_metrics", execution_id)

    try:
        metrics_logger.info("Sending metrics to CloudWatch", metrics=metrics)
        cloudwatch = boto3.client("cloudwatch", region_name=aws_region)

        total_errors = len(metrics["errors"])
        execution_success = total_errors == 0
        status = "Success" if execution_success else "Failure"
        execution_dimensions = [{"Name": "ExecutionId", "Value": execution_id}]
        status_dimensions = [{"Name": "Status", "Value": status}]

        metric_data = [
            {
                "MetricName": "PostsReceived",
                "Value": metrics["posts_received"],
                "Unit": "Count",
                "Dimensions": execution_dimensions,
            },
            {
                "MetricName": "ItemsPublished",
                "Value": metrics["items_published"],
                "Unit": "Count",
                "Dimensions": execution_dimensions,
            },
            {
                "MetricName": "ItemsSkipped",
                "Value": metrics["items_skipped"],
                "Unit": "Count",
                "Dimensions": execution_dimensions,
            },
            {
                "MetricName": "Errors",
                "Value": total_errors,
                "Unit": "Count",
                "Dimensions": execution_dimensions,
            },
            {
                "MetricName": "GenerationSuccess",
                "Value": 1 if execution_success else 0,
                "Unit": "Count",
                "Dimensions": status_dimensions,
            },
            {
                "MetricName": "GenerationFailure",
                "Value": 0 if execution_success else 1,
                "Unit": "Count",
                "Dimensions": status_dimensions,
            },
            {
                "MetricName": "SkipRate",
                "Value": (
                    metrics["items_skipped"]
                    / max(metrics["items_published"] + metrics["items_skipped"], 1)
                )
                * 100,
                "Unit": "Percent",
                "Dimensions": execution_dimensions,
            },
        ]

        # CloudWatch limit is 20 metrics per call
        batch_size = 20
        for i in range(0, len(metric_data), batch_size):
            batch = metric_data[i : i + batch_size]
            cloudwatch.put_metric_data(Namespace=METRICS_NAMESPACE, MetricData=batch)
            metrics_logger.debug(f"Sent batch of {len(batch)} metrics to CloudWatch")

        metrics_logger.info(
            "Successfully sent metrics to CloudWatch",
            metrics_sent=len(metric_data),
            namespace=METRICS_NAMESPACE,
            execution_success=execution_success,
        )

    except Exception as e:
        metrics_logger.error(f"Failed to send CloudWatch metrics: {e}", reason=str(e))
        # Don't raise - metrics failure shouldn't break the response
