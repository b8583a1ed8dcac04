"""
AWS Lambda Handler for the Bridge

Lambda entry point using the Mangum adapter to translate API Gateway events
into ASGI requests for the FastAPI application.
"""

from mangum import Mangum

from upsync.main import app
from upsync.utils.logging_config import get_logger

logger = get_logger(__name__)


# api_gateway_base_path "/" lets Mangum strip stage prefixes itself
handler = Mangum(app, lifespan="off", api_gateway_base_path="/")


def lambda_handler(event, context):
    """
    AWS Lambda handler function with invocation logging.

    Args:
        event: API Gateway event containing HTTP request details
        context: Lambda context with runtime information

    Returns:
        API Gateway response format
    """
    request_context = event.get("requestContext", {})

    logger.info(
        "Lambda invocation started",
        extra={
            "request_id": context.aws_request_id,
            "function_name": context.function_name,
            "remaining_time": context.get_remaining_time_in_millis(),
            "http_method": event.get("httpMethod")
            or request_context.get("http", {}).get("method"),
            "path": event.get("path") or event.get("rawPath"),
        },
    )

    try:
        response = handler(event, context)

        logger.info(
            "Lambda invocation completed",
            extra={
                "request_id": context.aws_request_id,
                "status_code": response.get("statusCode"),
            },
        )

        return response

    except Exception as e:
        logger.error(
            f"Lambda invocation failed: {e}",
            extra={
                "request_id": context.aws_request_id,
                "error": str(e),
                "error_type": type(e).__name__,
            },
        )
        raise


__all__ = ["handler", "lambda_handler"]
