"""
Lambda handler for POST /checkout.

Creates a Shopify draft order for a generated card and returns the
Shopify checkout URL. The daily order count is checked before the order
is created and only incremented once Shopify accepts it.
"""

from typing import Any, Dict, Optional

# Handle both Lambda (absolute) and unit test (relative) imports
try:  # pragma: no cover
    from handlers.dependencies import build_shopify_client, build_usage_limiter
    from services.image_store import card_image_key
    from services.shopify import ShopifyClient
    from utils.config import AppConfig, get_config
    from utils.decorators import api_handler
    from utils.errors import AppError, ErrorCode
    from utils.events import parse_json_body
    from utils.logging import StructuredLogger, get_correlation_id, get_logger
    from utils.responses import ProxyResponse, app_error_response, error_response, json_response, rate_limited_response
    from utils.usage_limiter import ORDER_COUNTER, DailyUsageLimiter
    from utils.validation import is_valid_email, require_field, validate_shipping_address
except ModuleNotFoundError:  # pragma: no cover
    from ..handlers.dependencies import build_shopify_client, build_usage_limiter
    from ..services.image_store import card_image_key
    from ..services.shopify import ShopifyClient
    from ..utils.config import AppConfig, get_config
    from ..utils.decorators import api_handler
    from ..utils.errors import AppError, ErrorCode
    from ..utils.events import parse_json_body
    from ..utils.logging import StructuredLogger, get_correlation_id, get_logger
    from ..utils.responses import ProxyResponse, app_error_response, error_response, json_response, rate_limited_response
    from ..utils.usage_limiter import ORDER_COUNTER, DailyUsageLimiter
    from ..utils.validation import is_valid_email, require_field, validate_shipping_address


def validate_checkout_request(body: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate a checkout request body.

    Returns:
        Dict with imageId, imageUrl (may be None), email and shippingAddress

    Raises:
        AppError: INVALID_INPUT for the first problem found
    """
    image_id = require_field(body, "imageId")
    email = require_field(body, "email")
    if not is_valid_email(email):
        raise AppError(ErrorCode.INVALID_INPUT, "Invalid email format")
    shipping_address = validate_shipping_address(require_field(body, "shippingAddress"))

    return {
        "imageId": str(image_id),
        "imageUrl": body.get("imageUrl") or None,
        "email": email,
        "shippingAddress": shipping_address,
    }


def default_image_url(config: AppConfig, image_id: str) -> str:
    """Public S3 URL for a stored card image."""
    return f"https://{config.image_bucket_name}.s3.{config.aws_region}.amazonaws.com/{card_image_key(image_id)}"


def handle_checkout(
    event: Dict[str, Any],
    *,
    config: AppConfig,
    limiter: DailyUsageLimiter,
    shopify: ShopifyClient,
    logger: Optional[StructuredLogger] = None,
) -> ProxyResponse:
    """
    Validate the order, check the daily order limit, create the draft order.

    Returns:
        200 with orderId and checkoutUrl; 400 for invalid input; 429 when the
        daily order limit is reached; 502 when Shopify rejects the order
    """
    logger = logger or get_logger(__name__, get_correlation_id(event))

    try:
        order = validate_checkout_request(parse_json_body(event))
    except AppError as e:
        return app_error_response(e)

    usage = limiter.check_limit(config.max_daily_orders)
    if not usage.allowed:
        logger.info("Daily order limit reached", current_count=usage.current_count, limit=usage.limit)
        return rate_limited_response(usage, "order")

    image_url = order["imageUrl"] or default_image_url(config, order["imageId"])

    try:
        draft_order = shopify.create_draft_order(
            image_id=order["imageId"],
            image_url=image_url,
            email=order["email"],
            shipping_address=order["shippingAddress"],
        )
    except AppError as e:
        logger.error("Checkout error", error_code=e.error_code.value, error=e.message)
        if e.error_code == ErrorCode.UPSTREAM_ERROR:
            return error_response(502, f"Failed to create order: {e.message}")
        if e.error_code == ErrorCode.CONFIGURATION_ERROR:
            return error_response(500, "Server configuration error. Please contact support.")
        return error_response(500, "Failed to process checkout. Please try again.")

    limiter.increment()

    logger.info("Draft order created", order_id=draft_order["orderId"], image_id=order["imageId"])
    return json_response(200, {"orderId": draft_order["orderId"], "checkoutUrl": draft_order["checkoutUrl"]})


@api_handler
def lambda_handler(event: Dict[str, Any], context: Any) -> ProxyResponse:
    """Lambda entry point for POST /checkout."""
    config = get_config()
    logger = get_logger(__name__, get_correlation_id(event))

    try:
        shopify = build_shopify_client(config)
    except AppError as e:
        logger.error("Checkout is not configured", error=e.message)
        return error_response(500, "Server configuration error. Please contact support.")

    return handle_checkout(
        event,
        config=config,
        limiter=build_usage_limiter(config, ORDER_COUNTER, logger),
        shopify=shopify,
        logger=logger,
    )
