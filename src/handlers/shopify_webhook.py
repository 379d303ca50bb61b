"""
Lambda handler for the Shopify orders/paid webhook.

Verifies the delivery signature, picks out the card line items and
submits them to Printify for fulfillment.

Once a delivery is authenticated and parsed it is always acknowledged
with a 200, even when there is nothing to fulfill or Printify fails.
"""

import json
from typing import Any, Callable, Dict, List, Optional

# Handle both Lambda (absolute) and unit test (relative) imports
try:  # pragma: no cover
    from handlers.dependencies import build_printify_client
    from services.printify import FulfillmentResult, PrintifyClient
    from utils.config import get_config
    from utils.decorators import api_handler
    from utils.events import get_header, get_raw_body
    from utils.logging import StructuredLogger, get_correlation_id, get_logger
    from utils.responses import ProxyResponse, error_response, json_response
    from utils.webhook_signature import SIGNATURE_HEADER, verify_webhook_signature
except ModuleNotFoundError:  # pragma: no cover
    from ..handlers.dependencies import build_printify_client
    from ..services.printify import FulfillmentResult, PrintifyClient
    from ..utils.config import get_config
    from ..utils.decorators import api_handler
    from ..utils.events import get_header, get_raw_body
    from ..utils.logging import StructuredLogger, get_correlation_id, get_logger
    from ..utils.responses import ProxyResponse, error_response, json_response
    from ..utils.webhook_signature import SIGNATURE_HEADER, verify_webhook_signature


CARD_IMAGE_URL_NAMES = {"card image url", "_card image url", "_card_image_url"}
CARD_IMAGE_ID_NAMES = {"card image id", "_card image id", "_card_image_id"}

MANUAL_INTERVENTION_MESSAGE = "Order received but Printify submission failed - requires manual intervention"


def _find_property(properties: List[Dict[str, Any]], names: set) -> Optional[Any]:
    for prop in properties:
        if isinstance(prop, dict) and str(prop.get("name", "")).lower() in names:
            return prop.get("value")
    return None


def extract_card_item(line_item: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Return the card image details carried by a line item, if any.

    A card line item has a ``Card Image URL`` property; ``Card Image ID`` is
    optional. Underscore-prefixed names are hidden from the customer.
    """
    properties = line_item.get("properties")
    if not isinstance(properties, list):
        return None

    image_url = _find_property(properties, CARD_IMAGE_URL_NAMES)
    if not image_url:
        return None

    return {
        "imageUrl": image_url,
        "imageId": _find_property(properties, CARD_IMAGE_ID_NAMES),
        "lineItemId": line_item.get("id"),
        "quantity": line_item.get("quantity"),
    }


def extract_card_items(order: Dict[str, Any]) -> List[Dict[str, Any]]:
    line_items = order.get("line_items")
    if not isinstance(line_items, list):
        return []
    items = [extract_card_item(li) for li in line_items if isinstance(li, dict)]
    return [item for item in items if item]


def extract_shipping_address(order: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    address = order.get("shipping_address")
    if not isinstance(address, dict):
        return None
    return {
        "firstName": address.get("first_name"),
        "lastName": address.get("last_name"),
        "address1": address.get("address1"),
        "address2": address.get("address2") or "",
        "city": address.get("city"),
        "provinceCode": address.get("province_code"),
        "countryCode": address.get("country_code"),
        "zip": address.get("zip"),
        "phone": address.get("phone") or "",
    }


def handle_shopify_webhook(
    event: Dict[str, Any],
    *,
    webhook_secret: Optional[str],
    printify_factory: Callable[[], PrintifyClient],
    logger: Optional[StructuredLogger] = None,
) -> ProxyResponse:
    """
    Authenticate, parse and fulfill an orders/paid delivery.

    Args:
        event: API Gateway proxy event; the body must be untouched
        webhook_secret: Shopify webhook signing secret
        printify_factory: Builds the Printify client once there is work to do
        logger: Request logger

    Returns:
        401 for a missing or bad signature, 400 for an unreadable payload,
        otherwise 200
    """
    logger = logger or get_logger(__name__, get_correlation_id(event))

    if not webhook_secret:
        logger.error("SHOPIFY_WEBHOOK_SECRET is not configured")
        return error_response(500, "Server configuration error")

    signature = get_header(event, SIGNATURE_HEADER)
    if not signature:
        logger.warning("Webhook received without HMAC header", securityEvent=True)
        return error_response(401, "Missing webhook signature")

    raw_body = get_raw_body(event)
    if not verify_webhook_signature(raw_body, signature, webhook_secret):
        logger.warning("Invalid webhook signature", securityEvent=True, body_length=len(raw_body))
        return error_response(401, "Invalid webhook signature")

    try:
        order = json.loads(raw_body)
    except (ValueError, UnicodeDecodeError) as e:
        logger.error("Failed to parse webhook payload", error=str(e))
        return error_response(400, "Invalid JSON payload")
    if not isinstance(order, dict):
        return error_response(400, "Invalid JSON payload")

    order_id = order.get("id")
    line_items = order.get("line_items")
    card_items = extract_card_items(order)
    logger.info(
        "Received orders/paid webhook",
        order_id=order_id,
        order_number=order.get("order_number"),
        line_item_count=len(line_items) if isinstance(line_items, list) else 0,
        card_count=len(card_items),
    )

    if not card_items:
        return json_response(200, {"received": True, "orderId": order_id, "message": "No card items to fulfill"})

    shipping_address = extract_shipping_address(order)
    if not shipping_address:
        logger.error("Order missing shipping address", order_id=order_id)
        return error_response(400, "Order missing shipping address")

    try:
        result = printify_factory().submit_order(
            shopify_order_id=order_id,
            email=order.get("email"),
            card_items=card_items,
            shipping_address=shipping_address,
        )
    except Exception as e:
        result = FulfillmentResult(success=False, error=getattr(e, "message", None) or str(e))

    if not result.success:
        logger.error(
            "Printify order submission failed",
            order_id=order_id,
            error=result.error,
            details=result.details,
        )
        return json_response(
            200,
            {
                "received": True,
                "orderId": order_id,
                "cardsToFulfill": len(card_items),
                "printifyError": result.error,
                "message": MANUAL_INTERVENTION_MESSAGE,
            },
        )

    logger.info(
        "Printify order submitted",
        order_id=order_id,
        printify_order_id=result.printify_order_id,
        status=result.status,
    )
    return json_response(
        200,
        {
            "received": True,
            "orderId": order_id,
            "cardsToFulfill": len(card_items),
            "printifyOrderId": result.printify_order_id,
            "printifyStatus": result.status,
        },
    )


@api_handler
def lambda_handler(event: Dict[str, Any], context: Any) -> ProxyResponse:
    """Lambda entry point for POST /webhooks/shopify/orders-paid."""
    config = get_config()
    return handle_shopify_webhook(
        event,
        webhook_secret=config.shopify_webhook_secret,
        printify_factory=lambda: build_printify_client(config),
        logger=get_logger(__name__, get_correlation_id(event)),
    )
