"""
Test data builders for Lambda function tests.

Factory functions for API Gateway events and Shopify payloads with
sensible defaults.
"""

import json
import threading
from typing import Any, Dict, List, Optional

from botocore.exceptions import ClientError

from src.utils.webhook_signature import compute_signature

WEBHOOK_SECRET = "shh"


def make_api_event(
    path: str = "/",
    method: str = "POST",
    body: Any = None,
    headers: Optional[Dict[str, str]] = None,
    raw_body: Optional[str] = None,
) -> Dict[str, Any]:
    """Build an API Gateway REST proxy event.

    Args:
        path: Request path
        method: HTTP method
        body: Object serialized to JSON as the body
        headers: Request headers
        raw_body: Body string used verbatim (takes precedence over body)
    """
    if raw_body is None and body is not None:
        raw_body = json.dumps(body)
    return {
        "httpMethod": method,
        "path": path,
        "headers": headers or {"Content-Type": "application/json"},
        "body": raw_body,
        "isBase64Encoded": False,
        "requestContext": {"requestId": "test-correlation-id"},
    }


def make_shipping_address(**overrides: Any) -> Dict[str, Any]:
    """Checkout shipping address with every required field."""
    address = {
        "firstName": "Ada",
        "lastName": "Lovelace",
        "address1": "12 Analytical Way",
        "city": "Denver",
        "state": "CO",
        "zip": "80202",
        "country": "US",
    }
    address.update(overrides)
    return address


def make_card_line_item(
    image_url: str = "https://bucket.s3.amazonaws.com/cards/img-1.png",
    image_id: str = "img-1",
    quantity: int = 1,
    hidden: bool = True,
) -> Dict[str, Any]:
    prefix = "_" if hidden else ""
    return {
        "id": 9001,
        "quantity": quantity,
        "properties": [
            {"name": f"{prefix}Card Image URL", "value": image_url},
            {"name": f"{prefix}Card Image ID", "value": image_id},
        ],
    }


def make_paid_order(
    line_items: Optional[List[Dict[str, Any]]] = None, with_shipping: bool = True
) -> Dict[str, Any]:
    """Shopify orders/paid webhook payload."""
    order: Dict[str, Any] = {
        "id": 123,
        "order_number": 1001,
        "email": "ada@example.com",
        "line_items": line_items if line_items is not None else [make_card_line_item()],
    }
    if with_shipping:
        order["shipping_address"] = {
            "first_name": "Ada",
            "last_name": "Lovelace",
            "address1": "12 Analytical Way",
            "city": "Denver",
            "province_code": "CO",
            "country_code": "US",
            "zip": "80202",
        }
    return order


def make_webhook_event(
    payload: Any = None,
    raw_body: Optional[str] = None,
    secret: str = WEBHOOK_SECRET,
    signature: Optional[str] = None,
    include_signature: bool = True,
) -> Dict[str, Any]:
    """Signed webhook event; the signature covers the exact body string."""
    if raw_body is None:
        raw_body = json.dumps(payload if payload is not None else make_paid_order())
    headers = {"Content-Type": "application/json"}
    if include_signature:
        headers["X-Shopify-Hmac-Sha256"] = signature or compute_signature(raw_body, secret)
    return make_api_event("/webhooks/shopify/orders-paid", body=None, headers=headers, raw_body=raw_body)


class InMemoryUsageTable:
    """Thread-safe stand-in for the usage table.

    Implements only the update expression and condition used by the
    limiter, applying each update under a lock the way DynamoDB
    serializes writes to a single item.
    """

    def __init__(self) -> None:
        self.items: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def get_item(self, Key: Dict[str, Any], **_: Any) -> Dict[str, Any]:
        with self._lock:
            item = self.items.get(Key["dateKey"])
            return {"Item": dict(item)} if item else {}

    def update_item(self, **kwargs: Any) -> Dict[str, Any]:
        key = kwargs["Key"]["dateKey"]
        names = kwargs["ExpressionAttributeNames"]
        values = kwargs["ExpressionAttributeValues"]
        counter = names["#count"]

        with self._lock:
            item = self.items.setdefault(key, {"dateKey": key})
            current = item.get(counter)
            if "ConditionExpression" in kwargs and current is not None and current >= values[":limit"]:
                raise ClientError(
                    {"Error": {"Code": "ConditionalCheckFailedException", "Message": "The conditional request failed"}},
                    "UpdateItem",
                )
            item[counter] = (current or 0) + values[":inc"]
            item[names["#ttl"]] = values[":ttl"]
            return {"Attributes": {counter: item[counter], names["#ttl"]: item[names["#ttl"]]}}
