"""
Printify order submission for print-on-demand card fulfillment.

Submission failures are reported in the result rather than raised: the
webhook that calls this must still acknowledge the delivery.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

try:  # pragma: no cover
    from utils.logging import get_logger
except ModuleNotFoundError:  # pragma: no cover
    from ..utils.logging import get_logger


API_BASE_URL = "https://api.printify.com/v1"
STANDARD_SHIPPING = 1


@dataclass
class FulfillmentResult:
    """Outcome of a Printify order submission."""

    success: bool
    printify_order_id: Optional[str] = None
    status: Optional[str] = None
    external_id: Optional[str] = None
    error: Optional[str] = None
    details: Any = None


class PrintifyClient:
    """Submits card orders to a Printify shop."""

    def __init__(
        self,
        api_key: str,
        shop_id: str,
        blueprint_id: int,
        print_provider_id: int,
        variant_id: int,
    ) -> None:
        self.api_key = api_key
        self.shop_id = shop_id
        self.blueprint_id = blueprint_id
        self.print_provider_id = print_provider_id
        self.variant_id = variant_id
        self.logger = get_logger(__name__)

    def build_order(
        self,
        shopify_order_id: Any,
        email: Optional[str],
        card_items: List[Dict[str, Any]],
        shipping_address: Dict[str, Any],
    ) -> Dict[str, Any]:
        line_items = [
            {
                "print_provider_id": self.print_provider_id,
                "blueprint_id": self.blueprint_id,
                "variant_id": self.variant_id,
                "print_areas": {"front": card["imageUrl"]},
                "quantity": card.get("quantity") or 1,
            }
            for card in card_items
        ]
        return {
            "external_id": f"shopify-{shopify_order_id}",
            "label": f"AI Greeting Card - Order {shopify_order_id}",
            "line_items": line_items,
            "shipping_method": STANDARD_SHIPPING,
            "send_shipping_notification": True,
            "address_to": {
                "first_name": shipping_address.get("firstName"),
                "last_name": shipping_address.get("lastName"),
                "email": email,
                "phone": shipping_address.get("phone") or "",
                "country": shipping_address.get("countryCode") or "US",
                "region": shipping_address.get("provinceCode") or "",
                "address1": shipping_address.get("address1"),
                "address2": shipping_address.get("address2") or "",
                "city": shipping_address.get("city"),
                "zip": shipping_address.get("zip"),
            },
        }

    def submit_order(
        self,
        shopify_order_id: Any,
        email: Optional[str],
        card_items: List[Dict[str, Any]],
        shipping_address: Dict[str, Any],
    ) -> FulfillmentResult:
        """
        Submit an order to Printify.

        Args:
            shopify_order_id: Shopify order ID, used for the external ID
            email: Customer email
            card_items: Cards with imageUrl, imageId and quantity
            shipping_address: Normalized shipping address

        Returns:
            FulfillmentResult; ``success`` is False on any failure
        """
        order = self.build_order(shopify_order_id, email, card_items, shipping_address)
        url = f"{API_BASE_URL}/shops/{self.shop_id}/orders.json"

        self.logger.info(
            "Submitting order to Printify",
            shop_id=self.shop_id,
            external_id=order["external_id"],
            line_item_count=len(order["line_items"]),
        )

        try:
            response = requests.post(
                url,
                json=order,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
        except requests.RequestException as e:
            self.logger.error("Printify request failed", error=str(e))
            return FulfillmentResult(success=False, error=str(e) or "Failed to connect to Printify API")

        try:
            data: Any = response.json()
        except ValueError:
            data = response.text

        if response.ok and isinstance(data, dict):
            self.logger.info(
                "Printify order created",
                printify_order_id=data.get("id"),
                status=data.get("status"),
            )
            return FulfillmentResult(
                success=True,
                printify_order_id=data.get("id"),
                status=data.get("status"),
                external_id=order["external_id"],
            )

        self.logger.error("Printify API error", status_code=response.status_code, response=data)
        if isinstance(data, dict):
            error = data.get("error") or data.get("message") or "Unknown Printify error"
            details = data.get("errors")
        else:
            error = f"Printify API error ({response.status_code})"
            details = None
        return FulfillmentResult(success=False, error=str(error), details=details)
