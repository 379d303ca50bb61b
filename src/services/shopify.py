"""
Shopify draft orders for AI-generated greeting cards.

Draft orders let the customer pay through Shopify's own checkout; the
card image travels with the line item as hidden properties that the
orders/paid webhook reads back.
"""

from typing import Any, Dict

import requests

try:  # pragma: no cover
    from utils.errors import AppError, ErrorCode
    from utils.logging import get_logger
except ModuleNotFoundError:  # pragma: no cover
    from ..utils.errors import AppError, ErrorCode
    from ..utils.logging import get_logger


API_VERSION = "2024-01"

# Underscore-prefixed properties are hidden from the customer at checkout
CARD_IMAGE_URL_PROPERTY = "_Card Image URL"
CARD_IMAGE_ID_PROPERTY = "_Card Image ID"


def normalize_variant_id(variant_id: str) -> str:
    """Accept ``gid://shopify/ProductVariant/123`` or a bare ``123``."""
    return variant_id.rstrip("/").split("/")[-1]


class ShopifyClient:
    """Minimal Shopify Admin REST client."""

    def __init__(self, store_domain: str, access_token: str, card_variant_id: str) -> None:
        self.store_domain = store_domain
        self.access_token = access_token
        self.card_variant_id = normalize_variant_id(card_variant_id)
        self.logger = get_logger(__name__)

    @property
    def draft_orders_url(self) -> str:
        return f"https://{self.store_domain}/admin/api/{API_VERSION}/draft_orders.json"

    def build_draft_order(
        self, image_id: str, image_url: str, email: str, shipping_address: Dict[str, Any]
    ) -> Dict[str, Any]:
        return {
            "draft_order": {
                "email": email,
                "line_items": [
                    {
                        "variant_id": self.card_variant_id,
                        "quantity": 1,
                        "properties": [
                            {"name": CARD_IMAGE_URL_PROPERTY, "value": image_url},
                            {"name": CARD_IMAGE_ID_PROPERTY, "value": image_id},
                        ],
                    }
                ],
                "shipping_address": {
                    "first_name": shipping_address["firstName"],
                    "last_name": shipping_address["lastName"],
                    "address1": shipping_address["address1"],
                    "address2": shipping_address.get("address2") or "",
                    "city": shipping_address["city"],
                    "province": shipping_address["state"],
                    "country": shipping_address["country"],
                    "zip": shipping_address["zip"],
                },
                "use_customer_default_address": False,
            }
        }

    def create_draft_order(
        self, image_id: str, image_url: str, email: str, shipping_address: Dict[str, Any]
    ) -> Dict[str, str]:
        """
        Create a draft order for one card.

        Returns:
            Dict with orderId and checkoutUrl (the draft order invoice URL)

        Raises:
            AppError: UPSTREAM_ERROR if Shopify is unreachable or rejects the order
        """
        payload = self.build_draft_order(image_id, image_url, email, shipping_address)
        try:
            response = requests.post(
                self.draft_orders_url,
                json=payload,
                headers={"X-Shopify-Access-Token": self.access_token},
            )
        except requests.RequestException as e:
            self.logger.error("Shopify request failed", error=str(e))
            raise AppError(ErrorCode.UPSTREAM_ERROR, f"Failed to connect to Shopify: {e}")

        try:
            data = response.json()
        except ValueError:
            self.logger.error("Failed to parse Shopify response", status_code=response.status_code)
            raise AppError(ErrorCode.UPSTREAM_ERROR, "Failed to parse Shopify API response")

        if not response.ok:
            errors = data.get("errors") if isinstance(data, dict) else None
            self.logger.error("Shopify API error", status_code=response.status_code, errors=errors)
            raise AppError(
                ErrorCode.UPSTREAM_ERROR,
                f"Shopify API error ({response.status_code}): {errors or 'Unknown Shopify API error'}",
                {"statusCode": response.status_code},
            )

        try:
            draft_order = data["draft_order"]
            return {"orderId": str(draft_order["id"]), "checkoutUrl": draft_order["invoice_url"]}
        except (KeyError, TypeError):
            raise AppError(ErrorCode.UPSTREAM_ERROR, "Failed to parse Shopify API response")
