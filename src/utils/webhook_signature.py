"""
Shopify webhook signature verification.

Shopify signs each delivery with a base64 HMAC-SHA256 of the raw request
body. The signature only matches the exact bytes that were sent, so the
body must reach this module before any JSON parsing.
"""

import base64
import hashlib
import hmac
from typing import Optional, Union

try:  # pragma: no cover
    from utils.logging import get_logger
except ModuleNotFoundError:  # pragma: no cover
    from .logging import get_logger

SIGNATURE_HEADER = "X-Shopify-Hmac-Sha256"

Body = Union[bytes, str]


def _to_bytes(value: Body) -> bytes:
    return value if isinstance(value, bytes) else value.encode("utf-8")


def compute_signature(raw_body: Body, secret: str) -> str:
    """Return the base64 HMAC-SHA256 of ``raw_body`` keyed by ``secret``."""
    digest = hmac.new(_to_bytes(secret), _to_bytes(raw_body), hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_webhook_signature(
    raw_body: Optional[Body], provided_signature: Optional[str], secret: Optional[str]
) -> bool:
    """
    Check a webhook signature in constant time.

    Args:
        raw_body: Request body exactly as received
        provided_signature: Base64 signature from the request header
        secret: Shared webhook signing secret

    Returns:
        True only if the signature matches. Never raises.
    """
    if not raw_body or not provided_signature or not secret:
        return False

    try:
        expected = compute_signature(raw_body, secret).encode("ascii")
        # compare_digest returns False on length mismatch without short-circuiting on content
        return hmac.compare_digest(expected, provided_signature.encode("utf-8"))
    except Exception as e:
        get_logger(__name__).warning("Webhook signature verification error", error=str(e))
        return False
