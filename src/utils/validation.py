"""
Input validation utilities.

Validates prompts, emails and shipping addresses. All failures raise
AppError with ErrorCode.INVALID_INPUT.
"""

import re
from typing import Any, Dict

from .errors import AppError, ErrorCode

MAX_PROMPT_LENGTH = 512

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

SHIPPING_ADDRESS_FIELDS = ["firstName", "lastName", "address1", "city", "state", "zip", "country"]


def require_field(body: Dict[str, Any], field: str) -> Any:
    """
    Return a required field from a request body.

    Raises:
        AppError: If the field is missing or empty
    """
    value = body.get(field)
    if value is None or value == "":
        raise AppError(ErrorCode.INVALID_INPUT, f"Missing required field: {field}", {"field": field})
    return value


def validate_prompt(prompt: Any) -> str:
    """
    Validate and trim an image prompt.

    Args:
        prompt: Raw prompt value from the request

    Returns:
        Trimmed prompt

    Raises:
        AppError: If prompt is not a non-empty string of at most 512 characters
    """
    if not isinstance(prompt, str):
        raise AppError(ErrorCode.INVALID_INPUT, "Prompt must be a string")

    trimmed = prompt.strip()
    if not trimmed:
        raise AppError(ErrorCode.INVALID_INPUT, "Prompt cannot be empty")

    if len(trimmed) > MAX_PROMPT_LENGTH:
        raise AppError(
            ErrorCode.INVALID_INPUT,
            f"Prompt exceeds maximum length of {MAX_PROMPT_LENGTH} characters",
        )

    return trimmed


def is_valid_email(email: Any) -> bool:
    """Loose email format check (something@domain.tld)."""
    return isinstance(email, str) and bool(EMAIL_PATTERN.match(email))


def validate_shipping_address(address: Any) -> Dict[str, Any]:
    """
    Validate a checkout shipping address has all required fields.

    Raises:
        AppError: Listing every missing field
    """
    if not isinstance(address, dict):
        raise AppError(ErrorCode.INVALID_INPUT, "Shipping address must be an object")

    missing_fields = [field for field in SHIPPING_ADDRESS_FIELDS if not address.get(field)]
    if missing_fields:
        raise AppError(
            ErrorCode.INVALID_INPUT,
            f"Missing required shipping address fields: {', '.join(missing_fields)}",
            {"missingFields": missing_fields},
        )

    return address
