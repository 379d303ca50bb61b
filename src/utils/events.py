"""
Helpers for reading API Gateway proxy events.
"""

import base64
import binascii
import json
from typing import Any, Dict, Optional

try:  # pragma: no cover
    from utils.errors import AppError, ErrorCode
except ModuleNotFoundError:  # pragma: no cover
    from .errors import AppError, ErrorCode


def get_header(event: Dict[str, Any], name: str) -> Optional[str]:
    """Case-insensitive header lookup."""
    headers = event.get("headers") or {}
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


def get_raw_body(event: Dict[str, Any]) -> bytes:
    """
    Return the request body exactly as the client sent it.

    API Gateway delivers binary payloads base64 encoded; text payloads are
    passed through unchanged and encoded as UTF-8.
    """
    body = event.get("body")
    if body is None:
        return b""
    if event.get("isBase64Encoded"):
        try:
            return base64.b64decode(body, validate=True)
        except (binascii.Error, ValueError):
            raise AppError(ErrorCode.INVALID_INPUT, "Request body is not valid base64")
    if isinstance(body, bytes):
        return body
    return str(body).encode("utf-8")


def parse_json_body(event: Dict[str, Any]) -> Dict[str, Any]:
    """
    Parse the request body as a JSON object.

    An absent or empty body is treated as ``{}``.

    Raises:
        AppError: If the body is not a JSON object
    """
    raw = get_raw_body(event)
    if not raw.strip():
        return {}
    try:
        parsed = json.loads(raw)
    except (ValueError, UnicodeDecodeError):
        raise AppError(ErrorCode.INVALID_INPUT, "Invalid JSON in request body")
    if not isinstance(parsed, dict):
        raise AppError(ErrorCode.INVALID_INPUT, "Invalid JSON in request body")
    return parsed
