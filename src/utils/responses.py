"""
API Gateway response builders for Lambda proxy integrations.

Every response carries a JSON body and the CORS headers the browser
front end needs.
"""

import json
from typing import Any, Dict, Optional, TypedDict

try:  # pragma: no cover
    from utils.errors import AppError
    from utils.usage_limiter import UsageDecision
except ModuleNotFoundError:  # pragma: no cover
    from .errors import AppError
    from .usage_limiter import UsageDecision


CORS_HEADERS: Dict[str, str] = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
}

PREFLIGHT_HEADERS: Dict[str, str] = {
    **CORS_HEADERS,
    "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type,Authorization,X-Correlation-Id",
}


class ProxyResponse(TypedDict):
    """API Gateway proxy integration response."""

    statusCode: int
    headers: Dict[str, str]
    body: str


def json_response(
    status_code: int, body: Dict[str, Any], headers: Optional[Dict[str, str]] = None
) -> ProxyResponse:
    """
    Build a proxy response with a JSON body.

    Args:
        status_code: HTTP status code
        body: JSON-serializable response body
        headers: Headers to use instead of the default CORS headers

    Returns:
        ProxyResponse dict
    """
    # Drop None values so optional fields (debug details) stay out of the body
    payload = {k: v for k, v in body.items() if v is not None}
    return ProxyResponse(
        statusCode=status_code,
        headers=dict(headers or CORS_HEADERS),
        body=json.dumps(payload, default=str),
    )


def error_response(status_code: int, message: str, **extra: Any) -> ProxyResponse:
    """Build an ``{error: message}`` response."""
    return json_response(status_code, {"error": message, **extra})


def app_error_response(error: AppError, message: Optional[str] = None) -> ProxyResponse:
    """Build an error response whose status comes from the error kind."""
    return error_response(error.status_code, message or error.message)


def rate_limited_response(decision: UsageDecision, noun: str) -> ProxyResponse:
    """Build the 429 response for an exhausted daily quota."""
    return error_response(
        429,
        f"Daily {noun} limit reached ({decision.limit}/day). Try again tomorrow.",
        currentCount=decision.current_count,
        limit=decision.limit,
    )
