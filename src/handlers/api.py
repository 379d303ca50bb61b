"""
Single Lambda entry point for the REST API.

API Gateway proxies every route to this function; requests are dispatched
on path to the per-route handlers.
"""

from typing import Any, Callable, Dict, Tuple

# Handle both Lambda (absolute) and unit test (relative) imports
try:  # pragma: no cover
    from handlers import checkout, generate_card, member_info, shopify_webhook, usage_status
    from utils.decorators import api_handler
    from utils.responses import PREFLIGHT_HEADERS, ProxyResponse, error_response, json_response
except ModuleNotFoundError:  # pragma: no cover
    from ..handlers import checkout, generate_card, member_info, shopify_webhook, usage_status
    from ..utils.decorators import api_handler
    from ..utils.responses import PREFLIGHT_HEADERS, ProxyResponse, error_response, json_response


Route = Callable[[Dict[str, Any], Any], ProxyResponse]

ROUTES: Dict[Tuple[str, str], Route] = {
    ("POST", "/generate-card"): generate_card.lambda_handler,
    ("POST", "/checkout"): checkout.lambda_handler,
    ("POST", "/webhooks/shopify/orders-paid"): shopify_webhook.lambda_handler,
    ("POST", "/member-info"): member_info.lambda_handler,
    ("GET", "/usage"): usage_status.lambda_handler,
}


def normalize_path(path: str) -> str:
    return "/" + path.strip("/")


@api_handler
def lambda_handler(event: Dict[str, Any], context: Any) -> ProxyResponse:
    """Route an API Gateway proxy event."""
    method = str(event.get("httpMethod") or "GET").upper()
    path = normalize_path(str(event.get("path") or "/"))

    if method == "OPTIONS":
        return json_response(200, {}, headers=PREFLIGHT_HEADERS)

    route = ROUTES.get((method, path))
    if route is None:
        if any(route_path == path for _, route_path in ROUTES):
            return error_response(405, f"Method {method} not allowed on {path}")
        return error_response(404, f"No route for {method} {path}")

    return route(event, context)
