"""
Lambda handler for POST /member-info.

Resolves a Memberstack bearer token to the member's email, name and plans.
"""

from typing import Any, Callable, Dict, Optional

# Handle both Lambda (absolute) and unit test (relative) imports
try:  # pragma: no cover
    from handlers.dependencies import build_memberstack_client
    from services.memberstack import MemberstackClient
    from utils.config import get_config
    from utils.decorators import api_handler
    from utils.errors import AppError, ErrorCode
    from utils.events import get_header
    from utils.logging import StructuredLogger, get_correlation_id, get_logger
    from utils.responses import ProxyResponse, error_response, json_response
except ModuleNotFoundError:  # pragma: no cover
    from ..handlers.dependencies import build_memberstack_client
    from ..services.memberstack import MemberstackClient
    from ..utils.config import get_config
    from ..utils.decorators import api_handler
    from ..utils.errors import AppError, ErrorCode
    from ..utils.events import get_header
    from ..utils.logging import StructuredLogger, get_correlation_id, get_logger
    from ..utils.responses import ProxyResponse, error_response, json_response


def get_bearer_token(event: Dict[str, Any]) -> Optional[str]:
    header = get_header(event, "Authorization")
    if not header or not header.startswith("Bearer "):
        return None
    token = header[len("Bearer "):].strip()
    return token or None


def handle_member_info(
    event: Dict[str, Any],
    *,
    memberstack_factory: Callable[[], MemberstackClient],
    logger: Optional[StructuredLogger] = None,
) -> ProxyResponse:
    logger = logger or get_logger(__name__, get_correlation_id(event))

    token = get_bearer_token(event)
    if not token:
        return error_response(401, "Missing or invalid Authorization header")

    try:
        memberstack = memberstack_factory()
    except AppError as e:
        logger.error("Memberstack is not configured", error=e.message)
        return error_response(500, "Server configuration error")

    try:
        member = memberstack.get_member_info(token)
    except AppError as e:
        logger.error("Memberstack API error", error_code=e.error_code.value, error=e.message)
        if e.error_code == ErrorCode.UNAUTHORIZED:
            return error_response(401, "Invalid or expired token")
        return error_response(500, "Failed to fetch member info")

    return json_response(200, member)


@api_handler
def lambda_handler(event: Dict[str, Any], context: Any) -> ProxyResponse:
    """Lambda entry point for POST /member-info."""
    config = get_config()
    return handle_member_info(
        event,
        memberstack_factory=lambda: build_memberstack_client(config),
        logger=get_logger(__name__, get_correlation_id(event)),
    )
