"""
Lambda handler for GET /usage.

Read-only view of today's generation quota so the front end can show
how many cards are left before the user submits a prompt.
"""

from typing import Any, Dict

# Handle both Lambda (absolute) and unit test (relative) imports
try:  # pragma: no cover
    from handlers.dependencies import build_usage_limiter
    from utils.config import get_config
    from utils.decorators import api_handler
    from utils.logging import get_correlation_id, get_logger
    from utils.responses import ProxyResponse, json_response, rate_limited_response
    from utils.usage_limiter import GENERATION_COUNTER, DailyUsageLimiter
except ModuleNotFoundError:  # pragma: no cover
    from ..handlers.dependencies import build_usage_limiter
    from ..utils.config import get_config
    from ..utils.decorators import api_handler
    from ..utils.logging import get_correlation_id, get_logger
    from ..utils.responses import ProxyResponse, json_response, rate_limited_response
    from ..utils.usage_limiter import GENERATION_COUNTER, DailyUsageLimiter


def handle_usage_status(limiter: DailyUsageLimiter, limit: int) -> ProxyResponse:
    """Return 200 with the current usage, or 429 once the limit is reached."""
    usage = limiter.check_limit(limit)
    if not usage.allowed:
        return rate_limited_response(usage, "generation")
    return json_response(200, usage.to_dict())


@api_handler
def lambda_handler(event: Dict[str, Any], context: Any) -> ProxyResponse:
    """Lambda entry point for GET /usage."""
    config = get_config()
    logger = get_logger(__name__, get_correlation_id(event))
    limiter = build_usage_limiter(config, GENERATION_COUNTER, logger)
    return handle_usage_status(limiter, config.max_daily_generations)
