"""
Lambda handler for POST /generate-card.

Generates an AI greeting card image and returns a presigned URL for it.
One unit of the daily generation quota is taken before the model is
called and is not returned if generation fails.
"""

from typing import Any, Dict, Optional

# Handle both Lambda (absolute) and unit test (relative) imports
try:  # pragma: no cover
    from handlers.dependencies import build_image_generator, build_image_store, build_usage_limiter
    from services.image_generator import ImageGenerator
    from services.image_store import ImageStore
    from utils.config import AppConfig, get_config
    from utils.decorators import api_handler
    from utils.errors import AppError, ErrorCode
    from utils.events import parse_json_body
    from utils.logging import StructuredLogger, get_correlation_id, get_logger
    from utils.responses import ProxyResponse, app_error_response, error_response, json_response, rate_limited_response
    from utils.usage_limiter import GENERATION_COUNTER, DailyUsageLimiter
    from utils.validation import require_field, validate_prompt
except ModuleNotFoundError:  # pragma: no cover
    from ..handlers.dependencies import build_image_generator, build_image_store, build_usage_limiter
    from ..services.image_generator import ImageGenerator
    from ..services.image_store import ImageStore
    from ..utils.config import AppConfig, get_config
    from ..utils.decorators import api_handler
    from ..utils.errors import AppError, ErrorCode
    from ..utils.events import parse_json_body
    from ..utils.logging import StructuredLogger, get_correlation_id, get_logger
    from ..utils.responses import ProxyResponse, app_error_response, error_response, json_response, rate_limited_response
    from ..utils.usage_limiter import GENERATION_COUNTER, DailyUsageLimiter
    from ..utils.validation import require_field, validate_prompt


def handle_generate_card(
    event: Dict[str, Any],
    *,
    config: AppConfig,
    limiter: DailyUsageLimiter,
    image_generator: ImageGenerator,
    image_store: ImageStore,
    logger: Optional[StructuredLogger] = None,
) -> ProxyResponse:
    """
    Validate the prompt, take a unit of quota, generate and store the image.

    Returns:
        200 with imageId, imageUrl and expiresAt; 400 for a bad prompt;
        429 when the daily limit is reached or the model is throttled
    """
    logger = logger or get_logger(__name__, get_correlation_id(event))

    try:
        body = parse_json_body(event)
        prompt = validate_prompt(require_field(body, "prompt"))
    except AppError as e:
        return app_error_response(e)

    usage = limiter.check_and_increment(config.max_daily_generations)
    if not usage.allowed:
        logger.info("Daily generation limit reached", limit=usage.limit)
        return rate_limited_response(usage, "generation")

    logger.debug("Usage recorded", current_count=usage.current_count, limit=usage.limit)

    try:
        logger.debug("Generating image", prompt_preview=prompt[:50])
        image_data, content_type = image_generator.generate_image(prompt)
        stored = image_store.upload_and_get_url(image_data, content_type)
    except AppError as e:
        logger.error("Error in generate-card", error_code=e.error_code.value, error=e.message)
        if e.error_code in (ErrorCode.RATE_LIMITED, ErrorCode.INVALID_INPUT):
            return app_error_response(e)
        if e.error_code == ErrorCode.ACCESS_DENIED:
            return error_response(403, "Service configuration error. Please contact support.")
        return error_response(
            500,
            "Image generation failed. Please try again.",
            details=e.message if config.debug_mode else None,
        )

    logger.info("Card generated", image_id=stored["imageId"], usage_count=usage.current_count)
    return json_response(
        200,
        {
            "imageId": stored["imageId"],
            "imageUrl": stored["imageUrl"],
            "expiresAt": stored["expiresAt"],
        },
    )


@api_handler
def lambda_handler(event: Dict[str, Any], context: Any) -> ProxyResponse:
    """Lambda entry point for POST /generate-card."""
    config = get_config()
    logger = get_logger(__name__, get_correlation_id(event))

    return handle_generate_card(
        event,
        config=config,
        limiter=build_usage_limiter(config, GENERATION_COUNTER, logger),
        image_generator=build_image_generator(config),
        image_store=build_image_store(config),
        logger=logger,
    )
