"""
Handler decorator: the outermost boundary between API Gateway and our code.
"""

import functools
from typing import Any, Callable, Dict

try:  # pragma: no cover
    from utils.errors import AppError, ErrorCode
    from utils.logging import StructuredLogger, get_correlation_id, get_logger
    from utils.responses import ProxyResponse, app_error_response, error_response
except ModuleNotFoundError:  # pragma: no cover
    from .errors import AppError, ErrorCode
    from .logging import StructuredLogger, get_correlation_id, get_logger
    from .responses import ProxyResponse, app_error_response, error_response


def api_handler(func: Callable[[Dict[str, Any], Any], ProxyResponse]) -> Callable[[Dict[str, Any], Any], ProxyResponse]:
    """
    Decorator for API Gateway Lambda handlers.

    Guarantees a structured JSON response: AppErrors that escape the
    handler are mapped by error kind, anything else becomes a 500.
    """

    @functools.wraps(func)
    def wrapper(event: Dict[str, Any], context: Any) -> ProxyResponse:
        event = event or {}

        # Created after the handler runs, since get_config() sets the log level.
        def logger() -> StructuredLogger:
            return get_logger(func.__module__, get_correlation_id(event))

        try:
            return func(event, context)
        except AppError as e:
            logger().warning(
                "Request failed",
                handler=func.__name__,
                error_code=e.error_code.value,
                error=e.message,
            )
            if e.error_code == ErrorCode.CONFIGURATION_ERROR:
                return error_response(500, "Server configuration error")
            return app_error_response(e)
        except Exception as e:
            logger().error(
                "Unhandled error",
                handler=func.__name__,
                error=str(e),
                error_type=type(e).__name__,
                request_id=getattr(context, "aws_request_id", None),
            )
            return error_response(500, "Internal server error")

    return wrapper
