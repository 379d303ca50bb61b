"""
Logging utilities for Lambda functions.

Provides structured JSON logging with correlation IDs for tracing requests.
"""

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

_LEVELS = {"DEBUG": 10, "INFO": 20, "WARNING": 30, "ERROR": 40}

# Level for loggers created from now on; set from AppConfig.log_level
_log_level = "INFO"


def set_log_level(level: str) -> None:
    global _log_level
    _log_level = level.upper()


class StructuredLogger:
    """
    JSON logger for Lambda functions with correlation ID support.

    Example:
        logger = StructuredLogger(__name__)
        logger.info("Card generated", image_id="abc-123", usage_count=4)
    """

    def __init__(self, name: str, correlation_id: Optional[str] = None, level: Optional[str] = None) -> None:
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level or _log_level)
        self.correlation_id = correlation_id or str(uuid.uuid4())

    def _log(
        self, level: str, message: str, **kwargs: Any
    ) -> None:
        """Internal method to emit structured JSON logs."""
        if _LEVELS[level] < self.logger.getEffectiveLevel():
            return

        log_entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level,
            "message": message,
            "correlationId": self.correlation_id,
            **kwargs,
        }

        # Remove None values
        log_entry = {k: v for k, v in log_entry.items() if v is not None}

        print(json.dumps(log_entry, default=str))

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info level message."""
        self._log("INFO", message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning level message."""
        self._log("WARNING", message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        """Log error level message."""
        self._log("ERROR", message, **kwargs)

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug level message."""
        self._log("DEBUG", message, **kwargs)


def get_logger(name: str, correlation_id: Optional[str] = None) -> StructuredLogger:
    """Create a StructuredLogger for a module."""
    return StructuredLogger(name, correlation_id)


def get_correlation_id(event: Dict[str, Any]) -> str:
    """
    Extract or generate correlation ID from an API Gateway event.

    Checks for correlation ID in:
    1. event['requestContext']['requestId']
    2. the x-correlation-id header (any case)
    3. Generates new UUID if not found
    """
    request_context = event.get("requestContext") or {}
    if "requestId" in request_context:
        return str(request_context["requestId"])

    headers = event.get("headers") or {}
    for key, value in headers.items():
        if key.lower() == "x-correlation-id" and value:
            return str(value)

    return str(uuid.uuid4())
