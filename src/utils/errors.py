"""
Error handling utilities for Lambda functions.

Provides typed application errors so handlers can choose an HTTP status from
the error kind rather than from the wording of a message.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """Kinds of failure a handler can report."""

    # Client errors
    INVALID_INPUT = "INVALID_INPUT"
    UNAUTHORIZED = "UNAUTHORIZED"

    # Quota
    RATE_LIMITED = "RATE_LIMITED"

    # Collaborator errors
    ACCESS_DENIED = "ACCESS_DENIED"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"

    # System errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


_STATUS_BY_CODE: Dict[ErrorCode, int] = {
    ErrorCode.INVALID_INPUT: 400,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.ACCESS_DENIED: 403,
    ErrorCode.RATE_LIMITED: 429,
    ErrorCode.UPSTREAM_ERROR: 502,
    ErrorCode.CONFIGURATION_ERROR: 500,
    ErrorCode.INTERNAL_ERROR: 500,
}


class AppError(Exception):
    """
    Application error with error code and message.

    Raised by validators and collaborator adapters, converted to an HTTP
    response at the handler boundary.
    """

    def __init__(self, error_code: ErrorCode, message: str, details: Optional[Dict[str, Any]] = None):
        self.error_code = error_code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    @property
    def status_code(self) -> int:
        return status_for(self.error_code)


def status_for(error_code: ErrorCode) -> int:
    """Return the HTTP status code for an error kind."""
    return _STATUS_BY_CODE.get(error_code, 500)
