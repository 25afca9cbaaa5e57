"""Error hierarchy for SmartBill failure modes.

Every error carries a code, a category and the HTTP status it maps to.
Upstream failures are retryable and their messages stay generic; the
original exception is logged by the caller, never returned.
"""

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    VALIDATION = "validation"
    AUTHORIZATION = "authorization"
    RESOURCE_NOT_FOUND = "resource_not_found"
    UPSTREAM = "upstream"
    INTERNAL = "internal"


class SmartBillError(Exception):
    """Base exception for all SmartBill errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        http_status: int = 500,
        retryable: bool = False,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.http_status = http_status
        self.retryable = retryable
        self.details = details or {}

    def to_response(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "retryable": self.retryable,
            }
        }


class ValidationError(SmartBillError):
    """Required input missing or malformed."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message, "VALIDATION_ERROR", ErrorCategory.VALIDATION, 400)
        self.field = field


class Unauthorized(SmartBillError):
    """Caller is not authenticated or does not own the resource."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, "UNAUTHORIZED", ErrorCategory.AUTHORIZATION, 401)


class NotFound(SmartBillError):
    """Resource does not exist or is no longer reachable.

    Raised identically for unknown, expired and revoked share tokens.
    """

    def __init__(self, resource_type: str = "Resource"):
        super().__init__(
            f"{resource_type} not found",
            "NOT_FOUND",
            ErrorCategory.RESOURCE_NOT_FOUND,
            404,
        )
        self.resource_type = resource_type


class UpstreamServiceError(SmartBillError):
    """Database or third-party API unreachable or erroring."""

    def __init__(self, operation: str):
        super().__init__(
            "The service is temporarily unavailable. Please try again.",
            "UPSTREAM_ERROR",
            ErrorCategory.UPSTREAM,
            503,
            retryable=True,
        )
        self.operation = operation
