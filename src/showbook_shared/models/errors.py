"""Standard error codes for the booking API.

Every failure a handler can surface is one of these codes. The HTTP layer
maps codes to status codes; services only raise BookingError.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class ErrorCode(str, Enum):
    """Error taxonomy shared by all handlers."""

    VALIDATION_ERROR = "ERR_VALIDATION"
    NOT_FOUND = "ERR_NOT_FOUND"
    CONFIGURATION_ERROR = "ERR_CONFIGURATION"
    UPSTREAM_ERROR = "ERR_UPSTREAM"
    INVALID_WEBHOOK_SIGNATURE = "ERR_WEBHOOK_SIGNATURE"
    METHOD_NOT_ALLOWED = "ERR_METHOD_NOT_ALLOWED"
    INTERNAL_ERROR = "ERR_INTERNAL"


# Human-readable error messages
ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.VALIDATION_ERROR: "Request validation failed",
    ErrorCode.NOT_FOUND: "Booking not found",
    ErrorCode.CONFIGURATION_ERROR: "Service is not configured",
    ErrorCode.UPSTREAM_ERROR: "An upstream service call failed",
    ErrorCode.INVALID_WEBHOOK_SIGNATURE: "Invalid webhook signature",
    ErrorCode.METHOD_NOT_ALLOWED: "Method not allowed",
    ErrorCode.INTERNAL_ERROR: "An unexpected error occurred",
}

# Recovery suggestions for API clients
ERROR_RECOVERY: dict[ErrorCode, str] = {
    ErrorCode.VALIDATION_ERROR: "Check the request fields and try again",
    ErrorCode.NOT_FOUND: "Verify the booking ID",
    ErrorCode.CONFIGURATION_ERROR: "Contact support to enable this feature",
    ErrorCode.UPSTREAM_ERROR: "Try again later or contact support",
    ErrorCode.INVALID_WEBHOOK_SIGNATURE: "Verify webhook secret configuration",
    ErrorCode.METHOD_NOT_ALLOWED: "Use one of the methods listed for this endpoint",
    ErrorCode.INTERNAL_ERROR: "Please try again later or contact support",
}


class ErrorResponse(BaseModel):
    """JSON body returned for every failed request."""

    model_config = ConfigDict(strict=True)

    success: bool = False
    error_code: ErrorCode
    error: str
    recovery: str
    details: Optional[dict[str, Any]] = None

    @classmethod
    def from_code(
        cls,
        code: ErrorCode,
        details: Optional[dict[str, Any]] = None,
        message: Optional[str] = None,
    ) -> "ErrorResponse":
        """Create an ErrorResponse from an error code.

        Args:
            code: The error code
            details: Optional additional context about the error
            message: Overrides the default message for the code

        Returns:
            An ErrorResponse with the message and recovery hint for the code.
        """
        return cls(
            error_code=code,
            error=message or ERROR_MESSAGES[code],
            recovery=ERROR_RECOVERY[code],
            details=details,
        )


class BookingError(Exception):
    """Exception raised by booking operations.

    Caught by the API exception handlers and converted to an ErrorResponse.
    """

    def __init__(
        self,
        code: ErrorCode,
        details: Optional[dict[str, Any]] = None,
        message: Optional[str] = None,
    ):
        self.code = code
        self.message = message or ERROR_MESSAGES[code]
        self.recovery = ERROR_RECOVERY[code]
        self.details = details
        super().__init__(self.message)

    def to_error_response(self) -> ErrorResponse:
        """Convert this exception to an ErrorResponse body."""
        return ErrorResponse.from_code(self.code, self.details, self.message)
