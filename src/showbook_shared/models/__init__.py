"""Pydantic models for booking data entities."""

from .booking import Booking, BookingFilters, BookingSubmission, StatusUpdate
from .enums import (
    BookingStatus,
    PackageType,
    PaymentStatus,
    ProcessingResult,
    WebhookEventKind,
)
from .errors import (
    ERROR_MESSAGES,
    ERROR_RECOVERY,
    BookingError,
    ErrorCode,
    ErrorResponse,
)
from .packages import PACKAGES, PackageInfo, package_label, price_for_package
from .webhook import WebhookOutcome

__all__ = [
    # Enums
    "BookingStatus",
    "PackageType",
    "PaymentStatus",
    "ProcessingResult",
    "WebhookEventKind",
    # Booking
    "Booking",
    "BookingFilters",
    "BookingSubmission",
    "StatusUpdate",
    # Packages
    "PACKAGES",
    "PackageInfo",
    "package_label",
    "price_for_package",
    # Webhooks
    "WebhookOutcome",
    # Errors
    "BookingError",
    "ErrorCode",
    "ErrorResponse",
    "ERROR_MESSAGES",
    "ERROR_RECOVERY",
]
