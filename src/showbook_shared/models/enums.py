"""Enumeration types for booking data models."""

from enum import Enum


class PackageType(str, Enum):
    """Bookable show packages."""

    PRESCHOOL = "preschool"
    CLASSIC = "classic"
    HALFDAY = "halfday"


class BookingStatus(str, Enum):
    """Status of a booking."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    """Payment status for a booking."""

    PENDING = "pending"
    PAID = "paid"
    REFUNDED = "refunded"
    FAILED = "failed"


class WebhookEventKind(str, Enum):
    """Stripe event types the reconciler knows about.

    Anything else is parsed as UNHANDLED and acknowledged without effect.
    """

    CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"
    PAYMENT_INTENT_SUCCEEDED = "payment_intent.succeeded"
    PAYMENT_INTENT_FAILED = "payment_intent.payment_failed"
    UNHANDLED = "unhandled"

    @classmethod
    def from_event_type(cls, event_type: str | None) -> "WebhookEventKind":
        """Map a raw Stripe event type onto the closed set of kinds."""
        for kind in cls:
            if kind is not cls.UNHANDLED and kind.value == event_type:
                return kind
        return cls.UNHANDLED


class ProcessingResult(str, Enum):
    """Outcome of reconciling one webhook delivery."""

    SUCCESS = "success"
    SKIPPED = "skipped"
    IGNORED = "ignored"
