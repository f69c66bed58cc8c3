"""Webhook handler for reconciling Stripe events with stored bookings.

Provides business logic for handling webhook events separate from
HTTP routing concerns. Each recognized event kind maps to one transition
function; anything else is acknowledged without effect.

Acknowledgement policy:
- Recognized event without a booking reference: skipped (200)
- Transition guarded by current state or booking absent: skipped (200)
- Payment for a cancelled booking: recorded, status stays cancelled (200)
- Unrecognized event type: ignored (200)
- Store write failure: BookingError(UPSTREAM_ERROR) so Stripe redelivers
"""

import datetime as dt
from collections.abc import Callable
from typing import Any

from showbook_shared.models import (
    Booking,
    BookingError,
    BookingStatus,
    ErrorCode,
    ProcessingResult,
    WebhookEventKind,
    WebhookOutcome,
)
from showbook_shared.utils.logging import get_logger, log_webhook_event

from .booking_service import upstream_error
from .booking_store import BookingStore, StoreError
from .notification_service import NotificationError, NotificationService
from .stripe_service import StripeConfigurationError, StripeService, WebhookSignatureError

logger = get_logger(__name__)

DEFAULT_FAILURE_REASON = "Payment failed"

Transition = Callable[[str, dict[str, Any], dt.datetime], Booking | None]


def _mapping(value: Any) -> dict[str, Any]:
    """Event fields that are not objects read as empty."""
    return value if isinstance(value, dict) else {}


class WebhookHandler:
    """Handler for processing Stripe webhook events.

    Transitions are idempotent per event kind: replaying a paid event sets
    the same fields to the same values and keeps the first paid_at.
    """

    def __init__(
        self,
        store: BookingStore,
        stripe_service: StripeService,
        notifier: NotificationService,
    ) -> None:
        self.store = store
        self.stripe = stripe_service
        self.notifier = notifier
        self.transitions: dict[WebhookEventKind, Transition] = {
            WebhookEventKind.CHECKOUT_SESSION_COMPLETED: self._checkout_completed,
            WebhookEventKind.PAYMENT_INTENT_SUCCEEDED: self._payment_intent_succeeded,
            WebhookEventKind.PAYMENT_INTENT_FAILED: self._payment_intent_failed,
        }

    def process(self, payload: bytes, signature: str | None) -> WebhookOutcome:
        """Verify a raw delivery and reconcile it.

        Raises:
            BookingError: INVALID_WEBHOOK_SIGNATURE before any state is read
                or written, CONFIGURATION_ERROR if no signing secret is set,
                UPSTREAM_ERROR on store failure.
        """
        try:
            event = self.stripe.verify_webhook_signature(payload, signature)
        except StripeConfigurationError as e:
            raise BookingError(
                ErrorCode.CONFIGURATION_ERROR,
                details={"setting": "STRIPE_WEBHOOK_SECRET"},
                message=str(e),
            ) from e
        except WebhookSignatureError as e:
            log_webhook_event(logger, None, None, result="error", error=str(e))
            raise BookingError(ErrorCode.INVALID_WEBHOOK_SIGNATURE) from e

        return self.handle_event(event)

    def handle_event(self, event: dict[str, Any]) -> WebhookOutcome:
        """Apply the transition for an already verified event."""
        event_id = event.get("id")
        event_type = event.get("type")
        kind = WebhookEventKind.from_event_type(event_type)
        outcome = WebhookOutcome(event_id=event_id, event_type=event_type, kind=kind)

        transition = self.transitions.get(kind)
        if transition is None:
            outcome.processing_result = ProcessingResult.IGNORED
            outcome.message = "Unhandled event type"
            log_webhook_event(logger, event_type, event_id, result=outcome.processing_result.value)
            return outcome

        obj = _mapping(_mapping(event.get("data")).get("object"))
        booking_id = _mapping(obj.get("metadata")).get("booking_id")
        if not isinstance(booking_id, str):
            booking_id = None
        outcome.booking_id = booking_id
        if not booking_id:
            outcome.processing_result = ProcessingResult.SKIPPED
            outcome.message = "No booking_id in metadata"
            log_webhook_event(
                logger, event_type, event_id, result="skipped", error=outcome.message
            )
            return outcome

        now = dt.datetime.now(dt.UTC)
        try:
            booking = transition(booking_id, obj, now)
        except StoreError as e:
            log_webhook_event(
                logger, event_type, event_id, booking_id=booking_id, result="error", error=str(e)
            )
            raise upstream_error(f"webhook:{event_type}", e) from e

        if booking is None:
            outcome.processing_result = ProcessingResult.SKIPPED
            outcome.message = "Booking not found or not in a state this event applies to"
            log_webhook_event(
                logger,
                event_type,
                event_id,
                booking_id=booking_id,
                result="skipped",
                error=outcome.message,
            )
            return outcome

        log_webhook_event(
            logger,
            event_type,
            event_id,
            booking_id=booking_id,
            result=outcome.processing_result.value,
            status=booking.status.value,
            payment_status=booking.payment_status.value,
        )

        # Only the delivery that set paid_at on a confirmed booking sends the confirmation
        if booking.status == BookingStatus.CONFIRMED and booking.paid_at == now:
            self._send_confirmation(booking)
        return outcome

    def _checkout_completed(
        self, booking_id: str, session: dict[str, Any], now: dt.datetime
    ) -> Booking | None:
        return self.store.mark_paid(booking_id, session.get("payment_intent"), now)

    def _payment_intent_succeeded(
        self, booking_id: str, intent: dict[str, Any], now: dt.datetime
    ) -> Booking | None:
        return self.store.mark_paid(booking_id, intent.get("id"), now)

    def _payment_intent_failed(
        self, booking_id: str, intent: dict[str, Any], now: dt.datetime
    ) -> Booking | None:
        error = _mapping(intent.get("last_payment_error"))
        reason = error.get("message") or DEFAULT_FAILURE_REASON
        return self.store.mark_payment_failed(booking_id, reason)

    def _send_confirmation(self, booking: Booking) -> None:
        try:
            self.notifier.send_booking_confirmed(booking)
        except NotificationError as e:
            logger.error("Confirmation email for %s not sent: %s", booking.display_id, e)
