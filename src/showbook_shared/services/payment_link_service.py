"""Payment link issuance for stored bookings."""

import datetime as dt

from showbook_shared.models import Booking, BookingError, ErrorCode
from showbook_shared.utils.logging import get_logger, log_booking_operation

from .booking_service import upstream_error
from .booking_store import BookingStore, StoreError
from .notification_service import NotificationError, NotificationService
from .stripe_service import StripeConfigurationError, StripeService, StripeServiceError

logger = get_logger(__name__)


class PaymentLinkService:
    """Issues Stripe payment links and emails them to customers."""

    def __init__(
        self,
        store: BookingStore,
        stripe_service: StripeService,
        notifier: NotificationService,
    ) -> None:
        self.store = store
        self.stripe = stripe_service
        self.notifier = notifier

    def _load(self, booking_id: str | None) -> Booking:
        if not booking_id:
            raise BookingError(
                ErrorCode.VALIDATION_ERROR,
                details={"missing": ["booking_id"]},
                message="Booking ID is required",
            )
        try:
            booking = self.store.get(booking_id)
        except StoreError as e:
            raise upstream_error("get_booking", e) from e
        if booking is None:
            raise BookingError(ErrorCode.NOT_FOUND, details={"booking_id": booking_id})
        return booking

    def issue_payment_link(self, booking_id: str | None) -> tuple[Booking, str]:
        """Create a payment link for a booking and record it.

        Regenerating replaces any previous link and timestamp. Failing to
        record the link is logged only: the link already exists at Stripe
        and is returned to the caller.

        Returns:
            Tuple of (booking, payment link URL). The booking reflects the
            recorded link when the write succeeded.

        Raises:
            BookingError: VALIDATION_ERROR, NOT_FOUND (before any Stripe
                call), CONFIGURATION_ERROR or UPSTREAM_ERROR.
        """
        booking = self._load(booking_id)

        try:
            url = self.stripe.create_payment_link(booking)
        except StripeConfigurationError as e:
            raise BookingError(
                ErrorCode.CONFIGURATION_ERROR,
                details={"setting": "STRIPE_SECRET_KEY"},
                message=str(e),
            ) from e
        except StripeServiceError as e:
            log_booking_operation(
                logger,
                "issue_payment_link",
                booking_id=booking.id,
                error=str(e),
                stripe_error_code=e.stripe_error_code,
            )
            raise upstream_error("issue_payment_link", e) from e

        try:
            updated = self.store.set_payment_link(booking.id, url, dt.datetime.now(dt.UTC))
        except StoreError as e:
            logger.error("Payment link for %s not recorded: %s", booking.display_id, e)
            updated = None
        if updated is not None:
            booking = updated

        log_booking_operation(
            logger,
            "issue_payment_link",
            booking_id=booking.id,
            booking_number=booking.booking_number,
            payment_link=url,
        )
        return booking, url

    def send_payment_link(self, booking_id: str | None) -> tuple[Booking, str]:
        """Email the booking's payment link, issuing one first if needed.

        Raises:
            BookingError: As issue_payment_link, or UPSTREAM_ERROR when the
                email cannot be sent.
        """
        booking = self._load(booking_id)
        url = booking.payment_link
        if not url:
            booking, url = self.issue_payment_link(booking.id)

        try:
            self.notifier.send_payment_link(booking, url)
        except NotificationError as e:
            log_booking_operation(
                logger, "send_payment_link", booking_id=booking.id, error=str(e)
            )
            raise upstream_error("send_payment_link", e) from e

        log_booking_operation(
            logger,
            "send_payment_link",
            booking_id=booking.id,
            booking_number=booking.booking_number,
        )
        return booking, url
