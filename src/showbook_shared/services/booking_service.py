"""Booking lifecycle service.

Validates submissions, persists new bookings, lists them and applies manual
status changes. Store failures are surfaced as BookingError(UPSTREAM_ERROR);
notification failures after a successful write are logged and dropped.
"""

import datetime as dt
import uuid

from showbook_shared.models import (
    Booking,
    BookingError,
    BookingFilters,
    BookingStatus,
    BookingSubmission,
    ErrorCode,
    PackageType,
    PaymentStatus,
    StatusUpdate,
    price_for_package,
)
from showbook_shared.utils.logging import get_logger, log_booking_operation

from .booking_store import BookingStore, StoreError
from .notification_service import NotificationError, NotificationService

logger = get_logger(__name__)

# Manual changes allowed on top of re-setting the current value
ALLOWED_STATUS_CHANGES: dict[BookingStatus, set[BookingStatus]] = {
    BookingStatus.PENDING: {BookingStatus.CANCELLED},
}
ALLOWED_PAYMENT_STATUS_CHANGES: dict[PaymentStatus, set[PaymentStatus]] = {
    PaymentStatus.PENDING: {PaymentStatus.FAILED},
    PaymentStatus.PAID: {PaymentStatus.REFUNDED},
}


def upstream_error(operation: str, exc: Exception) -> BookingError:
    """Wrap a collaborator failure, keeping its message for diagnostics."""
    return BookingError(
        ErrorCode.UPSTREAM_ERROR,
        details={"operation": operation, "upstream_error": str(exc)},
    )


def generate_booking_number(created_at: dt.datetime) -> str:
    """Generate a human-readable booking number like BK-2025-1A2B3C."""
    return f"BK-{created_at.year}-{uuid.uuid4().hex[:6].upper()}"


class BookingService:
    """Service for booking intake, listing and manual status updates."""

    def __init__(self, store: BookingStore, notifier: NotificationService) -> None:
        """Initialize booking service.

        Args:
            store: Booking store
            notifier: Email sender for intake notifications
        """
        self.store = store
        self.notifier = notifier

    def create_booking(self, submission: BookingSubmission) -> Booking:
        """Validate and persist a new booking.

        Price comes from the package catalogue; the new booking starts as
        pending/pending. Operator and customer emails are best-effort.

        Raises:
            BookingError: VALIDATION_ERROR for missing or malformed fields,
                UPSTREAM_ERROR if the store write fails.
        """
        missing = submission.missing_fields()
        if missing:
            raise BookingError(
                ErrorCode.VALIDATION_ERROR,
                details={"missing": missing},
                message="Missing required fields",
            )

        price = price_for_package(submission.package_type)
        if price is None:
            raise BookingError(
                ErrorCode.VALIDATION_ERROR,
                details={
                    "field": "package_type",
                    "value": submission.package_type,
                    "allowed": [p.value for p in PackageType],
                },
                message="Invalid package type",
            )

        try:
            booking_date = dt.date.fromisoformat(submission.date or "")
        except ValueError as e:
            raise BookingError(
                ErrorCode.VALIDATION_ERROR,
                details={"field": "date", "value": submission.date},
                message="Invalid date, expected YYYY-MM-DD",
            ) from e

        now = dt.datetime.now(dt.UTC)
        booking = Booking(
            id=str(uuid.uuid4()),
            booking_number=generate_booking_number(now),
            customer_name=submission.customer_name.strip(),
            organization_name=submission.organization_name,
            email=submission.email.strip(),
            phone=submission.phone.strip(),
            address=submission.resolved_address.strip(),
            address_details=submission.address_details,
            city=submission.city,
            latitude=submission.latitude,
            longitude=submission.longitude,
            package_type=PackageType(submission.package_type),
            date=booking_date,
            time_slot=submission.time_slot.strip(),
            price=price,
            message=submission.resolved_message,
            status=BookingStatus.PENDING,
            payment_status=PaymentStatus.PENDING,
            created_at=now,
            updated_at=now,
        )

        try:
            self.store.create(booking)
        except StoreError as e:
            log_booking_operation(
                logger, "create_booking", booking_id=booking.id, error=str(e)
            )
            raise upstream_error("create_booking", e) from e

        log_booking_operation(
            logger,
            "create_booking",
            booking_id=booking.id,
            booking_number=booking.booking_number,
            status=booking.status.value,
            payment_status=booking.payment_status.value,
            price=booking.price,
        )

        self._notify_new_booking(booking)
        return booking

    def _notify_new_booking(self, booking: Booking) -> None:
        try:
            self.notifier.send_operator_notice(booking)
        except NotificationError as e:
            logger.error("Operator notice for %s not sent: %s", booking.display_id, e)
        try:
            self.notifier.send_booking_received(booking)
        except NotificationError as e:
            logger.error(
                "Customer acknowledgement for %s not sent: %s", booking.display_id, e
            )

    def get_booking(self, booking_id: str | None) -> Booking:
        """Fetch a booking or raise NOT_FOUND."""
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

    def list_bookings(self, filters: BookingFilters | None = None) -> list[Booking]:
        """List bookings ordered by (date, time_slot)."""
        try:
            return self.store.list(filters)
        except StoreError as e:
            raise upstream_error("list_bookings", e) from e

    def update_status(self, booking_id: str | None, update: StatusUpdate) -> Booking:
        """Apply a partial manual status update.

        Accepted changes are listed in ALLOWED_STATUS_CHANGES and
        ALLOWED_PAYMENT_STATUS_CHANGES; re-setting a field to its current
        value is a no-op. The write only lands if the booking still has the
        status pair it was validated against.

        Raises:
            BookingError: VALIDATION_ERROR, NOT_FOUND or UPSTREAM_ERROR.
        """
        if not booking_id:
            raise BookingError(
                ErrorCode.VALIDATION_ERROR,
                details={"missing": ["id"]},
                message="Booking ID is required",
            )
        if update.is_empty():
            raise BookingError(
                ErrorCode.VALIDATION_ERROR,
                details={"allowed_fields": ["status", "payment_status"]},
                message="No status fields supplied",
            )

        current = self.get_booking(booking_id)
        self._check_transition(
            "status",
            current.status,
            update.status,
            ALLOWED_STATUS_CHANGES.get(current.status, set()),
        )
        self._check_transition(
            "payment_status",
            current.payment_status,
            update.payment_status,
            ALLOWED_PAYMENT_STATUS_CHANGES.get(current.payment_status, set()),
        )

        try:
            updated = self.store.apply_status_update(
                booking_id,
                update,
                dt.datetime.now(dt.UTC),
                expected_status=current.status,
                expected_payment_status=current.payment_status,
            )
            if updated is None:
                latest = self.store.get(booking_id)
        except StoreError as e:
            log_booking_operation(
                logger, "update_status", booking_id=booking_id, error=str(e)
            )
            raise upstream_error("update_status", e) from e
        if updated is None:
            if latest is None:
                raise BookingError(ErrorCode.NOT_FOUND, details={"booking_id": booking_id})
            raise BookingError(
                ErrorCode.VALIDATION_ERROR,
                details={
                    "current_status": latest.status.value,
                    "current_payment_status": latest.payment_status.value,
                },
                message="Booking changed while updating, reload and retry",
            )

        log_booking_operation(
            logger,
            "update_status",
            booking_id=updated.id,
            booking_number=updated.booking_number,
            status=updated.status.value,
            payment_status=updated.payment_status.value,
        )
        return updated

    @staticmethod
    def _check_transition(field, current, requested, allowed) -> None:
        if requested is None or requested == current or requested in allowed:
            return
        raise BookingError(
            ErrorCode.VALIDATION_ERROR,
            details={
                "field": field,
                "current": current.value,
                "requested": requested.value,
            },
            message=f"Cannot change {field} from {current.value} to {requested.value}",
        )
