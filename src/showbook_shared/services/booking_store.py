"""Booking store backed by a single DynamoDB table.

Every write is one UpdateItem/PutItem call, so per-row atomicity comes from
DynamoDB itself. Transition guards are expressed as condition expressions.
"""

import datetime as dt
import logging
from decimal import Decimal
from typing import Any

from boto3.dynamodb.conditions import Attr
from botocore.exceptions import BotoCoreError, ClientError

from showbook_shared.models import (
    Booking,
    BookingFilters,
    BookingStatus,
    PaymentStatus,
    StatusUpdate,
)

from .dynamodb import DynamoDBService

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when a booking store call fails."""


def _booking_to_item(booking: Booking) -> dict[str, Any]:
    """Serialize a Booking for DynamoDB.

    None values are omitted so that if_not_exists() guards see a missing
    attribute rather than a NULL one.
    """
    item: dict[str, Any] = {}
    for key, value in booking.model_dump(mode="json").items():
        if value is None:
            continue
        if isinstance(value, float):
            value = Decimal(str(value))
        item[key] = value
    return item


def _item_to_booking(item: dict[str, Any]) -> Booking:
    data = dict(item)
    if isinstance(data.get("price"), Decimal):
        data["price"] = int(data["price"])
    for key in ("latitude", "longitude"):
        if isinstance(data.get(key), Decimal):
            data[key] = float(data[key])
    return Booking.model_validate(data)


class BookingStore:
    """Query/update API over the bookings table."""

    TABLE = "bookings"

    def __init__(self, db: DynamoDBService) -> None:
        self.db = db

    def create(self, booking: Booking) -> Booking:
        """Persist a new booking.

        Raises:
            StoreError: If the write fails or the ID already exists.
        """
        try:
            created = self.db.put_item(
                self.TABLE,
                _booking_to_item(booking),
                condition_expression="attribute_not_exists(id)",
            )
        except (ClientError, BotoCoreError) as e:
            raise StoreError(f"Failed to create booking: {e}") from e
        if not created:
            raise StoreError(f"Booking {booking.id} already exists")
        return booking

    def get(self, booking_id: str) -> Booking | None:
        """Fetch a booking by ID, or None if absent."""
        try:
            item = self.db.get_item(self.TABLE, {"id": booking_id})
        except (ClientError, BotoCoreError) as e:
            raise StoreError(f"Failed to fetch booking: {e}") from e
        return _item_to_booking(item) if item else None

    def list(self, filters: BookingFilters | None = None) -> list[Booking]:
        """List bookings matching the filters, ordered by date then time slot."""
        filters = filters or BookingFilters()
        conditions = []
        if filters.date:
            conditions.append(Attr("date").eq(filters.date.isoformat()))
        if filters.from_date:
            conditions.append(Attr("date").gte(filters.from_date.isoformat()))
        if filters.to_date:
            conditions.append(Attr("date").lte(filters.to_date.isoformat()))
        if filters.status:
            conditions.append(Attr("status").eq(filters.status.value))

        expression = None
        for condition in conditions:
            expression = condition if expression is None else expression & condition

        try:
            items = self.db.scan(self.TABLE, filter_expression=expression)
        except (ClientError, BotoCoreError) as e:
            raise StoreError(f"Failed to list bookings: {e}") from e

        bookings = [_item_to_booking(item) for item in items]
        bookings.sort(key=lambda b: (b.date, b.time_slot))
        return bookings

    def _update(
        self,
        booking_id: str,
        assignments: dict[str, Any],
        *,
        keep_first: dict[str, Any] | None = None,
        condition: str = "attribute_exists(id)",
        condition_values: dict[str, Any] | None = None,
    ) -> Booking | None:
        """Run one SET update.

        Args:
            booking_id: Booking to update
            assignments: Attributes to overwrite
            keep_first: Attributes written only if currently absent
            condition: Condition expression guarding the write
            condition_values: Extra values referenced by the condition

        Returns:
            The updated booking, or None if the condition failed.
        """
        names: dict[str, str] = {}
        values: dict[str, Any] = dict(condition_values or {})
        clauses = []
        for i, (attr, value) in enumerate(assignments.items()):
            names[f"#a{i}"] = attr
            values[f":a{i}"] = value
            clauses.append(f"#a{i} = :a{i}")
        for i, (attr, value) in enumerate((keep_first or {}).items()):
            names[f"#k{i}"] = attr
            values[f":k{i}"] = value
            clauses.append(f"#k{i} = if_not_exists(#k{i}, :k{i})")
        if "#status" in condition:
            names["#status"] = "status"

        try:
            attrs = self.db.update_item(
                self.TABLE,
                {"id": booking_id},
                "SET " + ", ".join(clauses),
                values,
                names,
                condition_expression=condition,
            )
        except (ClientError, BotoCoreError) as e:
            raise StoreError(f"Failed to update booking {booking_id}: {e}") from e
        return _item_to_booking(attrs) if attrs else None

    def set_payment_link(
        self, booking_id: str, payment_link: str, sent_at: dt.datetime
    ) -> Booking | None:
        """Record an issued payment link, replacing any previous one."""
        return self._update(
            booking_id,
            {
                "payment_link": payment_link,
                "payment_link_sent_at": sent_at.isoformat(),
                "updated_at": sent_at.isoformat(),
            },
        )

    def mark_paid(
        self,
        booking_id: str,
        payment_intent_id: str | None,
        paid_at: dt.datetime,
    ) -> Booking | None:
        """Apply the paid transition.

        The payment is always recorded (payment_status=paid, payment intent,
        first paid_at); status moves to confirmed only from pending, so a
        cancelled booking stays cancelled with its payment on file. Replays
        are no-ops on the final state. Refunded bookings are left alone.

        Returns:
            Updated booking, or None if it is missing or refunded.
        """
        assignments: dict[str, Any] = {"payment_status": PaymentStatus.PAID.value}
        if payment_intent_id:
            assignments["payment_intent_id"] = payment_intent_id
        paid = self._update(
            booking_id,
            assignments,
            keep_first={"paid_at": paid_at.isoformat()},
            condition="attribute_exists(id) AND payment_status <> :refunded",
            condition_values={":refunded": PaymentStatus.REFUNDED.value},
        )
        if paid is None or paid.status != BookingStatus.PENDING:
            return paid

        confirmed = self._update(
            booking_id,
            {"status": BookingStatus.CONFIRMED.value},
            condition="#status = :pending AND payment_status = :paid",
            condition_values={
                ":pending": BookingStatus.PENDING.value,
                ":paid": PaymentStatus.PAID.value,
            },
        )
        # Status changed between the two writes; report what is stored now
        return confirmed if confirmed is not None else self.get(booking_id)

    def mark_payment_failed(self, booking_id: str, reason: str) -> Booking | None:
        """Apply the failed transition unless the booking is already settled."""
        return self._update(
            booking_id,
            {
                "payment_status": PaymentStatus.FAILED.value,
                "payment_failure_reason": reason,
            },
            condition="attribute_exists(id) AND payment_status IN (:pending, :failed)",
            condition_values={
                ":pending": PaymentStatus.PENDING.value,
                ":failed": PaymentStatus.FAILED.value,
            },
        )

    def apply_status_update(
        self,
        booking_id: str,
        update: StatusUpdate,
        updated_at: dt.datetime,
        *,
        expected_status: BookingStatus,
        expected_payment_status: PaymentStatus,
    ) -> Booking | None:
        """Write only the supplied status fields.

        The write applies only while the booking still has the status pair
        the caller validated against.

        Returns:
            Updated booking, or None if it is missing or has changed.
        """
        assignments: dict[str, Any] = {"updated_at": updated_at.isoformat()}
        if update.status is not None:
            assignments["status"] = update.status.value
        if update.payment_status is not None:
            assignments["payment_status"] = update.payment_status.value
        return self._update(
            booking_id,
            assignments,
            condition="#status = :cur_status AND payment_status = :cur_payment",
            condition_values={
                ":cur_status": expected_status.value,
                ":cur_payment": expected_payment_status.value,
            },
        )
