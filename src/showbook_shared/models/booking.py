"""Booking model - the single persisted entity."""

import datetime as dt
from typing import ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import BookingStatus, PackageType, PaymentStatus


class Booking(BaseModel):
    """A customer's request to schedule a show, with payment state.

    Price is in whole units of the payment currency and is derived from the
    package catalogue at creation.
    """

    # Note: strict=False allows ISO strings from the store to coerce into
    # date/datetime and Decimal numbers into int/float
    model_config = ConfigDict(strict=False)

    id: str = Field(..., description="Unique booking ID (UUID)")
    booking_number: Optional[str] = Field(
        default=None,
        description="Human-readable alias",
        examples=["BK-2025-1A2B3C"],
    )
    customer_name: str
    organization_name: Optional[str] = None
    email: str
    phone: str
    address: str
    address_details: Optional[str] = None
    city: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    package_type: PackageType
    date: dt.date
    time_slot: str
    price: int = Field(..., ge=0)
    message: Optional[str] = None
    status: BookingStatus = BookingStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_link: Optional[str] = None
    payment_link_sent_at: Optional[dt.datetime] = None
    payment_intent_id: Optional[str] = None
    paid_at: Optional[dt.datetime] = None
    payment_failure_reason: Optional[str] = None
    created_at: dt.datetime
    updated_at: Optional[dt.datetime] = None

    @property
    def display_id(self) -> str:
        """Identifier shown to customers: booking_number when present."""
        return self.booking_number or self.id


class BookingSubmission(BaseModel):
    """Raw booking submission as received from a client.

    Every field is optional here so that absent values can be reported
    together as a validation error instead of failing on the first one.
    """

    model_config = ConfigDict(strict=False, extra="ignore")

    customer_name: Optional[str] = None
    organization_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    full_address: Optional[str] = None
    address_details: Optional[str] = None
    city: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    package_type: Optional[str] = None
    date: Optional[str] = None
    time_slot: Optional[str] = None
    message: Optional[str] = None
    special_requests: Optional[str] = None

    REQUIRED_FIELDS: ClassVar[tuple[str, ...]] = (
        "customer_name",
        "email",
        "phone",
        "address",
        "package_type",
        "date",
        "time_slot",
    )

    @property
    def resolved_address(self) -> Optional[str]:
        return self.full_address or self.address

    @property
    def resolved_message(self) -> Optional[str]:
        return self.message or self.special_requests

    def missing_fields(self) -> list[str]:
        """Names of required fields that are absent or blank."""
        missing = []
        for name in self.REQUIRED_FIELDS:
            value = self.resolved_address if name == "address" else getattr(self, name)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(name)
        return missing


class BookingFilters(BaseModel):
    """Optional filters for listing bookings."""

    model_config = ConfigDict(strict=False)

    date: Optional[dt.date] = None
    from_date: Optional[dt.date] = None
    to_date: Optional[dt.date] = None
    status: Optional[BookingStatus] = None


class StatusUpdate(BaseModel):
    """Partial update of a booking's status fields."""

    model_config = ConfigDict(strict=False)

    status: Optional[BookingStatus] = None
    payment_status: Optional[PaymentStatus] = None

    def is_empty(self) -> bool:
        return self.status is None and self.payment_status is None
