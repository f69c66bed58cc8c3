"""Booking request/response models."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from showbook_shared.models import Booking, BookingStatus, PaymentStatus, StatusUpdate


class BookingResponse(BaseModel):
    """Single booking wrapped in the success envelope."""

    success: bool = True
    booking: Booking
    message: str


class BookingListResponse(BaseModel):
    """Result of a booking listing."""

    success: bool = True
    bookings: list[Booking]
    count: int = Field(..., ge=0)


class StatusUpdateRequest(BaseModel):
    """Body of PUT/PATCH /bookings/update.

    The booking may be referenced as either ``id`` or ``booking_id``.
    """

    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    booking_id: Optional[str] = None
    status: Optional[BookingStatus] = None
    payment_status: Optional[PaymentStatus] = None

    @property
    def resolved_id(self) -> Optional[str]:
        return self.id or self.booking_id

    def to_status_update(self) -> StatusUpdate:
        return StatusUpdate(status=self.status, payment_status=self.payment_status)
