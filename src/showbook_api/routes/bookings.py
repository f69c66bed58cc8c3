"""Booking endpoints.

Provides REST endpoints for:
- Submitting a booking request (public)
- Listing bookings with optional date/status filters
- Manually cancelling or refunding a booking
"""

import datetime as dt
from typing import Optional

from fastapi import APIRouter, Depends, Query
from starlette.status import HTTP_201_CREATED

from showbook_api.dependencies import get_booking_service
from showbook_api.models.bookings import (
    BookingListResponse,
    BookingResponse,
    StatusUpdateRequest,
)
from showbook_shared.models import BookingFilters, BookingStatus, BookingSubmission
from showbook_shared.services.booking_service import BookingService

router = APIRouter(tags=["bookings"])


@router.post(
    "/bookings",
    summary="Create booking",
    description="""
Submit a booking request.

**Notes:**
- Price is taken from the package catalogue, never from the request
- The booking starts as status=pending, payment_status=pending
- `full_address` is accepted in place of `address` and `special_requests`
  in place of `message`
- Operator and customer emails are best-effort
""",
    response_model=BookingResponse,
    status_code=HTTP_201_CREATED,
    responses={
        201: {"description": "Booking created"},
        400: {"description": "Missing required fields or unknown package"},
        500: {"description": "Booking could not be stored"},
    },
)
async def create_booking(
    body: BookingSubmission,
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    booking = booking_service.create_booking(body)
    return BookingResponse(booking=booking, message="Booking created successfully")


@router.get(
    "/bookings",
    summary="List bookings",
    description="""
List bookings ordered by date, then time slot.

All filters are optional and combine with AND. `from_date` and `to_date`
are inclusive bounds.
""",
    response_model=BookingListResponse,
)
async def list_bookings(
    date: Optional[dt.date] = Query(default=None, description="Exact date (YYYY-MM-DD)"),
    from_date: Optional[dt.date] = Query(default=None, description="Earliest date, inclusive"),
    to_date: Optional[dt.date] = Query(default=None, description="Latest date, inclusive"),
    status: Optional[BookingStatus] = Query(default=None, description="Booking status"),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingListResponse:
    filters = BookingFilters(date=date, from_date=from_date, to_date=to_date, status=status)
    bookings = booking_service.list_bookings(filters)
    return BookingListResponse(bookings=bookings, count=len(bookings))


@router.api_route(
    "/bookings/update",
    methods=["PUT", "PATCH"],
    summary="Update booking status",
    description="""
Partially update a booking's `status` and/or `payment_status`.

**Allowed changes:**
- status: pending → cancelled
- payment_status: paid → refunded

`paid` and `confirmed` are only ever set by verified payment webhooks.
""",
    response_model=BookingResponse,
    responses={
        400: {"description": "Missing ID, no fields, or disallowed transition"},
        404: {"description": "Booking not found"},
    },
)
async def update_booking(
    body: StatusUpdateRequest,
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    booking = booking_service.update_status(body.resolved_id, body.to_status_update())
    return BookingResponse(booking=booking, message="Booking updated successfully")
