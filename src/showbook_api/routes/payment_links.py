"""Payment link endpoints.

Provides REST endpoints for:
- Issuing a Stripe payment link for a booking
- Emailing a booking's payment link to the customer
"""

from fastapi import APIRouter, Depends

from showbook_api.dependencies import get_payment_link_service
from showbook_api.models.payments import PaymentLinkRequest, PaymentLinkResponse
from showbook_shared.services.payment_link_service import PaymentLinkService

router = APIRouter(tags=["payments"])


@router.post(
    "/payment-links",
    summary="Issue payment link",
    description="""
Create a hosted Stripe payment link priced at the booking's stored price.

Calling this again replaces the previously recorded link.
""",
    response_model=PaymentLinkResponse,
    responses={
        400: {"description": "booking_id missing"},
        404: {"description": "Booking not found"},
        500: {"description": "Stripe not configured or unavailable"},
    },
)
async def create_payment_link(
    body: PaymentLinkRequest,
    payment_links: PaymentLinkService = Depends(get_payment_link_service),
) -> PaymentLinkResponse:
    booking, url = payment_links.issue_payment_link(body.booking_id)
    return PaymentLinkResponse(
        payment_link=url,
        booking_id=booking.id,
        message="Payment link generated successfully",
    )


@router.post(
    "/payment-links/send",
    summary="Send payment link",
    description="""
Email the booking's payment link to the customer, issuing one first if the
booking has none.
""",
    response_model=PaymentLinkResponse,
    responses={
        400: {"description": "booking_id missing"},
        404: {"description": "Booking not found"},
        500: {"description": "Link issuance or email delivery failed"},
    },
)
async def send_payment_link(
    body: PaymentLinkRequest,
    payment_links: PaymentLinkService = Depends(get_payment_link_service),
) -> PaymentLinkResponse:
    booking, url = payment_links.send_payment_link(body.booking_id)
    return PaymentLinkResponse(
        payment_link=url,
        booking_id=booking.id,
        message=f"Payment link sent to {booking.email}",
    )
