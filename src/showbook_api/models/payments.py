"""Payment link request/response models."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PaymentLinkRequest(BaseModel):
    """Body of POST /payment-links and POST /payment-links/send."""

    model_config = ConfigDict(extra="ignore")

    booking_id: Optional[str] = Field(
        default=None,
        description="Booking ID (UUID)",
    )


class PaymentLinkResponse(BaseModel):
    """Issued or sent payment link."""

    success: bool = True
    payment_link: str = Field(
        ...,
        description="Hosted Stripe payment link URL",
        examples=["https://buy.stripe.com/test_abc123"],
    )
    booking_id: str
    message: str
