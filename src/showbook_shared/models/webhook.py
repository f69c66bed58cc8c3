"""Webhook reconciliation result model."""

from pydantic import BaseModel, ConfigDict, Field

from .enums import ProcessingResult, WebhookEventKind


class WebhookOutcome(BaseModel):
    """Result of reconciling one Stripe event against the booking store.

    Used for:
    - Building the acknowledgement body returned to Stripe
    - Structured logging of every delivery
    """

    model_config = ConfigDict(strict=True)

    event_id: str | None = Field(
        default=None,
        description="Stripe event ID (evt_xxx)",
        examples=["evt_1ABC123DEF456"],
    )
    event_type: str | None = Field(
        default=None,
        description="Raw Stripe event type",
        examples=["checkout.session.completed"],
    )
    kind: WebhookEventKind = Field(
        default=WebhookEventKind.UNHANDLED,
        description="Parsed event kind",
    )
    booking_id: str | None = Field(
        default=None,
        description="Booking reference from event metadata",
    )
    processing_result: ProcessingResult = Field(
        default=ProcessingResult.SUCCESS,
        description="success, skipped (recognized but no state change) or ignored (unhandled type)",
    )
    message: str | None = Field(
        default=None,
        description="Reason for a skipped or ignored event",
    )
