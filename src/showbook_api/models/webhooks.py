"""Webhook acknowledgement model."""

from pydantic import BaseModel

from showbook_shared.models import WebhookOutcome


class WebhookResponse(BaseModel):
    """Standard webhook response."""

    received: bool = True
    event_id: str | None = None
    event_type: str | None = None
    processing_result: str  # "success", "skipped", "ignored"
    message: str | None = None

    @classmethod
    def from_outcome(cls, outcome: WebhookOutcome) -> "WebhookResponse":
        return cls(
            event_id=outcome.event_id,
            event_type=outcome.event_type,
            processing_result=outcome.processing_result.value,
            message=outcome.message,
        )
