"""Webhook endpoints for external service integrations.

These endpoints do not require authentication; they receive payloads
signed with the Stripe webhook secret.
"""

from fastapi import APIRouter, Depends, Request

from showbook_api.dependencies import get_webhook_handler
from showbook_api.models.webhooks import WebhookResponse
from showbook_shared.services.webhook_handler import WebhookHandler

router = APIRouter(tags=["webhooks"])

SIGNATURE_HEADER = "Stripe-Signature"


@router.post(
    "/webhooks/payment",
    summary="Stripe webhook",
    description="""
Receive a Stripe event.

**Handled events:**
- `checkout.session.completed`: booking paid and confirmed
- `payment_intent.succeeded`: booking paid and confirmed
- `payment_intent.payment_failed`: payment marked failed

Other event types are acknowledged without effect. Only storage failures
return 5xx so that Stripe redelivers.
""",
    response_model=WebhookResponse,
    responses={
        400: {"description": "Invalid or missing signature"},
        500: {"description": "Processing failed, Stripe will retry"},
    },
)
async def stripe_webhook(
    request: Request,
    handler: WebhookHandler = Depends(get_webhook_handler),
) -> WebhookResponse:
    payload = await request.body()
    outcome = handler.process(payload, request.headers.get(SIGNATURE_HEADER))
    return WebhookResponse.from_outcome(outcome)
