"""Stripe payment service for payment links and webhook verification.

Provides integration with Stripe using the v8+ StripeClient pattern.
Credentials come from Settings (environment, or SSM Parameter Store when
SSM_PARAMETER_PREFIX is configured) and are resolved on first use.
"""

import logging
from functools import lru_cache
from typing import Any

import stripe
from stripe import StripeClient

from showbook_shared.config import load_settings
from showbook_shared.models import Booking, package_label

logger = logging.getLogger(__name__)


class StripeServiceError(Exception):
    """Raised when a Stripe operation fails."""

    def __init__(self, message: str, stripe_error_code: str | None = None) -> None:
        """Initialize with message and optional Stripe error code.

        Args:
            message: Human-readable error message.
            stripe_error_code: Stripe-specific error code if available.
        """
        super().__init__(message)
        self.stripe_error_code = stripe_error_code


class StripeConfigurationError(StripeServiceError):
    """Raised when a required Stripe credential is not configured."""


class WebhookSignatureError(StripeServiceError):
    """Raised when a webhook payload fails signature verification."""


class StripeService:
    """Service for Stripe payment operations.

    Handles:
    - Payment link creation for a stored booking
    - Webhook signature validation

    Usage:
        stripe_svc = get_stripe_service()
        url = stripe_svc.create_payment_link(booking)
    """

    def __init__(
        self,
        secret_key: str | None = None,
        webhook_secret: str | None = None,
    ) -> None:
        """Initialize Stripe service.

        Args:
            secret_key: API secret key. Defaults to the configured value.
            webhook_secret: Webhook signing secret. Defaults to the configured value.
        """
        self._secret_key = secret_key
        self._webhook_secret = webhook_secret
        self._client: StripeClient | None = None

    def _get_client(self) -> StripeClient:
        """Get or create the Stripe client (lazy initialization).

        Raises:
            StripeConfigurationError: If no secret key is configured.
        """
        if self._client is None:
            secret_key = self._secret_key or load_settings().stripe_secret_key
            if not secret_key:
                raise StripeConfigurationError("Stripe secret key is not configured")
            self._client = StripeClient(secret_key)
            logger.info("Stripe client initialized")
        return self._client

    def _get_webhook_secret(self) -> str:
        """Get the webhook signing secret.

        Raises:
            StripeConfigurationError: If no webhook secret is configured.
        """
        secret = self._webhook_secret or load_settings().stripe_webhook_secret
        if not secret:
            raise StripeConfigurationError("Stripe webhook secret is not configured")
        return secret

    def create_payment_link(self, booking: Booking) -> str:
        """Create a hosted payment link for a booking.

        One line item priced at the booking's stored price in the configured
        currency. Metadata carries the booking reference for reconciliation.

        Args:
            booking: The stored booking.

        Returns:
            The payment link URL.

        Raises:
            StripeConfigurationError: If the secret key is missing.
            StripeServiceError: If link creation fails.
        """
        client = self._get_client()
        settings = load_settings()
        display_id = booking.display_id

        metadata = {
            "booking_id": booking.id,
            "booking_number": display_id,
            "customer_email": booking.email,
            "customer_name": booking.customer_name,
            "organization": booking.organization_name or "",
        }

        params: dict[str, Any] = {
            "line_items": [
                {
                    "price_data": {
                        "currency": settings.currency,
                        # Stripe amounts are in the smallest currency unit
                        "unit_amount": booking.price * 100,
                        "product_data": {
                            "name": (
                                f"{settings.organization_name} - "
                                f"{package_label(booking.package_type)}"
                            ),
                            "description": (
                                f"Booking {display_id} on "
                                f"{booking.date.isoformat()} at {booking.time_slot}"
                            ),
                        },
                    },
                    "quantity": 1,
                }
            ],
            "metadata": metadata,
            "payment_intent_data": {"metadata": metadata},
            "after_completion": {
                "type": "redirect",
                "redirect": {
                    "url": f"{settings.app_url}/booking-success?booking_id={display_id}"
                },
            },
        }

        try:
            logger.info(
                "Creating Stripe payment link for booking %s, amount %d %s",
                display_id,
                booking.price,
                settings.currency,
            )
            link = client.payment_links.create(params=params)
        except stripe.StripeError as e:
            error_code = getattr(e, "code", None)
            logger.error(
                "Stripe payment link creation failed: %s (code: %s)",
                str(e),
                error_code,
            )
            raise StripeServiceError(
                f"Failed to create payment link: {e}",
                stripe_error_code=error_code,
            ) from e

        logger.info("Payment link %s created for booking %s", link.id, display_id)
        return link.url

    def verify_webhook_signature(self, payload: bytes, signature: str | None) -> dict[str, Any]:
        """Verify a webhook signature and parse the event.

        Args:
            payload: Raw request body bytes.
            signature: Stripe-Signature header value.

        Returns:
            Parsed event dictionary.

        Raises:
            StripeConfigurationError: If the webhook secret is missing.
            WebhookSignatureError: If the signature is absent or invalid.
        """
        webhook_secret = self._get_webhook_secret()
        if not signature:
            raise WebhookSignatureError("Missing Stripe-Signature header")

        try:
            event = stripe.Webhook.construct_event(payload, signature, webhook_secret)
        except stripe.SignatureVerificationError as e:
            logger.warning("Invalid webhook signature: %s", str(e))
            raise WebhookSignatureError("Invalid webhook signature") from e
        except ValueError as e:
            logger.warning("Invalid webhook payload: %s", str(e))
            raise WebhookSignatureError("Invalid webhook payload") from e

        logger.info("Webhook signature verified for event: %s", event.get("id"))
        return dict(event)


@lru_cache(maxsize=1)
def get_stripe_service() -> StripeService:
    """Get the shared StripeService instance (singleton pattern)."""
    return StripeService()
