"""FastAPI dependency injection providers for shared services.

This module provides factory functions for service instances using @lru_cache
so each warm Lambda container builds its collaborators once. Tests replace
them via ``app.dependency_overrides`` or reset them with reset_services().

Service Dependency Graph:
    DynamoDBService (singleton via get_dynamodb_service)
        └── BookingStore
                ├── BookingService ── NotificationService
                ├── PaymentLinkService ── StripeService, NotificationService
                └── WebhookHandler ── StripeService, NotificationService
"""

from functools import lru_cache

from showbook_shared.services.booking_service import BookingService
from showbook_shared.services.booking_store import BookingStore
from showbook_shared.services.dynamodb import get_dynamodb_service
from showbook_shared.services.notification_service import (
    NotificationService,
    get_notification_service,
)
from showbook_shared.services.payment_link_service import PaymentLinkService
from showbook_shared.services.stripe_service import get_stripe_service
from showbook_shared.services.webhook_handler import WebhookHandler


@lru_cache
def get_booking_store() -> BookingStore:
    """Get cached BookingStore backed by the DynamoDB singleton."""
    return BookingStore(db=get_dynamodb_service())


def get_notifier() -> NotificationService:
    """Get the shared SES NotificationService."""
    return get_notification_service()


@lru_cache
def get_booking_service() -> BookingService:
    """Get cached BookingService instance."""
    return BookingService(store=get_booking_store(), notifier=get_notification_service())


@lru_cache
def get_payment_link_service() -> PaymentLinkService:
    """Get cached PaymentLinkService instance."""
    return PaymentLinkService(
        store=get_booking_store(),
        stripe_service=get_stripe_service(),
        notifier=get_notification_service(),
    )


@lru_cache
def get_webhook_handler() -> WebhookHandler:
    """Get cached WebhookHandler instance."""
    return WebhookHandler(
        store=get_booking_store(),
        stripe_service=get_stripe_service(),
        notifier=get_notification_service(),
    )


def reset_services() -> None:
    """Clear all cached service instances.

    Call this in test fixtures to ensure clean state between tests.
    Also resets the underlying DynamoDB, Stripe and SES singletons.
    """
    from showbook_shared.services.dynamodb import reset_dynamodb_service
    from showbook_shared.services.ssm_service import get_ssm_service

    get_booking_store.cache_clear()
    get_booking_service.cache_clear()
    get_payment_link_service.cache_clear()
    get_webhook_handler.cache_clear()

    get_stripe_service.cache_clear()
    get_notification_service.cache_clear()
    get_ssm_service.cache_clear()
    reset_dynamodb_service()
