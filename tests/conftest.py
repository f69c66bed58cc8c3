"""Pytest configuration and fixtures for the show booking backend tests.

This module provides reusable fixtures for testing:
- AWS mocking with moto (DynamoDB bookings table, SES verified sender)
- A patched StripeClient so no real Stripe calls are made
- Stripe webhook event builders and HMAC signing
- Sample booking data
"""

import datetime as dt
import hashlib
import hmac
import json
import os
import time
import uuid
from collections.abc import Callable, Generator
from typing import Any
from unittest.mock import MagicMock, patch

import boto3
import pytest
from moto import mock_aws

# === Environment Setup ===

# Set environment variables for testing before imports
os.environ["AWS_DEFAULT_REGION"] = "eu-west-1"
os.environ["DYNAMODB_TABLE_PREFIX"] = "test-showbook"
os.environ["SES_REGION"] = "eu-west-1"
os.environ["SES_FROM_EMAIL"] = "bookings@showbook.test"
os.environ["OPERATOR_EMAIL"] = "operator@showbook.test"
os.environ["APP_URL"] = "https://shows.example.com"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_showbook"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test_secret_for_testing"
os.environ.pop("SSM_PARAMETER_PREFIX", None)
os.environ.pop("DYNAMODB_ENDPOINT_URL", None)

if not os.environ.get("AWS_PROFILE"):
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"

TEST_WEBHOOK_SECRET = "whsec_test_secret_for_testing"
TEST_PAYMENT_LINK_URL = "https://buy.stripe.com/test_abc123"
BOOKINGS_TABLE = "test-showbook-bookings"


# === Singleton Reset ===


@pytest.fixture(autouse=True)
def reset_singletons() -> Generator[None, None, None]:
    """Reset cached services before and after each test.

    Services must be created inside each test's mock_aws context rather
    than reusing clients from a previous test.
    """
    from showbook_api.dependencies import reset_services
    from showbook_shared.services.ssm_service import SSMService

    reset_services()
    SSMService._cache.clear()
    yield
    reset_services()
    SSMService._cache.clear()


# === AWS Fixtures ===


@pytest.fixture
def aws() -> Generator[None, None, None]:
    """Mocked AWS with the bookings table and a verified SES sender."""
    with mock_aws():
        dynamodb = boto3.client("dynamodb", region_name="eu-west-1")
        dynamodb.create_table(
            TableName=BOOKINGS_TABLE,
            KeySchema=[{"AttributeName": "id", "KeyType": "HASH"}],
            AttributeDefinitions=[{"AttributeName": "id", "AttributeType": "S"}],
            BillingMode="PAY_PER_REQUEST",
        )

        ses = boto3.client("ses", region_name="eu-west-1")
        ses.verify_email_identity(EmailAddress="bookings@showbook.test")
        ses.verify_domain_identity(Domain="showbook.test")

        yield


@pytest.fixture
def bookings_table(aws: None) -> Any:
    """Raw boto3 Table resource for asserting on stored items."""
    return boto3.resource("dynamodb", region_name="eu-west-1").Table(BOOKINGS_TABLE)


@pytest.fixture
def sent_email_count(aws: None) -> Callable[[], int]:
    """Number of emails SES accepted so far in this test."""
    ses = boto3.client("ses", region_name="eu-west-1")

    def count() -> int:
        return int(ses.get_send_quota()["SentLast24Hours"])

    return count


@pytest.fixture
def store(aws: None) -> Any:
    """BookingStore over the mocked bookings table."""
    from showbook_shared.services.booking_store import BookingStore
    from showbook_shared.services.dynamodb import DynamoDBService

    return BookingStore(DynamoDBService(table_prefix="test-showbook"))


@pytest.fixture
def notifier(aws: None) -> Any:
    """NotificationService sending through mocked SES."""
    from showbook_shared.services.notification_service import NotificationService

    return NotificationService()


# === Stripe Fixtures ===


@pytest.fixture
def mock_stripe_client() -> Generator[MagicMock, None, None]:
    """Patch StripeClient so payment links are created without network calls."""
    with patch("showbook_shared.services.stripe_service.StripeClient") as mock_client_class:
        mock_client = MagicMock()
        mock_client.payment_links.create.return_value = MagicMock(
            id="plink_test_123",
            url=TEST_PAYMENT_LINK_URL,
        )
        mock_client_class.return_value = mock_client
        yield mock_client


def sign_payload(payload: bytes, secret: str = TEST_WEBHOOK_SECRET) -> str:
    """Create a valid Stripe webhook signature.

    Stripe signatures use HMAC-SHA256 with format: t={timestamp},v1={signature}
    """
    timestamp = str(int(time.time()))
    signed_payload = f"{timestamp}.{payload.decode('utf-8')}"
    signature = hmac.new(
        secret.encode("utf-8"),
        signed_payload.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return f"t={timestamp},v1={signature}"


def build_event(
    event_type: str,
    obj: dict[str, Any],
    event_id: str | None = None,
) -> dict[str, Any]:
    """Build a Stripe event envelope around a data object."""
    return {
        "id": event_id or f"evt_{uuid.uuid4().hex[:16]}",
        "object": "event",
        "type": event_type,
        "created": int(time.time()),
        "data": {"object": obj},
    }


@pytest.fixture
def checkout_completed_event() -> Callable[..., dict[str, Any]]:
    def make(booking_id: str | None, payment_intent: str = "pi_3ABC123DEF456") -> dict[str, Any]:
        metadata = {"booking_id": booking_id} if booking_id else {}
        return build_event(
            "checkout.session.completed",
            {
                "id": "cs_test_abc123",
                "object": "checkout.session",
                "payment_intent": payment_intent,
                "payment_status": "paid",
                "metadata": metadata,
            },
        )

    return make


@pytest.fixture
def payment_intent_event() -> Callable[..., dict[str, Any]]:
    def make(
        event_type: str,
        booking_id: str | None,
        intent_id: str = "pi_3ABC123DEF456",
        error_message: str | None = None,
    ) -> dict[str, Any]:
        obj: dict[str, Any] = {
            "id": intent_id,
            "object": "payment_intent",
            "metadata": {"booking_id": booking_id} if booking_id else {},
        }
        if error_message is not None:
            obj["last_payment_error"] = {"message": error_message}
        return build_event(event_type, obj)

    return make


@pytest.fixture
def signed() -> Callable[..., tuple[bytes, str]]:
    """Serialize an event (raw bytes pass through) and sign it with the test webhook secret."""

    def make(event: Any, secret: str = TEST_WEBHOOK_SECRET) -> tuple[bytes, str]:
        payload = event if isinstance(event, bytes) else json.dumps(event).encode("utf-8")
        return payload, sign_payload(payload, secret)

    return make


# === Sample Data ===


@pytest.fixture
def sample_submission() -> dict[str, Any]:
    """A complete booking form submission."""
    return {
        "customer_name": "Jane Doe",
        "organization_name": "Sunrise Primary School",
        "email": "jane@example.com",
        "phone": "+971500000000",
        "address": "1 Science Way, Dubai",
        "package_type": "classic",
        "date": "2025-06-01",
        "time_slot": "10:00",
        "message": "Grade 3 class, about 40 children",
    }


@pytest.fixture
def make_booking() -> Callable[..., Any]:
    """Build a Booking with sensible defaults; keyword overrides apply."""
    from showbook_shared.models import Booking

    def make(**overrides: Any) -> Booking:
        now = dt.datetime.now(dt.UTC)
        data: dict[str, Any] = {
            "id": str(uuid.uuid4()),
            "booking_number": f"BK-2025-{uuid.uuid4().hex[:6].upper()}",
            "customer_name": "Jane Doe",
            "email": "jane@example.com",
            "phone": "+971500000000",
            "address": "1 Science Way, Dubai",
            "package_type": "classic",
            "date": dt.date(2025, 6, 1),
            "time_slot": "10:00",
            "price": 1800,
            "created_at": now,
            "updated_at": now,
        }
        data.update(overrides)
        return Booking(**data)

    return make


@pytest.fixture
def stored_booking(store: Any, make_booking: Callable[..., Any]) -> Any:
    """A pending booking persisted in the mocked table."""
    return store.create(make_booking())
