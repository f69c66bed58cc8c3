"""End-to-end booking flow through the HTTP API.

Submission, payment link, signed Stripe webhook, confirmation email.
AWS is mocked with moto and Stripe link creation is patched.
"""

import pytest
from fastapi.testclient import TestClient

from showbook_api.main import app

pytestmark = pytest.mark.integration


@pytest.fixture
def client(aws: None, mock_stripe_client) -> TestClient:
    return TestClient(app)


def test_booking_paid_through_stripe(
    client, sample_submission, signed, checkout_completed_event, sent_email_count
) -> None:
    created = client.post("/api/bookings", json=sample_submission)
    assert created.status_code == 201
    booking = created.json()["booking"]
    assert booking["price"] == 1800
    assert booking["status"] == "pending"
    assert booking["payment_status"] == "pending"
    assert sent_email_count() == 2

    link = client.post("/api/payment-links", json={"booking_id": booking["id"]})
    assert link.status_code == 200
    assert link.json()["payment_link"] == "https://buy.stripe.com/test_abc123"

    payload, signature = signed(checkout_completed_event(booking["id"]))
    webhook = client.post(
        "/api/webhooks/payment",
        content=payload,
        headers={"Stripe-Signature": signature, "Content-Type": "application/json"},
    )
    assert webhook.status_code == 200
    assert webhook.json()["processing_result"] == "success"

    listed = client.get("/api/bookings", params={"date": "2025-06-01"}).json()
    assert listed["count"] == 1
    stored = listed["bookings"][0]
    assert stored["status"] == "confirmed"
    assert stored["payment_status"] == "paid"
    assert stored["payment_link"] == "https://buy.stripe.com/test_abc123"
    assert sent_email_count() == 3


def test_payment_for_cancelled_booking_is_recorded_and_refundable(
    client, sample_submission, signed, checkout_completed_event, sent_email_count
) -> None:
    booking = client.post("/bookings", json=sample_submission).json()["booking"]
    cancelled = client.patch(
        "/bookings/update", json={"id": booking["id"], "status": "cancelled"}
    )
    assert cancelled.status_code == 200

    payload, signature = signed(checkout_completed_event(booking["id"]))
    webhook = client.post(
        "/webhooks/payment",
        content=payload,
        headers={"Stripe-Signature": signature},
    )

    assert webhook.json()["processing_result"] == "success"
    stored = client.get("/bookings").json()["bookings"][0]
    assert stored["status"] == "cancelled"
    assert stored["payment_status"] == "paid"
    assert stored["payment_intent_id"] == "pi_3ABC123DEF456"
    # Intake emails only; no confirmation for a cancelled show
    assert sent_email_count() == 2

    refunded = client.patch(
        "/bookings/update", json={"id": booking["id"], "payment_status": "refunded"}
    )
    assert refunded.status_code == 200
    assert refunded.json()["booking"]["payment_status"] == "refunded"
    assert refunded.json()["booking"]["status"] == "cancelled"
