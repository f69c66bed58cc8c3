"""Contract tests for POST /webhooks/payment.

Test categories:
- Signature validation (400)
- Recognized events (200 success)
- Acknowledged no-ops (200 skipped / ignored)
- Replay idempotence
- Processing failures (500)
"""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from starlette.status import (
    HTTP_200_OK,
    HTTP_400_BAD_REQUEST,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from showbook_api.dependencies import get_webhook_handler
from showbook_api.main import app
from showbook_shared.services.booking_store import BookingStore, StoreError
from showbook_shared.services.stripe_service import StripeService
from showbook_shared.services.webhook_handler import WebhookHandler


@pytest.fixture
def client(aws: None) -> TestClient:
    return TestClient(app)


def _post(client: TestClient, payload: bytes, signature: str | None):
    headers = {"Content-Type": "application/json"}
    if signature is not None:
        headers["Stripe-Signature"] = signature
    return client.post("/webhooks/payment", content=payload, headers=headers)


class TestSignatureValidation:
    def test_invalid_signature_rejected_without_mutation(
        self, client, stored_booking, bookings_table, checkout_completed_event, signed
    ) -> None:
        before = bookings_table.get_item(Key={"id": stored_booking.id})["Item"]
        payload, signature = signed(
            checkout_completed_event(stored_booking.id), secret="whsec_attacker"
        )

        response = _post(client, payload, signature)

        assert response.status_code == HTTP_400_BAD_REQUEST
        body = response.json()
        assert body["success"] is False
        assert body["error_code"] == "ERR_WEBHOOK_SIGNATURE"
        assert bookings_table.get_item(Key={"id": stored_booking.id})["Item"] == before

    def test_missing_signature_header(
        self, client, stored_booking, checkout_completed_event, signed
    ) -> None:
        payload, _ = signed(checkout_completed_event(stored_booking.id))

        response = _post(client, payload, None)

        assert response.status_code == HTTP_400_BAD_REQUEST

    def test_missing_webhook_secret(
        self, client, stored_booking, checkout_completed_event, signed, monkeypatch
    ) -> None:
        monkeypatch.delenv("STRIPE_WEBHOOK_SECRET", raising=False)
        payload, signature = signed(checkout_completed_event(stored_booking.id))

        response = _post(client, payload, signature)

        assert response.status_code == HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["error_code"] == "ERR_CONFIGURATION"


class TestRecognizedEvents:
    def test_checkout_completed(
        self, client, stored_booking, bookings_table, checkout_completed_event, signed
    ) -> None:
        event = checkout_completed_event(stored_booking.id)
        payload, signature = signed(event)

        response = _post(client, payload, signature)

        assert response.status_code == HTTP_200_OK
        body = response.json()
        assert body["received"] is True
        assert body["event_type"] == "checkout.session.completed"
        assert body["event_id"] == event["id"]
        assert body["processing_result"] == "success"
        item = bookings_table.get_item(Key={"id": stored_booking.id})["Item"]
        assert item["status"] == "confirmed"
        assert item["payment_status"] == "paid"
        assert item["payment_intent_id"] == "pi_3ABC123DEF456"

    def test_payment_failed(
        self, client, stored_booking, bookings_table, payment_intent_event, signed
    ) -> None:
        payload, signature = signed(
            payment_intent_event(
                "payment_intent.payment_failed",
                stored_booking.id,
                error_message="Insufficient funds",
            )
        )

        response = _post(client, payload, signature)

        assert response.status_code == HTTP_200_OK
        item = bookings_table.get_item(Key={"id": stored_booking.id})["Item"]
        assert item["payment_status"] == "failed"
        assert item["payment_failure_reason"] == "Insufficient funds"

    def test_replay_leaves_identical_state(
        self, client, stored_booking, bookings_table, checkout_completed_event, signed
    ) -> None:
        payload, signature = signed(checkout_completed_event(stored_booking.id))

        assert _post(client, payload, signature).status_code == HTTP_200_OK
        after_first = bookings_table.get_item(Key={"id": stored_booking.id})["Item"]
        assert _post(client, payload, signature).status_code == HTTP_200_OK

        assert bookings_table.get_item(Key={"id": stored_booking.id})["Item"] == after_first


class TestAcknowledgedNoOps:
    def test_missing_booking_reference(self, client, checkout_completed_event, signed) -> None:
        payload, signature = signed(checkout_completed_event(None))

        response = _post(client, payload, signature)

        assert response.status_code == HTTP_200_OK
        assert response.json()["processing_result"] == "skipped"

    def test_unhandled_event_type(
        self, client, stored_booking, bookings_table, payment_intent_event, signed
    ) -> None:
        before = bookings_table.get_item(Key={"id": stored_booking.id})["Item"]
        payload, signature = signed(payment_intent_event("charge.refunded", stored_booking.id))

        response = _post(client, payload, signature)

        assert response.status_code == HTTP_200_OK
        body = response.json()
        assert body["event_type"] == "charge.refunded"
        assert body["processing_result"] == "ignored"
        assert bookings_table.get_item(Key={"id": stored_booking.id})["Item"] == before


class TestProcessingFailure:
    @pytest.fixture
    def failing_store(self):
        store = MagicMock(spec=BookingStore)
        store.mark_paid.side_effect = StoreError("ProvisionedThroughputExceeded")
        app.dependency_overrides[get_webhook_handler] = lambda: WebhookHandler(
            store=store,
            stripe_service=StripeService(),
            notifier=MagicMock(),
        )
        yield store
        app.dependency_overrides.clear()

    def test_store_failure_returns_500(
        self, client, failing_store, checkout_completed_event, signed
    ) -> None:
        payload, signature = signed(checkout_completed_event("b-1"))

        response = _post(client, payload, signature)

        assert response.status_code == HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["error_code"] == "ERR_UPSTREAM"


class TestMalformedEvents:
    def test_non_object_data_is_skipped(self, client, signed) -> None:
        payload, signature = signed(
            {"id": "evt_list", "type": "payment_intent.succeeded", "data": ["pi_123"]}
        )

        response = _post(client, payload, signature)

        assert response.status_code == HTTP_200_OK
        assert response.json()["processing_result"] == "skipped"

    def test_payment_for_cancelled_booking_is_recorded(
        self, client, store, make_booking, bookings_table, checkout_completed_event, signed
    ) -> None:
        booking = store.create(make_booking(status="cancelled"))
        payload, signature = signed(checkout_completed_event(booking.id))

        response = _post(client, payload, signature)

        assert response.status_code == HTTP_200_OK
        assert response.json()["processing_result"] == "success"
        item = bookings_table.get_item(Key={"id": booking.id})["Item"]
        assert item["status"] == "cancelled"
        assert item["payment_status"] == "paid"
