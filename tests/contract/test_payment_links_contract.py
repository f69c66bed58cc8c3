"""Contract tests for POST /payment-links and POST /payment-links/send."""

import pytest
import stripe
from fastapi.testclient import TestClient
from starlette.status import (
    HTTP_200_OK,
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from showbook_api.main import app


LINK = "https://buy.stripe.com/test_abc123"


@pytest.fixture
def client(aws: None, mock_stripe_client) -> TestClient:
    return TestClient(app)


class TestIssuePaymentLink:
    def test_issued_and_recorded(self, client, stored_booking, bookings_table) -> None:
        response = client.post("/payment-links", json={"booking_id": stored_booking.id})

        assert response.status_code == HTTP_200_OK
        body = response.json()
        assert body["success"] is True
        assert body["payment_link"] == LINK
        item = bookings_table.get_item(Key={"id": stored_booking.id})["Item"]
        assert item["payment_link"] == LINK
        assert "payment_link_sent_at" in item

    def test_unknown_booking_never_calls_stripe(self, client, mock_stripe_client) -> None:
        response = client.post("/payment-links", json={"booking_id": "does-not-exist"})

        assert response.status_code == HTTP_404_NOT_FOUND
        assert response.json()["error_code"] == "ERR_NOT_FOUND"
        mock_stripe_client.payment_links.create.assert_not_called()

    def test_missing_booking_id(self, client) -> None:
        response = client.post("/payment-links", json={})

        assert response.status_code == HTTP_400_BAD_REQUEST
        assert response.json()["details"]["missing"] == ["booking_id"]

    def test_missing_secret_key(self, client, stored_booking, monkeypatch) -> None:
        monkeypatch.delenv("STRIPE_SECRET_KEY", raising=False)

        response = client.post("/payment-links", json={"booking_id": stored_booking.id})

        assert response.status_code == HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["error_code"] == "ERR_CONFIGURATION"

    def test_stripe_unavailable(self, client, stored_booking, mock_stripe_client) -> None:
        mock_stripe_client.payment_links.create.side_effect = stripe.APIConnectionError(
            "Network down"
        )

        response = client.post("/payment-links", json={"booking_id": stored_booking.id})

        assert response.status_code == HTTP_500_INTERNAL_SERVER_ERROR
        body = response.json()
        assert body["error_code"] == "ERR_UPSTREAM"
        assert "Network down" in body["details"]["upstream_error"]


class TestSendPaymentLink:
    def test_sends_email(self, client, stored_booking, sent_email_count) -> None:
        response = client.post("/payment-links/send", json={"booking_id": stored_booking.id})

        assert response.status_code == HTTP_200_OK
        body = response.json()
        assert body["payment_link"] == LINK
        assert "jane@example.com" in body["message"]
        assert sent_email_count() == 1

    def test_unknown_booking(self, client) -> None:
        response = client.post("/payment-links/send", json={"booking_id": "does-not-exist"})
        assert response.status_code == HTTP_404_NOT_FOUND

    def test_email_failure(self, client, stored_booking, monkeypatch) -> None:
        monkeypatch.setenv("SES_FROM_EMAIL", "nobody@unverified.example")

        response = client.post("/payment-links/send", json={"booking_id": stored_booking.id})

        assert response.status_code == HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["error_code"] == "ERR_UPSTREAM"
