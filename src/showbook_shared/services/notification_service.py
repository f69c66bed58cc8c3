"""Transactional email notifications sent through Amazon SES.

Every message goes out as a single send_email call with a plain-text and
an HTML part. Callers decide whether a failure is fatal: intake and
confirmation emails are best-effort, the payment-link email is not.
"""

import logging
from functools import lru_cache
from html import escape
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from showbook_shared.config import load_settings
from showbook_shared.models import Booking, package_label

logger = logging.getLogger(__name__)


class NotificationError(Exception):
    """Raised when an email cannot be handed to SES."""


# Simple HTML email shell shared by every message
_HTML_TEMPLATE = """
<html>
<body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; color: #333;">
    <h2 style="color: #6366f1;">{heading}</h2>
    {intro}
    <table style="border-collapse: collapse; width: 100%; margin: 20px 0;">
{rows}
    </table>
    {outro}
    <hr style="border: none; border-top: 1px solid #eee; margin: 20px 0;">
    <p style="color: #999; font-size: 12px;">{organization}</p>
</body>
</html>
"""

_HTML_ROW = (
    '        <tr><td style="padding: 6px 0; font-weight: bold; width: 160px;">{label}</td>'
    '<td style="padding: 6px 0;">{value}</td></tr>'
)


def _booking_rows(booking: Booking) -> list[tuple[str, str]]:
    rows = [
        ("Booking", booking.display_id),
        ("Customer", booking.customer_name),
    ]
    if booking.organization_name:
        rows.append(("Organization", booking.organization_name))
    rows.extend(
        [
            ("Email", booking.email),
            ("Phone", booking.phone),
            ("Address", booking.address),
            ("Package", package_label(booking.package_type)),
            ("Date", booking.date.isoformat()),
            ("Time", booking.time_slot),
            ("Price", str(booking.price)),
        ]
    )
    if booking.address_details:
        rows.append(("Address details", booking.address_details))
    if booking.message:
        rows.append(("Message", booking.message))
    return rows


class NotificationService:
    """Renders and sends booking emails via SES.

    Usage:
        notifier = get_notification_service()
        notifier.send_operator_notice(booking)
    """

    def __init__(self, ses_client: Any | None = None) -> None:
        self._client = ses_client

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = boto3.client("ses", region_name=load_settings().ses_region)
        return self._client

    def _render(
        self,
        heading: str,
        rows: list[tuple[str, str]],
        *,
        intro: str = "",
        outro: str = "",
        link: str | None = None,
        link_label: str = "Pay now",
    ) -> tuple[str, str]:
        """Render the (text, html) bodies of one message."""
        organization = load_settings().organization_name

        text_lines = [heading, ""]
        if intro:
            text_lines.extend([intro, ""])
        text_lines.extend(f"{label}: {value}" for label, value in rows)
        if link:
            text_lines.extend(["", link])
        if outro:
            text_lines.extend(["", outro])
        text_lines.extend(["", organization])

        html_outro = f"<p>{escape(outro)}</p>" if outro else ""
        if link:
            html_outro = (
                f'<p><a href="{escape(link, quote=True)}" style="display: inline-block; '
                'padding: 12px 24px; background: #6366f1; color: white; '
                'text-decoration: none; border-radius: 6px;">'
                f"{escape(link_label)}</a></p>{html_outro}"
            )
        html_body = _HTML_TEMPLATE.format(
            heading=escape(heading),
            intro=f"<p>{escape(intro)}</p>" if intro else "",
            rows="\n".join(
                _HTML_ROW.format(label=escape(label), value=escape(value))
                for label, value in rows
            ),
            outro=html_outro,
            organization=escape(organization),
        )
        return "\n".join(text_lines), html_body

    def _send(self, to_address: str, subject: str, text_body: str, html_body: str) -> str:
        """Send one email.

        Returns:
            The SES message ID.

        Raises:
            NotificationError: If SES rejects or cannot be reached.
        """
        sender = load_settings().sender_email
        try:
            response = self._get_client().send_email(
                Source=sender,
                Destination={"ToAddresses": [to_address]},
                Message={
                    "Subject": {"Data": subject, "Charset": "UTF-8"},
                    "Body": {
                        "Text": {"Data": text_body, "Charset": "UTF-8"},
                        "Html": {"Data": html_body, "Charset": "UTF-8"},
                    },
                },
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("Failed to send email '%s': %s", subject, e)
            raise NotificationError(f"Failed to send email: {e}") from e

        message_id = response.get("MessageId", "")
        logger.info("Sent email '%s' (message_id=%s)", subject, message_id)
        return message_id

    def send_operator_notice(self, booking: Booking) -> str:
        """Notify the operator address that a new booking arrived."""
        subject = f"New booking {booking.display_id} - {booking.customer_name}"
        text, html = self._render(
            "New booking request",
            _booking_rows(booking),
            intro="A new booking has been submitted and is awaiting review.",
        )
        return self._send(load_settings().operator_email, subject, text, html)

    def send_booking_received(self, booking: Booking) -> str:
        """Acknowledge a new booking to the customer."""
        text, html = self._render(
            "We received your booking request",
            _booking_rows(booking),
            intro=f"Hi {booking.customer_name}, thank you for your booking request.",
            outro="We will contact you shortly with a payment link to confirm your show.",
        )
        return self._send(
            booking.email, f"Booking request received - {booking.display_id}", text, html
        )

    def send_booking_confirmed(self, booking: Booking) -> str:
        """Tell the customer that payment was received and the booking is confirmed."""
        text, html = self._render(
            "Your booking is confirmed",
            _booking_rows(booking),
            intro=f"Hi {booking.customer_name}, we have received your payment.",
            outro="We look forward to seeing you.",
        )
        return self._send(
            booking.email, f"Booking confirmed - {booking.display_id}", text, html
        )

    def send_payment_link(self, booking: Booking, payment_link: str) -> str:
        """Email the customer a payment link for their booking."""
        text, html = self._render(
            "Complete your booking",
            _booking_rows(booking),
            intro=(
                f"Hi {booking.customer_name}, please complete payment to "
                "confirm your booking."
            ),
            link=payment_link,
        )
        return self._send(
            booking.email, f"Payment link for booking {booking.display_id}", text, html
        )

    def send_profile_update(
        self,
        email: str,
        full_name: str,
        *,
        phone: str | None = None,
        school_organization: str | None = None,
        job_position: str | None = None,
    ) -> str:
        """Confirm a profile change to the account holder."""
        rows = [("Full name", full_name), ("Email", email)]
        if phone:
            rows.append(("Phone", phone))
        if school_organization:
            rows.append(("School / organization", school_organization))
        if job_position:
            rows.append(("Position", job_position))

        organization = load_settings().organization_name
        text, html = self._render(
            "Profile updated",
            rows,
            intro=f"Hi {full_name}, your profile information was updated.",
            outro="If you did not make this change, please contact us immediately.",
        )
        return self._send(email, f"Profile Updated - {organization}", text, html)

    def send_signup_confirmation(self, email: str, confirmation_url: str) -> str:
        """Ask a new account holder to confirm their email address."""
        organization = load_settings().organization_name
        text, html = self._render(
            "Confirm your email address",
            [("Email", email)],
            intro=(
                f"Welcome to {organization}! Please confirm your email address "
                "to start booking shows."
            ),
            outro="If you did not create an account, you can safely ignore this email.",
            link=confirmation_url,
            link_label="Confirm email address",
        )
        return self._send(email, f"Welcome to {organization} - Confirm Your Email", text, html)


@lru_cache(maxsize=1)
def get_notification_service() -> NotificationService:
    """Get the shared NotificationService instance (singleton pattern)."""
    return NotificationService()
