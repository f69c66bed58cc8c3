"""Notification endpoints."""

from fastapi import APIRouter, Depends

from showbook_api.dependencies import get_notifier
from showbook_api.models.notifications import (
    NotificationResponse,
    ProfileUpdateRequest,
    SignupConfirmationRequest,
)
from showbook_shared.models import BookingError, ErrorCode
from showbook_shared.services.booking_service import upstream_error
from showbook_shared.services.notification_service import (
    NotificationError,
    NotificationService,
)

router = APIRouter(tags=["notifications"])


@router.post(
    "/profile-update-notifications",
    summary="Send profile update email",
    response_model=NotificationResponse,
    responses={
        400: {"description": "email or full_name missing"},
        500: {"description": "Email could not be sent"},
    },
)
async def send_profile_update_notification(
    body: ProfileUpdateRequest,
    notifier: NotificationService = Depends(get_notifier),
) -> NotificationResponse:
    missing = body.missing_fields()
    if missing:
        raise BookingError(
            ErrorCode.VALIDATION_ERROR,
            details={"missing": missing},
            message="Email and full name are required",
        )

    try:
        message_id = notifier.send_profile_update(
            body.email.strip(),
            body.full_name.strip(),
            phone=body.phone,
            school_organization=body.school_organization,
            job_position=body.job_position,
        )
    except NotificationError as e:
        raise upstream_error("send_profile_update", e) from e

    return NotificationResponse(
        message="Profile update notification sent",
        message_id=message_id,
    )


@router.post(
    "/signup-confirmation-notifications",
    summary="Send signup confirmation email",
    response_model=NotificationResponse,
    responses={
        400: {"description": "email or confirmation_url missing"},
        500: {"description": "Email could not be sent"},
    },
)
async def send_signup_confirmation(
    body: SignupConfirmationRequest,
    notifier: NotificationService = Depends(get_notifier),
) -> NotificationResponse:
    missing = body.missing_fields()
    if missing:
        raise BookingError(
            ErrorCode.VALIDATION_ERROR,
            details={"missing": missing},
            message="Email and confirmation URL are required",
        )

    try:
        message_id = notifier.send_signup_confirmation(
            body.email.strip(), body.confirmation_url.strip()
        )
    except NotificationError as e:
        raise upstream_error("send_signup_confirmation", e) from e

    return NotificationResponse(
        message="Confirmation email sent",
        message_id=message_id,
    )
