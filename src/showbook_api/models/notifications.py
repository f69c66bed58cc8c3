"""Profile update notification models."""

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ProfileUpdateRequest(BaseModel):
    """Body of POST /profile-update-notifications."""

    model_config = ConfigDict(extra="ignore")

    email: Optional[str] = None
    full_name: Optional[str] = None
    phone: Optional[str] = None
    school_organization: Optional[str] = None
    job_position: Optional[str] = None

    def missing_fields(self) -> list[str]:
        return [
            name
            for name in ("email", "full_name")
            if not (getattr(self, name) or "").strip()
        ]


class SignupConfirmationRequest(BaseModel):
    """Body of POST /signup-confirmation-notifications.

    The link may be sent as ``confirmation_url`` or ``confirmationUrl``.
    """

    model_config = ConfigDict(extra="ignore")

    email: Optional[str] = None
    confirmation_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("confirmation_url", "confirmationUrl"),
    )

    def missing_fields(self) -> list[str]:
        return [
            name
            for name in ("email", "confirmation_url")
            if not (getattr(self, name) or "").strip()
        ]


class NotificationResponse(BaseModel):
    """Acknowledgement that an email was handed to the mail service."""

    success: bool = True
    message: str
    message_id: Optional[str] = None
