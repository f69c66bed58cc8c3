"""API-specific request/response models.

Domain models (Booking, StatusUpdate, ...) live in showbook_shared.models
and are reused here where appropriate.

Modules:
- bookings: Intake, listing and status update bodies
- payments: Payment link request/response models
- webhooks: Webhook acknowledgement model
- notifications: Profile update notification models
"""

__all__: list[str] = []
