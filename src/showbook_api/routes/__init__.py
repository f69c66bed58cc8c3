"""API routes package.

Routers are organized by domain:

- health: Liveness check
- bookings: Intake, listing and manual status updates
- payment_links: Stripe payment link issuance and delivery
- webhooks: Stripe payment event reconciliation
- notifications: Profile update emails

All routers are registered in main.py at the root and under /api.
"""

from showbook_api.routes.bookings import router as bookings_router
from showbook_api.routes.health import router as health_router
from showbook_api.routes.notifications import router as notifications_router
from showbook_api.routes.payment_links import router as payment_links_router
from showbook_api.routes.webhooks import router as webhooks_router

__all__ = [
    "bookings_router",
    "health_router",
    "notifications_router",
    "payment_links_router",
    "webhooks_router",
]
