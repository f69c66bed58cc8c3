"""FastAPI application for the show booking REST API.

This package provides REST endpoints for:
- Booking intake, listing and status updates
- Stripe payment links and payment webhooks
- Profile update notification emails

Runs on AWS Lambda behind API Gateway via Mangum, or locally via uvicorn.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from mangum import Mangum

from showbook_api.exceptions import register_exception_handlers
from showbook_api.middleware.correlation import CorrelationIdMiddleware
from showbook_api.routes import (
    bookings_router,
    health_router,
    notifications_router,
    payment_links_router,
    webhooks_router,
)
from showbook_shared.utils.logging import configure_logging

logger = logging.getLogger(__name__)
configure_logging(logging.INFO)

ROUTERS = (
    health_router,
    bookings_router,
    payment_links_router,
    webhooks_router,
    notifications_router,
)

app = FastAPI(
    title="Show Booking API",
    description="REST API for show bookings, payment links and payment webhooks",
    version="0.1.0",
)

app.add_middleware(CorrelationIdMiddleware)

# Public booking form and admin pages may be served from any origin.
# Added last so that it is the outermost middleware and answers pre-flights.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "PATCH", "OPTIONS"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Routes are served at the root and under /api.
# /api matches CloudFront routing: /api/* → API Gateway
for router in ROUTERS:
    app.include_router(router)
    app.include_router(router, prefix="/api")


# Lambda handler - Mangum wraps FastAPI for AWS Lambda + API Gateway
handler = Mangum(app, lifespan="off")


def run_server(host: str = "0.0.0.0", port: int = 8080, reload: bool = True) -> None:
    """Run the FastAPI server.

    Args:
        host: Host to bind to (default: 0.0.0.0)
        port: Port to listen on (default: 8080)
        reload: Enable hot reload for development (default: True)
    """
    import uvicorn

    if reload:
        # Use string reference for reload mode (uvicorn requirement)
        uvicorn.run("showbook_api.main:app", host=host, port=port, reload=True, reload_dirs=["src"])
    else:
        uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run_server()
