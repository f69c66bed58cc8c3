"""Runtime configuration read from the process environment.

Settings are resolved at call time so each Lambda invocation sees the
environment it was deployed with. Stripe secrets may also come from SSM
Parameter Store when SSM_PARAMETER_PREFIX is set.
"""

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_SENDER = "Show Bookings <bookings@example.com>"
DEFAULT_OPERATOR_EMAIL = "operator@example.com"
DEFAULT_APP_URL = "http://localhost:3000"


@dataclass(frozen=True)
class Settings:
    """Resolved configuration for one invocation."""

    environment: str
    table_prefix: str
    dynamodb_endpoint_url: str | None
    stripe_secret_key: str | None
    stripe_webhook_secret: str | None
    sender_email: str
    operator_email: str
    ses_region: str | None
    app_url: str
    currency: str
    organization_name: str


def _secret(env_var: str, ssm_name: str) -> str | None:
    """Read a secret from the environment, falling back to SSM if enabled."""
    value = os.environ.get(env_var)
    if value:
        return value

    prefix = os.environ.get("SSM_PARAMETER_PREFIX")
    if not prefix:
        return None

    from .services.ssm_service import SSMServiceError, get_ssm_service

    try:
        return get_ssm_service().get_parameter(f"{prefix.rstrip('/')}/{ssm_name}")
    except SSMServiceError as e:
        logger.warning("Secret %s unavailable from SSM: %s", ssm_name, e)
        return None


def load_settings() -> Settings:
    """Build Settings from the current environment."""
    environment = os.environ.get("ENVIRONMENT", "dev")
    return Settings(
        environment=environment,
        table_prefix=os.environ.get("DYNAMODB_TABLE_PREFIX", f"showbook-{environment}"),
        dynamodb_endpoint_url=os.environ.get("DYNAMODB_ENDPOINT_URL") or None,
        stripe_secret_key=_secret("STRIPE_SECRET_KEY", "stripe/secret_key"),
        stripe_webhook_secret=_secret("STRIPE_WEBHOOK_SECRET", "stripe/webhook_secret"),
        sender_email=os.environ.get("SES_FROM_EMAIL", DEFAULT_SENDER),
        operator_email=os.environ.get("OPERATOR_EMAIL", DEFAULT_OPERATOR_EMAIL),
        ses_region=os.environ.get("SES_REGION") or None,
        app_url=os.environ.get("APP_URL", DEFAULT_APP_URL).rstrip("/"),
        currency=os.environ.get("PAYMENT_CURRENCY", "aed").lower(),
        organization_name=os.environ.get("ORGANIZATION_NAME", "Science Shows"),
    )
