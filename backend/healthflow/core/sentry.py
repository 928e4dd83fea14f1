"""
Sentry Integration Module.

Configures Sentry for error tracking and logging integration. Disabled
unless SENTRY_DSN is configured.
"""

import logging
from typing import Optional, Dict, Any

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

logger = logging.getLogger(__name__)

IGNORED_EXCEPTIONS = (
    "ConnectionResetError",
    "BrokenPipeError",
    "ClientDisconnected",
    "LocationNotFound",
    "ProcedureNotFound",
)

IGNORED_TRANSACTIONS = (
    "/health",
    "/metrics",
    "/favicon.ico",
)


def init_sentry(
    dsn: Optional[str],
    environment: str = "development",
    release: str = "1.0.0",
    traces_sample_rate: float = 0.1,
) -> bool:
    """
    Initialize Sentry SDK for the FastAPI backend.

    Args:
        dsn: Sentry DSN. Nothing is initialized when empty.
        environment: Environment name (production, staging, development).
        release: Application release/version string.
        traces_sample_rate: Performance transaction sample rate.

    Returns:
        True if Sentry was initialized.
    """
    if not dsn:
        logger.info("Sentry DSN not configured. Error tracking disabled.")
        return False

    logging_integration = LoggingIntegration(
        level=logging.WARNING,  # Capture warnings and above as breadcrumbs
        event_level=logging.ERROR,  # Send errors as Sentry events
    )

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=f"healthflow-backend@{release}",
        traces_sample_rate=traces_sample_rate,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            StarletteIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
            logging_integration,
        ],
        send_default_pii=False,
        before_send=before_send_handler,
        before_send_transaction=before_send_transaction_handler,
        attach_stacktrace=True,
        max_breadcrumbs=50,
    )

    logger.info(f"Sentry initialized for environment: {environment}")
    return True


def before_send_handler(event: Dict[str, Any], hint: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Drop expected client errors and scrub sensitive headers."""
    if "exc_info" in hint:
        exc_type, _, _ = hint["exc_info"]
        if exc_type.__name__ in IGNORED_EXCEPTIONS:
            return None

    if "request" in event:
        headers = event["request"].get("headers", {})
        for header in ("authorization", "x-api-key", "cookie"):
            if header in headers:
                headers[header] = "[Filtered]"

    return event


def before_send_transaction_handler(
    event: Dict[str, Any],
    hint: Dict[str, Any]
) -> Optional[Dict[str, Any]]:
    """Filter out health check and metrics transactions."""
    transaction_name = event.get("transaction", "")
    for endpoint in IGNORED_TRANSACTIONS:
        if endpoint in transaction_name:
            return None
    return event
