# Standard library imports
import logging

# Third-party imports
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

# Local application imports
from civic_issues.core.monitoring.logging import get_logger
from civic_issues.settings import settings

logger = get_logger(__name__)


def setup_sentry() -> bool:
    """
    Initialise Sentry with the FastAPI and logging integrations.

    Only runs in production with a DSN configured. Logs of level WARNING and
    above become breadcrumbs, errors become events.

    Returns:
        True if Sentry was initialised by this call
    """
    if settings.ENVIRONMENT != "production" or not settings.SENTRY_DSN:
        return False

    if sentry_sdk.get_client().is_active():
        logger.info("Sentry already initialised, skipping")
        return False

    logger.info(f"Initializing Sentry in {settings.ENVIRONMENT} environment")
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        integrations=[
            FastApiIntegration(),
            LoggingIntegration(level=logging.WARNING, event_level=logging.ERROR),
        ],
        environment=settings.ENVIRONMENT,
        traces_sample_rate=1.0,  # tweak for performance
    )
    return True
