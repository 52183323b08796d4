"""
Application entry point.

Configuration, middleware and lifecycle management are delegated to
``bookwise.core.app_factory`` and ``bookwise.core.lifecycle``.
"""

import logging

import sentry_sdk

from bookwise.config.settings import get_settings
from bookwise.core.app_factory import create_app

logger = logging.getLogger(__name__)
settings = get_settings()

# Initialize Sentry for error tracking
if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        send_default_pii=False,
        environment=settings.ENVIRONMENT,
    )

# Create application using factory
app = create_app()

if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting application in {settings.ENVIRONMENT} mode")
    uvicorn.run(
        "bookwise.main:app",
        host="0.0.0.0",
        port=8001,
        reload=settings.DEBUG,
    )
