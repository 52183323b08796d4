"""
Application factory for FastAPI.

Handles FastAPI application creation and configuration only; lifecycle
lives in ``bookwise.core.lifecycle``.
"""

import logging
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bookwise.api.exception_handlers import register_exception_handlers
from bookwise.api.middleware import RequestLoggingMiddleware
from bookwise.api.router import api_router
from bookwise.config.settings import Settings, get_settings
from bookwise.core.lifecycle import get_lifecycle_manager, lifespan

logger = logging.getLogger(__name__)


class AppFactory:
    """
    Factory for creating and configuring FastAPI applications.

    Each configuration step is handled by a dedicated method.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()

    def create_app(self, with_lifespan: bool = True) -> FastAPI:
        """
        Create and configure the FastAPI application.

        Args:
            with_lifespan: Attach startup/shutdown (sweeps, logging setup).
                Tests build the app without it.
        """
        app = self._create_base_app(with_lifespan)

        self._configure_middleware(app)
        self._configure_exception_handlers(app)
        self._configure_routes(app)
        self._configure_health_endpoint(app)

        logger.info(f"Application created: {self._settings.PROJECT_NAME}")
        return app

    def _create_base_app(self, with_lifespan: bool) -> FastAPI:
        return FastAPI(
            title=self._settings.PROJECT_NAME,
            description=self._settings.PROJECT_DESCRIPTION,
            version=self._settings.VERSION,
            docs_url=f"{self._settings.API_V1_STR}/docs" if self._settings.DEBUG else None,
            redoc_url=f"{self._settings.API_V1_STR}/redoc" if self._settings.DEBUG else None,
            lifespan=lifespan if with_lifespan else None,
        )

    def _configure_middleware(self, app: FastAPI) -> None:
        """CORS outermost, request logging inside it."""
        app.add_middleware(
            CORSMiddleware,
            allow_origins=self._get_cors_origins(),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
        app.add_middleware(RequestLoggingMiddleware, tenant_header=self._settings.TENANT_HEADER)

    def _configure_exception_handlers(self, app: FastAPI) -> None:
        register_exception_handlers(app)

    def _configure_routes(self, app: FastAPI) -> None:
        app.include_router(api_router, prefix=self._settings.API_V1_STR)

    def _configure_health_endpoint(self, app: FastAPI) -> None:
        @app.get("/health", tags=["health"])
        async def health_check() -> dict[str, Any]:
            scheduler = get_lifecycle_manager().scheduler
            return {
                "status": "ok",
                "environment": self._settings.ENVIRONMENT,
                "sweeps": {
                    "running": bool(scheduler and scheduler.is_running),
                    "jobs": scheduler.get_jobs_info() if scheduler else [],
                },
            }

    def _get_cors_origins(self) -> list[str]:
        if self._settings.DEBUG:
            return ["*"]
        return [self._settings.WEB_URL]


def create_app(settings: Settings | None = None, with_lifespan: bool = True) -> FastAPI:
    """Create FastAPI application using the factory."""
    return AppFactory(settings).create_app(with_lifespan=with_lifespan)
