"""
Dependency Injection Container.

Composes the shared singletons with the scheduling domain container.
"""

import logging

from .base import BaseContainer
from .scheduling import SchedulingContainer, SchedulingServices

logger = logging.getLogger(__name__)


class DependencyContainer:
    """
    Dependency Injection Container (Facade).

    Single Responsibility: Compose and delegate to domain-specific containers.
    """

    def __init__(self, base: BaseContainer | None = None):
        self._base = base or BaseContainer()
        self._scheduling = SchedulingContainer(self._base)

        logger.info("DependencyContainer initialized")

    @property
    def settings(self):
        return self._base.settings

    @property
    def base(self) -> BaseContainer:
        return self._base

    @property
    def scheduling(self) -> SchedulingContainer:
        return self._scheduling


_container: DependencyContainer | None = None


def get_container() -> DependencyContainer:
    """Get or create the global container."""
    global _container
    if _container is None:
        _container = DependencyContainer()
    return _container


def reset_container() -> None:
    """Drop the global container (tests)."""
    global _container
    _container = None


__all__ = [
    "BaseContainer",
    "DependencyContainer",
    "SchedulingContainer",
    "SchedulingServices",
    "get_container",
    "reset_container",
]
