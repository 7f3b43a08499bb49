"""
Service Container - Dependency Injection Container

Builds service instances on first access around a shared Database.
"""

from dataclasses import dataclass, field
from typing import Optional
import logging

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """
    Simple dependency injection container for services.

    Services are lazy-loaded on first access via properties.
    """

    db: object  # Database instance

    _checkin_service: Optional[object] = field(default=None, init=False, repr=False)
    _progress_service: Optional[object] = field(default=None, init=False, repr=False)
    _habit_service: Optional[object] = field(default=None, init=False, repr=False)

    @property
    def checkin_service(self):
        """Get CheckInService instance (lazy-loaded)"""
        if self._checkin_service is None:
            from microhabits.services.checkin_service import CheckInService
            self._checkin_service = CheckInService(self.db)
            logger.debug("CheckInService instantiated")
        return self._checkin_service

    @property
    def progress_service(self):
        """Get ProgressService instance (lazy-loaded)"""
        if self._progress_service is None:
            from microhabits.services.progress_service import ProgressService
            self._progress_service = ProgressService(self.db)
            logger.debug("ProgressService instantiated")
        return self._progress_service

    @property
    def habit_service(self):
        """Get HabitService instance (lazy-loaded)"""
        if self._habit_service is None:
            from microhabits.services.habit_service import HabitService
            self._habit_service = HabitService(self.db)
            logger.debug("HabitService instantiated")
        return self._habit_service


# Global container instance (initialized in the API lifespan)
_container: Optional[ServiceContainer] = None


def get_container() -> ServiceContainer:
    """
    Get the global service container.

    Raises:
        RuntimeError: If container not initialized (call init_container first)
    """
    if _container is None:
        raise RuntimeError(
            "Service container not initialized. "
            "Call init_container() during application startup."
        )
    return _container


def init_container(db: object) -> ServiceContainer:
    """
    Initialize the global service container.

    Args:
        db: Database instance

    Returns:
        ServiceContainer: The initialized container
    """
    global _container

    _container = ServiceContainer(db=db)
    logger.info("Service container initialized")
    return _container
