"""
Service Container - Dependency Injection Container

Holds the clock and lazily builds the services the API routes use.
"""

from dataclasses import dataclass, field
from typing import Optional
import logging

from lumin.utils.clock import Clock, SystemClock

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """
    Simple dependency injection container for services.

    Services are lazy-loaded on first access via properties.
    The clock and the AI service are injected so tests can pin time and
    replace the model transport.
    """

    clock: Clock = field(default_factory=SystemClock)
    ai_service: Optional[object] = None

    _user_service: Optional[object] = field(default=None, init=False, repr=False)
    _entry_service: Optional[object] = field(default=None, init=False, repr=False)
    _goal_service: Optional[object] = field(default=None, init=False, repr=False)
    _challenge_service: Optional[object] = field(default=None, init=False, repr=False)
    _stats_service: Optional[object] = field(default=None, init=False, repr=False)
    _coach_service: Optional[object] = field(default=None, init=False, repr=False)
    _export_service: Optional[object] = field(default=None, init=False, repr=False)

    @property
    def user_service(self):
        """Get UserService instance (lazy-loaded)"""
        if self._user_service is None:
            from lumin.services.user_service import UserService
            self._user_service = UserService()
            logger.debug("UserService instantiated")
        return self._user_service

    @property
    def challenge_service(self):
        """Get ChallengeService instance (lazy-loaded)"""
        if self._challenge_service is None:
            from lumin.services.challenge_service import ChallengeService
            self._challenge_service = ChallengeService(self.clock)
            logger.debug("ChallengeService instantiated")
        return self._challenge_service

    @property
    def entry_service(self):
        """Get EntryService instance (lazy-loaded)"""
        if self._entry_service is None:
            from lumin.services.entry_service import EntryService
            self._entry_service = EntryService(self.clock, self.challenge_service)
            logger.debug("EntryService instantiated")
        return self._entry_service

    @property
    def goal_service(self):
        if self._goal_service is None:
            from lumin.services.goal_service import GoalService
            self._goal_service = GoalService(self.clock)
            logger.debug("GoalService instantiated")
        return self._goal_service

    @property
    def stats_service(self):
        if self._stats_service is None:
            from lumin.services.stats_service import StatsService
            self._stats_service = StatsService(self.clock)
            logger.debug("StatsService instantiated")
        return self._stats_service

    @property
    def export_service(self):
        if self._export_service is None:
            from lumin.services.export_service import ExportService
            self._export_service = ExportService(self.clock)
            logger.debug("ExportService instantiated")
        return self._export_service

    @property
    def coach_service(self):
        """Get CoachService instance (lazy-loaded)"""
        if self._coach_service is None:
            from lumin.services.ai_service import AIService
            from lumin.services.coach_service import CoachService
            if self.ai_service is None:
                self.ai_service = AIService()
            self._coach_service = CoachService(self.clock, self.ai_service)
            logger.debug("CoachService instantiated")
        return self._coach_service


# Global container instance (initialized at API startup)
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
            "Call init_container() at startup before using services."
        )
    return _container


def init_container(clock: Optional[Clock] = None, ai_service: Optional[object] = None) -> ServiceContainer:
    """
    Initialize the global service container.

    Args:
        clock: Clock for day boundaries (defaults to the app timezone)
        ai_service: Optional AIService, e.g. one with a cache or a fake transport

    Returns:
        ServiceContainer: The initialized container
    """
    global _container

    _container = ServiceContainer(clock=clock or SystemClock(), ai_service=ai_service)

    logger.info("Service container initialized")
    return _container
