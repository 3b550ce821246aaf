"""Short-lived cache for the dashboard payload"""
import logging
from datetime import datetime, timedelta
from typing import Any, Optional

from lumin.utils.clock import Clock, SystemClock

logger = logging.getLogger(__name__)

DASHBOARD_TTL_SECONDS = 300


class DashboardCache:
    """
    Single-slot cache with a time-to-live

    Writes through the client invalidate it so the next dashboard read
    reflects the new XP, streak and goals.
    """

    def __init__(self, ttl_seconds: float = DASHBOARD_TTL_SECONDS, clock: Optional[Clock] = None):
        self.ttl = timedelta(seconds=ttl_seconds)
        self.clock = clock or SystemClock()
        self._data: Optional[Any] = None
        self._stored_at: Optional[datetime] = None

    def get(self) -> Optional[Any]:
        if self._stored_at is None:
            return None
        if self.clock.now() - self._stored_at >= self.ttl:
            logger.debug("Dashboard cache expired")
            self.invalidate()
            return None
        return self._data

    def set(self, data: Any) -> None:
        self._data = data
        self._stored_at = self.clock.now()

    def invalidate(self) -> None:
        self._data = None
        self._stored_at = None
