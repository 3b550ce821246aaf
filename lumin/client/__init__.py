"""Async HTTP client for the LUMIN API"""

from lumin.client.api_client import LuminClient, LOGIN_ROUTE, REQUEST_TIMEOUT
from lumin.client.dashboard_cache import DashboardCache, DASHBOARD_TTL_SECONDS
from lumin.client.token_store import TokenStore, MemoryTokenStore, FileTokenStore

__all__ = [
    "LuminClient",
    "LOGIN_ROUTE",
    "REQUEST_TIMEOUT",
    "DashboardCache",
    "DASHBOARD_TTL_SECONDS",
    "TokenStore",
    "MemoryTokenStore",
    "FileTokenStore",
]
