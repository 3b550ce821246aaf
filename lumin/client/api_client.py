"""
Async client for the LUMIN HTTP API

Wraps every authenticated request with:
- a hard 10 second timeout
- exactly one refresh-and-retry cycle when the server answers 401
- session expiry handling when the refresh fails (tokens cleared, callback
  invoked with the login route, SessionExpiredError raised)
"""
import logging
from typing import Any, Callable, Dict, Optional

import httpx

from lumin.client.dashboard_cache import DashboardCache
from lumin.client.token_store import MemoryTokenStore, TokenStore
from lumin.exceptions import SessionExpiredError, wrap_external_exception

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:5000/api"
REQUEST_TIMEOUT = 10.0
LOGIN_ROUTE = "/login"


class LuminClient:
    """
    API client used by front ends and scripts

    Example:
        async with LuminClient(on_session_expired=navigate) as client:
            await client.login("ada@example.com", "secret123")
            dashboard = await client.get_dashboard()
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token_store: Optional[TokenStore] = None,
        on_session_expired: Optional[Callable[[str], Any]] = None,
        dashboard_cache: Optional[DashboardCache] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = REQUEST_TIMEOUT
    ):
        self.tokens = token_store or MemoryTokenStore()
        self.on_session_expired = on_session_expired
        self.dashboard_cache = dashboard_cache or DashboardCache()
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "LuminClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ==========================================
    # Transport
    # ==========================================

    async def _send(
        self,
        method: str,
        path: str,
        json: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
        auth: bool = True
    ) -> httpx.Response:
        headers = {"Content-Type": "application/json"}
        token = self.tokens.get_access_token() if auth else None
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            return await self._http.request(method, path, json=json, params=params, headers=headers)
        except httpx.TimeoutException as e:
            raise wrap_external_exception(e, operation=f"{method} {path}") from e

    async def _refresh_tokens(self) -> bool:
        """Exchange the stored refresh token; True when new tokens were stored"""
        refresh_token = self.tokens.get_refresh_token()
        if not refresh_token:
            return False

        try:
            response = await self._send(
                "POST", "/auth/refresh", json={"refresh_token": refresh_token}, auth=False
            )
        except Exception as e:
            logger.warning(f"Token refresh failed: {e}")
            return False

        if response.status_code != 200:
            logger.info(f"Token refresh rejected with status {response.status_code}")
            return False

        try:
            data = response.json().get("data") or {}
        except ValueError as e:
            logger.warning(f"Token refresh returned an unreadable body: {e}")
            return False
        if not isinstance(data, dict) or not data.get("access_token"):
            return False
        self.tokens.set_tokens(data["access_token"], data.get("refresh_token"))
        return True

    def _expire_session(self) -> None:
        self.tokens.clear()
        self.dashboard_cache.invalidate()
        if self.on_session_expired is not None:
            self.on_session_expired(LOGIN_ROUTE)

    async def request(
        self,
        method: str,
        path: str,
        json: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
        auth: bool = True
    ) -> httpx.Response:
        """
        Send a request, refreshing the access token once on 401

        The retried response is returned as-is, even if it is another 401.

        Raises:
            SessionExpiredError: If the token refresh fails
            ExternalAPIError: If the request times out
        """
        response = await self._send(method, path, json=json, params=params, auth=auth)
        if response.status_code != 401 or not auth:
            return response

        logger.debug(f"{method} {path} returned 401, refreshing tokens")
        if not await self._refresh_tokens():
            self._expire_session()
            raise SessionExpiredError()

        return await self._send(method, path, json=json, params=params, auth=auth)

    async def call(
        self,
        method: str,
        path: str,
        json: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
        auth: bool = True
    ) -> Dict[str, Any]:
        """Send a request and return the decoded response envelope"""
        response = await self.request(method, path, json=json, params=params, auth=auth)
        return response.json()

    async def _write(self, method: str, path: str, json: Optional[Any] = None) -> Dict[str, Any]:
        """Mutating call; clears the cached dashboard"""
        result = await self.call(method, path, json=json)
        self.dashboard_cache.invalidate()
        return result

    # ==========================================
    # Auth
    # ==========================================

    async def register(self, name: str, email: str, password: str) -> Dict[str, Any]:
        result = await self.call(
            "POST", "/auth/register",
            json={"name": name, "email": email, "password": password},
            auth=False,
        )
        self._store_login(result)
        return result

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        result = await self.call(
            "POST", "/auth/login", json={"email": email, "password": password}, auth=False
        )
        self._store_login(result)
        return result

    def _store_login(self, result: Dict[str, Any]) -> None:
        data = result.get("data") or {}
        if result.get("success") and data.get("access_token"):
            self.tokens.set_tokens(data["access_token"], data.get("refresh_token"))
            self.dashboard_cache.invalidate()

    def logout(self) -> None:
        self.tokens.clear()
        self.dashboard_cache.invalidate()

    async def get_me(self) -> Dict[str, Any]:
        return await self.call("GET", "/auth/me")

    # ==========================================
    # Dashboard & stats
    # ==========================================

    async def get_dashboard(self, force_refresh: bool = False) -> Dict[str, Any]:
        """Dashboard envelope, served from the cache while it is fresh"""
        if not force_refresh:
            cached = self.dashboard_cache.get()
            if cached is not None:
                return cached

        result = await self.call("GET", "/stats/dashboard")
        if result.get("success"):
            self.dashboard_cache.set(result)
        return result

    async def get_stats(self, name: str, **params: Any) -> Dict[str, Any]:
        """Any /stats view: mood-trends, weekly-activity, goal-consistency, level, streak"""
        return await self.call("GET", f"/stats/{name}", params=params or None)

    # ==========================================
    # Entries
    # ==========================================

    async def create_entry(self, entry: Dict[str, Any]) -> Dict[str, Any]:
        return await self._write("POST", "/entries", json=entry)

    async def get_today_entry(self) -> Dict[str, Any]:
        return await self.call("GET", "/entries/today")

    async def list_entries(self, **filters: Any) -> Dict[str, Any]:
        return await self.call("GET", "/entries", params=filters or None)

    async def update_entry(self, entry_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        return await self._write("PUT", f"/entries/{entry_id}", json=updates)

    async def delete_entry(self, entry_id: str) -> Dict[str, Any]:
        return await self._write("DELETE", f"/entries/{entry_id}")

    # ==========================================
    # Goals
    # ==========================================

    async def create_goal(self, goal: Dict[str, Any]) -> Dict[str, Any]:
        return await self._write("POST", "/goals", json=goal)

    async def list_goals(self, **filters: Any) -> Dict[str, Any]:
        return await self.call("GET", "/goals", params=filters or None)

    async def update_goal_progress(self, goal_id: str, current_value: float) -> Dict[str, Any]:
        return await self._write("PATCH", f"/goals/{goal_id}/progress", json={"current_value": current_value})

    async def complete_milestone(self, goal_id: str, milestone_id: str) -> Dict[str, Any]:
        return await self._write("PATCH", f"/goals/{goal_id}/milestones/{milestone_id}")

    async def delete_goal(self, goal_id: str) -> Dict[str, Any]:
        return await self._write("DELETE", f"/goals/{goal_id}")

    # ==========================================
    # Challenges
    # ==========================================

    async def get_today_challenges(self) -> Dict[str, Any]:
        return await self.call("GET", "/challenges/today")

    async def complete_challenge(self, challenge_id: str) -> Dict[str, Any]:
        return await self._write("PATCH", f"/challenges/{challenge_id}/complete")

    # ==========================================
    # AI coach
    # ==========================================

    async def get_smart_prompts(self) -> Dict[str, Any]:
        return await self.call("GET", "/ai/smart-prompts")

    async def chat(self, message: str, history: Optional[list] = None) -> Dict[str, Any]:
        return await self.call("POST", "/ai/chat", json={"message": message, "history": history or []})

    async def motivate(self, situation: Optional[str] = None) -> Dict[str, Any]:
        return await self.call("POST", "/ai/motivate", json={"situation": situation})
