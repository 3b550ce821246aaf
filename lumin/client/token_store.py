"""Token storage for the API client"""
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class TokenStore(ABC):
    """Holds the access and refresh tokens between requests"""

    @abstractmethod
    def get_access_token(self) -> Optional[str]:
        ...

    @abstractmethod
    def get_refresh_token(self) -> Optional[str]:
        ...

    @abstractmethod
    def set_tokens(self, access_token: str, refresh_token: Optional[str] = None) -> None:
        """Store a new access token; the refresh token is kept unless a new one is given"""

    @abstractmethod
    def clear(self) -> None:
        ...


class MemoryTokenStore(TokenStore):
    def __init__(self, access_token: Optional[str] = None, refresh_token: Optional[str] = None):
        self._access_token = access_token
        self._refresh_token = refresh_token

    def get_access_token(self) -> Optional[str]:
        return self._access_token

    def get_refresh_token(self) -> Optional[str]:
        return self._refresh_token

    def set_tokens(self, access_token: str, refresh_token: Optional[str] = None) -> None:
        self._access_token = access_token
        if refresh_token is not None:
            self._refresh_token = refresh_token

    def clear(self) -> None:
        self._access_token = None
        self._refresh_token = None


class FileTokenStore(TokenStore):
    """
    Tokens persisted as a small JSON document

    The file is read on every access so several client processes share one
    login, the way browser local storage is shared between tabs.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable token file {self.path}: {e}")
            return {}

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data), encoding="utf-8")

    def get_access_token(self) -> Optional[str]:
        return self._read().get("access_token")

    def get_refresh_token(self) -> Optional[str]:
        return self._read().get("refresh_token")

    def set_tokens(self, access_token: str, refresh_token: Optional[str] = None) -> None:
        data = self._read()
        data["access_token"] = access_token
        if refresh_token is not None:
            data["refresh_token"] = refresh_token
        self._write(data)

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
