"""
Client-side session state.

AuthSession keeps the token (in a cookie jar by default) and the current user,
and talks to the auth API through an injected httpx.Client. A FastAPI
TestClient works too since it is an httpx.Client.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

import httpx

from auth import config as auth_config
from auth.identity import AUTH_COOKIE
from auth.jwt import TokenCodec

logger = logging.getLogger(__name__)

LOGIN_FAILED = "Login failed."


class TokenStore(Protocol):
    def get(self) -> Optional[str]: ...

    def set(self, token: str) -> None: ...

    def clear(self) -> None: ...


class MemoryTokenStore:
    def __init__(self, token: Optional[str] = None) -> None:
        self._token = token

    def get(self) -> Optional[str]:
        return self._token

    def set(self, token: str) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None


class CookieTokenStore:
    """Token kept as the auth_token cookie, so guarded pages receive it too."""

    def __init__(self, cookies: httpx.Cookies, name: str = AUTH_COOKIE) -> None:
        self._cookies = cookies
        self.name = name

    def get(self) -> Optional[str]:
        return self._cookies.get(self.name)

    def set(self, token: str) -> None:
        self.clear()
        self._cookies.set(self.name, token)

    def clear(self) -> None:
        self._cookies.delete(self.name)


@dataclass(frozen=True)
class LoginResult:
    success: bool
    user: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


def _error_message(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return None


class AuthSession:
    def __init__(
        self,
        http: httpx.Client,
        *,
        store: Optional[TokenStore] = None,
        codec: Optional[TokenCodec] = None,
        api_prefix: str = "/api/auth",
    ) -> None:
        self._http = http
        self._store: TokenStore = store if store is not None else CookieTokenStore(http.cookies)
        self._codec = codec
        self._api = api_prefix.rstrip("/")
        self.user: Optional[Dict[str, Any]] = None

    @property
    def codec(self) -> TokenCodec:
        return self._codec or auth_config.get_token_codec()

    @property
    def token(self) -> Optional[str]:
        return self._store.get()

    def _auth_headers(self) -> Dict[str, str]:
        token = self.token
        return {"Authorization": f"Bearer {token}"} if token else {}

    def _clear(self) -> None:
        self._store.clear()
        self.user = None

    def set_token(self, token: str) -> None:
        """
        Store the token and fill in a provisional user from its claims.
        The claims are read WITHOUT verification; fetch_user() confirms them.
        """
        self._store.set(token)
        claims = self.codec.decode_unverified(token)
        if claims:
            email = claims.get("email")
            if not isinstance(email, str):
                email = None
            self.user = {
                "id": claims.get("userId"),
                "email": email,
                "name": (email or "").split("@")[0] or "User",
            }

    def login(self, email: str, password: str) -> LoginResult:
        try:
            response = self._http.post(f"{self._api}/login", json={"email": email, "password": password})
        except httpx.HTTPError as e:
            logger.warning("Login request failed: %s", e)
            return LoginResult(False, error=LOGIN_FAILED)

        if response.status_code != 200:
            return LoginResult(False, error=_error_message(response) or LOGIN_FAILED)

        try:
            data = response.json()
        except ValueError:
            logger.warning("Login response was not JSON")
            return LoginResult(False, error=LOGIN_FAILED)
        if not isinstance(data, dict):
            return LoginResult(False, error=LOGIN_FAILED)
        token = data.get("token")
        if data.get("success") and isinstance(token, str) and token:
            self.set_token(token)
            return LoginResult(True, user=data.get("user"))
        return LoginResult(False, error=LOGIN_FAILED)

    def fetch_user(self) -> Optional[Dict[str, Any]]:
        """Ask the server who the token belongs to; any failure ends the session."""
        if not self.token:
            return None
        try:
            response = self._http.get(f"{self._api}/me", headers=self._auth_headers())
            response.raise_for_status()
            user = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.debug("fetch_user failed, logging out: %s", e)
            self.logout()
            return None
        self.user = user
        return user

    def logout(self) -> None:
        """Tell the server, then always drop the local token and user."""
        try:
            self._http.post(f"{self._api}/logout", headers=self._auth_headers())
        except httpx.HTTPError as e:
            logger.debug("Logout request failed: %s", e)
        finally:
            self._clear()

    def verify_auth(self) -> bool:
        """Local signature/expiry check; an invalid token is dropped."""
        token = self.token
        if not token:
            return False
        if self.codec.verify(token) is None:
            self._clear()
            return False
        return True

    @property
    def is_authenticated(self) -> bool:
        if not self.token or not self.user:
            return False
        return self.verify_auth()

    def restore(self) -> Optional[Dict[str, Any]]:
        """Resume a stored session: a token without a user triggers fetch_user()."""
        if self.token and not self.user:
            return self.fetch_user()
        return self.user
