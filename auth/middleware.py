"""
Route guard middleware.
Pages marked "auth" need a valid session; pages marked "guest" are only for signed-out visitors.
"""
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import RedirectResponse
from typing import Any, Awaitable, Callable, Optional
from urllib.parse import urlencode
import logging
import re

from auth.identity import AUTH_COOKIE, request_token, resolve_identity

logger = logging.getLogger(__name__)

GUARD_AUTH = "auth"
GUARD_GUEST = "guest"


class RouteGuardMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, login_path: str = "/", home_path: str = "/home"):
        super().__init__(app)
        self.login_path = login_path
        self.home_path = home_path
        # Routes not listed here are not guarded (API routes answer 401 themselves)
        self.route_guard_map = {
            re.compile(r"^/home(/.*)?$"): GUARD_AUTH,
            re.compile(r"^/?$"): GUARD_GUEST,
        }

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Any]]):
        path = request.url.path
        guard = self._get_guard_for_route(path)
        if guard is None:
            return await call_next(request)

        token = request_token(request)
        identity = resolve_identity(token) if token else None
        if identity is not None:
            request.state.identity = identity

        if guard == GUARD_AUTH and identity is None:
            target = self._login_redirect_url(request)
            logger.debug(f"RouteGuard: {path} needs a session, redirecting to {target}")
            response = RedirectResponse(target, status_code=302)
            if token:
                # stale or forged
                response.delete_cookie(AUTH_COOKIE)
            return response

        if guard == GUARD_GUEST and identity is not None:
            logger.debug(f"RouteGuard: {path} is for guests, user {identity['user']['id']} sent to {self.home_path}")
            return RedirectResponse(self.home_path, status_code=302)

        return await call_next(request)

    def _get_guard_for_route(self, path: str) -> Optional[str]:
        for pattern, guard in self.route_guard_map.items():
            if pattern.fullmatch(path):
                return guard
        return None

    def _login_redirect_url(self, request: Request) -> str:
        full_path = request.url.path
        if request.url.query:
            full_path = f"{full_path}?{request.url.query}"
        return f"{self.login_path}?{urlencode({'redirect': full_path})}"
