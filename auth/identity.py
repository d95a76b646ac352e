"""
Resolve who is calling from a cookie or an Authorization header.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import status
from starlette.requests import Request
from starlette.responses import JSONResponse

from auth import config as auth_config
from auth import tokens

logger = logging.getLogger(__name__)

AUTH_COOKIE = "auth_token"


def error_response(status_code: int, message: str, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


def unauthorized(message: str) -> JSONResponse:
    return error_response(status.HTTP_401_UNAUTHORIZED, message, headers={"WWW-Authenticate": "Bearer"})


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Token from 'Bearer <token>', None for a missing or non-bearer header."""
    if not authorization:
        return None
    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1].strip() or None


def request_token(request: Request) -> Optional[str]:
    """auth_token cookie first, then the Authorization header."""
    return request.cookies.get(AUTH_COOKIE) or extract_bearer_token(request.headers.get("Authorization"))


def resolve_identity(token: str) -> Optional[Dict[str, Any]]:
    """
    Verified claims plus the matching user, or None when the token does not
    verify or names a user that no longer exists.
    """
    claims = tokens.verify_token(token)
    if claims is None:
        return None
    user = auth_config.find_user_by_id(claims.get("userId"))
    if user is None:
        logger.debug("Token for unknown user %r", claims.get("userId"))
        return None
    return {"claims": claims, "user": auth_config.public_user(user)}
