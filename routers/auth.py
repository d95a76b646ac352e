"""
Mock auth API
- POST /login: email + password against the configured users, returns a signed token
- GET /me: user behind a Bearer token (verified: signature and expiry)
- POST /logout: stateless, the client drops its token
Error bodies are {"error": "..."}.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Header, status
from pydantic import BaseModel, Field

from auth import config as auth_config
from auth import tokens
from auth.identity import error_response, extract_bearer_token, unauthorized

logger = logging.getLogger(__name__)


router = APIRouter(prefix="/api/auth", tags=["auth"])


# ============================
# Models
# ============================

class LoginRequest(BaseModel):
    email: str = Field(..., description="Account email")
    password: str = Field(..., description="Plaintext password")


class UserInfo(BaseModel):
    id: str
    email: str
    name: Optional[str] = None


class LoginResponse(BaseModel):
    success: bool = True
    token: str
    user: UserInfo


class LogoutResponse(BaseModel):
    success: bool = True


class ErrorResponse(BaseModel):
    error: str


# ============================
# Routes
# ============================

@router.post(
    "/login",
    response_model=LoginResponse,
    responses={401: {"model": ErrorResponse}},
)
async def login(body: LoginRequest):
    logger.info(f"Login attempt for {body.email}")
    user = auth_config.check_credentials(body.email, body.password)
    if user is None:
        logger.warning(f"Login failed for {body.email}")
        return unauthorized("Invalid email or password.")

    token = tokens.generate_token({"userId": str(user.get("id")), "email": user.get("email")})
    logger.info(f"User {user.get('id')} logged in")
    return LoginResponse(token=token, user=UserInfo(**auth_config.public_user(user)))


@router.get(
    "/me",
    response_model=UserInfo,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_me(authorization: Optional[str] = Header(None)):
    token = extract_bearer_token(authorization)
    if token is None:
        return unauthorized("Authentication token is required.")

    result = tokens.inspect_token(token)
    if not result.valid:
        logger.debug(f"/me rejected token: {result.reason}")
        return unauthorized("Invalid token.")

    claims: Dict[str, Any] = result.claims or {}
    user = auth_config.find_user_by_id(claims.get("userId"))
    if user is None:
        return error_response(status.HTTP_404_NOT_FOUND, "User not found.")
    return UserInfo(**auth_config.public_user(user))


@router.post("/logout", response_model=LogoutResponse)
async def logout():
    return LogoutResponse()
