"""
Page routes guarded by RouteGuardMiddleware.
"""
from typing import Optional

from fastapi import APIRouter, Request, status

from auth.identity import error_response

router = APIRouter(tags=["pages"])


@router.get("/")
async def login_page(redirect: Optional[str] = None):
    """Login page; `redirect` is where to go after signing in."""
    return {"page": "login", "redirect": redirect}


@router.get("/home")
async def home_page(request: Request):
    identity = getattr(request.state, "identity", None)
    if identity is None:
        return error_response(status.HTTP_401_UNAUTHORIZED, "Authentication token is required.")
    return {"page": "home", "user": identity["user"]}
