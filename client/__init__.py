"""
Client session helpers for the auth API.
"""
from .session import AuthSession, CookieTokenStore, LoginResult, MemoryTokenStore

__all__ = ["AuthSession", "CookieTokenStore", "LoginResult", "MemoryTokenStore"]
