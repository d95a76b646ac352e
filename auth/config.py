"""
Auth configuration loader and helpers.

- Loads JSON config from ENV AUTH_CONFIG_PATH or '$DATA_BASE_PATH/auth.json' (DATA_BASE_PATH defaults to ./data).
- Provides read-only accessors for users and JWT settings.
- JWT secret priority: ENV JWT_SECRET > config.jwt_secret > default 'change-me' (logged as WARNING)
- JWT expires seconds default: 604800, 7 days (overridable via config.jwt_expires_seconds)
- JWT signer: 'hmac-sha256' (default) or 'rolling-hash' for tokens issued by the legacy frontend
- Users default to the two built-in mock accounts when the config carries none.
- On missing/invalid config file: log WARNING, use default users and JWT settings.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import pathlib
from typing import Any, Dict, List, Optional

from auth import jwt as jwt_lib

logger = logging.getLogger(__name__)

_DEFAULT_SECRET = "change-me"
_DEFAULT_EXPIRES_SECONDS = jwt_lib.DEFAULT_LIFETIME_SECONDS
_DEFAULT_SIGNER = "hmac-sha256"
_PASSWORD_SALT = "session_auth_salt"

_ENV_JWT_SECRET = "JWT_SECRET"
_ENV_AUTH_CONFIG_PATH = "AUTH_CONFIG_PATH"
_ENV_DATA_BASE_PATH = "DATA_BASE_PATH"

# Plaintext passwords are accepted for the mock accounts only
_DEFAULT_USERS: List[Dict[str, Any]] = [
    {"id": "1", "email": "user@example.com", "password": "password123", "name": "Test User"},
    {"id": "2", "email": "admin@example.com", "password": "admin123", "name": "Administrator"},
]

_CONFIG: Dict[str, Any] = {}
_CODEC: Optional[jwt_lib.TokenCodec] = None


def _effective_config_path() -> str:
    """ENV AUTH_CONFIG_PATH first, then DATA_BASE_PATH/auth.json."""
    env_path = os.environ.get(_ENV_AUTH_CONFIG_PATH)
    if env_path and str(env_path).strip():
        return str(env_path)
    return str(pathlib.Path(os.environ.get(_ENV_DATA_BASE_PATH, "./data")) / "auth.json")


def _load_file(path: str) -> Dict[str, Any]:
    if not os.path.isfile(path):
        logger.warning("Auth config %s not found; using defaults", path)
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Failed to read auth config %s: %s; using defaults", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Auth config %s is not a JSON object; using defaults", path)
        return {}
    return data


def hash_password(password: str) -> str:
    """
    Salted SHA-256 of the password, hex.
    Good enough for the mock backend; a real deployment wants bcrypt/scrypt.
    """
    if not password:
        return ""
    return hashlib.sha256((password + _PASSWORD_SALT).encode("utf-8")).hexdigest()


def verify_password(password: str, hashed_password: str) -> bool:
    if not password or not hashed_password:
        return False
    return hash_password(password) == hashed_password


def _init_config() -> None:
    """
    (Re)load the auth config file, apply ENV overrides and normalise types.
    Also rebuilds the token codec so new secrets/lifetimes take effect.
    """
    global _CONFIG, _CODEC
    cfg = _load_file(_effective_config_path())

    env_secret = os.environ.get(_ENV_JWT_SECRET)
    cfg["jwt_secret_from_env"] = bool(env_secret)
    cfg["jwt_secret"] = env_secret or cfg.get("jwt_secret") or _DEFAULT_SECRET
    if cfg["jwt_secret"] == _DEFAULT_SECRET:
        logger.warning("JWT secret is the insecure default; set %s", _ENV_JWT_SECRET)

    try:
        cfg["jwt_expires_seconds"] = int(cfg.get("jwt_expires_seconds", _DEFAULT_EXPIRES_SECONDS))
    except (TypeError, ValueError):
        logger.warning("Invalid jwt_expires_seconds in config; using default %d", _DEFAULT_EXPIRES_SECONDS)
        cfg["jwt_expires_seconds"] = _DEFAULT_EXPIRES_SECONDS

    signer_name = cfg.get("jwt_signer", _DEFAULT_SIGNER)
    if signer_name not in jwt_lib.SIGNERS:
        logger.warning("Unknown jwt_signer %r in config; using %s", signer_name, _DEFAULT_SIGNER)
        signer_name = _DEFAULT_SIGNER
    cfg["jwt_signer"] = signer_name

    users = cfg.get("users")
    if not isinstance(users, list):
        users = [dict(u) for u in _DEFAULT_USERS]
    cfg["users"] = [u for u in users if isinstance(u, dict) and isinstance(u.get("email"), str) and u["email"]]
    if len(cfg["users"]) != len(users):
        logger.warning("Skipped %d user entries without an email", len(users) - len(cfg["users"]))

    _CONFIG = cfg
    _CODEC = jwt_lib.TokenCodec(
        cfg["jwt_secret"],
        lifetime_seconds=cfg["jwt_expires_seconds"],
        signer=jwt_lib.get_signer(signer_name),
    )
    logger.debug("Auth config loaded. users=%d, signer=%s", len(cfg["users"]), signer_name)


def get_users() -> List[Dict[str, Any]]:
    """Copy of the configured user list."""
    return list(_CONFIG.get("users", []))


def find_user_by_email(email: str) -> Optional[Dict[str, Any]]:
    if not email:
        return None
    for u in _CONFIG.get("users", []):
        if u.get("email") == email:
            return u
    return None


def find_user_by_id(user_id: Any) -> Optional[Dict[str, Any]]:
    if user_id is None:
        return None
    for u in _CONFIG.get("users", []):
        if str(u.get("id")) == str(user_id):
            return u
    return None


def check_credentials(email: str, password: str) -> Optional[Dict[str, Any]]:
    """
    Return the user whose email and password match, else None.
    password_hash wins over a plaintext password field.
    """
    user = find_user_by_email(email)
    if user is None:
        return None
    stored_hash = user.get("password_hash")
    if stored_hash:
        return user if verify_password(password, stored_hash) else None
    stored_password = user.get("password")
    if stored_password is None or stored_password != password:
        return None
    return user


def public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    """The fields of a user record that may leave the server."""
    name = user.get("name")
    return {"id": str(user.get("id")), "email": user.get("email"), "name": name if isinstance(name, str) else None}


def get_jwt_secret() -> str:
    """JWT secret the codec signs with (ENV JWT_SECRET > config > default, resolved at load)."""
    return _CONFIG.get("jwt_secret", _DEFAULT_SECRET) or _DEFAULT_SECRET


def get_jwt_expires_seconds() -> int:
    return _CONFIG.get("jwt_expires_seconds", _DEFAULT_EXPIRES_SECONDS)


def get_token_codec() -> jwt_lib.TokenCodec:
    """Codec built from the current config."""
    if _CODEC is None:
        _init_config()
    return _CODEC  # type: ignore[return-value]


def get_effective_config_snapshot() -> Dict[str, Any]:
    """Shallow copy of the effective config for diagnostics, without secrets or passwords."""
    snapshot = {k: v for k, v in _CONFIG.items() if k not in ("users", "jwt_secret")}
    snapshot["users"] = [public_user(u) for u in _CONFIG.get("users", [])]
    snapshot["config_path"] = _effective_config_path()
    return snapshot


_init_config()
