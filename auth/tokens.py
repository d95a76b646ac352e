"""
Token operations bound to the configured codec.

generate_token / verify_token are the trusted path.
decode_token performs NO verification of any kind; treat its output as an
unauthenticated hint (e.g. to show a name before /api/auth/me answers).
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from auth import config as auth_config
from auth.jwt import VerificationResult


def generate_token(payload: Mapping[str, Any]) -> str:
    return auth_config.get_token_codec().generate(payload)


def verify_token(token: str) -> Optional[Dict[str, Any]]:
    return auth_config.get_token_codec().verify(token)


def inspect_token(token: str) -> VerificationResult:
    return auth_config.get_token_codec().inspect(token)


def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """UNVERIFIED: signature and expiry are not checked."""
    return auth_config.get_token_codec().decode_unverified(token)
