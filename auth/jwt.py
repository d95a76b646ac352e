"""
Signed session token codec (JWT-shaped, standard library only).

Wire format: ``<b64url(header_json)>.<b64url(claims_json)>.<hex_signature>``

- Base64url without padding for the header and claims segments
- Hex signature over ``headerCode.claimsCode`` keyed by a shared secret
- Pluggable signer: HMAC-SHA256 (default) or the legacy rolling checksum
- exp validation against an injected clock

Three operations:
- ``TokenCodec.generate``: stamp iat/exp and sign
- ``TokenCodec.verify``: signature, then claims, then expiry; ``None`` on any failure
- ``TokenCodec.decode_unverified``: read claims WITHOUT any check (hints only)
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

ALG = "HS256"
TYP = "JWT"
HEADER: Dict[str, str] = {"alg": ALG, "typ": TYP}

DEFAULT_LIFETIME_SECONDS = 7 * 24 * 60 * 60

Signer = Callable[[str, str], str]
Clock = Callable[[], int]


# ============================
# Errors
# ============================

class TokenError(ValueError):
    """Base class for every token rejection."""

    reason = "invalid_token"


class MalformedToken(TokenError):
    reason = "malformed_token"


class MalformedClaims(MalformedToken):
    """Signature matched but the header or claims segment is unusable."""

    reason = "malformed_claims"


class InvalidSignature(TokenError):
    reason = "invalid_signature"


class ExpiredToken(TokenError):
    reason = "expired"


class DecodeError(TokenError):
    """Transport layer cannot invert its input."""

    reason = "decode_error"


@dataclass(frozen=True)
class VerificationResult:
    valid: bool
    reason: str
    claims: Optional[Dict[str, Any]] = None


# ============================
# Transport encoding
# ============================

def b64url_encode(text: str) -> str:
    """Base64url encode UTF-8 text without padding."""
    return base64.urlsafe_b64encode(text.encode("utf-8")).rstrip(b"=").decode("ascii")


def b64url_decode(code: str) -> str:
    """
    Base64url decode with padding restoration.
    Raises DecodeError for anything outside the base64 alphabet or non UTF-8 payloads.
    """
    try:
        raw = code.encode("ascii")
        raw += b"=" * (-len(raw) % 4)
        return base64.b64decode(raw, altchars=b"-_", validate=True).decode("utf-8")
    except (binascii.Error, UnicodeError) as e:
        raise DecodeError(f"Cannot decode segment: {e}") from e


def _dump_json(value: Mapping[str, Any]) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def _load_object(code: str, what: str) -> Dict[str, Any]:
    try:
        value = json.loads(b64url_decode(code))
    except (DecodeError, ValueError, RecursionError) as e:
        raise MalformedClaims(f"Undecodable {what}: {e}") from e
    if not isinstance(value, dict):
        raise MalformedClaims(f"{what} is not a JSON object")
    return value


# ============================
# Signers
# ============================

def rolling_hash(message: str) -> str:
    """
    Non-cryptographic 32-bit rolling checksum (h * 31 + unit) over UTF-16 code units.
    Rendered as the absolute value in lowercase hex.
    """
    units = message.encode("utf-16-le")
    h = 0
    for i in range(0, len(units), 2):
        h = ((h << 5) - h + int.from_bytes(units[i:i + 2], "little")) & 0xFFFFFFFF
    if h & 0x80000000:
        h -= 1 << 32
    return format(abs(h), "x")


def rolling_hash_signer(signing_input: str, secret: str) -> str:
    """Legacy signer: the secret is concatenated into the hashed message."""
    return rolling_hash(f"{signing_input}.{secret}")


def hmac_sha256_signer(signing_input: str, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), signing_input.encode("utf-8"), hashlib.sha256).hexdigest()


SIGNERS: Dict[str, Signer] = {
    "hmac-sha256": hmac_sha256_signer,
    "rolling-hash": rolling_hash_signer,
}


def get_signer(name: str) -> Signer:
    try:
        return SIGNERS[name]
    except KeyError:
        raise ValueError(f"Unknown token signer '{name}', expected one of {sorted(SIGNERS)}") from None


def now_ts() -> int:
    """Return current UNIX timestamp (seconds)."""
    return int(time.time())


# ============================
# Codec
# ============================

def _split(token: Any) -> Tuple[str, str, str]:
    if not isinstance(token, str):
        raise MalformedToken("Token is not a string")
    parts = token.split(".")
    if len(parts) != 3 or not all(parts):
        raise MalformedToken(f"Expected 3 non-empty segments, got {len(parts)}")
    header_b64, claims_b64, signature = parts
    return header_b64, claims_b64, signature


class TokenCodec:
    """Encode, verify and read signed tokens with a fixed secret and lifetime."""

    def __init__(
        self,
        secret: str,
        *,
        lifetime_seconds: int = DEFAULT_LIFETIME_SECONDS,
        signer: Signer = hmac_sha256_signer,
        clock: Clock = now_ts,
    ) -> None:
        self._secret = secret
        self.lifetime_seconds = int(lifetime_seconds)
        self._signer = signer
        self._clock = clock

    def _sign(self, header_b64: str, claims_b64: str) -> str:
        return self._signer(f"{header_b64}.{claims_b64}", self._secret)

    def encode(self, claims: Mapping[str, Any]) -> str:
        """Sign the claims exactly as given (no iat/exp stamping)."""
        header_b64 = b64url_encode(_dump_json(HEADER))
        claims_b64 = b64url_encode(_dump_json(claims))
        return f"{header_b64}.{claims_b64}.{self._sign(header_b64, claims_b64)}"

    def generate(self, payload: Mapping[str, Any]) -> str:
        """
        Issue a token for ``{"userId": ..., "email": ...}``.
        iat = now, exp = iat + lifetime. Any caller-supplied iat/exp is overwritten.
        """
        iat = int(self._clock())
        claims: Dict[str, Any] = dict(payload)
        claims["iat"] = iat
        claims["exp"] = iat + self.lifetime_seconds
        return self.encode(claims)

    def check(self, token: str) -> Dict[str, Any]:
        """
        Verify a token and return its claims.
        Order: segments -> signature -> header/claims decoding -> expiry.
        Raises the specific TokenError subclass on failure.
        """
        header_b64, claims_b64, signature = _split(token)

        expected = self._sign(header_b64, claims_b64)
        if not hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8")):
            raise InvalidSignature("Signature mismatch")

        _load_object(header_b64, "header")
        claims = _load_object(claims_b64, "claims")

        exp = claims.get("exp")
        if exp is not None:
            if isinstance(exp, bool) or not isinstance(exp, (int, float)):
                raise MalformedClaims("'exp' is not a UNIX timestamp")
            if exp < int(self._clock()):
                raise ExpiredToken("Token expired")
        return claims

    def inspect(self, token: str) -> VerificationResult:
        """Tagged verification outcome, for callers that need the failure kind."""
        try:
            claims = self.check(token)
        except TokenError as e:
            return VerificationResult(False, e.reason)
        return VerificationResult(True, "ok", claims)

    def verify(self, token: str) -> Optional[Dict[str, Any]]:
        """Claims of a valid, unexpired token, or None. Never raises."""
        result = self.inspect(token)
        if not result.valid:
            logger.debug("Token rejected: %s", result.reason)
            return None
        return result.claims

    def decode_unverified(self, token: str) -> Optional[Dict[str, Any]]:
        """
        UNVERIFIED read of the claims segment.

        No signature check and no expiry check: anyone can forge what this returns.
        Only use it for optimistic display hints, never for an authorization decision.
        """
        try:
            _, claims_b64, _ = _split(token)
            return _load_object(claims_b64, "claims")
        except TokenError as e:
            logger.debug("Token not decodable: %s", e)
            return None
