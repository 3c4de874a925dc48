"""JWT creation and validation (ES256).

Access tokens carry the platform role in `roles`; refresh tokens carry
identity only and use their own audience, so neither can stand in for the
other.  The refresh endpoint re-reads the user's current role.
"""

from __future__ import annotations

import hashlib
import uuid
from datetime import UTC, datetime, timedelta

import jwt
from cryptography.hazmat.primitives.asymmetric import ec

# Ephemeral key pair per process; tokens do not survive a restart.
_private_key = ec.generate_private_key(ec.SECP256R1())
_public_key = _private_key.public_key()

ALGORITHM = "ES256"
ISSUER = "mentor-buddy"
AUDIENCE = "mentor-buddy"
ACCESS_TOKEN_TTL_MIN = 15

REFRESH_AUDIENCE = "mentor-buddy-refresh"
REFRESH_TOKEN_TTL_DAYS = 7

RESET_AUDIENCE = "mentor-buddy-reset"
RESET_TOKEN_TTL_MIN = 30


def _encode(sub: str, audience: str, ttl: timedelta, **extra) -> str:
    now = datetime.now(UTC)
    payload = {
        "sub": sub,
        "iss": ISSUER,
        "aud": audience,
        "exp": now + ttl,
        "iat": now,
        "jti": str(uuid.uuid4()),
        **extra,
    }
    return jwt.encode(payload, _private_key, algorithm=ALGORITHM)


def _decode(token: str, audience: str) -> dict:
    return jwt.decode(
        token,
        _public_key,
        algorithms=[ALGORITHM],
        issuer=ISSUER,
        audience=audience,
        options={"require": ["sub", "exp", "iat", "jti"]},
    )


def create_access_token(*, sub: str, role: str) -> str:
    return _encode(
        sub, AUDIENCE, timedelta(minutes=ACCESS_TOKEN_TTL_MIN), roles=[role]
    )


def decode_access_token(token: str) -> dict:
    """Verify signature and claims, return the payload.

    Raises jwt.ExpiredSignatureError, jwt.InvalidTokenError on failure.
    """
    return _decode(token, AUDIENCE)


def create_refresh_token(*, sub: str) -> str:
    return _encode(sub, REFRESH_AUDIENCE, timedelta(days=REFRESH_TOKEN_TTL_DAYS))


def decode_refresh_token(token: str) -> dict:
    return _decode(token, REFRESH_AUDIENCE)


def password_fingerprint(password_hash: str) -> str:
    return hashlib.sha256(password_hash.encode()).hexdigest()[:16]


def create_reset_token(*, sub: str, password_hash: str) -> str:
    """Single-use password reset token.

    Bound to the current password hash: once the password changes, every
    outstanding reset token for the user stops verifying.
    """
    return _encode(
        sub,
        RESET_AUDIENCE,
        timedelta(minutes=RESET_TOKEN_TTL_MIN),
        pwv=password_fingerprint(password_hash),
    )


def decode_reset_token(token: str) -> dict:
    return _decode(token, RESET_AUDIENCE)


def issue_token_pair(*, sub: str, role: str) -> tuple[str, str]:
    return create_access_token(sub=sub, role=role), create_refresh_token(sub=sub)
