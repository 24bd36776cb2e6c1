"""Centralised JWT helpers for access tokens.

Uses HS256 with the application's secret key and validates standard claims
plus the expected issuer/audience values.
"""

from __future__ import annotations

import time
from typing import Any, Dict

import jwt
from jwt import InvalidTokenError

from interest_connect.settings import settings


ISSUER = "interest-connect-api"
AUDIENCE = "interest-connect-web"


def encode_access(user_id: str, **claims: Any) -> str:
    """Encode an access token for ``user_id`` valid for ``access_ttl_minutes``."""
    now = int(time.time())
    body: Dict[str, Any] = {
        "iss": ISSUER,
        "aud": AUDIENCE,
        "iat": now,
        "exp": now + settings.access_ttl_minutes * 60,
        "sub": str(user_id),
    }
    body.update(claims)
    return jwt.encode(body, settings.secret_key, algorithm="HS256")


def decode_access(token: str) -> dict[str, Any]:
    """Decode and validate an access token.

    Raises jwt.InvalidTokenError subclasses on failure.
    """
    payload = jwt.decode(
        token,
        settings.secret_key,
        algorithms=["HS256"],
        audience=AUDIENCE,
        issuer=ISSUER,
        leeway=5,
        options={"require": ["exp", "iat", "iss", "aud", "sub"]},
    )
    if not str(payload.get("sub") or "").strip():
        raise InvalidTokenError("missing_claim:sub")
    return payload
