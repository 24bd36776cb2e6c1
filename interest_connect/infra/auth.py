"""Authentication helpers for FastAPI endpoints and socket handshakes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import PyJWTError

from interest_connect.infra import jwt as jwt_helper
from interest_connect.settings import settings


@dataclass(slots=True)
class AuthenticatedUser:
	id: str
	token_issued_at: Optional[int] = None


_bearer_scheme = HTTPBearer(auto_error=False)


def verify_access_jwt(token: str) -> AuthenticatedUser:
	"""Decode an access JWT and return the caller it was issued to.

	Every decode failure is reported as ``invalid_token``.
	"""
	try:
		payload = jwt_helper.decode_access(token)
	except PyJWTError:
		raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid_token")
	issued_at = payload.get("iat")
	return AuthenticatedUser(
		id=str(payload["sub"]).strip(),
		token_issued_at=int(issued_at) if issued_at is not None else None,
	)


async def get_current_user(
	x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
	credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> AuthenticatedUser:
	"""Resolve the caller from a Bearer token.

	Development builds also accept a bare ``X-User-Id`` header for local tools.
	"""
	if credentials and credentials.scheme.lower() == "bearer":
		return verify_access_jwt(credentials.credentials)

	if settings.is_dev() and x_user_id and x_user_id.strip():
		return AuthenticatedUser(id=x_user_id.strip())

	raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid_token")
