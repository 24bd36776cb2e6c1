"""Password reset flows.

Tokens are random 32-byte hex strings. Only their SHA-256 digest is kept, in
redis under ``pwreset:{digest}`` with a TTL, mapping to the account id.
"""

from __future__ import annotations

import hashlib
import logging
import secrets
from dataclasses import dataclass
from typing import Optional

from interest_connect.domain.identity import service
from interest_connect.domain.identity.models import User
from interest_connect.infra import rate_limit
from interest_connect.infra.redis import redis_client
from interest_connect.obs import metrics as obs_metrics
from interest_connect.settings import settings

logger = logging.getLogger(__name__)


class ResetTokenInvalid(service.IdentityServiceError):
	def __init__(self) -> None:
		super().__init__("reset_token_invalid", status_code=400)


@dataclass(slots=True)
class ResetIssued:
	token: str
	reset_url: str


def _digest(token: str) -> str:
	return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _key(token: str) -> str:
	return f"pwreset:{_digest(token)}"


def _user_key(user_id: str) -> str:
	return f"pwreset:user:{user_id}"


async def request_password_reset(email: str) -> Optional[ResetIssued]:
	"""Issue a reset token when ``email`` belongs to an account.

	Returns None for unknown addresses so callers can answer identically.
	"""
	normalised = service.normalise_email(email)
	if not await rate_limit.PASSWORD_RESET.consume(normalised):
		obs_metrics.inc_identity("pwreset_request", "rate_limited")
		return None
	user = await service.find_by_email(normalised)
	if user is None:
		obs_metrics.inc_identity("pwreset_request", "unknown_email")
		return None
	token = secrets.token_hex(32)
	ttl = settings.password_reset_ttl_seconds
	previous = await redis_client.get(_user_key(user.id))
	if previous:
		await redis_client.delete(f"pwreset:{previous}")
	await redis_client.set(_key(token), user.id, ex=ttl)
	await redis_client.set(_user_key(user.id), _digest(token), ex=ttl)
	reset_url = f"{settings.frontend_url.rstrip('/')}/reset-password.html?token={token}"
	obs_metrics.inc_identity("pwreset_request")
	# No mail transport is wired up, the link only goes to the log.
	logger.info("password reset link issued", extra={"user_id": user.id, "reset_url": reset_url})
	return ResetIssued(token=token, reset_url=reset_url)


async def _resolve(token: str) -> User:
	user_id = await redis_client.get(_key(token))
	if not user_id:
		raise ResetTokenInvalid()
	try:
		return await service.get_user(user_id)
	except service.UserNotFound:
		raise ResetTokenInvalid() from None


async def verify_reset_token(token: str) -> User:
	return await _resolve(token)


async def consume_password_reset(token: str, new_password: str) -> None:
	try:
		user = await _resolve(token)
	except ResetTokenInvalid:
		obs_metrics.inc_identity("pwreset_consume", "invalid")
		raise
	await service.set_password(user.id, new_password)
	await redis_client.delete(_key(token), _user_key(user.id))
	obs_metrics.inc_identity("pwreset_consume")
	logger.info("password reset completed", extra={"user_id": user.id})
