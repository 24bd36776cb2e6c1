"""Service layer for accounts, profiles, search and matching."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple
from uuid import uuid4

from interest_connect.domain.common.errors import ServiceError
from interest_connect.domain.groups.repo import GroupRepository
from interest_connect.domain.identity import schemas
from interest_connect.domain.identity.models import PrivacySettings, User, words_match
from interest_connect.domain.identity.repo import DuplicateEmail, UserRepository
from interest_connect.infra import jwt as jwt_helper
from interest_connect.infra import rate_limit
from interest_connect.infra.password import check_needs_rehash, hash_password, verify_password
from interest_connect.matching import MatchResult, find_matches
from interest_connect.obs import metrics as obs_metrics
from interest_connect.settings import settings

logger = logging.getLogger(__name__)

_REPO = UserRepository()
_GROUPS = GroupRepository()


class IdentityServiceError(ServiceError):
	"""Raised for account and profile failures."""


class EmailTaken(IdentityServiceError):
	def __init__(self) -> None:
		super().__init__("email_taken", status_code=409)


class InvalidCredentials(IdentityServiceError):
	def __init__(self) -> None:
		super().__init__("invalid_credentials", status_code=401)


class UserNotFound(IdentityServiceError):
	def __init__(self) -> None:
		super().__init__("user_not_found", status_code=404)


class RateLimited(IdentityServiceError):
	def __init__(self) -> None:
		super().__init__("rate_limited", status_code=429)


def _now() -> datetime:
	return datetime.now(timezone.utc)


def normalise_email(email: str) -> str:
	return email.strip().lower()


async def register(payload: schemas.RegisterRequest, *, ip: str = "unknown") -> Tuple[User, str]:
	"""Create an account and return it together with a fresh access token."""
	if not await rate_limit.REGISTER.consume(ip):
		obs_metrics.inc_identity("register", "rate_limited")
		raise RateLimited()
	now = _now()
	user = User(
		id=str(uuid4()),
		name=payload.name.strip(),
		email=normalise_email(payload.email),
		password_hash=hash_password(payload.password),
		age=payload.age,
		bio=payload.bio,
		interests=[tag.strip() for tag in payload.interests if tag.strip()],
		skills=[tag.strip() for tag in payload.skills if tag.strip()],
		location=payload.location,
		user_type=payload.user_type,
		created_at=now,
		last_active=now,
	)
	try:
		user = await _REPO.create(user)
	except DuplicateEmail:
		obs_metrics.inc_identity("register", "email_taken")
		raise EmailTaken() from None
	obs_metrics.inc_identity("register")
	logger.info("user registered", extra={"user_id": user.id})
	return user, jwt_helper.encode_access(user.id)


async def login(payload: schemas.LoginRequest, *, ip: str = "unknown") -> Tuple[User, str]:
	email = normalise_email(payload.email)
	if not await rate_limit.LOGIN.consume(f"{ip}:{email}"):
		obs_metrics.inc_identity("login", "rate_limited")
		raise RateLimited()
	user = await _REPO.get_by_email(email)
	if user is None or not verify_password(user.password_hash, payload.password):
		obs_metrics.inc_identity("login", "invalid_credentials")
		raise InvalidCredentials()
	if check_needs_rehash(user.password_hash):
		user.password_hash = hash_password(payload.password)
		await _REPO.set_password(user.id, user.password_hash)
	user.last_active = _now()
	await _REPO.touch(user.id, user.last_active)
	obs_metrics.inc_identity("login")
	return user, jwt_helper.encode_access(user.id)


async def get_user(user_id: str) -> User:
	user = await _REPO.get(str(user_id))
	if user is None:
		raise UserNotFound()
	return user


async def touch(user: User) -> None:
	user.last_active = _now()
	await _REPO.touch(user.id, user.last_active)


async def update_profile(user: User, payload: schemas.ProfileUpdateRequest) -> User:
	"""Apply a partial update. Empty strings and omitted fields leave values untouched."""
	if payload.name and payload.name.strip():
		user.name = payload.name.strip()
	if payload.age:
		user.age = payload.age
	if payload.bio:
		user.bio = payload.bio
	if payload.interests is not None:
		user.interests = [tag.strip() for tag in payload.interests if tag.strip()]
	if payload.skills is not None:
		user.skills = [tag.strip() for tag in payload.skills if tag.strip()]
	if payload.location:
		user.location = payload.location
	if payload.user_type:
		user.user_type = payload.user_type
	if payload.privacy_settings is not None:
		user.privacy = PrivacySettings(**payload.privacy_settings.model_dump())
	await _REPO.save_profile(user)
	return user


async def _visible_others(user: User) -> List[User]:
	"""Every account except ``user`` and anyone with a block between them."""
	return [
		other
		for other in await _REPO.list_all()
		if other.id != user.id and not user.blocks_either_way(other)
	]


async def search(
	user: User,
	*,
	query: Optional[str] = None,
	user_type: Optional[str] = None,
	interests: Optional[str] = None,
	limit: Optional[int] = None,
) -> List[User]:
	query = (query or "").strip()
	wanted = [tag.strip() for tag in (interests or "").split(",") if tag.strip()]
	results: List[User] = []
	for other in await _visible_others(user):
		if query and not words_match(query, [other.name, *other.interests, *other.skills]):
			continue
		if user_type and other.user_type.value != user_type:
			continue
		if wanted and not any(tag in other.interests for tag in wanted):
			continue
		results.append(other)
	return results[: limit or settings.search_limit]


async def matches(user: User, *, limit: Optional[int] = None) -> List[MatchResult]:
	candidates = await _visible_others(user)
	results = find_matches(user, candidates, limit or settings.match_limit)
	obs_metrics.observe_matches(len(results))
	return results


async def block(user: User, target_id: str) -> None:
	target = await _REPO.get(str(target_id))
	if target is None:
		raise UserNotFound()
	if target.id not in user.blocked_users:
		user.blocked_users.append(target.id)
		await _REPO.add_block(user.id, target.id)
		obs_metrics.inc_identity("block")
		logger.info("user blocked", extra={"user_id": user.id, "target_id": target.id})


async def set_password(user_id: str, new_password: str) -> None:
	await _REPO.set_password(user_id, hash_password(new_password))


async def find_by_email(email: str) -> Optional[User]:
	return await _REPO.get_by_email(normalise_email(email))


async def joined_groups(user_id: str) -> List[schemas.GroupSummary]:
	groups = await _GROUPS.list_for_member(user_id)
	return [schemas.GroupSummary(id=g.id, name=g.name, category=g.category.value) for g in groups]


async def profile_view(user: User) -> schemas.UserProfile:
	return schemas.UserProfile(**user.private_fields(), joined_groups=await joined_groups(user.id))


async def public_view(user_id: str) -> schemas.PublicUser:
	"""Another user's profile with their privacy settings applied."""
	user = await get_user(user_id)
	return schemas.PublicUser(**user.public_fields(), joined_groups=await joined_groups(user.id))


def listing_view(user: User) -> schemas.PublicUser:
	"""Compact public view used in search and match listings. Never includes the email."""
	return schemas.PublicUser(**user.public_fields(reveal_email=False))
