"""User persistence backed by asyncpg with an in-memory fallback."""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Iterable, List, Optional

import asyncpg

from interest_connect.domain.identity.models import User
from interest_connect.infra.postgres import pool_or_none


class DuplicateEmail(Exception):
	"""Raised by the repository when the email is already registered."""


_USER_COLUMNS = """
	id, name, email, password_hash, age, bio, interests, skills, location,
	profile_picture, user_type, blocked_users, is_verified,
	show_email, show_age, show_location, created_at, last_active
"""


class _InMemoryStore:
	"""Fallback store used in tests when Postgres is unavailable."""

	def __init__(self) -> None:
		self._lock = asyncio.Lock()
		self._users: dict[str, User] = {}

	async def insert(self, user: User) -> User:
		async with self._lock:
			if any(existing.email == user.email for existing in self._users.values()):
				raise DuplicateEmail(user.email)
			self._users[user.id] = user.copy()
			return user.copy()

	async def get(self, user_id: str) -> Optional[User]:
		async with self._lock:
			user = self._users.get(user_id)
			return user.copy() if user else None

	async def get_by_email(self, email: str) -> Optional[User]:
		async with self._lock:
			for user in self._users.values():
				if user.email == email:
					return user.copy()
			return None

	async def get_many(self, user_ids: Iterable[str]) -> List[User]:
		async with self._lock:
			return [self._users[uid].copy() for uid in user_ids if uid in self._users]

	async def list_all(self) -> List[User]:
		async with self._lock:
			ordered = sorted(self._users.values(), key=lambda u: u.created_at)
			return [user.copy() for user in ordered]

	async def save(self, user: User) -> None:
		async with self._lock:
			self._users[user.id] = user.copy()

	async def touch(self, user_id: str, at: datetime) -> None:
		async with self._lock:
			user = self._users.get(user_id)
			if user:
				user.last_active = at

	async def add_block(self, user_id: str, target_id: str) -> None:
		async with self._lock:
			user = self._users.get(user_id)
			if user and target_id not in user.blocked_users:
				user.blocked_users.append(target_id)

	async def set_password(self, user_id: str, password_hash: str) -> None:
		async with self._lock:
			user = self._users.get(user_id)
			if user:
				user.password_hash = password_hash

	def clear(self) -> None:
		self._users.clear()


_MEMORY_STORE = _InMemoryStore()


def reset_memory_store() -> None:
	_MEMORY_STORE.clear()


class UserRepository:
	"""Repository backed by asyncpg with an in-memory fallback."""

	async def create(self, user: User) -> User:
		pool = await pool_or_none()
		if pool is None:
			return await _MEMORY_STORE.insert(user)
		async with pool.acquire() as conn:
			try:
				row = await conn.fetchrow(
					f"""
					INSERT INTO users (
						id, name, email, password_hash, age, bio, interests, skills, location,
						profile_picture, user_type, blocked_users, is_verified,
						show_email, show_age, show_location, created_at, last_active
					)
					VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13, $14, $15, $16, $17, $18)
					RETURNING {_USER_COLUMNS}
					""",
					user.id,
					user.name,
					user.email,
					user.password_hash,
					user.age,
					user.bio,
					user.interests,
					user.skills,
					user.location,
					user.profile_picture,
					user.user_type.value,
					user.blocked_users,
					user.is_verified,
					user.privacy.show_email,
					user.privacy.show_age,
					user.privacy.show_location,
					user.created_at,
					user.last_active,
				)
			except asyncpg.UniqueViolationError as exc:
				raise DuplicateEmail(user.email) from exc
		return User.from_record(row)

	async def get(self, user_id: str) -> Optional[User]:
		pool = await pool_or_none()
		if pool is None:
			return await _MEMORY_STORE.get(user_id)
		async with pool.acquire() as conn:
			row = await conn.fetchrow(f"SELECT {_USER_COLUMNS} FROM users WHERE id = $1", user_id)
		return User.from_record(row) if row else None

	async def get_by_email(self, email: str) -> Optional[User]:
		pool = await pool_or_none()
		if pool is None:
			return await _MEMORY_STORE.get_by_email(email)
		async with pool.acquire() as conn:
			row = await conn.fetchrow(f"SELECT {_USER_COLUMNS} FROM users WHERE email = $1", email)
		return User.from_record(row) if row else None

	async def get_many(self, user_ids: Iterable[str]) -> List[User]:
		"""Fetch users by id, preserving the order of ``user_ids``."""
		ids = list(dict.fromkeys(str(uid) for uid in user_ids))
		if not ids:
			return []
		pool = await pool_or_none()
		if pool is None:
			return await _MEMORY_STORE.get_many(ids)
		async with pool.acquire() as conn:
			rows = await conn.fetch(f"SELECT {_USER_COLUMNS} FROM users WHERE id = ANY($1::text[])", ids)
		by_id = {str(row["id"]): User.from_record(row) for row in rows}
		return [by_id[uid] for uid in ids if uid in by_id]

	async def list_all(self) -> List[User]:
		"""All accounts, oldest first."""
		pool = await pool_or_none()
		if pool is None:
			return await _MEMORY_STORE.list_all()
		async with pool.acquire() as conn:
			rows = await conn.fetch(f"SELECT {_USER_COLUMNS} FROM users ORDER BY created_at ASC")
		return [User.from_record(row) for row in rows]

	async def save_profile(self, user: User) -> None:
		pool = await pool_or_none()
		if pool is None:
			await _MEMORY_STORE.save(user)
			return
		async with pool.acquire() as conn:
			await conn.execute(
				"""
				UPDATE users
				SET name = $2, age = $3, bio = $4, interests = $5, skills = $6, location = $7,
					user_type = $8, show_email = $9, show_age = $10, show_location = $11
				WHERE id = $1
				""",
				user.id,
				user.name,
				user.age,
				user.bio,
				user.interests,
				user.skills,
				user.location,
				user.user_type.value,
				user.privacy.show_email,
				user.privacy.show_age,
				user.privacy.show_location,
			)

	async def touch(self, user_id: str, at: datetime) -> None:
		pool = await pool_or_none()
		if pool is None:
			await _MEMORY_STORE.touch(user_id, at)
			return
		async with pool.acquire() as conn:
			await conn.execute("UPDATE users SET last_active = $2 WHERE id = $1", user_id, at)

	async def add_block(self, user_id: str, target_id: str) -> None:
		pool = await pool_or_none()
		if pool is None:
			await _MEMORY_STORE.add_block(user_id, target_id)
			return
		async with pool.acquire() as conn:
			await conn.execute(
				"""
				UPDATE users
				SET blocked_users = array_append(blocked_users, $2)
				WHERE id = $1 AND NOT ($2 = ANY(blocked_users))
				""",
				user_id,
				target_id,
			)

	async def set_password(self, user_id: str, password_hash: str) -> None:
		pool = await pool_or_none()
		if pool is None:
			await _MEMORY_STORE.set_password(user_id, password_hash)
			return
		async with pool.acquire() as conn:
			await conn.execute("UPDATE users SET password_hash = $2 WHERE id = $1", user_id, password_hash)
