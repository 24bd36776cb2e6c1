"""AsyncPG pool management for the backend."""

from __future__ import annotations

import logging
from typing import Optional

import asyncpg

from interest_connect.settings import settings

logger = logging.getLogger(__name__)

_pool: Optional[asyncpg.pool.Pool] = None


async def init_pool() -> asyncpg.pool.Pool:
	global _pool
	if _pool is None:
		_pool = await asyncpg.create_pool(
			dsn=settings.postgres_url,
			min_size=settings.postgres_min_pool_size,
			max_size=settings.postgres_max_pool_size,
		)
	return _pool


def set_pool(pool: Optional[asyncpg.pool.Pool]) -> None:
	global _pool
	_pool = pool


async def get_pool() -> asyncpg.pool.Pool:
	if _pool is None:
		await init_pool()
	assert _pool is not None
	return _pool


async def pool_or_none() -> Optional[asyncpg.pool.Pool]:
	"""Return the pool, or None when Postgres is not configured or reachable.

	Repositories use this to fall back to their in-memory stores.
	"""
	try:
		return await get_pool()
	except AssertionError:
		return None
	except (OSError, asyncpg.PostgresError):
		logger.warning("postgres unavailable, using in-memory store", exc_info=True)
		return None


async def close_pool() -> None:
	global _pool
	if _pool is not None:
		await _pool.close()
		_pool = None
