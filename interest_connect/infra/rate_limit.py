"""Fixed-window request budgets kept in redis."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional

from interest_connect.infra.redis import redis_client


@dataclass(frozen=True)
class Budget:
	"""At most ``limit`` attempts per actor in each ``window_seconds`` slot."""

	name: str
	limit: int
	window_seconds: int

	def key(self, actor: str, now: float) -> str:
		return f"rl:{self.name}:{actor}:{int(now // self.window_seconds)}"

	async def consume(self, actor: str, *, now: Optional[float] = None) -> bool:
		"""Spend one attempt for ``actor``. False once the window is used up."""
		key = self.key(actor, time.time() if now is None else now)
		count = int(await redis_client.incr(key))
		if count == 1:
			await redis_client.expire(key, self.window_seconds)
		return count <= self.limit


REGISTER = Budget("register", limit=20, window_seconds=3600)
LOGIN = Budget("login", limit=10, window_seconds=60)
PASSWORD_RESET = Budget("pwreset", limit=5, window_seconds=3600)
