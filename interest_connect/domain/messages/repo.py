"""Message persistence backed by asyncpg with an in-memory fallback."""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import List, Optional

import ulid

from interest_connect.domain.messages.models import ConversationSummary, Message, MessageType
from interest_connect.infra.postgres import pool_or_none

_MESSAGE_COLUMNS = "id, sender_id, receiver_id, group_id, content, message_type, is_read, created_at"


def _chronological(messages: List[Message]) -> List[Message]:
	return sorted(messages, key=lambda m: (m.created_at, m.id))


class _InMemoryStore:
	"""Fallback store used in tests when Postgres is unavailable."""

	def __init__(self) -> None:
		self._lock = asyncio.Lock()
		self._messages: List[Message] = []

	async def create(self, message: Message) -> Message:
		async with self._lock:
			self._messages.append(message.copy())
			return message.copy()

	async def conversation(self, user_id: str, peer_id: str) -> List[Message]:
		async with self._lock:
			return _chronological([m.copy() for m in self._messages if m.between(user_id, peer_id)])

	async def mark_read(self, receiver_id: str, sender_id: str) -> int:
		async with self._lock:
			updated = 0
			for message in self._messages:
				if message.receiver_id == receiver_id and message.sender_id == sender_id and not message.is_read:
					message.is_read = True
					updated += 1
			return updated

	async def group_history(self, group_id: str, limit: int) -> List[Message]:
		async with self._lock:
			history = _chronological([m.copy() for m in self._messages if m.group_id == group_id])
			return history[-limit:] if limit else history

	async def conversations(self, user_id: str) -> List[ConversationSummary]:
		async with self._lock:
			latest: dict[str, Message] = {}
			unread: dict[str, int] = {}
			for message in _chronological(self._messages):
				peer = message.counterpart(user_id)
				if peer is None:
					continue
				latest[peer] = message.copy()
				if message.receiver_id == user_id and not message.is_read:
					unread[peer] = unread.get(peer, 0) + 1
			summaries = [
				ConversationSummary(peer_id=peer, last_message=msg, unread_count=unread.get(peer, 0))
				for peer, msg in latest.items()
			]
			summaries.sort(key=lambda s: (s.last_message.created_at, s.last_message.id), reverse=True)
			return summaries

	async def unread_count(self, user_id: str) -> int:
		async with self._lock:
			return sum(1 for m in self._messages if m.receiver_id == user_id and not m.is_read)

	def clear(self) -> None:
		self._messages.clear()


_MEMORY_STORE = _InMemoryStore()


def reset_memory_store() -> None:
	_MEMORY_STORE.clear()


class MessageRepository:
	"""Repository backed by asyncpg with an in-memory fallback."""

	async def create_message(
		self,
		sender_id: str,
		content: str,
		created_at: datetime,
		*,
		receiver_id: Optional[str] = None,
		group_id: Optional[str] = None,
		message_type: MessageType = MessageType.TEXT,
	) -> Message:
		message = Message(
			id=str(ulid.new()),
			sender_id=sender_id,
			content=content,
			created_at=created_at,
			receiver_id=receiver_id,
			group_id=group_id,
			message_type=message_type,
		)
		pool = await pool_or_none()
		if pool is None:
			return await _MEMORY_STORE.create(message)
		async with pool.acquire() as conn:
			row = await conn.fetchrow(
				f"""
				INSERT INTO messages (id, sender_id, receiver_id, group_id, content, message_type, is_read, created_at)
				VALUES ($1, $2, $3, $4, $5, $6, FALSE, $7)
				RETURNING {_MESSAGE_COLUMNS}
				""",
				message.id,
				message.sender_id,
				message.receiver_id,
				message.group_id,
				message.content,
				message.message_type.value,
				message.created_at,
			)
		return Message.from_record(row)

	async def conversation(self, user_id: str, peer_id: str) -> List[Message]:
		"""Direct messages between two users in both directions, oldest first."""
		pool = await pool_or_none()
		if pool is None:
			return await _MEMORY_STORE.conversation(user_id, peer_id)
		async with pool.acquire() as conn:
			rows = await conn.fetch(
				f"""
				SELECT {_MESSAGE_COLUMNS} FROM messages
				WHERE (sender_id = $1 AND receiver_id = $2) OR (sender_id = $2 AND receiver_id = $1)
				ORDER BY created_at ASC, id ASC
				""",
				user_id,
				peer_id,
			)
		return [Message.from_record(row) for row in rows]

	async def mark_read(self, receiver_id: str, sender_id: str) -> int:
		pool = await pool_or_none()
		if pool is None:
			return await _MEMORY_STORE.mark_read(receiver_id, sender_id)
		async with pool.acquire() as conn:
			status = await conn.execute(
				"""
				UPDATE messages SET is_read = TRUE
				WHERE receiver_id = $1 AND sender_id = $2 AND NOT is_read
				""",
				receiver_id,
				sender_id,
			)
		return int(status.split()[-1])

	async def group_history(self, group_id: str, limit: int) -> List[Message]:
		"""The latest ``limit`` group messages, oldest first."""
		pool = await pool_or_none()
		if pool is None:
			return await _MEMORY_STORE.group_history(group_id, limit)
		async with pool.acquire() as conn:
			rows = await conn.fetch(
				f"""
				SELECT {_MESSAGE_COLUMNS} FROM (
					SELECT {_MESSAGE_COLUMNS} FROM messages
					WHERE group_id = $1
					ORDER BY created_at DESC, id DESC
					LIMIT $2
				) recent
				ORDER BY created_at ASC, id ASC
				""",
				group_id,
				limit,
			)
		return [Message.from_record(row) for row in rows]

	async def conversations(self, user_id: str) -> List[ConversationSummary]:
		"""One entry per direct-message counterpart, most recent first."""
		pool = await pool_or_none()
		if pool is None:
			return await _MEMORY_STORE.conversations(user_id)
		async with pool.acquire() as conn:
			rows = await conn.fetch(
				f"""
				SELECT DISTINCT ON (peer_id) peer_id, {_MESSAGE_COLUMNS},
					(
						SELECT COUNT(*) FROM messages u
						WHERE u.sender_id = peer_id AND u.receiver_id = $1 AND NOT u.is_read
					) AS unread_count
				FROM (
					SELECT CASE WHEN sender_id = $1 THEN receiver_id ELSE sender_id END AS peer_id, *
					FROM messages
					WHERE receiver_id IS NOT NULL AND (sender_id = $1 OR receiver_id = $1)
				) direct
				ORDER BY peer_id, created_at DESC, id DESC
				""",
				user_id,
			)
		summaries = [
			ConversationSummary(
				peer_id=str(row["peer_id"]),
				last_message=Message.from_record(row),
				unread_count=int(row["unread_count"]),
			)
			for row in rows
		]
		summaries.sort(key=lambda s: (s.last_message.created_at, s.last_message.id), reverse=True)
		return summaries

	async def unread_count(self, user_id: str) -> int:
		pool = await pool_or_none()
		if pool is None:
			return await _MEMORY_STORE.unread_count(user_id)
		async with pool.acquire() as conn:
			count = await conn.fetchval(
				"SELECT COUNT(*) FROM messages WHERE receiver_id = $1 AND NOT is_read",
				user_id,
			)
		return int(count or 0)
