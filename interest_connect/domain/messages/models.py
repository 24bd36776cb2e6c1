"""Domain models for direct and group messages."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional


class MessageType(str, Enum):
	TEXT = "text"
	IMAGE = "image"
	FILE = "file"


@dataclass(slots=True)
class Message:
	"""A message addressed to exactly one user or one group.

	Ids are ULIDs, so lexical order follows creation order.
	"""

	id: str
	sender_id: str
	content: str
	created_at: datetime
	receiver_id: Optional[str] = None
	group_id: Optional[str] = None
	message_type: MessageType = MessageType.TEXT
	is_read: bool = False

	@classmethod
	def from_record(cls, record: Mapping[str, Any]) -> "Message":
		return cls(
			id=str(record["id"]),
			sender_id=str(record["sender_id"]),
			content=record["content"],
			created_at=record["created_at"],
			receiver_id=str(record["receiver_id"]) if record["receiver_id"] else None,
			group_id=str(record["group_id"]) if record["group_id"] else None,
			message_type=MessageType(record["message_type"]),
			is_read=bool(record["is_read"]),
		)

	def copy(self) -> "Message":
		return replace(self)

	@property
	def is_direct(self) -> bool:
		return self.receiver_id is not None

	def between(self, user_a: str, user_b: str) -> bool:
		return (self.sender_id, self.receiver_id) in ((user_a, user_b), (user_b, user_a))

	def counterpart(self, user_id: str) -> Optional[str]:
		if not self.is_direct:
			return None
		if self.sender_id == user_id:
			return self.receiver_id
		if self.receiver_id == user_id:
			return self.sender_id
		return None


@dataclass(slots=True)
class ConversationSummary:
	peer_id: str
	last_message: Message
	unread_count: int
