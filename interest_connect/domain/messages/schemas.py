"""Pydantic schemas for the messaging API and socket payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from interest_connect.domain.identity.schemas import UserSummary
from interest_connect.domain.messages.models import MessageType


class SendMessageRequest(BaseModel):
	receiver_id: Optional[str] = None
	group_id: Optional[str] = None
	content: str = Field(..., min_length=1, max_length=5000)
	message_type: MessageType = MessageType.TEXT


class MessageOut(BaseModel):
	id: str
	sender: Optional[UserSummary]
	receiver: Optional[UserSummary] = None
	group_id: Optional[str] = None
	content: str
	message_type: MessageType
	is_read: bool
	created_at: datetime


class SendMessageResponse(BaseModel):
	message: str
	data: MessageOut


class ConversationPeer(UserSummary):
	last_active: datetime


class ConversationOut(BaseModel):
	user: ConversationPeer
	last_message: MessageOut
	unread_count: int


class UnreadCountResponse(BaseModel):
	count: int