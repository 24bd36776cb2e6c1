"""Messaging service shared by the REST API and the socket namespace."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, List

from interest_connect.domain.common.errors import ServiceError
from interest_connect.domain.groups.repo import GroupRepository
from interest_connect.domain.groups.service import GroupNotFound
from interest_connect.domain.identity.repo import UserRepository
from interest_connect.domain.identity.service import UserNotFound
from interest_connect.domain.messages import sockets
from interest_connect.domain.messages.models import Message
from interest_connect.domain.messages.repo import MessageRepository
from interest_connect.domain.messages.schemas import (
	ConversationOut,
	ConversationPeer,
	MessageOut,
	SendMessageRequest,
)
from interest_connect.obs import metrics as obs_metrics
from interest_connect.settings import settings

logger = logging.getLogger(__name__)

_MESSAGES = MessageRepository()
_USERS = UserRepository()
_GROUPS = GroupRepository()


class MessagingError(ServiceError):
	"""Raised when a message cannot be addressed."""


class RecipientRequired(MessagingError):
	def __init__(self) -> None:
		super().__init__("recipient_required")


class SingleRecipientOnly(MessagingError):
	def __init__(self) -> None:
		super().__init__("single_recipient_only")


def _now() -> datetime:
	return datetime.now(timezone.utc)


async def render(messages: Iterable[Message]) -> List[MessageOut]:
	"""Attach sender and receiver summaries to stored messages."""
	messages = list(messages)
	wanted: List[str] = []
	for message in messages:
		wanted.append(message.sender_id)
		if message.receiver_id:
			wanted.append(message.receiver_id)
	users = {u.id: u for u in await _USERS.get_many(wanted)}
	rendered: List[MessageOut] = []
	for message in messages:
		sender = users.get(message.sender_id)
		receiver = users.get(message.receiver_id) if message.receiver_id else None
		rendered.append(
			MessageOut(
				id=message.id,
				sender=sender.summary() if sender else None,
				receiver=receiver.summary() if receiver else None,
				group_id=message.group_id,
				content=message.content,
				message_type=message.message_type,
				is_read=message.is_read,
				created_at=message.created_at,
			)
		)
	return rendered


async def send_message(sender_id: str, request: SendMessageRequest) -> MessageOut:
	"""Persist a message and push ``new_message`` to its recipient room."""
	receiver_id = request.receiver_id or None
	group_id = request.group_id or None
	if not receiver_id and not group_id:
		raise RecipientRequired()
	if receiver_id and group_id:
		raise SingleRecipientOnly()
	if await _USERS.get(sender_id) is None:
		raise UserNotFound()
	if receiver_id and await _USERS.get(receiver_id) is None:
		raise UserNotFound()
	if group_id and await _GROUPS.get(group_id) is None:
		raise GroupNotFound()

	message = await _MESSAGES.create_message(
		sender_id,
		request.content,
		_now(),
		receiver_id=receiver_id,
		group_id=group_id,
		message_type=request.message_type,
	)
	kind = "direct" if receiver_id else "group"
	obs_metrics.inc_message_sent(kind)
	logger.info("message sent", extra={"message_id": message.id, "user_id": sender_id, "kind": kind})
	(rendered,) = await render([message])
	await sockets.emit_new_message(
		rendered.model_dump(mode="json"),
		receiver_id=receiver_id,
		group_id=group_id,
	)
	return rendered


async def conversation(user_id: str, peer_id: str) -> List[MessageOut]:
	"""Both directions of a direct conversation, oldest first; marks incoming as read."""
	messages = await _MESSAGES.conversation(user_id, peer_id)
	await _MESSAGES.mark_read(user_id, peer_id)
	return await render(messages)


async def group_history(group_id: str) -> List[MessageOut]:
	messages = await _MESSAGES.group_history(group_id, settings.group_history_limit)
	return await render(messages)


async def conversations(user_id: str) -> List[ConversationOut]:
	summaries = await _MESSAGES.conversations(user_id)
	peers = {u.id: u for u in await _USERS.get_many(s.peer_id for s in summaries)}
	rendered_last = await render(s.last_message for s in summaries)
	items: List[ConversationOut] = []
	for summary, last_message in zip(summaries, rendered_last):
		peer = peers.get(summary.peer_id)
		if peer is None:
			continue
		items.append(
			ConversationOut(
				user=ConversationPeer(**peer.summary(), last_active=peer.last_active),
				last_message=last_message,
				unread_count=summary.unread_count,
			)
		)
	return items


async def unread_count(user_id: str) -> int:
	return await _MESSAGES.unread_count(user_id)
