"""Socket.IO namespace for real-time messaging and presence."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Set, Tuple

import socketio
from jwt import PyJWTError
from pydantic import ValidationError
from socketio.exceptions import ConnectionRefusedError as HandshakeRefused

from interest_connect.domain.common.errors import ServiceError
from interest_connect.domain.messages import service as messages_service
from interest_connect.domain.messages.schemas import SendMessageRequest
from interest_connect.infra import jwt as jwt_helper
from interest_connect.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)

SEND_FAILED = {"message": "Failed to send message"}

_namespace: Optional["MessagingNamespace"] = None


class PresenceRegistry:
	"""Tracks which users have at least one live socket in this process."""

	def __init__(self) -> None:
		self._sockets: Dict[str, Set[str]] = {}
		self._users: Dict[str, str] = {}

	def add(self, sid: str, user_id: str) -> bool:
		"""Register ``sid`` for ``user_id``. Returns True when the user just came online."""
		self._users[sid] = user_id
		sockets = self._sockets.setdefault(user_id, set())
		first = not sockets
		sockets.add(sid)
		return first

	def remove(self, sid: str) -> Tuple[Optional[str], bool]:
		"""Forget ``sid``. Returns its user and whether that user has now gone offline."""
		user_id = self._users.pop(sid, None)
		if user_id is None:
			return None, False
		sockets = self._sockets.get(user_id, set())
		sockets.discard(sid)
		if sockets:
			return user_id, False
		self._sockets.pop(user_id, None)
		return user_id, True

	def user_for(self, sid: str) -> Optional[str]:
		return self._users.get(sid)

	def is_online(self, user_id: str) -> bool:
		return bool(self._sockets.get(user_id))

	def __len__(self) -> int:
		return len(self._sockets)


def _field(payload: Any, *names: str) -> Optional[str]:
	if not isinstance(payload, dict):
		return None
	for name in names:
		value = payload.get(name)
		if value:
			return str(value)
	return None


def _group_id(payload: Any) -> Optional[str]:
	if isinstance(payload, (str, int)):
		return str(payload) or None
	return _field(payload, "group_id", "groupId")


class MessagingNamespace(socketio.AsyncNamespace):
	"""Default namespace: every socket joins its user's room and may join group rooms."""

	def __init__(self, namespace: str = "/") -> None:
		super().__init__(namespace)
		self.presence = PresenceRegistry()

	async def on_connect(self, sid: str, environ: dict, auth: Optional[dict] = None) -> None:
		obs_metrics.socket_connected(self.namespace)
		token = _field(auth, "token")
		try:
			if not token:
				raise PyJWTError("missing token")
			user_id = str(jwt_helper.decode_access(token)["sub"])
		except PyJWTError:
			obs_metrics.socket_disconnected(self.namespace)
			raise HandshakeRefused("authentication_error") from None
		came_online = self.presence.add(sid, user_id)
		obs_metrics.set_online_users(len(self.presence))
		await self.enter_room(sid, self.user_room(user_id))
		if came_online:
			await self.emit("user_online", {"user_id": user_id})

	async def on_disconnect(self, sid: str, reason: Any = None) -> None:
		obs_metrics.socket_disconnected(self.namespace)
		user_id, went_offline = self.presence.remove(sid)
		obs_metrics.set_online_users(len(self.presence))
		if user_id and went_offline:
			await self.emit("user_offline", {"user_id": user_id})

	async def on_send_message(self, sid: str, payload: dict) -> None:
		obs_metrics.socket_event(self.namespace, "send_message")
		user_id = self.presence.user_for(sid)
		if not user_id:
			await self.emit("error", SEND_FAILED, room=sid)
			return
		try:
			request = SendMessageRequest(
				receiver_id=_field(payload, "receiver_id", "receiverId"),
				group_id=_field(payload, "group_id", "groupId"),
				content=(payload or {}).get("content") or "",
			)
			message = await messages_service.send_message(user_id, request)
		except (ServiceError, ValidationError) as exc:
			logger.info("socket send rejected", extra={"user_id": user_id, "error": str(exc)})
			await self.emit("error", SEND_FAILED, room=sid)
			return
		except Exception:
			logger.exception("socket send failed", extra={"user_id": user_id})
			await self.emit("error", SEND_FAILED, room=sid)
			return
		if message.receiver is not None:
			await self.emit("message_sent", message.model_dump(mode="json"), room=sid)

	async def on_join_group(self, sid: str, payload: Any) -> None:
		obs_metrics.socket_event(self.namespace, "join_group")
		group_id = _group_id(payload)
		if group_id and self.presence.user_for(sid):
			await self.enter_room(sid, self.group_room(group_id))

	async def on_leave_group(self, sid: str, payload: Any) -> None:
		obs_metrics.socket_event(self.namespace, "leave_group")
		group_id = _group_id(payload)
		if group_id:
			await self.leave_room(sid, self.group_room(group_id))

	async def on_typing(self, sid: str, payload: dict) -> None:
		obs_metrics.socket_event(self.namespace, "typing")
		user_id = self.presence.user_for(sid)
		receiver_id = _field(payload, "receiver_id", "receiverId")
		if not user_id or not receiver_id:
			return
		is_typing = bool(payload.get("is_typing", payload.get("isTyping", False)))
		await self.emit(
			"user_typing",
			{"user_id": user_id, "is_typing": is_typing},
			room=self.user_room(receiver_id),
		)

	@staticmethod
	def user_room(user_id: str) -> str:
		return f"user:{user_id}"

	@staticmethod
	def group_room(group_id: str) -> str:
		return f"group_{group_id}"


def set_namespace(namespace: Optional[MessagingNamespace]) -> None:
	global _namespace
	_namespace = namespace


def get_namespace() -> Optional[MessagingNamespace]:
	return _namespace


async def emit_new_message(
	payload: dict,
	*,
	receiver_id: Optional[str] = None,
	group_id: Optional[str] = None,
) -> None:
	if _namespace is None:
		return
	obs_metrics.socket_event(_namespace.namespace, "new_message")
	if receiver_id:
		await _namespace.emit("new_message", payload, room=MessagingNamespace.user_room(receiver_id))
	if group_id:
		await _namespace.emit("new_message", payload, room=MessagingNamespace.group_room(group_id))
