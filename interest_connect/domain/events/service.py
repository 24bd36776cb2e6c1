"""Service for events organised by users, optionally within a group."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional
from uuid import uuid4

from interest_connect.domain.common.errors import ServiceError
from interest_connect.domain.events import schemas
from interest_connect.domain.events.models import Event, EventCategory, EventStatus
from interest_connect.domain.events.repo import EventRepository
from interest_connect.domain.groups.repo import GroupRepository
from interest_connect.domain.groups.service import GroupNotFound
from interest_connect.domain.identity.models import User
from interest_connect.domain.identity.repo import UserRepository
from interest_connect.obs import metrics as obs_metrics
from interest_connect.settings import settings

logger = logging.getLogger(__name__)


class EventError(ServiceError):
    """Raised for event participation failures."""


class EventNotFound(EventError):
    def __init__(self) -> None:
        super().__init__("event_not_found", status_code=404)


class GroupMembershipRequired(EventError):
    def __init__(self) -> None:
        super().__init__("group_membership_required", status_code=403)


class AlreadyJoined(EventError):
    def __init__(self) -> None:
        super().__init__("already_joined")


class EventFull(EventError):
    def __init__(self) -> None:
        super().__init__("event_full")


class NotParticipant(EventError):
    def __init__(self) -> None:
        super().__init__("not_participant")


class OrganizerCannotLeave(EventError):
    def __init__(self) -> None:
        super().__init__("organizer_cannot_leave")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class EventService:
    def __init__(self) -> None:
        self._events = EventRepository()
        self._groups = GroupRepository()
        self._users = UserRepository()

    async def create_event(self, user: User, data: schemas.EventCreateRequest) -> Event:
        """Create an event with the organizer as its first participant."""
        group_id = data.group_id or None
        if group_id:
            group = await self._groups.get(group_id)
            if group is None:
                raise GroupNotFound()
            if not group.is_member(user.id):
                raise GroupMembershipRequired()
        event = Event(
            id=str(uuid4()),
            title=data.title.strip(),
            description=data.description,
            organizer_id=user.id,
            group_id=group_id,
            location=data.location,
            date=_as_utc(data.date),
            duration=data.duration,
            max_participants=data.max_participants,
            participants=[user.id],
            category=data.category,
            is_online=data.is_online,
            meeting_link=data.meeting_link,
            status=EventStatus.UPCOMING,
            created_at=_now(),
        )
        event = await self._events.create(event)
        logger.info("event created", extra={"event_id": event.id, "user_id": user.id, "group_id": group_id})
        return event

    async def get_event(self, event_id: str) -> Event:
        event = await self._events.get(str(event_id))
        if event is None:
            raise EventNotFound()
        return event

    async def list_events(
        self,
        *,
        category: Optional[EventCategory] = None,
        is_online: Optional[bool] = None,
    ) -> List[Event]:
        return await self._events.list_upcoming(
            now=_now(),
            category=category,
            is_online=is_online,
            limit=settings.listing_limit,
        )

    async def my_events(self, user_id: str) -> List[Event]:
        return await self._events.list_upcoming(now=_now(), participant_id=str(user_id), only_status=None)

    async def join_event(self, user: User, event_id: str) -> Event:
        event = await self.get_event(event_id)
        if event.has_participant(user.id):
            raise AlreadyJoined()
        if event.is_full:
            raise EventFull()
        updated = await self._events.add_participant(event.id, user.id)
        if updated is None:
            current = await self.get_event(event.id)
            raise AlreadyJoined() if current.has_participant(user.id) else EventFull()
        obs_metrics.inc_membership("event", "join")
        return updated

    async def leave_event(self, user: User, event_id: str) -> None:
        event = await self.get_event(event_id)
        if not event.has_participant(user.id):
            raise NotParticipant()
        if event.organizer_id == user.id:
            raise OrganizerCannotLeave()
        if await self._events.remove_participant(event.id, user.id) is None:
            raise NotParticipant()
        obs_metrics.inc_membership("event", "leave")

    async def describe(self, events: Iterable[Event]) -> List[schemas.EventResponse]:
        events = list(events)
        wanted: List[str] = []
        group_names = {}
        for event in events:
            wanted.append(event.organizer_id)
            wanted.extend(event.participants)
            if event.group_id and event.group_id not in group_names:
                group = await self._groups.get(event.group_id)
                group_names[event.group_id] = group.name if group else None
        users = {u.id: u for u in await self._users.get_many(wanted)}
        rendered: List[schemas.EventResponse] = []
        for event in events:
            organizer = users.get(event.organizer_id)
            group_name = group_names.get(event.group_id) if event.group_id else None
            rendered.append(
                schemas.EventResponse(
                    id=event.id,
                    title=event.title,
                    description=event.description,
                    organizer=organizer.summary() if organizer else None,
                    group=schemas.EventGroup(id=event.group_id, name=group_name) if group_name else None,
                    location=event.location,
                    date=event.date,
                    duration=event.duration,
                    max_participants=event.max_participants,
                    participants=[
                        schemas.EventParticipant(**users[p].summary(), user_type=users[p].user_type.value)
                        for p in event.participants
                        if p in users
                    ],
                    participant_count=len(event.participants),
                    category=event.category,
                    is_online=event.is_online,
                    meeting_link=event.meeting_link,
                    status=event.status,
                    created_at=event.created_at,
                )
            )
        return rendered
