"""Event persistence backed by asyncpg with an in-memory fallback."""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import List, Optional

from interest_connect.domain.events.models import Event, EventCategory, EventStatus
from interest_connect.infra.postgres import pool_or_none

_EVENT_COLUMNS = """
    id, title, description, organizer_id, group_id, location, date, duration,
    max_participants, participants, category, is_online, meeting_link, status, created_at
"""


class _InMemoryStore:
    """Fallback store used in tests when Postgres is unavailable."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._events: dict[str, Event] = {}

    async def insert(self, event: Event) -> Event:
        async with self._lock:
            self._events[event.id] = event.copy()
            return event.copy()

    async def get(self, event_id: str) -> Optional[Event]:
        async with self._lock:
            event = self._events.get(event_id)
            return event.copy() if event else None

    async def list_all(self) -> List[Event]:
        async with self._lock:
            return [event.copy() for event in self._events.values()]

    async def add_participant(self, event_id: str, user_id: str) -> Optional[Event]:
        async with self._lock:
            event = self._events.get(event_id)
            if event is None or event.has_participant(user_id) or event.is_full:
                return None
            event.participants.append(user_id)
            return event.copy()

    async def remove_participant(self, event_id: str, user_id: str) -> Optional[Event]:
        async with self._lock:
            event = self._events.get(event_id)
            if event is None or not event.has_participant(user_id) or event.organizer_id == user_id:
                return None
            event.participants = [p for p in event.participants if p != user_id]
            return event.copy()

    def clear(self) -> None:
        self._events.clear()


_MEMORY_STORE = _InMemoryStore()


def reset_memory_store() -> None:
    _MEMORY_STORE.clear()


class EventRepository:
    """Repository backed by asyncpg with an in-memory fallback."""

    async def create(self, event: Event) -> Event:
        pool = await pool_or_none()
        if pool is None:
            return await _MEMORY_STORE.insert(event)
        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                INSERT INTO events (
                    id, title, description, organizer_id, group_id, location, date, duration,
                    max_participants, participants, category, is_online, meeting_link, status, created_at
                )
                VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13, $14, $15)
                RETURNING {_EVENT_COLUMNS}
                """,
                event.id,
                event.title,
                event.description,
                event.organizer_id,
                event.group_id,
                event.location,
                event.date,
                event.duration,
                event.max_participants,
                event.participants,
                event.category.value,
                event.is_online,
                event.meeting_link,
                event.status.value,
                event.created_at,
            )
        return Event.from_record(row)

    async def get(self, event_id: str) -> Optional[Event]:
        pool = await pool_or_none()
        if pool is None:
            return await _MEMORY_STORE.get(event_id)
        async with pool.acquire() as conn:
            row = await conn.fetchrow(f"SELECT {_EVENT_COLUMNS} FROM events WHERE id = $1", event_id)
        return Event.from_record(row) if row else None

    async def list_upcoming(
        self,
        *,
        now: datetime,
        category: Optional[EventCategory] = None,
        is_online: Optional[bool] = None,
        participant_id: Optional[str] = None,
        only_status: Optional[EventStatus] = EventStatus.UPCOMING,
        limit: Optional[int] = None,
    ) -> List[Event]:
        """Events dated at or after ``now``, soonest first."""
        pool = await pool_or_none()
        if pool is None:
            events = [
                e
                for e in await _MEMORY_STORE.list_all()
                if e.date >= now
                and (only_status is None or e.status == only_status)
                and (category is None or e.category == category)
                and (is_online is None or e.is_online == is_online)
                and (participant_id is None or e.has_participant(participant_id))
            ]
            events.sort(key=lambda e: e.date)
            return events[:limit] if limit else events
        async with pool.acquire() as conn:
            rows = await conn.fetch(
                f"""
                SELECT {_EVENT_COLUMNS} FROM events
                WHERE date >= $1
                  AND ($2::text IS NULL OR status = $2)
                  AND ($3::text IS NULL OR category = $3)
                  AND ($4::boolean IS NULL OR is_online = $4)
                  AND ($5::text IS NULL OR $5 = ANY(participants))
                ORDER BY date ASC
                LIMIT $6
                """,
                now,
                only_status.value if only_status else None,
                category.value if category else None,
                is_online,
                participant_id,
                limit,
            )
        return [Event.from_record(row) for row in rows]

    async def add_participant(self, event_id: str, user_id: str) -> Optional[Event]:
        """Append ``user_id`` unless already joined or the event is full.

        Returns None when nothing changed.
        """
        pool = await pool_or_none()
        if pool is None:
            return await _MEMORY_STORE.add_participant(event_id, user_id)
        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                UPDATE events
                SET participants = array_append(participants, $2)
                WHERE id = $1 AND NOT ($2 = ANY(participants))
                  AND cardinality(participants) < max_participants
                RETURNING {_EVENT_COLUMNS}
                """,
                event_id,
                user_id,
            )
        return Event.from_record(row) if row else None

    async def remove_participant(self, event_id: str, user_id: str) -> Optional[Event]:
        pool = await pool_or_none()
        if pool is None:
            return await _MEMORY_STORE.remove_participant(event_id, user_id)
        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                UPDATE events
                SET participants = array_remove(participants, $2)
                WHERE id = $1 AND $2 = ANY(participants) AND organizer_id <> $2
                RETURNING {_EVENT_COLUMNS}
                """,
                event_id,
                user_id,
            )
        return Event.from_record(row) if row else None
