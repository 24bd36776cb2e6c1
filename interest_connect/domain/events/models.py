"""Domain models for events."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Mapping, Optional

DEFAULT_DURATION_MINUTES = 60
DEFAULT_MAX_PARTICIPANTS = 20


class EventCategory(str, Enum):
    STUDY = "study"
    SPORTS = "sports"
    ARTS = "arts"
    TECHNOLOGY = "technology"
    BUSINESS = "business"
    SOCIAL = "social"
    OTHER = "other"


class EventStatus(str, Enum):
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Event:
    id: str
    title: str
    description: str
    organizer_id: str
    location: str
    date: datetime
    category: EventCategory
    group_id: Optional[str] = None
    duration: int = DEFAULT_DURATION_MINUTES
    max_participants: int = DEFAULT_MAX_PARTICIPANTS
    participants: List[str] = field(default_factory=list)
    is_online: bool = False
    meeting_link: Optional[str] = None
    status: EventStatus = EventStatus.UPCOMING
    created_at: datetime = field(default_factory=_now)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Event":
        return cls(
            id=str(record["id"]),
            title=record["title"],
            description=record["description"],
            organizer_id=str(record["organizer_id"]),
            location=record["location"],
            date=record["date"],
            category=EventCategory(record["category"]),
            group_id=str(record["group_id"]) if record["group_id"] else None,
            duration=record["duration"],
            max_participants=record["max_participants"],
            participants=[str(p) for p in record["participants"] or []],
            is_online=record["is_online"],
            meeting_link=record["meeting_link"],
            status=EventStatus(record["status"]),
            created_at=record["created_at"],
        )

    def copy(self) -> "Event":
        clone = Event(**{name: getattr(self, name) for name in self.__dataclass_fields__})
        clone.participants = list(self.participants)
        return clone

    def has_participant(self, user_id: str) -> bool:
        return str(user_id) in self.participants

    @property
    def is_full(self) -> bool:
        return len(self.participants) >= self.max_participants
