"""Domain models for interest groups."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Mapping, Optional

DEFAULT_GROUP_IMAGE = "default-group.png"
DEFAULT_MAX_MEMBERS = 50


class GroupCategory(str, Enum):
    STUDY = "study"
    SPORTS = "sports"
    ARTS = "arts"
    TECHNOLOGY = "technology"
    BUSINESS = "business"
    LANGUAGES = "languages"
    MUSIC = "music"
    OTHER = "other"


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Group:
    id: str
    name: str
    description: str
    category: GroupCategory
    creator_id: str
    interests: List[str] = field(default_factory=list)
    members: List[str] = field(default_factory=list)
    admins: List[str] = field(default_factory=list)
    max_members: int = DEFAULT_MAX_MEMBERS
    is_private: bool = False
    group_image: str = DEFAULT_GROUP_IMAGE
    created_at: datetime = field(default_factory=_now)
    last_activity: datetime = field(default_factory=_now)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Group":
        return cls(
            id=str(record["id"]),
            name=record["name"],
            description=record["description"],
            category=GroupCategory(record["category"]),
            creator_id=str(record["creator_id"]),
            interests=list(record["interests"] or []),
            members=[str(m) for m in record["members"] or []],
            admins=[str(a) for a in record["admins"] or []],
            max_members=record["max_members"],
            is_private=record["is_private"],
            group_image=record["group_image"] or DEFAULT_GROUP_IMAGE,
            created_at=record["created_at"],
            last_activity=record["last_activity"],
        )

    def copy(self) -> "Group":
        return Group(
            id=self.id,
            name=self.name,
            description=self.description,
            category=self.category,
            creator_id=self.creator_id,
            interests=list(self.interests),
            members=list(self.members),
            admins=list(self.admins),
            max_members=self.max_members,
            is_private=self.is_private,
            group_image=self.group_image,
            created_at=self.created_at,
            last_activity=self.last_activity,
        )

    def is_member(self, user_id: str) -> bool:
        return str(user_id) in self.members

    @property
    def is_full(self) -> bool:
        return len(self.members) >= self.max_members

    def matches_search(self, search: Optional[str]) -> bool:
        """Loose text search: any word found in the name, description or interests."""
        if not search:
            return True
        haystack = " ".join([self.name, self.description, *self.interests]).lower()
        return any(word in haystack for word in search.lower().split())
