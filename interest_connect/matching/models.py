"""Value types consumed and produced by the match scorer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Collection, Optional, Protocol, Sequence, Tuple


class UserType(str, Enum):
	STUDENT = "student"
	PROFESSIONAL = "professional"
	HOBBYIST = "hobbyist"


class Matchable(Protocol):
	"""Attributes the scorer reads from a user record."""

	id: Any
	interests: Sequence[str]
	skills: Sequence[str]
	user_type: Any
	age: Optional[int]
	location: Optional[str]
	blocked_users: Collection[Any]


class GroupMatchable(Protocol):
	"""Attributes the scorer reads from a group record."""

	id: Any
	interests: Sequence[str]
	members: Collection[Any]


@dataclass(frozen=True, slots=True)
class Profile:
	id: str
	interests: Tuple[str, ...] = ()
	skills: Tuple[str, ...] = ()
	user_type: UserType = UserType.STUDENT
	age: Optional[int] = None
	location: Optional[str] = None
	blocked_users: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True, slots=True)
class GroupProfile:
	id: str
	interests: Tuple[str, ...] = ()
	members: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True, slots=True)
class MatchResult:
	user: Any
	match_score: int
	common_interests: Tuple[str, ...]
	common_skills: Tuple[str, ...]


@dataclass(frozen=True, slots=True)
class GroupRecommendation:
	group: Any
	relevance_score: int
	matched_interests: Tuple[str, ...]
