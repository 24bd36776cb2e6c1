"""Domain models for accounts and profiles."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Sequence

from interest_connect.matching import UserType

RecordLike = Mapping[str, Any]

DEFAULT_AVATAR = "default-avatar.png"


def _now() -> datetime:
	return datetime.now(timezone.utc)


def _as_str_list(value: Any) -> list[str]:
	if not value:
		return []
	processed: list[str] = []
	for entry in value:
		if entry is None:
			continue
		txt = str(entry).strip()
		if txt:
			processed.append(txt)
	return processed


@dataclass(slots=True)
class PrivacySettings:
	show_email: bool = False
	show_age: bool = True
	show_location: bool = True

	def to_dict(self) -> dict[str, bool]:
		return {
			"show_email": self.show_email,
			"show_age": self.show_age,
			"show_location": self.show_location,
		}


@dataclass(slots=True)
class User:
	"""A registered account. Satisfies the matcher's profile shape directly."""

	id: str
	name: str
	email: str
	password_hash: str
	age: Optional[int] = None
	bio: Optional[str] = None
	interests: list[str] = field(default_factory=list)
	skills: list[str] = field(default_factory=list)
	location: Optional[str] = None
	profile_picture: str = DEFAULT_AVATAR
	user_type: UserType = UserType.STUDENT
	blocked_users: list[str] = field(default_factory=list)
	is_verified: bool = False
	privacy: PrivacySettings = field(default_factory=PrivacySettings)
	created_at: datetime = field(default_factory=_now)
	last_active: datetime = field(default_factory=_now)

	@classmethod
	def from_record(cls, record: RecordLike) -> "User":
		return cls(
			id=str(record["id"]),
			name=str(record["name"]),
			email=str(record["email"]),
			password_hash=str(record["password_hash"]),
			age=record.get("age"),
			bio=record.get("bio"),
			interests=_as_str_list(record.get("interests")),
			skills=_as_str_list(record.get("skills")),
			location=record.get("location"),
			profile_picture=record.get("profile_picture") or DEFAULT_AVATAR,
			user_type=UserType(record.get("user_type") or UserType.STUDENT.value),
			blocked_users=_as_str_list(record.get("blocked_users")),
			is_verified=bool(record.get("is_verified", False)),
			privacy=PrivacySettings(
				show_email=bool(record.get("show_email", False)),
				show_age=bool(record.get("show_age", True)),
				show_location=bool(record.get("show_location", True)),
			),
			created_at=record.get("created_at") or _now(),
			last_active=record.get("last_active") or _now(),
		)

	def copy(self) -> "User":
		return User(
			id=self.id,
			name=self.name,
			email=self.email,
			password_hash=self.password_hash,
			age=self.age,
			bio=self.bio,
			interests=list(self.interests),
			skills=list(self.skills),
			location=self.location,
			profile_picture=self.profile_picture,
			user_type=self.user_type,
			blocked_users=list(self.blocked_users),
			is_verified=self.is_verified,
			privacy=PrivacySettings(**self.privacy.to_dict()),
			created_at=self.created_at,
			last_active=self.last_active,
		)

	def blocks_either_way(self, other: "User") -> bool:
		return other.id in self.blocked_users or self.id in other.blocked_users

	def private_fields(self) -> dict[str, Any]:
		"""Everything the owner may see about their own account."""
		return {
			"id": self.id,
			"name": self.name,
			"email": self.email,
			"age": self.age,
			"bio": self.bio,
			"interests": list(self.interests),
			"skills": list(self.skills),
			"location": self.location,
			"profile_picture": self.profile_picture,
			"user_type": self.user_type.value,
			"is_verified": self.is_verified,
			"privacy_settings": self.privacy.to_dict(),
			"created_at": self.created_at,
			"last_active": self.last_active,
		}

	def public_fields(self, *, reveal_email: bool = True) -> dict[str, Any]:
		"""Fields visible to other users, with privacy settings applied.

		Hidden fields are omitted entirely rather than nulled.
		"""
		payload = self.private_fields()
		payload.pop("privacy_settings")
		if not (reveal_email and self.privacy.show_email):
			payload.pop("email")
		if not self.privacy.show_age:
			payload.pop("age")
		if not self.privacy.show_location:
			payload.pop("location")
		return payload

	def summary(self) -> dict[str, Any]:
		return {"id": self.id, "name": self.name, "profile_picture": self.profile_picture}


def words_match(query: str, values: Sequence[str]) -> bool:
	"""True when any whitespace-separated word of ``query`` occurs in any value, ignoring case."""
	words = query.lower().split()
	haystack = [value.lower() for value in values]
	return any(word in value for word in words for value in haystack)
