"""Pydantic schemas for account, profile and password reset flows."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import BaseModel, EmailStr, Field

from interest_connect.matching import UserType

Tag = Annotated[str, Field(min_length=1, max_length=50)]


class PrivacySettingsIn(BaseModel):
	show_email: bool = False
	show_age: bool = True
	show_location: bool = True


class RegisterRequest(BaseModel):
	name: Annotated[str, Field(min_length=1, max_length=100)]
	email: EmailStr
	password: Annotated[str, Field(min_length=6)]
	age: Optional[Annotated[int, Field(ge=16, le=100)]] = None
	bio: Optional[Annotated[str, Field(max_length=500)]] = None
	interests: List[Tag] = Field(default_factory=list)
	skills: List[Tag] = Field(default_factory=list)
	location: Optional[str] = None
	user_type: UserType = UserType.STUDENT


class LoginRequest(BaseModel):
	email: EmailStr
	password: str


class ProfileUpdateRequest(BaseModel):
	name: Optional[Annotated[str, Field(max_length=100)]] = None
	age: Optional[Annotated[int, Field(ge=16, le=100)]] = None
	bio: Optional[Annotated[str, Field(max_length=500)]] = None
	interests: Optional[List[Tag]] = None
	skills: Optional[List[Tag]] = None
	location: Optional[str] = None
	user_type: Optional[UserType] = None
	privacy_settings: Optional[PrivacySettingsIn] = None


class GroupSummary(BaseModel):
	id: str
	name: str
	category: str


class UserSummary(BaseModel):
	id: str
	name: str
	profile_picture: str


class UserProfile(BaseModel):
	id: str
	name: str
	email: str
	age: Optional[int] = None
	bio: Optional[str] = None
	interests: List[str]
	skills: List[str]
	location: Optional[str] = None
	profile_picture: str
	user_type: UserType
	is_verified: bool
	privacy_settings: PrivacySettingsIn
	created_at: datetime
	last_active: datetime
	joined_groups: List[GroupSummary] = Field(default_factory=list)


class PublicUser(BaseModel):
	"""Another user's profile. Fields hidden by privacy settings are left unset."""

	id: str
	name: str
	email: Optional[str] = None
	age: Optional[int] = None
	bio: Optional[str] = None
	interests: List[str]
	skills: List[str]
	location: Optional[str] = None
	profile_picture: str
	user_type: UserType
	is_verified: bool
	created_at: datetime
	last_active: datetime
	joined_groups: Optional[List[GroupSummary]] = None


class AuthResponse(BaseModel):
	token: str
	user: UserProfile


class ProfileUpdateResponse(BaseModel):
	message: str
	user: UserProfile


class MatchOut(BaseModel):
	user: PublicUser
	match_score: int
	common_interests: List[str]
	common_skills: List[str]


class MessageResponse(BaseModel):
	message: str


class ForgotPasswordRequest(BaseModel):
	email: EmailStr


class ForgotPasswordResponse(BaseModel):
	message: str
	reset_url: Optional[str] = None
	token: Optional[str] = None


class VerifyResetResponse(BaseModel):
	message: str
	email: str


class ResetPasswordRequest(BaseModel):
	token: Annotated[str, Field(min_length=1)]
	new_password: Annotated[str, Field(min_length=6)]
