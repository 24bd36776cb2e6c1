"""Pydantic schemas for the groups API."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from interest_connect.domain.groups.models import DEFAULT_MAX_MEMBERS, GroupCategory
from interest_connect.domain.identity.schemas import Tag, UserSummary


class GroupCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=1000)
    category: GroupCategory
    interests: List[Tag] = Field(default_factory=list)
    max_members: int = Field(DEFAULT_MAX_MEMBERS, ge=2, le=1000)
    is_private: bool = False


class GroupMember(UserSummary):
    user_type: Optional[str] = None


class GroupResponse(BaseModel):
    id: str
    name: str
    description: str
    category: GroupCategory
    interests: List[str]
    creator: Optional[UserSummary]
    members: List[GroupMember]
    admins: List[str]
    member_count: int
    max_members: int
    is_private: bool
    group_image: str
    created_at: datetime
    last_activity: datetime


class GroupCreatedResponse(BaseModel):
    message: str
    group: GroupResponse


class GroupRecommendationOut(BaseModel):
    group: GroupResponse
    relevance_score: int
    matched_interests: List[str]
