"""Pydantic schemas for the events API."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from interest_connect.domain.events.models import (
    DEFAULT_DURATION_MINUTES,
    DEFAULT_MAX_PARTICIPANTS,
    EventCategory,
    EventStatus,
)
from interest_connect.domain.identity.schemas import UserSummary


class EventCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=1000)
    location: str = Field(..., min_length=1, max_length=200)
    date: datetime
    duration: int = Field(DEFAULT_DURATION_MINUTES, ge=1, le=24 * 60)
    max_participants: int = Field(DEFAULT_MAX_PARTICIPANTS, ge=1, le=10000)
    category: EventCategory
    is_online: bool = False
    meeting_link: Optional[str] = None
    group_id: Optional[str] = None


class EventGroup(BaseModel):
    id: str
    name: str


class EventParticipant(UserSummary):
    user_type: Optional[str] = None


class EventResponse(BaseModel):
    id: str
    title: str
    description: str
    organizer: Optional[UserSummary]
    group: Optional[EventGroup]
    location: str
    date: datetime
    duration: int
    max_participants: int
    participants: List[EventParticipant]
    participant_count: int
    category: EventCategory
    is_online: bool
    meeting_link: Optional[str]
    status: EventStatus
    created_at: datetime


class EventCreatedResponse(BaseModel):
    message: str
    event: EventResponse
