"""FastAPI routes for events."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, status

from interest_connect.api.deps import get_active_user
from interest_connect.domain.events import schemas, service
from interest_connect.domain.events.models import EventCategory
from interest_connect.domain.identity.models import User
from interest_connect.domain.identity.schemas import MessageResponse

router = APIRouter(prefix="/events", tags=["events"])

_event_service = service.EventService()


@router.post("", response_model=schemas.EventCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_event_endpoint(
    payload: schemas.EventCreateRequest,
    user: User = Depends(get_active_user),
) -> schemas.EventCreatedResponse:
    event = await _event_service.create_event(user, payload)
    (rendered,) = await _event_service.describe([event])
    return schemas.EventCreatedResponse(message="Event created successfully", event=rendered)


@router.get("", response_model=List[schemas.EventResponse])
async def list_events_endpoint(
    category: Optional[EventCategory] = None,
    is_online: Optional[bool] = None,
    _: User = Depends(get_active_user),
) -> List[schemas.EventResponse]:
    events = await _event_service.list_events(category=category, is_online=is_online)
    return await _event_service.describe(events)


@router.get("/user/my-events", response_model=List[schemas.EventResponse])
async def my_events_endpoint(user: User = Depends(get_active_user)) -> List[schemas.EventResponse]:
    events = await _event_service.my_events(user.id)
    return await _event_service.describe(events)


@router.get("/{event_id}", response_model=schemas.EventResponse)
async def get_event_endpoint(event_id: str, _: User = Depends(get_active_user)) -> schemas.EventResponse:
    event = await _event_service.get_event(event_id)
    (rendered,) = await _event_service.describe([event])
    return rendered


@router.post("/{event_id}/join", response_model=MessageResponse)
async def join_event_endpoint(event_id: str, user: User = Depends(get_active_user)) -> MessageResponse:
    await _event_service.join_event(user, event_id)
    return MessageResponse(message="Joined event successfully")


@router.post("/{event_id}/leave", response_model=MessageResponse)
async def leave_event_endpoint(event_id: str, user: User = Depends(get_active_user)) -> MessageResponse:
    await _event_service.leave_event(user, event_id)
    return MessageResponse(message="Left event successfully")
