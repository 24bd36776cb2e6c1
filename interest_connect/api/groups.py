"""FastAPI routes for interest groups."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, status

from interest_connect.api.deps import get_active_user
from interest_connect.domain.groups import schemas, service
from interest_connect.domain.groups.models import GroupCategory
from interest_connect.domain.identity.models import User
from interest_connect.domain.identity.schemas import MessageResponse

router = APIRouter(prefix="/groups", tags=["groups"])

_group_service = service.GroupService()


@router.post("", response_model=schemas.GroupCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_group_endpoint(
    payload: schemas.GroupCreateRequest,
    user: User = Depends(get_active_user),
) -> schemas.GroupCreatedResponse:
    group = await _group_service.create_group(user, payload)
    (rendered,) = await _group_service.describe([group])
    return schemas.GroupCreatedResponse(message="Group created successfully", group=rendered)


@router.get("", response_model=List[schemas.GroupResponse])
async def list_groups_endpoint(
    category: Optional[GroupCategory] = None,
    search: Optional[str] = None,
    _: User = Depends(get_active_user),
) -> List[schemas.GroupResponse]:
    groups = await _group_service.list_groups(category=category, search=search)
    return await _group_service.describe(groups)


@router.get("/recommendations", response_model=List[schemas.GroupRecommendationOut])
async def recommendations_endpoint(
    user: User = Depends(get_active_user),
) -> List[schemas.GroupRecommendationOut]:
    recommendations = await _group_service.recommendations(user)
    rendered = await _group_service.describe(rec.group for rec in recommendations)
    return [
        schemas.GroupRecommendationOut(
            group=group,
            relevance_score=rec.relevance_score,
            matched_interests=list(rec.matched_interests),
        )
        for rec, group in zip(recommendations, rendered)
    ]


@router.get("/user/my-groups", response_model=List[schemas.GroupResponse])
async def my_groups_endpoint(user: User = Depends(get_active_user)) -> List[schemas.GroupResponse]:
    groups = await _group_service.my_groups(user.id)
    return await _group_service.describe(groups)


@router.get("/{group_id}", response_model=schemas.GroupResponse)
async def get_group_endpoint(group_id: str, user: User = Depends(get_active_user)) -> schemas.GroupResponse:
    group = await _group_service.get_visible_group(user, group_id)
    (rendered,) = await _group_service.describe([group])
    return rendered


@router.post("/{group_id}/join", response_model=MessageResponse)
async def join_group_endpoint(group_id: str, user: User = Depends(get_active_user)) -> MessageResponse:
    await _group_service.join_group(user, group_id)
    return MessageResponse(message="Joined group successfully")


@router.post("/{group_id}/leave", response_model=MessageResponse)
async def leave_group_endpoint(group_id: str, user: User = Depends(get_active_user)) -> MessageResponse:
    await _group_service.leave_group(user, group_id)
    return MessageResponse(message="Left group successfully")
