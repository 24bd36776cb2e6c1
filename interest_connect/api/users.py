"""Profile, search, matching and blocking endpoints."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends

from interest_connect.api.deps import get_active_user
from interest_connect.domain.identity import schemas, service
from interest_connect.domain.identity.models import User
from interest_connect.matching import UserType

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/profile", response_model=schemas.UserProfile)
async def get_profile(user: User = Depends(get_active_user)) -> schemas.UserProfile:
	return await service.profile_view(user)


@router.put("/profile", response_model=schemas.ProfileUpdateResponse)
async def update_profile(
	payload: schemas.ProfileUpdateRequest,
	user: User = Depends(get_active_user),
) -> schemas.ProfileUpdateResponse:
	user = await service.update_profile(user, payload)
	return schemas.ProfileUpdateResponse(
		message="Profile updated successfully",
		user=await service.profile_view(user),
	)


@router.get("/search", response_model=List[schemas.PublicUser], response_model_exclude_unset=True)
async def search_users(
	query: Optional[str] = None,
	user_type: Optional[UserType] = None,
	interests: Optional[str] = None,
	user: User = Depends(get_active_user),
) -> List[schemas.PublicUser]:
	found = await service.search(
		user,
		query=query,
		user_type=user_type.value if user_type else None,
		interests=interests,
	)
	return [service.listing_view(other) for other in found]


@router.get("/matches", response_model=List[schemas.MatchOut], response_model_exclude_unset=True)
async def get_matches(user: User = Depends(get_active_user)) -> List[schemas.MatchOut]:
	results = await service.matches(user)
	return [
		schemas.MatchOut(
			user=service.listing_view(match.user),
			match_score=match.match_score,
			common_interests=list(match.common_interests),
			common_skills=list(match.common_skills),
		)
		for match in results
	]


@router.post("/block/{user_id}", response_model=schemas.MessageResponse)
async def block_user(user_id: str, user: User = Depends(get_active_user)) -> schemas.MessageResponse:
	await service.block(user, user_id)
	return schemas.MessageResponse(message="User blocked successfully")


@router.get("/{user_id}", response_model=schemas.PublicUser, response_model_exclude_unset=True)
async def get_user(user_id: str, _: User = Depends(get_active_user)) -> schemas.PublicUser:
	return await service.public_view(user_id)
