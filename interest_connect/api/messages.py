"""Direct and group messaging endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status

from interest_connect.api.deps import get_active_user
from interest_connect.domain.identity.models import User
from interest_connect.domain.messages import schemas, service

router = APIRouter(prefix="/messages", tags=["messages"])


@router.post("", response_model=schemas.SendMessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
	payload: schemas.SendMessageRequest,
	user: User = Depends(get_active_user),
) -> schemas.SendMessageResponse:
	message = await service.send_message(user.id, payload)
	return schemas.SendMessageResponse(message="Message sent successfully", data=message)


@router.get("/conversation/{user_id}", response_model=List[schemas.MessageOut])
async def get_conversation(user_id: str, user: User = Depends(get_active_user)) -> List[schemas.MessageOut]:
	return await service.conversation(user.id, user_id)


@router.get("/group/{group_id}", response_model=List[schemas.MessageOut])
async def get_group_messages(group_id: str, _: User = Depends(get_active_user)) -> List[schemas.MessageOut]:
	return await service.group_history(group_id)


@router.get("/conversations", response_model=List[schemas.ConversationOut])
async def list_conversations(user: User = Depends(get_active_user)) -> List[schemas.ConversationOut]:
	return await service.conversations(user.id)


@router.get("/unread-count", response_model=schemas.UnreadCountResponse)
async def get_unread_count(user: User = Depends(get_active_user)) -> schemas.UnreadCountResponse:
	return schemas.UnreadCountResponse(count=await service.unread_count(user.id))
