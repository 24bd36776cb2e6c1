"""Registration and login endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Request, status

from interest_connect.api.request_id import client_ip
from interest_connect.domain.identity import schemas, service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=schemas.AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(payload: schemas.RegisterRequest, request: Request) -> schemas.AuthResponse:
	user, token = await service.register(payload, ip=client_ip(request))
	return schemas.AuthResponse(token=token, user=await service.profile_view(user))


@router.post("/login", response_model=schemas.AuthResponse)
async def login(payload: schemas.LoginRequest, request: Request) -> schemas.AuthResponse:
	user, token = await service.login(payload, ip=client_ip(request))
	return schemas.AuthResponse(token=token, user=await service.profile_view(user))
