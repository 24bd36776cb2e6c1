"""Shared FastAPI dependencies."""

from __future__ import annotations

from fastapi import Depends, HTTPException, status

from interest_connect.domain.identity import service as identity_service
from interest_connect.domain.identity.models import User
from interest_connect.infra.auth import AuthenticatedUser, get_current_user


async def get_active_user(auth_user: AuthenticatedUser = Depends(get_current_user)) -> User:
    """Load the caller's account and record the activity."""
    try:
        user = await identity_service.get_user(auth_user.id)
    except identity_service.UserNotFound:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="account_not_found") from None
    await identity_service.touch(user)
    return user
