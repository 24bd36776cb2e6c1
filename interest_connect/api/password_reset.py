"""Password reset endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from interest_connect.domain.identity import recovery, schemas
from interest_connect.settings import settings

router = APIRouter(prefix="/password", tags=["password"])

FORGOT_MESSAGE = "If an account with that email exists, a password reset link has been sent"


@router.post("/forgot", response_model=schemas.ForgotPasswordResponse, response_model_exclude_none=True)
async def forgot_password(payload: schemas.ForgotPasswordRequest) -> schemas.ForgotPasswordResponse:
	issued = await recovery.request_password_reset(payload.email)
	response = schemas.ForgotPasswordResponse(message=FORGOT_MESSAGE)
	if issued is not None and settings.is_dev():
		response.reset_url = issued.reset_url
		response.token = issued.token
	return response


@router.get("/verify/{token}", response_model=schemas.VerifyResetResponse)
async def verify_token(token: str) -> schemas.VerifyResetResponse:
	user = await recovery.verify_reset_token(token)
	return schemas.VerifyResetResponse(message="Token is valid", email=user.email)


@router.post("/reset", response_model=schemas.MessageResponse)
async def reset_password(payload: schemas.ResetPasswordRequest) -> schemas.MessageResponse:
	await recovery.consume_password_reset(payload.token, payload.new_password)
	return schemas.MessageResponse(message="Password has been reset successfully")
