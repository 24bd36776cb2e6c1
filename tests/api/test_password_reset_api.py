import pytest

from interest_connect.api.password_reset import FORGOT_MESSAGE
from interest_connect.settings import settings


@pytest.mark.asyncio
async def test_forgot_password_answers_identically_for_unknown_email(api_client):
    resp = await api_client.post("/api/password/forgot", json={"email": "nobody@example.com"})
    assert resp.status_code == 200
    assert resp.json() == {"message": FORGOT_MESSAGE}


@pytest.mark.asyncio
async def test_full_reset_flow(api_client, register):
    user, _ = await register("Ada", email="ada@example.com", password="secret123")

    resp = await api_client.post("/api/password/forgot", json={"email": "ada@example.com"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == FORGOT_MESSAGE
    token = body["token"]
    assert body["reset_url"] == f"{settings.frontend_url.rstrip('/')}/reset-password.html?token={token}"

    verify = await api_client.get(f"/api/password/verify/{token}")
    assert verify.status_code == 200
    assert verify.json() == {"message": "Token is valid", "email": "ada@example.com"}

    reset = await api_client.post("/api/password/reset", json={"token": token, "new_password": "newpass456"})
    assert reset.status_code == 200
    assert reset.json() == {"message": "Password has been reset successfully"}

    old_login = await api_client.post("/api/auth/login", json={"email": "ada@example.com", "password": "secret123"})
    assert old_login.status_code == 401
    new_login = await api_client.post("/api/auth/login", json={"email": "ada@example.com", "password": "newpass456"})
    assert new_login.status_code == 200
    assert new_login.json()["user"]["id"] == user["id"]

    reused = await api_client.post("/api/password/reset", json={"token": token, "new_password": "another789"})
    assert reused.status_code == 400
    assert reused.json()["detail"] == "reset_token_invalid"


@pytest.mark.asyncio
async def test_invalid_token_is_rejected(api_client):
    resp = await api_client.get("/api/password/verify/not-a-real-token")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "reset_token_invalid"


@pytest.mark.asyncio
async def test_new_password_must_be_long_enough(api_client):
    resp = await api_client.post("/api/password/reset", json={"token": "abc", "new_password": "123"})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_token_is_not_echoed_outside_development(api_client, register):
    await register("Ada", email="ada@example.com")
    settings.environment = "production"
    resp = await api_client.post("/api/password/forgot", json={"email": "ada@example.com"})
    assert resp.status_code == 200
    assert resp.json() == {"message": FORGOT_MESSAGE}
