import pytest

from interest_connect.settings import settings


@pytest.mark.asyncio
async def test_register_returns_token_and_private_profile(api_client):
    resp = await api_client.post(
        "/api/auth/register",
        json={
            "name": "Ada",
            "email": "Ada@Example.com",
            "password": "secret123",
            "age": 30,
            "interests": ["Chess", "Music"],
            "user_type": "professional",
        },
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["token"]
    user = body["user"]
    assert user["email"] == "ada@example.com"
    assert user["interests"] == ["Chess", "Music"]
    assert user["user_type"] == "professional"
    assert user["profile_picture"] == "default-avatar.png"
    assert user["privacy_settings"] == {"show_email": False, "show_age": True, "show_location": True}
    assert user["joined_groups"] == []
    assert "password_hash" not in user
    assert "password" not in user


@pytest.mark.asyncio
async def test_register_duplicate_email_conflicts(api_client, register):
    await register("Ada", email="ada@example.com")
    resp = await api_client.post(
        "/api/auth/register",
        json={"name": "Again", "email": "ADA@example.com", "password": "secret123"},
    )
    assert resp.status_code == 409
    assert resp.json()["detail"] == "email_taken"


@pytest.mark.asyncio
async def test_register_validates_payload(api_client):
    resp = await api_client.post(
        "/api/auth/register",
        json={"name": "Kid", "email": "not-an-email", "password": "123", "age": 12},
    )
    assert resp.status_code == 422
    body = resp.json()
    assert body["detail"] == "validation_error"
    fields = {tuple(err["loc"])[-1] for err in body["errors"]}
    assert {"email", "password", "age"} <= fields
    assert body["request_id"]


@pytest.mark.asyncio
async def test_login_round_trip(api_client, register):
    user, _ = await register("Ada", email="ada@example.com", password="secret123")

    resp = await api_client.post("/api/auth/login", json={"email": "ada@example.com", "password": "secret123"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["user"]["id"] == user["id"]

    profile = await api_client.get("/api/users/profile", headers={"Authorization": f"Bearer {body['token']}"})
    assert profile.status_code == 200
    assert profile.json()["id"] == user["id"]


@pytest.mark.asyncio
async def test_login_rejects_bad_password(api_client, register):
    await register("Ada", email="ada@example.com")
    resp = await api_client.post("/api/auth/login", json={"email": "ada@example.com", "password": "nope-nope"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "invalid_credentials"


@pytest.mark.asyncio
async def test_protected_routes_require_a_valid_token(api_client):
    resp = await api_client.get("/api/users/profile")
    assert resp.status_code == 401

    resp = await api_client.get("/api/users/profile", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "invalid_token"


@pytest.mark.asyncio
async def test_dev_header_fallback_is_disabled_in_production(api_client, register):
    user, _ = await register("Ada")

    resp = await api_client.get("/api/users/profile", headers={"X-User-Id": user["id"]})
    assert resp.status_code == 200

    settings.environment = "production"
    resp = await api_client.get("/api/users/profile", headers={"X-User-Id": user["id"]})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_token_for_deleted_account_is_rejected(api_client):
    from interest_connect.infra import jwt as jwt_helper

    token = jwt_helper.encode_access("ghost")
    resp = await api_client.get("/api/users/profile", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "account_not_found"
