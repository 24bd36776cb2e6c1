import pytest

from interest_connect.domain.identity import recovery, schemas, service
from interest_connect.domain.identity.models import words_match
from interest_connect.domain.identity.repo import UserRepository
from interest_connect.infra import jwt as jwt_helper
from interest_connect.infra import rate_limit
from interest_connect.infra.password import verify_password
from interest_connect.matching import UserType


async def _register(name: str, email: str, **fields):
    payload = schemas.RegisterRequest(name=name, email=email, password="secret123", **fields)
    user, _ = await service.register(payload, ip="10.0.0.1")
    return user


@pytest.mark.asyncio
async def test_register_normalises_email_and_issues_token():
    payload = schemas.RegisterRequest(name="  Ada ", email="Ada@Example.COM", password="secret123")
    user, token = await service.register(payload, ip="10.0.0.1")

    assert user.name == "Ada"
    assert user.email == "ada@example.com"
    assert user.password_hash != "secret123"
    assert verify_password(user.password_hash, "secret123")
    assert jwt_helper.decode_access(token)["sub"] == user.id


@pytest.mark.asyncio
async def test_register_rejects_duplicate_email_case_insensitively():
    await _register("Ada", "ada@example.com")
    with pytest.raises(service.EmailTaken):
        await _register("Other", "ADA@example.com")


@pytest.mark.asyncio
async def test_login_checks_password():
    await _register("Ada", "ada@example.com")
    user, token = await service.login(
        schemas.LoginRequest(email="ada@example.com", password="secret123"), ip="10.0.0.1"
    )
    assert jwt_helper.decode_access(token)["sub"] == user.id

    with pytest.raises(service.InvalidCredentials):
        await service.login(schemas.LoginRequest(email="ada@example.com", password="wrong-one"), ip="10.0.0.1")
    with pytest.raises(service.InvalidCredentials):
        await service.login(schemas.LoginRequest(email="nobody@example.com", password="secret123"), ip="10.0.0.1")


@pytest.mark.asyncio
async def test_login_is_rate_limited_per_ip_and_email():
    await _register("Ada", "ada@example.com")
    bad = schemas.LoginRequest(email="ada@example.com", password="wrong-one")
    for _ in range(rate_limit.LOGIN.limit):
        with pytest.raises(service.InvalidCredentials):
            await service.login(bad, ip="10.0.0.9")
    with pytest.raises(service.RateLimited):
        await service.login(bad, ip="10.0.0.9")


@pytest.mark.asyncio
async def test_update_profile_ignores_empty_strings_but_accepts_empty_lists():
    user = await _register("Ada", "ada@example.com", bio="hello", interests=["Chess"], location="Paris")
    update = schemas.ProfileUpdateRequest(
        name="",
        bio="",
        interests=[],
        skills=["  SQL "],
        user_type=UserType.PROFESSIONAL,
        privacy_settings=schemas.PrivacySettingsIn(show_email=True, show_age=False),
    )
    updated = await service.update_profile(user, update)

    assert updated.name == "Ada"
    assert updated.bio == "hello"
    assert updated.interests == []
    assert updated.skills == ["SQL"]
    assert updated.location == "Paris"
    assert updated.user_type is UserType.PROFESSIONAL
    assert updated.privacy.show_email is True
    assert updated.privacy.show_age is False

    stored = await UserRepository().get(user.id)
    assert stored.skills == ["SQL"]
    assert stored.privacy.show_email is True


@pytest.mark.asyncio
async def test_search_filters_and_hides_self_and_blocked():
    me = await _register("Me", "me@example.com", interests=["Chess"])
    ada = await _register("Ada Lovelace", "ada@example.com", interests=["Math", "Chess"], user_type=UserType.PROFESSIONAL)
    bob = await _register("Bob", "bob@example.com", interests=["Hiking"], skills=["chess coaching"])
    eve = await _register("Eve", "eve@example.com", interests=["Chess"])
    await service.block(eve, me.id)

    everyone = await service.search(me)
    assert [u.id for u in everyone] == [ada.id, bob.id]

    by_query = await service.search(me, query="CHESS")
    assert [u.id for u in by_query] == [ada.id, bob.id]

    by_type = await service.search(me, user_type="professional")
    assert [u.id for u in by_type] == [ada.id]

    by_interest = await service.search(me, interests="Hiking, Painting")
    assert [u.id for u in by_interest] == [bob.id]


@pytest.mark.asyncio
async def test_search_query_matches_any_word():
    me = await _register("Me", "me@example.com")
    bob = await _register("Bob", "bob@example.com", interests=["Chess", "Music"])
    await _register("Cy", "cy@example.com", skills=["Welding"])

    assert [u.id for u in await service.search(me, query="chess music")] == [bob.id]
    assert [u.id for u in await service.search(me, query="  bob   painting ")] == [bob.id]
    assert len(await service.search(me, query="   ")) == 2


def test_words_match_splits_query_on_whitespace():
    assert words_match("chess music", ["Music"])
    assert words_match("GUIT", ["Electric guitar"])
    assert not words_match("chess music", ["Hiking"])
    assert not words_match("", ["Hiking"])


@pytest.mark.asyncio
async def test_block_is_idempotent_and_requires_target():
    me = await _register("Me", "me@example.com")
    other = await _register("Other", "other@example.com")

    await service.block(me, other.id)
    await service.block(me, other.id)
    stored = await UserRepository().get(me.id)
    assert stored.blocked_users == [other.id]

    with pytest.raises(service.UserNotFound):
        await service.block(me, "missing")


@pytest.mark.asyncio
async def test_matches_rank_visible_users():
    me = await _register("Me", "me@example.com", interests=["Chess", "Music"], age=30)
    close = await _register("Close", "close@example.com", interests=["chess", "music"], age=30)
    loose = await _register("Loose", "loose@example.com", interests=["Music"], user_type=UserType.HOBBYIST)
    await _register("Stranger", "stranger@example.com", user_type=UserType.HOBBYIST)

    results = await service.matches(me)
    assert [r.user.id for r in results] == [close.id, loose.id]
    assert results[0].match_score == 20 + 15 + 10
    assert results[1].common_interests == ("Music",)


@pytest.mark.asyncio
async def test_password_reset_flow():
    user = await _register("Ada", "ada@example.com")

    assert await recovery.request_password_reset("nobody@example.com") is None

    first = await recovery.request_password_reset("ADA@example.com")
    second = await recovery.request_password_reset("ada@example.com")
    assert first.token != second.token
    assert second.reset_url.endswith(f"/reset-password.html?token={second.token}")

    with pytest.raises(recovery.ResetTokenInvalid):
        await recovery.verify_reset_token(first.token)
    assert (await recovery.verify_reset_token(second.token)).id == user.id

    await recovery.consume_password_reset(second.token, "brand-new-pass")
    stored = await UserRepository().get(user.id)
    assert verify_password(stored.password_hash, "brand-new-pass")

    with pytest.raises(recovery.ResetTokenInvalid):
        await recovery.consume_password_reset(second.token, "another-pass")
