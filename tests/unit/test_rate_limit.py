import pytest

from interest_connect.infra.rate_limit import LOGIN, PASSWORD_RESET, REGISTER, Budget


@pytest.mark.asyncio
async def test_budget_allows_up_to_limit_per_window(fake_redis):
    budget = Budget("demo", limit=3, window_seconds=60)
    now = 1_000_020.0

    results = [await budget.consume("alice", now=now) for _ in range(4)]
    assert results == [True, True, True, False]

    assert await budget.consume("bob", now=now) is True
    assert await budget.consume("alice", now=now + 60) is True


@pytest.mark.asyncio
async def test_window_key_expires_with_the_window(fake_redis):
    budget = Budget("demo", limit=1, window_seconds=90)
    await budget.consume("alice", now=900.0)
    ttl = await fake_redis.ttl(budget.key("alice", 900.0))
    assert 0 < ttl <= 90


def test_identity_budgets():
    assert (REGISTER.limit, REGISTER.window_seconds) == (20, 3600)
    assert (LOGIN.limit, LOGIN.window_seconds) == (10, 60)
    assert (PASSWORD_RESET.limit, PASSWORD_RESET.window_seconds) == (5, 3600)
