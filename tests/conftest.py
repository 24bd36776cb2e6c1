import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-with-enough-entropy-123456")
os.environ.setdefault("ENV", "dev")

import pytest
import pytest_asyncio
from fakeredis.aioredis import FakeRedis
from httpx import ASGITransport, AsyncClient

from interest_connect.domain.events import repo as events_repo
from interest_connect.domain.groups import repo as groups_repo
from interest_connect.domain.identity import repo as identity_repo
from interest_connect.domain.messages import repo as messages_repo
from interest_connect.domain.messages import sockets as messages_sockets
from interest_connect.infra import postgres
from interest_connect.main import app
from interest_connect.settings import settings


@pytest_asyncio.fixture(autouse=True)
async def fake_redis():
	from interest_connect.infra.redis import redis_client, set_redis_client

	original = redis_client.client
	client = FakeRedis(decode_responses=True)
	set_redis_client(client)
	try:
		yield client
	finally:
		set_redis_client(original)
		await client.flushall()


@pytest.fixture(autouse=True)
def patch_postgres(monkeypatch):
	async def _noop():
		return None

	monkeypatch.setattr(postgres, "init_pool", _noop)
	monkeypatch.setattr(postgres, "close_pool", _noop)
	postgres.set_pool(None)


@pytest.fixture(autouse=True)
def force_test_settings():
	"""Dev mode so the X-User-Id header fallback and reset token echo are available."""
	original_env = settings.environment
	settings.environment = "dev"
	try:
		yield
	finally:
		settings.environment = original_env


@pytest.fixture(autouse=True)
def clean_stores():
	identity_repo.reset_memory_store()
	groups_repo.reset_memory_store()
	events_repo.reset_memory_store()
	messages_repo.reset_memory_store()
	original_namespace = messages_sockets.get_namespace()
	messages_sockets.set_namespace(None)
	yield
	messages_sockets.set_namespace(original_namespace)


@pytest_asyncio.fixture
async def api_client():
	transport = ASGITransport(app=app)
	async with AsyncClient(transport=transport, base_url="http://testserver") as client:
		yield client


@pytest_asyncio.fixture
async def register(api_client):
	"""Register an account through the API and return ``(user, auth_headers)``."""

	counter = {"n": 0}

	async def _register(name: str = "User", **fields):
		counter["n"] += 1
		body = {
			"name": name,
			"email": fields.pop("email", f"{name.lower().replace(' ', '.')}{counter['n']}@example.com"),
			"password": fields.pop("password", "secret123"),
		}
		body.update(fields)
		resp = await api_client.post("/api/auth/register", json=body)
		assert resp.status_code == 201, resp.text
		data = resp.json()
		return data["user"], {"Authorization": f"Bearer {data['token']}"}

	return _register
