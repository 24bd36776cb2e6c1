"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path

import asyncpg
import socketio
from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.staticfiles import StaticFiles

from interest_connect import __version__
from interest_connect.api import auth, events, groups, messages, ops, password_reset, users
from interest_connect.api.errors import install_error_handlers
from interest_connect.domain.messages.sockets import MessagingNamespace, set_namespace
from interest_connect.infra import postgres
from interest_connect.infra.schema import ensure_schema
from interest_connect.obs import init as obs_init
from interest_connect.settings import settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
	try:
		await postgres.init_pool()
	except (OSError, asyncpg.PostgresError):
		if settings.is_prod():
			raise
		logger.warning("postgres unavailable at startup, serving from in-memory stores", exc_info=True)
	await ensure_schema(await postgres.pool_or_none())
	try:
		yield
	finally:
		await postgres.close_pool()


app = FastAPI(title="InterestConnect API", version=__version__, lifespan=lifespan)
obs_init(app)
install_error_handlers(app)

allow_origins = list(settings.cors_allow_origins)
# Starlette disallows wildcard '*' with allow_credentials=True.
allow_credentials = bool(allow_origins) and "*" not in allow_origins
app.add_middleware(
	CORSMiddleware,
	allow_origins=allow_origins if allow_credentials else ["*"],
	allow_credentials=allow_credentials,
	allow_methods=["*"],
	allow_headers=["*"],
)

api_router = APIRouter(prefix="/api")
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(password_reset.router)
api_router.include_router(groups.router)
api_router.include_router(events.router)
api_router.include_router(messages.router)
app.include_router(api_router)
app.include_router(ops.router)


@app.get("/", tags=["meta"])
async def root() -> dict:
	return {
		"message": "Welcome to InterestConnect API",
		"version": __version__,
		"endpoints": {
			"auth": "/api/auth (register, login)",
			"users": "/api/users (profile, search, matches)",
			"groups": "/api/groups (create, join, search)",
			"events": "/api/events (create, join, browse)",
			"messages": "/api/messages (chat)",
			"password": "/api/password (forgot, verify, reset)",
		},
	}


if settings.frontend_dir and Path(settings.frontend_dir).is_dir():
	app.mount("/app", StaticFiles(directory=settings.frontend_dir, html=True), name="frontend")


sio = socketio.AsyncServer(
	async_mode="asgi",
	cors_allowed_origins=allow_origins if allow_credentials else "*",
)
messaging_namespace = MessagingNamespace()
sio.register_namespace(messaging_namespace)
set_namespace(messaging_namespace)
socket_app = socketio.ASGIApp(sio, other_asgi_app=app)
