"""Idempotent table bootstrap run at application startup."""

from __future__ import annotations

import logging

import asyncpg

logger = logging.getLogger(__name__)

DDL = (
	"""
	CREATE TABLE IF NOT EXISTS users (
		id TEXT PRIMARY KEY,
		name TEXT NOT NULL,
		email TEXT NOT NULL UNIQUE,
		password_hash TEXT NOT NULL,
		age INTEGER CHECK (age BETWEEN 16 AND 100),
		bio VARCHAR(500),
		interests TEXT[] NOT NULL DEFAULT '{}',
		skills TEXT[] NOT NULL DEFAULT '{}',
		location TEXT,
		profile_picture TEXT NOT NULL DEFAULT 'default-avatar.png',
		user_type TEXT NOT NULL DEFAULT 'student',
		blocked_users TEXT[] NOT NULL DEFAULT '{}',
		is_verified BOOLEAN NOT NULL DEFAULT FALSE,
		show_email BOOLEAN NOT NULL DEFAULT FALSE,
		show_age BOOLEAN NOT NULL DEFAULT TRUE,
		show_location BOOLEAN NOT NULL DEFAULT TRUE,
		created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
		last_active TIMESTAMPTZ NOT NULL DEFAULT NOW()
	)
	""",
	"""
	CREATE TABLE IF NOT EXISTS groups (
		id TEXT PRIMARY KEY,
		name TEXT NOT NULL,
		description VARCHAR(1000) NOT NULL,
		category TEXT NOT NULL,
		interests TEXT[] NOT NULL DEFAULT '{}',
		creator_id TEXT NOT NULL REFERENCES users(id),
		members TEXT[] NOT NULL DEFAULT '{}',
		admins TEXT[] NOT NULL DEFAULT '{}',
		max_members INTEGER NOT NULL DEFAULT 50,
		is_private BOOLEAN NOT NULL DEFAULT FALSE,
		group_image TEXT NOT NULL DEFAULT 'default-group.png',
		created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
		last_activity TIMESTAMPTZ NOT NULL DEFAULT NOW()
	)
	""",
	"""
	CREATE TABLE IF NOT EXISTS events (
		id TEXT PRIMARY KEY,
		title TEXT NOT NULL,
		description VARCHAR(1000) NOT NULL,
		organizer_id TEXT NOT NULL REFERENCES users(id),
		group_id TEXT REFERENCES groups(id),
		location TEXT NOT NULL,
		date TIMESTAMPTZ NOT NULL,
		duration INTEGER NOT NULL DEFAULT 60,
		max_participants INTEGER NOT NULL DEFAULT 20,
		participants TEXT[] NOT NULL DEFAULT '{}',
		category TEXT NOT NULL,
		is_online BOOLEAN NOT NULL DEFAULT FALSE,
		meeting_link TEXT,
		status TEXT NOT NULL DEFAULT 'upcoming',
		created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
	)
	""",
	"CREATE INDEX IF NOT EXISTS events_date_status_idx ON events (date, status)",
	"CREATE INDEX IF NOT EXISTS events_category_idx ON events (category)",
	"""
	CREATE TABLE IF NOT EXISTS messages (
		id TEXT PRIMARY KEY,
		sender_id TEXT NOT NULL REFERENCES users(id),
		receiver_id TEXT REFERENCES users(id),
		group_id TEXT REFERENCES groups(id),
		content TEXT NOT NULL,
		message_type TEXT NOT NULL DEFAULT 'text',
		is_read BOOLEAN NOT NULL DEFAULT FALSE,
		created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
	)
	""",
	"CREATE INDEX IF NOT EXISTS messages_pair_idx ON messages (sender_id, receiver_id, created_at DESC)",
	"CREATE INDEX IF NOT EXISTS messages_group_idx ON messages (group_id, created_at DESC)",
)


async def ensure_schema(pool: asyncpg.pool.Pool | None) -> None:
	if pool is None:
		return
	async with pool.acquire() as conn:
		async with conn.transaction():
			for statement in DDL:
				await conn.execute(statement)
	logger.info("schema ensured", extra={"tables": ["users", "groups", "events", "messages"]})
