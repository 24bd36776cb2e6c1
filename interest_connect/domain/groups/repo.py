"""Group persistence backed by asyncpg with an in-memory fallback."""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import List, Optional

from interest_connect.domain.groups.models import Group, GroupCategory
from interest_connect.infra.postgres import pool_or_none

_GROUP_COLUMNS = """
    id, name, description, category, interests, creator_id, members, admins,
    max_members, is_private, group_image, created_at, last_activity
"""


class _InMemoryStore:
    """Fallback store used in tests when Postgres is unavailable."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._groups: dict[str, Group] = {}

    async def insert(self, group: Group) -> Group:
        async with self._lock:
            self._groups[group.id] = group.copy()
            return group.copy()

    async def get(self, group_id: str) -> Optional[Group]:
        async with self._lock:
            group = self._groups.get(group_id)
            return group.copy() if group else None

    async def list_all(self) -> List[Group]:
        async with self._lock:
            return [group.copy() for group in self._groups.values()]

    async def add_member(self, group_id: str, user_id: str, at: datetime) -> Optional[Group]:
        async with self._lock:
            group = self._groups.get(group_id)
            if group is None or group.is_member(user_id) or group.is_full:
                return None
            group.members.append(user_id)
            group.last_activity = at
            return group.copy()

    async def remove_member(self, group_id: str, user_id: str) -> Optional[Group]:
        async with self._lock:
            group = self._groups.get(group_id)
            if group is None or not group.is_member(user_id) or group.creator_id == user_id:
                return None
            group.members = [m for m in group.members if m != user_id]
            group.admins = [a for a in group.admins if a != user_id]
            return group.copy()

    def clear(self) -> None:
        self._groups.clear()


_MEMORY_STORE = _InMemoryStore()


def reset_memory_store() -> None:
    _MEMORY_STORE.clear()


def _by_activity(groups: List[Group]) -> List[Group]:
    return sorted(groups, key=lambda g: g.last_activity, reverse=True)


class GroupRepository:
    """Repository backed by asyncpg with an in-memory fallback."""

    async def create(self, group: Group) -> Group:
        pool = await pool_or_none()
        if pool is None:
            return await _MEMORY_STORE.insert(group)
        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                INSERT INTO groups (
                    id, name, description, category, interests, creator_id, members, admins,
                    max_members, is_private, group_image, created_at, last_activity
                )
                VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13)
                RETURNING {_GROUP_COLUMNS}
                """,
                group.id,
                group.name,
                group.description,
                group.category.value,
                group.interests,
                group.creator_id,
                group.members,
                group.admins,
                group.max_members,
                group.is_private,
                group.group_image,
                group.created_at,
                group.last_activity,
            )
        return Group.from_record(row)

    async def get(self, group_id: str) -> Optional[Group]:
        pool = await pool_or_none()
        if pool is None:
            return await _MEMORY_STORE.get(group_id)
        async with pool.acquire() as conn:
            row = await conn.fetchrow(f"SELECT {_GROUP_COLUMNS} FROM groups WHERE id = $1", group_id)
        return Group.from_record(row) if row else None

    async def list_public(
        self,
        *,
        category: Optional[GroupCategory] = None,
        search: Optional[str] = None,
        limit: int = 20,
    ) -> List[Group]:
        """Public groups, most recently active first."""
        pool = await pool_or_none()
        if pool is None:
            groups = [
                g
                for g in await _MEMORY_STORE.list_all()
                if not g.is_private and (category is None or g.category == category)
            ]
        else:
            async with pool.acquire() as conn:
                rows = await conn.fetch(
                    f"""
                    SELECT {_GROUP_COLUMNS} FROM groups
                    WHERE NOT is_private AND ($1::text IS NULL OR category = $1)
                    """,
                    category.value if category else None,
                )
            groups = [Group.from_record(row) for row in rows]
        groups = [g for g in _by_activity(groups) if g.matches_search(search)]
        return groups[:limit]

    async def list_joinable(self, user_id: str) -> List[Group]:
        """Public groups ``user_id`` has not joined, oldest first."""
        pool = await pool_or_none()
        if pool is None:
            groups = await _MEMORY_STORE.list_all()
            return [g for g in groups if not g.is_private and not g.is_member(user_id)]
        async with pool.acquire() as conn:
            rows = await conn.fetch(
                f"""
                SELECT {_GROUP_COLUMNS} FROM groups
                WHERE NOT is_private AND NOT ($1 = ANY(members))
                ORDER BY created_at ASC
                """,
                user_id,
            )
        return [Group.from_record(row) for row in rows]

    async def list_for_member(self, user_id: str) -> List[Group]:
        pool = await pool_or_none()
        if pool is None:
            groups = [g for g in await _MEMORY_STORE.list_all() if g.is_member(user_id)]
            return _by_activity(groups)
        async with pool.acquire() as conn:
            rows = await conn.fetch(
                f"""
                SELECT {_GROUP_COLUMNS} FROM groups
                WHERE $1 = ANY(members)
                ORDER BY last_activity DESC
                """,
                user_id,
            )
        return [Group.from_record(row) for row in rows]

    async def add_member(self, group_id: str, user_id: str, at: datetime) -> Optional[Group]:
        """Append ``user_id`` unless already a member or the group is full.

        Returns None when nothing changed.
        """
        pool = await pool_or_none()
        if pool is None:
            return await _MEMORY_STORE.add_member(group_id, user_id, at)
        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                UPDATE groups
                SET members = array_append(members, $2), last_activity = $3
                WHERE id = $1 AND NOT ($2 = ANY(members)) AND cardinality(members) < max_members
                RETURNING {_GROUP_COLUMNS}
                """,
                group_id,
                user_id,
                at,
            )
        return Group.from_record(row) if row else None

    async def remove_member(self, group_id: str, user_id: str) -> Optional[Group]:
        """Drop ``user_id`` from members and admins. The creator is never removed."""
        pool = await pool_or_none()
        if pool is None:
            return await _MEMORY_STORE.remove_member(group_id, user_id)
        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                UPDATE groups
                SET members = array_remove(members, $2), admins = array_remove(admins, $2)
                WHERE id = $1 AND $2 = ANY(members) AND creator_id <> $2
                RETURNING {_GROUP_COLUMNS}
                """,
                group_id,
                user_id,
            )
        return Group.from_record(row) if row else None
