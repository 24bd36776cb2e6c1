"""Service for interest groups."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional
from uuid import uuid4

from interest_connect.domain.common.errors import ServiceError
from interest_connect.domain.groups import schemas
from interest_connect.domain.groups.models import Group, GroupCategory
from interest_connect.domain.groups.repo import GroupRepository
from interest_connect.domain.identity.models import User
from interest_connect.domain.identity.repo import UserRepository
from interest_connect.matching import GroupRecommendation, recommend_groups
from interest_connect.obs import metrics as obs_metrics
from interest_connect.settings import settings

logger = logging.getLogger(__name__)


class GroupError(ServiceError):
    """Raised for group membership and visibility failures."""


class GroupNotFound(GroupError):
    def __init__(self) -> None:
        super().__init__("group_not_found", status_code=404)


class GroupPrivate(GroupError):
    def __init__(self) -> None:
        super().__init__("group_private", status_code=403)


class AlreadyMember(GroupError):
    def __init__(self) -> None:
        super().__init__("already_member")


class GroupFull(GroupError):
    def __init__(self) -> None:
        super().__init__("group_full")


class NotMember(GroupError):
    def __init__(self) -> None:
        super().__init__("not_member")


class CreatorCannotLeave(GroupError):
    def __init__(self) -> None:
        super().__init__("creator_cannot_leave")


def _now() -> datetime:
    return datetime.now(timezone.utc)


class GroupService:
    def __init__(self) -> None:
        self._groups = GroupRepository()
        self._users = UserRepository()

    async def create_group(self, user: User, data: schemas.GroupCreateRequest) -> Group:
        """Create a group with the creator as its first member and admin."""
        now = _now()
        group = Group(
            id=str(uuid4()),
            name=data.name.strip(),
            description=data.description,
            category=data.category,
            creator_id=user.id,
            interests=[tag.strip() for tag in data.interests if tag.strip()],
            members=[user.id],
            admins=[user.id],
            max_members=data.max_members,
            is_private=data.is_private,
            created_at=now,
            last_activity=now,
        )
        group = await self._groups.create(group)
        logger.info("group created", extra={"group_id": group.id, "user_id": user.id})
        return group

    async def get_group(self, group_id: str) -> Group:
        group = await self._groups.get(str(group_id))
        if group is None:
            raise GroupNotFound()
        return group

    async def get_visible_group(self, user: User, group_id: str) -> Group:
        group = await self.get_group(group_id)
        if group.is_private and not group.is_member(user.id):
            raise GroupPrivate()
        return group

    async def list_groups(
        self,
        *,
        category: Optional[GroupCategory] = None,
        search: Optional[str] = None,
    ) -> List[Group]:
        return await self._groups.list_public(category=category, search=search, limit=settings.listing_limit)

    async def my_groups(self, user_id: str) -> List[Group]:
        return await self._groups.list_for_member(str(user_id))

    async def recommendations(self, user: User) -> List[GroupRecommendation]:
        candidates = await self._groups.list_joinable(user.id)
        obs_metrics.inc_group_recommendations()
        return recommend_groups(user, candidates, settings.group_recommendation_limit)

    async def join_group(self, user: User, group_id: str) -> Group:
        group = await self.get_group(group_id)
        if group.is_member(user.id):
            raise AlreadyMember()
        if group.is_full:
            raise GroupFull()
        updated = await self._groups.add_member(group.id, user.id, _now())
        if updated is None:
            # Lost a race with another join; report the state that blocked us.
            current = await self.get_group(group.id)
            raise AlreadyMember() if current.is_member(user.id) else GroupFull()
        obs_metrics.inc_membership("group", "join")
        logger.info("group joined", extra={"group_id": group.id, "user_id": user.id})
        return updated

    async def leave_group(self, user: User, group_id: str) -> None:
        group = await self.get_group(group_id)
        if not group.is_member(user.id):
            raise NotMember()
        if group.creator_id == user.id:
            raise CreatorCannotLeave()
        if await self._groups.remove_member(group.id, user.id) is None:
            raise NotMember()
        obs_metrics.inc_membership("group", "leave")
        logger.info("group left", extra={"group_id": group.id, "user_id": user.id})

    async def describe(self, groups: Iterable[Group]) -> List[schemas.GroupResponse]:
        """Render groups with creator and member summaries attached."""
        groups = list(groups)
        wanted: List[str] = []
        for group in groups:
            wanted.append(group.creator_id)
            wanted.extend(group.members)
        users = {u.id: u for u in await self._users.get_many(wanted)}
        rendered: List[schemas.GroupResponse] = []
        for group in groups:
            creator = users.get(group.creator_id)
            rendered.append(
                schemas.GroupResponse(
                    id=group.id,
                    name=group.name,
                    description=group.description,
                    category=group.category,
                    interests=list(group.interests),
                    creator=creator.summary() if creator else None,
                    members=[
                        schemas.GroupMember(**users[m].summary(), user_type=users[m].user_type.value)
                        for m in group.members
                        if m in users
                    ],
                    admins=list(group.admins),
                    member_count=len(group.members),
                    max_members=group.max_members,
                    is_private=group.is_private,
                    group_image=group.group_image,
                    created_at=group.created_at,
                    last_activity=group.last_activity,
                )
            )
        return rendered
