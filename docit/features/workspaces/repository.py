"""SQLAlchemy repository for workspaces and their members"""

import logging
import re
from typing import Dict, List, Optional, Tuple

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from docit.db.models._mixins import utcnow
from docit.db.models.chat_message import WorkspaceChatMessage as ChatMessageORM
from docit.db.models.document import Document as DocumentORM
from docit.db.models.user import User as UserORM, UserWorkspace as UserWorkspaceORM
from docit.db.models.webhook import Webhook as WebhookORM
from docit.db.models.workspace import (
    Workspace as WorkspaceORM,
    WorkspaceMember as WorkspaceMemberORM,
)
from docit.features.workspaces.domain import Workspace, WorkspaceMember, WorkspaceRole
from docit.features.workspaces.policy import resolve_effective_role

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")
_NON_SLUG = re.compile(r"[^a-z0-9-]")


def slugify(name: str) -> str:
    """Lowercase, whitespace to hyphens, strip everything outside [a-z0-9-]"""
    return _NON_SLUG.sub("", _WHITESPACE.sub("-", name.lower()))


class WorkspaceRepository:
    """Repository for workspace operations using SQLAlchemy"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_member_role(self, workspace_id: int, user_id: int) -> Optional[WorkspaceRole]:
        """Effective role of a user in a workspace, or None if no access"""
        owner_id = await self.db.scalar(
            select(WorkspaceORM.owner_id).where(WorkspaceORM.id == workspace_id)
        )
        if owner_id is None:
            return None
        member_role = await self.db.scalar(
            select(WorkspaceMemberORM.role).where(
                WorkspaceMemberORM.workspace_id == workspace_id,
                WorkspaceMemberORM.user_id == user_id,
            )
        )
        return resolve_effective_role(owner_id, member_role, user_id)

    async def get_owner_id(self, workspace_id: int) -> Optional[int]:
        return await self.db.scalar(
            select(WorkspaceORM.owner_id).where(WorkspaceORM.id == workspace_id)
        )

    async def get_name(self, workspace_id: int) -> Optional[str]:
        return await self.db.scalar(
            select(WorkspaceORM.name).where(WorkspaceORM.id == workspace_id)
        )

    async def slug_exists(self, slug: str) -> bool:
        found = await self.db.scalar(select(WorkspaceORM.id).where(WorkspaceORM.slug == slug))
        return found is not None

    async def next_available_slug(self, name: str) -> str:
        """Sequential probing: base, base-1, base-2, ..."""
        base = slugify(name) or "workspace"
        slug = base
        suffix = 0
        while await self.slug_exists(slug):
            suffix += 1
            slug = f"{base}-{suffix}"
        return slug

    async def create(self, name: str, description: Optional[str], owner_id: int) -> Workspace:
        slug = await self.next_available_slug(name)
        orm_workspace = WorkspaceORM(
            name=name,
            description=description,
            slug=slug,
            owner_id=owner_id,
        )
        self.db.add(orm_workspace)
        await self.db.flush()

        self.db.add(WorkspaceMemberORM(
            workspace_id=orm_workspace.id,
            user_id=owner_id,
            role=WorkspaceRole.ADMIN.value,
        ))
        await self._link_user(owner_id, orm_workspace.id)
        await self.db.commit()

        logger.info(f"Workspace {orm_workspace.id} created with slug '{slug}' by user {owner_id}")
        return await self.get(orm_workspace.id)

    async def get(self, workspace_id: int) -> Optional[Workspace]:
        orm_workspace = await self.db.get(WorkspaceORM, workspace_id)
        if orm_workspace is None:
            return None
        members = await self._load_members([workspace_id])
        return self._to_domain(orm_workspace, members.get(workspace_id, []))

    async def list_for_user(
        self,
        user_id: int,
        page: int,
        limit: int,
    ) -> Tuple[List[Workspace], int]:
        """Workspaces the user owns or belongs to, most recently updated first"""
        member_of = select(WorkspaceMemberORM.workspace_id).where(
            WorkspaceMemberORM.user_id == user_id
        )
        visible = or_(WorkspaceORM.owner_id == user_id, WorkspaceORM.id.in_(member_of))

        total = await self.db.scalar(
            select(func.count()).select_from(WorkspaceORM).where(visible)
        )
        stmt = (
            select(WorkspaceORM)
            .where(visible)
            .order_by(WorkspaceORM.updated_at.desc(), WorkspaceORM.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        rows = list((await self.db.execute(stmt)).scalars().all())
        members = await self._load_members([w.id for w in rows])
        return [self._to_domain(w, members.get(w.id, [])) for w in rows], total or 0

    async def update(self, workspace_id: int, fields: Dict[str, Optional[str]]) -> Optional[Workspace]:
        """Apply only the supplied fields"""
        orm_workspace = await self.db.get(WorkspaceORM, workspace_id)
        if orm_workspace is None:
            return None
        for key, value in fields.items():
            setattr(orm_workspace, key, value)
        await self.db.commit()
        return await self.get(workspace_id)

    async def delete(self, workspace_id: int) -> List[Tuple[str, str]]:
        """
        Delete a workspace and everything scoped to it in one transaction.

        Returns:
            (storage_path, provider_file_id) of every deleted document, so the
            caller can release the stored bytes afterwards
        """
        blobs = (await self.db.execute(
            select(DocumentORM.storage_path, DocumentORM.provider_file_id)
            .where(DocumentORM.workspace_id == workspace_id)
        )).all()

        await self.db.execute(delete(DocumentORM).where(DocumentORM.workspace_id == workspace_id))
        await self.db.execute(
            delete(ChatMessageORM).where(ChatMessageORM.workspace_id == workspace_id)
        )
        await self.db.execute(delete(WebhookORM).where(WebhookORM.workspace_id == workspace_id))
        await self.db.execute(
            delete(WorkspaceMemberORM).where(WorkspaceMemberORM.workspace_id == workspace_id)
        )
        await self.db.execute(delete(WorkspaceORM).where(WorkspaceORM.id == workspace_id))
        await self.db.execute(
            delete(UserWorkspaceORM).where(UserWorkspaceORM.workspace_id == workspace_id)
        )
        await self.db.commit()

        logger.info(f"Workspace {workspace_id} deleted with {len(blobs)} documents")
        return [(row.storage_path, row.provider_file_id) for row in blobs]

    async def is_member(self, workspace_id: int, user_id: int) -> bool:
        found = await self.db.scalar(
            select(WorkspaceMemberORM.id).where(
                WorkspaceMemberORM.workspace_id == workspace_id,
                WorkspaceMemberORM.user_id == user_id,
            )
        )
        return found is not None

    async def add_member(self, workspace_id: int, user_id: int, role: WorkspaceRole) -> bool:
        """
        Insert a member row. Returns False, leaving state untouched,
        if the user is already a member.
        """
        if await self.is_member(workspace_id, user_id):
            return False

        self.db.add(WorkspaceMemberORM(
            workspace_id=workspace_id,
            user_id=user_id,
            role=role.value,
        ))
        await self._link_user(user_id, workspace_id)
        await self._touch(workspace_id)
        try:
            await self.db.commit()
        except IntegrityError:
            # Lost a race against a concurrent add of the same user
            await self.db.rollback()
            logger.info(f"Concurrent add of user {user_id} to workspace {workspace_id} ignored")
            return False
        return True

    async def remove_member(self, workspace_id: int, user_id: int) -> bool:
        result = await self.db.execute(
            delete(WorkspaceMemberORM).where(
                WorkspaceMemberORM.workspace_id == workspace_id,
                WorkspaceMemberORM.user_id == user_id,
            )
        )
        if result.rowcount == 0:
            await self.db.rollback()
            return False
        await self.db.execute(
            delete(UserWorkspaceORM).where(
                UserWorkspaceORM.workspace_id == workspace_id,
                UserWorkspaceORM.user_id == user_id,
            )
        )
        await self._touch(workspace_id)
        await self.db.commit()
        return True

    async def update_member_role(self, workspace_id: int, user_id: int, role: WorkspaceRole) -> bool:
        result = await self.db.execute(
            update(WorkspaceMemberORM)
            .where(
                WorkspaceMemberORM.workspace_id == workspace_id,
                WorkspaceMemberORM.user_id == user_id,
            )
            .values(role=role.value)
        )
        if result.rowcount == 0:
            await self.db.rollback()
            return False
        await self._touch(workspace_id)
        await self.db.commit()
        return True

    async def member_user_ids(self, workspace_id: int) -> List[int]:
        """Owner plus every member, without duplicates"""
        owner_id = await self.get_owner_id(workspace_id)
        if owner_id is None:
            return []
        rows = await self.db.execute(
            select(WorkspaceMemberORM.user_id).where(WorkspaceMemberORM.workspace_id == workspace_id)
        )
        ids = [owner_id]
        for user_id in rows.scalars().all():
            if user_id not in ids:
                ids.append(user_id)
        return ids

    async def _link_user(self, user_id: int, workspace_id: int) -> None:
        """Insert-if-absent into the denormalized membership list"""
        existing = await self.db.scalar(
            select(UserWorkspaceORM.id).where(
                UserWorkspaceORM.user_id == user_id,
                UserWorkspaceORM.workspace_id == workspace_id,
            )
        )
        if existing is None:
            self.db.add(UserWorkspaceORM(user_id=user_id, workspace_id=workspace_id))

    async def _touch(self, workspace_id: int) -> None:
        await self.db.execute(
            update(WorkspaceORM)
            .where(WorkspaceORM.id == workspace_id)
            .values(updated_at=utcnow())
        )

    async def _load_members(self, workspace_ids: List[int]) -> Dict[int, List[WorkspaceMember]]:
        if not workspace_ids:
            return {}
        stmt = (
            select(WorkspaceMemberORM, UserORM.name, UserORM.email)
            .join(UserORM, UserORM.id == WorkspaceMemberORM.user_id)
            .where(WorkspaceMemberORM.workspace_id.in_(workspace_ids))
            .order_by(WorkspaceMemberORM.added_at.asc(), WorkspaceMemberORM.id.asc())
        )
        grouped: Dict[int, List[WorkspaceMember]] = {}
        for member, name, email in (await self.db.execute(stmt)).all():
            grouped.setdefault(member.workspace_id, []).append(WorkspaceMember(
                user_id=member.user_id,
                role=WorkspaceRole(member.role),
                added_at=member.added_at,
                name=name,
                email=email,
            ))
        return grouped

    @staticmethod
    def _to_domain(orm_workspace: WorkspaceORM, members: List[WorkspaceMember]) -> Workspace:
        return Workspace(
            id=orm_workspace.id,
            name=orm_workspace.name,
            description=orm_workspace.description,
            slug=orm_workspace.slug,
            owner_id=orm_workspace.owner_id,
            members=members,
            created_at=orm_workspace.created_at,
            updated_at=orm_workspace.updated_at,
        )
