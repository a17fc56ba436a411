"""Business logic for workspaces and membership"""

import logging
from typing import Dict, List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from docit.api.schemas import Pagination
from docit.errors import ConflictError, NotFoundError
from docit.features.auth.domain import User
from docit.features.auth.repository import UserRepository
from docit.features.workspaces.domain import Workspace, WorkspaceRole
from docit.features.workspaces.policy import Capability, can
from docit.features.workspaces.repository import WorkspaceRepository

logger = logging.getLogger(__name__)

NO_PERMISSION = "Workspace not found or no permission"


class WorkspaceService:
    """Service layer for workspace business logic"""

    def __init__(self, db: AsyncSession):
        self.repository = WorkspaceRepository(db)
        self.users = UserRepository(db)

    async def require(self, workspace_id: int, user_id: int, capability: Capability) -> WorkspaceRole:
        """
        Resolve the caller's role and check it grants the capability.

        Raises:
            NotFoundError: If the workspace is missing or the role is insufficient
        """
        role = await self.repository.get_member_role(workspace_id, user_id)
        if not can(role, capability):
            raise NotFoundError(NO_PERMISSION)
        return role

    async def create_workspace(
        self,
        name: str,
        description: Optional[str],
        creator: User,
    ) -> Workspace:
        """Creator becomes owner and an explicit admin member"""
        return await self.repository.create(name, description, creator.id)

    async def get_workspace_by_id(self, workspace_id: int, caller_id: int) -> Workspace:
        await self.require(workspace_id, caller_id, Capability.READ)
        workspace = await self.repository.get(workspace_id)
        if workspace is None:
            raise NotFoundError("Workspace not found")
        return workspace

    async def list_workspaces_for_user(
        self,
        caller_id: int,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[Workspace], Pagination]:
        items, total = await self.repository.list_for_user(caller_id, page, limit)
        return items, Pagination.build(page, limit, total)

    async def update_workspace(
        self,
        workspace_id: int,
        caller_id: int,
        fields: Dict[str, Optional[str]],
    ) -> Workspace:
        await self.require(workspace_id, caller_id, Capability.WRITE)
        if not fields:
            return await self.get_workspace_by_id(workspace_id, caller_id)
        workspace = await self.repository.update(workspace_id, fields)
        if workspace is None:
            raise NotFoundError(NO_PERMISSION)
        return workspace

    async def delete_workspace(self, workspace_id: int, caller_id: int) -> List[Tuple[str, str]]:
        """Cascade delete; returns the blob references of the removed documents"""
        await self.require(workspace_id, caller_id, Capability.MANAGE)
        return await self.repository.delete(workspace_id)

    async def add_member(
        self,
        workspace_id: int,
        caller_id: int,
        new_user_id: int,
        role: WorkspaceRole,
    ) -> Workspace:
        """
        Add a user to the workspace.

        Raises:
            NotFoundError: Caller is not an admin, or the user does not exist
            ConflictError: The user is the owner or already a member
        """
        await self.require(workspace_id, caller_id, Capability.MANAGE)
        if await self.users.get_by_id(new_user_id) is None:
            raise NotFoundError("User not found", code="USER_NOT_FOUND")
        return await self._add_existing_user(workspace_id, new_user_id, role)

    async def invite_by_email(
        self,
        workspace_id: int,
        caller_id: int,
        email: str,
        role: WorkspaceRole,
    ) -> Tuple[Workspace, User]:
        await self.require(workspace_id, caller_id, Capability.MANAGE)
        user = await self.users.get_by_email(email)
        if user is None:
            raise NotFoundError("No user with this email has signed up yet", code="USER_NOT_FOUND")
        workspace = await self._add_existing_user(workspace_id, user.id, role)
        return workspace, user

    async def remove_member(self, workspace_id: int, caller_id: int, member_user_id: int) -> None:
        await self.require(workspace_id, caller_id, Capability.MANAGE)
        await self._reject_owner(workspace_id, member_user_id)
        if not await self.repository.remove_member(workspace_id, member_user_id):
            raise NotFoundError("Member not found")
        logger.info(f"User {member_user_id} removed from workspace {workspace_id} by {caller_id}")

    async def update_member_role(
        self,
        workspace_id: int,
        caller_id: int,
        member_user_id: int,
        role: WorkspaceRole,
    ) -> Workspace:
        await self.require(workspace_id, caller_id, Capability.MANAGE)
        await self._reject_owner(workspace_id, member_user_id)
        if not await self.repository.update_member_role(workspace_id, member_user_id, role):
            raise NotFoundError("Member not found")
        return await self.repository.get(workspace_id)

    async def _add_existing_user(
        self,
        workspace_id: int,
        user_id: int,
        role: WorkspaceRole,
    ) -> Workspace:
        # The owner always counts as a member, even without a member row
        is_owner = await self.repository.get_owner_id(workspace_id) == user_id
        if is_owner or not await self.repository.add_member(workspace_id, user_id, role):
            raise ConflictError("User is already a member", code="ALREADY_MEMBER")
        logger.info(f"User {user_id} added to workspace {workspace_id} as {role.value}")
        return await self.repository.get(workspace_id)

    async def _reject_owner(self, workspace_id: int, user_id: int) -> None:
        if await self.repository.get_owner_id(workspace_id) == user_id:
            raise ConflictError("The workspace owner cannot be changed", code="OWNER_IMMUTABLE")
