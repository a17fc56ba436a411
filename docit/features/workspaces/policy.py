"""Access control policy for workspaces.

Roles are strictly ordered viewer < editor < admin. The workspace owner is
always an admin, whether or not a member row exists. Call sites ask whether a
role grants a named capability instead of comparing role strings.
"""
from enum import Enum
from typing import Optional

from docit.features.workspaces.domain import WorkspaceRole


class Capability(str, Enum):
    READ = "read"
    WRITE = "write"
    MANAGE = "manage"


_ROLE_RANK = {
    WorkspaceRole.VIEWER: 1,
    WorkspaceRole.EDITOR: 2,
    WorkspaceRole.ADMIN: 3,
}

_MINIMUM_ROLE = {
    Capability.READ: WorkspaceRole.VIEWER,
    Capability.WRITE: WorkspaceRole.EDITOR,
    Capability.MANAGE: WorkspaceRole.ADMIN,
}


def resolve_effective_role(
    owner_id: int,
    member_role: Optional[str],
    user_id: int,
) -> Optional[WorkspaceRole]:
    """Owner first, then the stored member role, else no access"""
    if owner_id == user_id:
        return WorkspaceRole.ADMIN
    if member_role is None:
        return None
    try:
        return WorkspaceRole(member_role)
    except ValueError:
        return None


def can(role: Optional[WorkspaceRole], capability: Capability) -> bool:
    if role is None:
        return False
    return _ROLE_RANK[role] >= _ROLE_RANK[_MINIMUM_ROLE[capability]]
