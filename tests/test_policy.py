"""Access control policy tests."""

from __future__ import annotations

import pytest

from docit.features.workspaces.domain import WorkspaceRole
from docit.features.workspaces.policy import Capability, can, resolve_effective_role


def test_owner_is_admin_even_without_member_row() -> None:
    assert resolve_effective_role(owner_id=7, member_role=None, user_id=7) is WorkspaceRole.ADMIN


def test_owner_is_admin_even_if_stored_role_is_lower() -> None:
    assert resolve_effective_role(owner_id=7, member_role="viewer", user_id=7) is WorkspaceRole.ADMIN


def test_member_gets_stored_role() -> None:
    assert resolve_effective_role(owner_id=1, member_role="editor", user_id=2) is WorkspaceRole.EDITOR


def test_stranger_has_no_role() -> None:
    assert resolve_effective_role(owner_id=1, member_role=None, user_id=2) is None


def test_unknown_stored_role_grants_nothing() -> None:
    assert resolve_effective_role(owner_id=1, member_role="superuser", user_id=2) is None


@pytest.mark.parametrize(
    ("role", "read", "write", "manage"),
    [
        (WorkspaceRole.VIEWER, True, False, False),
        (WorkspaceRole.EDITOR, True, True, False),
        (WorkspaceRole.ADMIN, True, True, True),
        (None, False, False, False),
    ],
)
def test_capabilities_follow_role_order(role, read, write, manage) -> None:
    assert can(role, Capability.READ) is read
    assert can(role, Capability.WRITE) is write
    assert can(role, Capability.MANAGE) is manage
