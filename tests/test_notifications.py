"""Notification ledger endpoint tests."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

from docit.db import SessionLocal
from docit.features.notifications.domain import NotificationType
from docit.features.notifications.repository import NotificationRepository
from docit.features.notifications.service import notify_workspace_members_except


async def _seed(user_id: int, count: int) -> list:
    async with SessionLocal() as session:
        repo = NotificationRepository(session)
        created = []
        for i in range(count):
            created += await repo.create_many(
                [user_id], NotificationType.DOCUMENT_UPLOADED, {"documentTitle": f"Doc {i}"}
            )
        return created


@pytest.mark.asyncio
async def test_list_newest_first_with_unread_filter(
    async_client: AsyncClient, make_user, headers
) -> None:
    user = await make_user()
    created = await _seed(user.id, 3)

    marked = await async_client.patch(f"/api/notifications/{created[0].id}/read", headers=headers(user))
    assert marked.status_code == 200
    assert marked.json()["data"] == {"ok": True}

    everything = await async_client.get("/api/notifications", headers=headers(user))
    unread = await async_client.get("/api/notifications?unreadOnly=true", headers=headers(user))

    assert [n["id"] for n in everything.json()["data"]] == [n.id for n in reversed(created)]
    assert [n["id"] for n in unread.json()["data"]] == [created[2].id, created[1].id]
    assert everything.json()["data"][0]["payload"] == {"documentTitle": "Doc 2"}


@pytest.mark.asyncio
async def test_mark_read_is_idempotent(async_client: AsyncClient, make_user, headers) -> None:
    user = await make_user()
    [notification] = await _seed(user.id, 1)
    url = f"/api/notifications/{notification.id}/read"

    first = await async_client.patch(url, headers=headers(user))
    second = await async_client.patch(url, headers=headers(user))

    assert first.status_code == second.status_code == 200
    count = await async_client.get("/api/notifications/unread-count", headers=headers(user))
    assert count.json()["data"] == {"count": 0}


@pytest.mark.asyncio
async def test_read_all_reports_changed_count(async_client: AsyncClient, make_user, headers) -> None:
    user = await make_user()
    created = await _seed(user.id, 4)
    await async_client.patch(f"/api/notifications/{created[1].id}/read", headers=headers(user))

    before = await async_client.get("/api/notifications/unread-count", headers=headers(user))
    changed = await async_client.patch("/api/notifications/read-all", headers=headers(user))
    again = await async_client.patch("/api/notifications/read-all", headers=headers(user))

    assert before.json()["data"]["count"] == 3
    assert changed.json()["data"]["count"] == 3
    assert again.json()["data"]["count"] == 0


@pytest.mark.asyncio
async def test_cannot_touch_another_users_notification(
    async_client: AsyncClient, make_user, headers
) -> None:
    owner = await make_user()
    other = await make_user()
    [notification] = await _seed(owner.id, 1)

    response = await async_client.patch(f"/api/notifications/{notification.id}/read", headers=headers(other))

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"
    count = await async_client.get("/api/notifications/unread-count", headers=headers(owner))
    assert count.json()["data"]["count"] == 1


@pytest.mark.asyncio
async def test_requires_authentication(async_client: AsyncClient) -> None:
    response = await async_client.get("/api/notifications")

    assert response.status_code == 401
    assert response.json() == {
        "success": False,
        "error": {"code": "UNAUTHORIZED", "message": response.json()["error"]["message"]},
    }


@pytest.mark.asyncio
async def test_fan_out_skips_the_actor(make_user, create_workspace, add_member) -> None:
    from docit.features.notifications.schemas import NotificationPayload

    owner = await make_user()
    editor = await make_user()
    viewer = await make_user()
    workspace = await create_workspace(owner)
    await add_member(workspace["id"], owner, editor, "editor")
    await add_member(workspace["id"], owner, viewer, "viewer")

    await notify_workspace_members_except(
        workspace["id"],
        editor.id,
        NotificationType.DOCUMENT_UPLOADED,
        NotificationPayload(workspace_id=workspace["id"], document_title="Plan"),
    )

    async with SessionLocal() as session:
        repo = NotificationRepository(session)
        uploads = {
            user.id: [
                n for n in await repo.list_for_user(user.id, limit=10)
                if n.type is NotificationType.DOCUMENT_UPLOADED
            ]
            for user in (owner, editor, viewer)
        }
    assert len(uploads[owner.id]) == 1
    assert len(uploads[viewer.id]) == 1
    assert uploads[editor.id] == []
