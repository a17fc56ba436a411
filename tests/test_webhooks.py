"""Webhook registry and dispatcher tests."""

from __future__ import annotations

import json

import httpx
import pytest
from httpx import AsyncClient

from docit.db import SessionLocal
from docit.features.webhooks.domain import WebhookEvent
from docit.features.webhooks.repository import WebhookRepository
from docit.features.webhooks.service import build_payload, fire_webhooks


@pytest.mark.asyncio
async def test_create_filters_unknown_events(
    async_client: AsyncClient, make_user, create_workspace, headers
) -> None:
    owner = await make_user()
    workspace = await create_workspace(owner)

    response = await async_client.post(
        f"/api/workspaces/{workspace['id']}/webhooks",
        json={"url": "https://hooks.example.test/a", "events": ["document_uploaded", "bogus"]},
        headers=headers(owner),
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["events"] == ["document_uploaded"]
    assert data["workspaceId"] == workspace["id"]


@pytest.mark.asyncio
async def test_no_events_subscribes_to_all(
    async_client: AsyncClient, make_user, create_workspace, headers
) -> None:
    owner = await make_user()
    workspace = await create_workspace(owner)

    response = await async_client.post(
        f"/api/workspaces/{workspace['id']}/webhooks",
        json={"url": "https://hooks.example.test/all", "events": ["nope"]},
        headers=headers(owner),
    )

    assert sorted(response.json()["data"]["events"]) == sorted(e.value for e in WebhookEvent)


@pytest.mark.asyncio
async def test_invalid_url_is_rejected(
    async_client: AsyncClient, make_user, create_workspace, headers
) -> None:
    owner = await make_user()
    workspace = await create_workspace(owner)

    response = await async_client.post(
        f"/api/workspaces/{workspace['id']}/webhooks",
        json={"url": "ftp://hooks.example.test"},
        headers=headers(owner),
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_viewer_cannot_manage_webhooks(
    async_client: AsyncClient, make_user, create_workspace, add_member, headers
) -> None:
    owner = await make_user()
    viewer = await make_user()
    workspace = await create_workspace(owner)
    await add_member(workspace["id"], owner, viewer, "viewer")
    base = f"/api/workspaces/{workspace['id']}/webhooks"

    listing = await async_client.get(base, headers=headers(viewer))
    create = await async_client.post(base, json={"url": "https://x.example.test"}, headers=headers(viewer))

    assert listing.status_code == create.status_code == 404


@pytest.mark.asyncio
async def test_list_and_delete(
    async_client: AsyncClient, make_user, create_workspace, headers
) -> None:
    owner = await make_user()
    workspace = await create_workspace(owner)
    other = await create_workspace(owner, "Other")
    base = f"/api/workspaces/{workspace['id']}/webhooks"
    created = (await async_client.post(base, json={"url": "https://a.example.test"}, headers=headers(owner))).json()["data"]

    wrong_workspace = await async_client.delete(
        f"/api/workspaces/{other['id']}/webhooks/{created['id']}", headers=headers(owner)
    )
    assert wrong_workspace.status_code == 404

    listed = await async_client.get(base, headers=headers(owner))
    assert [w["id"] for w in listed.json()["data"]] == [created["id"]]

    deleted = await async_client.delete(f"{base}/{created['id']}", headers=headers(owner))
    assert deleted.status_code == 204
    assert (await async_client.get(base, headers=headers(owner))).json()["data"] == []


def test_payload_shape() -> None:
    body = build_payload(3, WebhookEvent.DOCUMENT_UPLOADED, {"documentId": 9})

    assert body["event"] == "document_uploaded"
    assert body["workspaceId"] == 3
    assert body["documentId"] == 9
    assert "timestamp" in body


@pytest.mark.asyncio
async def test_dispatch_reaches_only_subscribed_targets(make_user, create_workspace) -> None:
    owner = await make_user()
    workspace = await create_workspace(owner)
    async with SessionLocal() as session:
        repo = WebhookRepository(session)
        await repo.create(workspace["id"], "https://uploads.example.test/hook", events=[WebhookEvent.DOCUMENT_UPLOADED])
        await repo.create(workspace["id"], "https://members.example.test/hook", events=[WebhookEvent.MEMBER_INVITED])
        await repo.create(workspace["id"], "https://broken.example.test/hook", events=[])

    received = []

    def handler(request: httpx.Request) -> httpx.Response:
        received.append((str(request.url), json.loads(request.content)))
        if "broken" in request.url.host:
            return httpx.Response(500)
        return httpx.Response(204)

    attempted = await fire_webhooks(
        workspace["id"],
        WebhookEvent.DOCUMENT_UPLOADED,
        {"documentId": 1},
        transport=httpx.MockTransport(handler),
    )

    assert attempted == 2
    assert sorted(url for url, _ in received) == [
        "https://broken.example.test/hook",
        "https://uploads.example.test/hook",
    ]
    assert all(body["event"] == "document_uploaded" for _, body in received)


@pytest.mark.asyncio
async def test_dispatch_survives_unreachable_target(make_user, create_workspace) -> None:
    owner = await make_user()
    workspace = await create_workspace(owner)
    async with SessionLocal() as session:
        await WebhookRepository(session).create(workspace["id"], "https://down.example.test/hook")

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    attempted = await fire_webhooks(
        workspace["id"], WebhookEvent.WORKSPACE_CREATED, transport=httpx.MockTransport(handler)
    )

    assert attempted == 1
