"""Document store endpoint tests."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

from docit import config
from docit.db import SessionLocal
from docit.features.documents.service import default_title, extract_text, sanitize_filename, storage_key
from docit.features.notifications.domain import NotificationType
from docit.features.notifications.repository import NotificationRepository


async def _upload(client: AsyncClient, headers, user, workspace_id: int, name="notes.txt",
                  content=b"hello world", mime="text/plain", title=None):
    data = {"workspaceId": str(workspace_id)}
    if title is not None:
        data["title"] = title
    return await client.post(
        "/api/documents/upload",
        data=data,
        files={"file": (name, content, mime)},
        headers=headers(user),
    )


def test_storage_key_layout() -> None:
    assert storage_key(12, "Q3 report (final).pdf", now_ms=1700000000000) == (
        "workspaces/12/1700000000000-Q3_report__final_.pdf"
    )
    assert sanitize_filename("résumé.txt") == "r_sum_.txt"


def test_default_title_and_text_extraction() -> None:
    assert default_title("minutes.md") == "minutes"
    assert extract_text(b"  plain body \n", "text/plain") == "plain body"
    assert extract_text(b"%PDF-1.7", "application/pdf") == ""


@pytest.mark.asyncio
async def test_upload_and_download_round_trip(
    async_client: AsyncClient, make_user, create_workspace, headers, storage
) -> None:
    owner = await make_user(name="Owner")
    workspace = await create_workspace(owner)
    payload = b"line one\nline two\n"

    uploaded = await _upload(async_client, headers, owner, workspace["id"], name="meeting notes.txt", content=payload)
    assert uploaded.status_code == 201
    document = uploaded.json()["data"]
    assert document["title"] == "meeting notes"
    assert document["fileSize"] == len(payload)
    assert document["mimeType"] == "text/plain"
    assert document["uploadedBy"] == {"id": owner.id, "name": "Owner", "email": owner.email}
    assert len(storage.blobs) == 1
    [key] = storage.blobs
    assert key.startswith(f"workspaces/{workspace['id']}/") and key.endswith("-meeting_notes.txt")

    downloaded = await async_client.get(f"/api/documents/{document['id']}/download", headers=headers(owner))
    assert downloaded.status_code == 200
    assert downloaded.content == payload
    assert downloaded.headers["content-type"].startswith("text/plain")
    assert "meeting%20notes.txt" in downloaded.headers["content-disposition"]

    deleted = await async_client.delete(f"/api/documents/{document['id']}", headers=headers(owner))
    assert deleted.status_code == 204
    assert storage.blobs == {}
    missing = await async_client.get(f"/api/documents/{document['id']}", headers=headers(owner))
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_download_accepts_query_token(
    async_client: AsyncClient, make_user, create_workspace, headers
) -> None:
    owner = await make_user()
    workspace = await create_workspace(owner)
    uploaded = await _upload(async_client, headers, owner, workspace["id"])
    token = headers(owner)["Authorization"].split(" ", 1)[1]

    response = await async_client.get(f"/api/documents/{uploaded.json()['data']['id']}/download?token={token}")

    assert response.status_code == 200
    assert response.content == b"hello world"


@pytest.mark.asyncio
async def test_explicit_title_is_kept(
    async_client: AsyncClient, make_user, create_workspace, headers
) -> None:
    owner = await make_user()
    workspace = await create_workspace(owner)

    uploaded = await _upload(async_client, headers, owner, workspace["id"], title="  Board Minutes ")

    assert uploaded.json()["data"]["title"] == "Board Minutes"


@pytest.mark.asyncio
async def test_viewer_can_read_but_not_write(
    async_client: AsyncClient, make_user, create_workspace, add_member, headers, storage
) -> None:
    owner = await make_user()
    viewer = await make_user()
    workspace = await create_workspace(owner)
    await add_member(workspace["id"], owner, viewer, "viewer")
    existing = (await _upload(async_client, headers, owner, workspace["id"])).json()["data"]

    upload = await _upload(async_client, headers, viewer, workspace["id"], name="mine.txt")
    delete = await async_client.delete(f"/api/documents/{existing['id']}", headers=headers(viewer))
    listing = await async_client.get(f"/api/documents/workspace/{workspace['id']}", headers=headers(viewer))

    assert upload.status_code == 404
    assert delete.status_code == 404
    assert listing.status_code == 200
    assert [d["id"] for d in listing.json()["data"]] == [existing["id"]]
    assert len(storage.blobs) == 1


@pytest.mark.asyncio
async def test_non_member_cannot_see_documents(
    async_client: AsyncClient, make_user, create_workspace, headers
) -> None:
    owner = await make_user()
    stranger = await make_user()
    workspace = await create_workspace(owner)
    document = (await _upload(async_client, headers, owner, workspace["id"])).json()["data"]

    by_id = await async_client.get(f"/api/documents/{document['id']}", headers=headers(stranger))
    download = await async_client.get(f"/api/documents/{document['id']}/download", headers=headers(stranger))
    listing = await async_client.get(f"/api/documents/workspace/{workspace['id']}", headers=headers(stranger))

    assert [by_id.status_code, download.status_code, listing.status_code] == [404, 404, 404]


@pytest.mark.asyncio
async def test_listing_is_newest_first(
    async_client: AsyncClient, make_user, create_workspace, headers
) -> None:
    owner = await make_user()
    workspace = await create_workspace(owner)
    ids = [
        (await _upload(async_client, headers, owner, workspace["id"], name=f"n{i}.txt")).json()["data"]["id"]
        for i in range(3)
    ]

    listing = await async_client.get(f"/api/documents/workspace/{workspace['id']}", headers=headers(owner))

    assert [d["id"] for d in listing.json()["data"]] == list(reversed(ids))
    assert listing.json()["pagination"]["total"] == 3


@pytest.mark.asyncio
async def test_rejected_files(
    async_client: AsyncClient, make_user, create_workspace, headers, storage
) -> None:
    owner = await make_user()
    workspace = await create_workspace(owner)

    wrong_type = await _upload(async_client, headers, owner, workspace["id"], name="run.exe",
                               mime="application/x-msdownload")
    empty = await _upload(async_client, headers, owner, workspace["id"], content=b"")

    assert wrong_type.status_code == empty.status_code == 400
    assert wrong_type.json()["error"]["code"] == "VALIDATION_ERROR"
    assert storage.blobs == {}


@pytest.mark.asyncio
async def test_storage_outage_writes_no_metadata(
    async_client: AsyncClient, make_user, create_workspace, headers, storage
) -> None:
    owner = await make_user()
    workspace = await create_workspace(owner)
    storage.fail_put = True

    response = await _upload(async_client, headers, owner, workspace["id"])

    assert response.status_code == 502
    assert response.json()["error"]["code"] == "STORAGE_ERROR"
    listing = await async_client.get(f"/api/documents/workspace/{workspace['id']}", headers=headers(owner))
    assert listing.json()["data"] == []


@pytest.mark.asyncio
async def test_blob_delete_failure_still_removes_metadata(
    async_client: AsyncClient, make_user, create_workspace, headers, storage
) -> None:
    owner = await make_user()
    workspace = await create_workspace(owner)
    document = (await _upload(async_client, headers, owner, workspace["id"])).json()["data"]
    storage.fail_delete = True

    response = await async_client.delete(f"/api/documents/{document['id']}", headers=headers(owner))

    assert response.status_code == 204
    missing = await async_client.get(f"/api/documents/{document['id']}", headers=headers(owner))
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_upload_notifies_other_members(
    async_client: AsyncClient, make_user, create_workspace, add_member, headers
) -> None:
    owner = await make_user()
    editor = await make_user(name="Editor")
    workspace = await create_workspace(owner, "Design")
    await add_member(workspace["id"], owner, editor, "editor")

    document = (await _upload(async_client, headers, editor, workspace["id"], name="roadmap.md",
                              mime="text/markdown")).json()["data"]

    async with SessionLocal() as session:
        repo = NotificationRepository(session)
        owner_inbox = await repo.list_for_user(owner.id, limit=10)
        editor_inbox = await repo.list_for_user(editor.id, limit=10)

    uploads = [n for n in owner_inbox if n.type is NotificationType.DOCUMENT_UPLOADED]
    assert len(uploads) == 1
    assert uploads[0].payload == {
        "workspaceId": workspace["id"],
        "workspaceName": "Design",
        "documentId": document["id"],
        "documentTitle": "roadmap",
        "actorUserId": editor.id,
        "actorName": "Editor",
    }
    assert all(n.type is not NotificationType.DOCUMENT_UPLOADED for n in editor_inbox)


@pytest.mark.asyncio
async def test_summarize_stores_summary(
    async_client: AsyncClient, make_user, create_workspace, headers, summarizer
) -> None:
    owner = await make_user()
    workspace = await create_workspace(owner)
    document = (await _upload(async_client, headers, owner, workspace["id"], name="plan.txt",
                              content=b"Ship the beta in May.")).json()["data"]

    response = await async_client.post(f"/api/documents/{document['id']}/summarize", headers=headers(owner))

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["summary"] == "Summary of plan"
    assert data["keyPoints"] == ["first point"]
    assert data["documentType"] == "memo"
    assert data["document"]["summary"] == "Summary of plan"
    assert summarizer.calls == [("plan", "Ship the beta in May.")]


@pytest.mark.asyncio
async def test_summarizer_failure_leaves_document_unchanged(
    async_client: AsyncClient, make_user, create_workspace, headers, summarizer
) -> None:
    owner = await make_user()
    workspace = await create_workspace(owner)
    document = (await _upload(async_client, headers, owner, workspace["id"])).json()["data"]
    summarizer.fail = True

    response = await async_client.post(f"/api/documents/{document['id']}/summarize", headers=headers(owner))

    assert response.status_code == 502
    assert response.json()["error"]["code"] == "AI_UNAVAILABLE"
    current = await async_client.get(f"/api/documents/{document['id']}", headers=headers(owner))
    assert current.json()["data"]["summary"] is None


@pytest.mark.asyncio
async def test_manual_summary_and_invalid_id(
    async_client: AsyncClient, make_user, create_workspace, headers
) -> None:
    owner = await make_user()
    workspace = await create_workspace(owner)
    document = (await _upload(async_client, headers, owner, workspace["id"])).json()["data"]

    attached = await async_client.put(
        f"/api/documents/{document['id']}/summary", json={"summary": "Short."}, headers=headers(owner)
    )
    invalid = await async_client.get("/api/documents/not-a-number", headers=headers(owner))

    assert attached.json()["data"]["summary"] == "Short."
    assert invalid.status_code == 400
    assert invalid.json()["error"]["code"] == "INVALID_ID"


@pytest.mark.asyncio
async def test_oversized_upload_is_rejected(
    async_client: AsyncClient, make_user, create_workspace, headers, storage, monkeypatch
) -> None:
    monkeypatch.setattr(config, "MAX_FILE_SIZE", 16)
    owner = await make_user()
    workspace = await create_workspace(owner)

    at_limit = await _upload(async_client, headers, owner, workspace["id"], name="small.txt", content=b"x" * 16)
    too_big = await _upload(async_client, headers, owner, workspace["id"], name="big.txt", content=b"x" * 1000)

    assert at_limit.status_code == 201
    assert too_big.status_code == 400
    assert too_big.json()["error"]["code"] == "VALIDATION_ERROR"
    assert [data for data, _ in storage.blobs.values()] == [b"x" * 16]
