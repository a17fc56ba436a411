"""Shared pytest fixtures for backend tests."""

from __future__ import annotations

import os
import tempfile
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any, Dict, List, Optional, Tuple

# Point the app at a throwaway SQLite database before anything imports docit.db
_DB_DIR = tempfile.mkdtemp(prefix="docit-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR}/docit.sqlite"
os.environ["JWT_SECRET"] = "test-access-secret-0123456789abcdef0123456789"
os.environ["JWT_REFRESH_SECRET"] = "test-refresh-secret-0123456789abcdef01234567"
os.environ["DB_AUTO_CREATE"] = "false"

import email_validator  # noqa: E402

# Tests use reserved ".test" addresses; email-validator rejects them unless told otherwise
email_validator.TEST_ENVIRONMENT = True

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from docit.db import SessionLocal, engine  # noqa: E402
from docit.db.base import Base  # noqa: E402
from docit.db import models  # noqa: E402,F401
from docit.db.models.user import User as UserORM  # noqa: E402
from docit.features.auth.domain import User  # noqa: E402
from docit.features.auth.tokens import create_access_token  # noqa: E402
from docit.features.documents.storage import (  # noqa: E402
    BlobStorage,
    StorageError,
    StoredBlob,
    get_blob_storage,
)
from docit.main import app as docit_app  # noqa: E402
from docit.services.llm import DocumentSummary, Summarizer, SummarizerError, get_summarizer  # noqa: E402


class InMemoryBlobStorage(BlobStorage):
    """Dict-backed storage with switches for simulating outages."""

    def __init__(self) -> None:
        self.blobs: Dict[str, Tuple[bytes, str]] = {}
        self.fail_put = False
        self.fail_delete = False
        self.deleted: List[str] = []

    async def put(self, data: bytes, key: str, content_type: str) -> StoredBlob:
        if self.fail_put:
            raise StorageError("storage offline")
        self.blobs[key] = (data, content_type)
        return StoredBlob(storage_path=key, provider_file_id=f"file-{len(self.blobs)}", size=len(data))

    async def get(self, storage_path: str) -> bytes:
        if storage_path not in self.blobs:
            raise StorageError("not found")
        return self.blobs[storage_path][0]

    async def delete(self, storage_path: str, provider_file_id: str) -> None:
        if self.fail_delete:
            raise StorageError("storage offline")
        self.blobs.pop(storage_path, None)
        self.deleted.append(storage_path)


class FakeSummarizer(Summarizer):
    """Deterministic summarizer recording what it was asked."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, str]] = []
        self.fail = False

    async def summarize(self, title: str, text: str) -> DocumentSummary:
        self.calls.append((title, text))
        if not text.strip():
            return DocumentSummary.empty()
        if self.fail:
            raise SummarizerError("model offline")
        return DocumentSummary(
            summary=f"Summary of {title}",
            key_points=["first point"],
            topics=["testing"],
            document_type="memo",
        )


@pytest_asyncio.fixture(autouse=True)
async def _database() -> AsyncIterator[None]:
    """Fresh schema for every test."""

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


@pytest.fixture()
def storage() -> InMemoryBlobStorage:
    return InMemoryBlobStorage()


@pytest.fixture()
def summarizer() -> FakeSummarizer:
    return FakeSummarizer()


@pytest.fixture()
def app(storage: InMemoryBlobStorage, summarizer: FakeSummarizer) -> FastAPI:
    docit_app.dependency_overrides[get_blob_storage] = lambda: storage
    docit_app.dependency_overrides[get_summarizer] = lambda: summarizer
    yield docit_app
    docit_app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def async_client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """Provide an HTTPX async client bound to the FastAPI app."""

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest.fixture()
def make_user() -> Callable[..., Awaitable[User]]:
    """Insert a user row directly."""

    counter = {"n": 0}

    async def _make(name: Optional[str] = None, email: Optional[str] = None) -> User:
        counter["n"] += 1
        n = counter["n"]
        async with SessionLocal() as session:
            row = UserORM(
                email=email or f"user{n}@example.test",
                name=name or f"User {n}",
                role="viewer",
            )
            session.add(row)
            await session.commit()
            return User.model_validate(row)

    return _make


def auth_headers(user: User) -> Dict[str, str]:
    token = create_access_token(user.id, user.email, user.role.value)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def headers() -> Callable[[User], Dict[str, str]]:
    return auth_headers


@pytest.fixture()
def create_workspace(
    async_client: AsyncClient,
) -> Callable[..., Awaitable[Dict[str, Any]]]:
    """Create a workspace through the API and return its JSON data."""

    async def _create(owner: User, name: str = "Team Docs", description: Optional[str] = None) -> Dict[str, Any]:
        body: Dict[str, Any] = {"name": name}
        if description is not None:
            body["description"] = description
        response = await async_client.post("/api/workspaces", json=body, headers=auth_headers(owner))
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _create


@pytest.fixture()
def add_member(
    async_client: AsyncClient,
) -> Callable[..., Awaitable[Any]]:
    async def _add(workspace_id: int, admin: User, member: User, role: str = "viewer"):
        return await async_client.post(
            f"/api/workspaces/{workspace_id}/members",
            json={"userId": member.id, "role": role},
            headers=auth_headers(admin),
        )

    return _add
