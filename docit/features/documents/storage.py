"""Blob storage for document bytes.

``BlobStorage`` is the seam the document registry depends on. The production
implementation writes to a Supabase Storage bucket; tests substitute an
in-memory store through the ``get_blob_storage`` dependency.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from fastapi.concurrency import run_in_threadpool

from docit import config
from docit.errors import UpstreamError
from docit.infra.supabase import get_supabase_client

logger = logging.getLogger(__name__)


class StorageError(UpstreamError):
    code = "STORAGE_ERROR"


@dataclass
class StoredBlob:
    """Reference to bytes written by a storage backend"""
    storage_path: str
    provider_file_id: str
    size: int


class BlobStorage(ABC):
    """Key/bytes object store"""

    @abstractmethod
    async def put(self, data: bytes, key: str, content_type: str) -> StoredBlob:
        ...

    @abstractmethod
    async def get(self, storage_path: str) -> bytes:
        ...

    @abstractmethod
    async def delete(self, storage_path: str, provider_file_id: str) -> None:
        ...


class SupabaseBlobStorage(BlobStorage):
    """Supabase Storage bucket backend"""

    def __init__(self, bucket: Optional[str] = None):
        self.bucket = bucket or config.SUPABASE_STORAGE_BUCKET

    def _bucket(self):
        return get_supabase_client().storage.from_(self.bucket)

    async def put(self, data: bytes, key: str, content_type: str) -> StoredBlob:
        def _upload():
            return self._bucket().upload(key, data, {"content-type": content_type})

        try:
            result = await run_in_threadpool(_upload)
        except Exception as e:
            logger.error(f"Error uploading {key} to bucket {self.bucket}: {e}")
            raise StorageError(f"Failed to store file: {e}")

        provider_file_id = getattr(result, "full_path", None) or key
        logger.info(f"File uploaded to storage: {key} ({len(data)} bytes)")
        return StoredBlob(storage_path=key, provider_file_id=provider_file_id, size=len(data))

    async def get(self, storage_path: str) -> bytes:
        try:
            return await run_in_threadpool(lambda: self._bucket().download(storage_path))
        except Exception as e:
            logger.error(f"Error downloading {storage_path} from bucket {self.bucket}: {e}")
            raise StorageError(f"Failed to download file: {e}")

    async def delete(self, storage_path: str, provider_file_id: str) -> None:
        try:
            await run_in_threadpool(lambda: self._bucket().remove([storage_path]))
        except Exception as e:
            logger.error(f"Error deleting {storage_path} ({provider_file_id}): {e}")
            raise StorageError(f"Failed to delete file: {e}")
        logger.info(f"File deleted from storage: {storage_path}")


_blob_storage: Optional[BlobStorage] = None


def get_blob_storage() -> BlobStorage:
    """FastAPI dependency returning the process-wide storage backend"""
    global _blob_storage
    if _blob_storage is None:
        _blob_storage = SupabaseBlobStorage()
    return _blob_storage


async def release_blobs(storage: BlobStorage, blobs: Iterable[Tuple[str, str]]) -> None:
    """Best-effort deletion of bytes whose metadata is already gone"""
    for storage_path, provider_file_id in blobs:
        try:
            await storage.delete(storage_path, provider_file_id)
        except StorageError:
            logger.warning(f"Orphaned blob left in storage: {storage_path}")
