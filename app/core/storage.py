# app/core/storage.py
import hashlib
import logging
from dataclasses import dataclass
from typing import Any, Protocol

from fastapi import Depends
from storage3.utils import StorageException
from supabase import Client

from app.core.config import Settings, get_settings
from app.core.errors import StorageError
from app.core.supabase_client import supabase_admin

logger = logging.getLogger("uvicorn")

# Page size for bucket listings
LIST_PAGE_SIZE = 100


@dataclass
class StoredObject:
    """A blob fetched from the object store, with its HTTP metadata."""

    key: str
    body: bytes
    content_type: str
    etag: str


def content_etag(body: bytes) -> str:
    """Quoted MD5 of the content, the same shape S3-style stores report."""
    return f'"{hashlib.md5(body).hexdigest()}"'


class ObjectStore(Protocol):
    """
    Key-value blob storage keyed by string paths ("ABC-1/front.jpg").

    Contract:
      - put overwrites an existing key.
      - get returns None for a missing key instead of raising.
      - delete is idempotent on missing keys.
      - backend faults are raised as StorageError.
    """

    def put(self, key: str, data: bytes, content_type: str) -> None: ...

    def get(self, key: str) -> StoredObject | None: ...

    def delete(self, keys: str | list[str]) -> None: ...

    def list_by_prefix(self, prefix: str) -> list[str]: ...


class SupabaseObjectStore:
    """
    ObjectStore backed by a Supabase Storage bucket.

    Supabase models keys as folders, so listings and metadata lookups go
    through the parent folder of the key.
    """

    def __init__(self, client: Client, bucket: str):
        self.client = client
        self.bucket = bucket

    def _bucket(self):
        return self.client.storage.from_(self.bucket)

    def _list_folder(self, folder: str, search: str = "") -> list[dict[str, Any]]:
        """
        Return every file entry of `folder` whose name starts with `search`.

        Folder placeholders (entries without an id) are skipped.
        """
        entries: list[dict[str, Any]] = []
        offset = 0
        while True:
            page = self._bucket().list(
                folder,
                {"limit": LIST_PAGE_SIZE, "offset": offset, "search": search},
            )
            entries.extend(
                e for e in page if e.get("id") and e["name"].startswith(search)
            )
            if len(page) < LIST_PAGE_SIZE:
                return entries
            offset += LIST_PAGE_SIZE

    def put(self, key: str, data: bytes, content_type: str) -> None:
        """
        Upload raw bytes to `key`.

        If a file already exists at this path, it will be overwritten
        thanks to the 'upsert' option.
        """
        try:
            self._bucket().upload(
                key,
                data,
                {"content-type": content_type, "upsert": "true"},
            )
        except StorageException as e:
            raise StorageError(f"Failed to store {key}: {e}") from e

    def get(self, key: str) -> StoredObject | None:
        folder, _, name = key.rpartition("/")
        if not name:
            return None

        try:
            matches = [e for e in self._list_folder(folder, name) if e["name"] == name]
            if not matches:
                return None
            body = self._bucket().download(key)
        except StorageException as e:
            raise StorageError(f"Failed to read {key}: {e}") from e

        metadata = matches[0].get("metadata") or {}
        return StoredObject(
            key=key,
            body=body,
            content_type=metadata.get("mimetype") or "application/octet-stream",
            etag=metadata.get("eTag") or content_etag(body),
        )

    def delete(self, keys: str | list[str]) -> None:
        """
        Delete one or more files. Missing keys are ignored by Supabase.
        """
        paths = [keys] if isinstance(keys, str) else list(keys)
        if not paths:
            return
        try:
            # Supabase Python client expects a list of paths.
            self._bucket().remove(paths)
        except StorageException as e:
            raise StorageError(f"Failed to delete {', '.join(paths)}: {e}") from e

    def list_by_prefix(self, prefix: str) -> list[str]:
        """
        List keys starting with `prefix`.

        Example:
            list_by_prefix("ABC-1/") -> ["ABC-1/front.jpg", "ABC-1/back.jpg"]
        """
        folder, _, search = prefix.rpartition("/")
        try:
            entries = self._list_folder(folder, search)
        except StorageException as e:
            raise StorageError(f"Failed to list {prefix}: {e}") from e

        if not folder:
            return [e["name"] for e in entries]
        return [f"{folder}/{e['name']}" for e in entries]


def get_object_store(settings: Settings = Depends(get_settings)) -> ObjectStore:
    """FastAPI dependency returning the product image store."""
    client = supabase_admin(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)
    return SupabaseObjectStore(client, settings.STORAGE_BUCKET)
