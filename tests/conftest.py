"""Pytest configuration and fixtures."""
import os

# Settings are read at import time by app.database / app.main
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from app.core.config import Settings, get_settings
from app.core.errors import StorageError
from app.core.storage import StoredObject, content_etag, get_object_store
from app.database import get_session
from app.main import app
from app.models import product as _product_models  # noqa: F401
from app.repositories.product_repo import ProductRepository
from app.services.product_service import ProductService


class InMemoryObjectStore:
    """
    ObjectStore kept in a dict, for tests.

    - `calls` records every operation as (name, arg)
    - add an operation name to `fail_on` to make it raise StorageError
    """

    def __init__(self):
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.calls: list[tuple[str, object]] = []
        self.fail_on: set[str] = set()

    def _record(self, op: str, arg: object) -> None:
        self.calls.append((op, arg))
        if op in self.fail_on:
            raise StorageError(f"{op} failed")

    def put(self, key: str, data: bytes, content_type: str) -> None:
        self._record("put", key)
        self.objects[key] = (data, content_type)

    def get(self, key: str) -> StoredObject | None:
        self._record("get", key)
        if key not in self.objects:
            return None
        body, content_type = self.objects[key]
        return StoredObject(
            key=key, body=body, content_type=content_type, etag=content_etag(body)
        )

    def delete(self, keys: str | list[str]) -> None:
        keys = [keys] if isinstance(keys, str) else list(keys)
        self._record("delete", keys)
        for key in keys:
            self.objects.pop(key, None)

    def list_by_prefix(self, prefix: str) -> list[str]:
        self._record("list", prefix)
        return sorted(k for k in self.objects if k.startswith(prefix))

    def write_ops(self) -> list[tuple[str, object]]:
        return [c for c in self.calls if c[0] in ("put", "delete")]


@pytest.fixture
def engine():
    """In-memory SQLite shared by every session of a test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def store():
    return InMemoryObjectStore()


@pytest.fixture
def settings():
    return Settings(
        DATABASE_URL="sqlite://",
        SUPABASE_URL="http://localhost:54321",
        DOMAIN="catalog.example.com",
        MAX_SIZE_MB=10,
        ENABLE_AUTH=False,
    )


@pytest.fixture
def repo():
    return ProductRepository()


@pytest.fixture
def service(repo, store):
    return ProductService(repo, store, max_upload_bytes=10 * 1024 * 1024)


@pytest.fixture
def client(engine, store, settings):
    """TestClient wired to the in-memory database and store."""

    def override_get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_object_store] = lambda: store
    app.dependency_overrides[get_settings] = lambda: settings

    yield TestClient(app, follow_redirects=False)

    app.dependency_overrides.clear()
