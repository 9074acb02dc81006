import os
import uuid
from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine.base import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.session import Session

from tests.helpers import TEST_JWT_SECRET, TEST_SERVICE_KEY, make_gallery, make_share, make_viewer

os.environ.update({"JWT_SECRET_KEY": TEST_JWT_SECRET, "SERVICE_ROLE_KEY": TEST_SERVICE_KEY, "JWT_AUDIENCE": "authenticated"})

from posevault.auth_utils import get_auth_settings  # noqa: E402
from posevault.exceptions import ObjectNotFound  # noqa: E402
from posevault.models.db import Base  # noqa: E402
from posevault.s3_service import DEFAULT_CONTENT_TYPE, StoredObject  # noqa: E402


class InMemoryObjectStore:
    """Stands in for AsyncS3Client; same coroutine interface, objects kept in a dict."""

    def __init__(self):
        self.objects: dict[str, StoredObject] = {}
        self.deleted: list[str] = []

    async def put_object(self, key: str, body: bytes, content_type: str | None = None) -> int:
        self.objects[key] = StoredObject(body=body, content_type=content_type or DEFAULT_CONTENT_TYPE, size=len(body))
        return len(body)

    async def get_object(self, key: str) -> StoredObject:
        if key not in self.objects:
            raise ObjectNotFound("Object not found")
        return self.objects[key]

    async def delete_object(self, key: str) -> None:
        self.deleted.append(key)
        self.objects.pop(key, None)

    async def close(self) -> None:
        return None


@pytest.fixture(autouse=True)
def _fresh_auth_settings() -> Generator[None]:
    get_auth_settings.cache_clear()
    yield
    get_auth_settings.cache_clear()


@pytest.fixture(scope="function")
def engine(tmp_path) -> Generator[Engine]:
    """SQLite database file per test; worker threads share it, hence check_same_thread=False."""
    import posevault.models  # noqa: F401

    engine = create_engine(f"sqlite:///{tmp_path / 'posevault.db'}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_maker(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture(scope="function")
def db_session(session_maker: sessionmaker[Session]) -> Generator[Session]:
    session = session_maker()
    yield session
    session.close()


@pytest.fixture(scope="function")
def object_store() -> InMemoryObjectStore:
    return InMemoryObjectStore()


@pytest.fixture(scope="function")
def client(session_maker: sessionmaker[Session], object_store: InMemoryObjectStore) -> Generator[TestClient]:
    """FastAPI test client wired to the per-test database and the in-memory store."""
    from posevault.dependencies import get_db_session_maker, get_s3_client
    from posevault.main import app
    from posevault.models.db import get_db

    def override_get_db():
        session = session_maker()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_db_session_maker] = lambda: session_maker
    app.dependency_overrides[get_s3_client] = lambda: object_store

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def owner_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture(scope="function")
def gallery(db_session: Session, owner_id: uuid.UUID):
    return make_gallery(db_session, owner_id, name="Studio Poses", notes="Natural light")


@pytest.fixture(scope="function")
def share(db_session: Session, gallery):
    return make_share(db_session, gallery)


@pytest.fixture(scope="function")
def upload_share(db_session: Session, gallery):
    """Share that accepts viewer uploads without approval, 1 MB limit."""
    return make_share(db_session, gallery, allow_uploads=True, require_upload_approval=False, max_upload_size_mb=1)


@pytest.fixture(scope="function")
def viewer(db_session: Session, share):
    return make_viewer(db_session, share, "Alice")
