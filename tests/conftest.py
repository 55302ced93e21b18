"""Shared test fixtures for pytest"""
import os

# Settings are read once at import time; point them at throwaway values first
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-helper-documents")
os.environ.setdefault("STORAGE_BACKEND", "local")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (AsyncSession, async_sessionmaker,  # noqa: E402
                                    create_async_engine)
from sqlalchemy.pool import StaticPool  # noqa: E402

from main import app  # noqa: E402
from src.infrastructure.external.storage.local_storage import \
    LocalStorageService  # noqa: E402
from src.infrastructure.persistence.database import (  # noqa: E402
    Base, get_db, get_db_transactional)
from src.infrastructure.persistence.models import Helper  # noqa: E402
from src.infrastructure.security.jwt import create_access_token  # noqa: E402
from src.presentation.api.dependencies import get_storage_service  # noqa: E402

# In-memory SQLite shared across connections of one engine
TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture
async def test_engine():
    """Create test database engine"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def test_db(test_engine):
    """Create test database session"""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
        autocommit=False,
    )

    async with async_session() as session:
        yield session


@pytest.fixture
def storage(tmp_path):
    """Local blob store rooted in a per-test temp directory"""
    return LocalStorageService(storage_root=str(tmp_path / "storage"))


@pytest.fixture
async def client(test_db, storage):
    """HTTP client for API testing"""

    async def override_get_db():
        yield test_db

    async def override_get_db_transactional():
        try:
            yield test_db
            await test_db.commit()
        except Exception:
            await test_db.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_db_transactional] = override_get_db_transactional
    app.dependency_overrides[get_storage_service] = lambda: storage

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def test_helper(test_db):
    """Create helper h1 in the helper directory"""
    helper = Helper(id="h1", name="Test Helper")
    test_db.add(helper)
    await test_db.commit()
    await test_db.refresh(helper)
    return helper


@pytest.fixture
async def other_helper(test_db):
    """Create helper h2 in the helper directory"""
    helper = Helper(id="h2", name="Other Helper")
    test_db.add(helper)
    await test_db.commit()
    await test_db.refresh(helper)
    return helper


def _bearer(subject: str, role: str, helper_id: str | None = None) -> dict[str, str]:
    token = create_access_token(subject, role, helper_id=helper_id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers():
    """Auth headers for an administrator"""
    return _bearer("admin-user", "admin")


@pytest.fixture
def jugendamt_headers():
    """Auth headers for a youth welfare office caseworker"""
    return _bearer("jugendamt-user", "jugendamt")


@pytest.fixture
def helper_headers():
    """Auth headers for helper h1"""
    return _bearer("helper-user", "helper", helper_id="h1")
