import os
import uuid
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession
from typing import AsyncGenerator

# Configure database for tests via settings module rather than hardcoding directly.
# Allow overriding with TEST_DATABASE_URL; fall back to a local sqlite file.
test_db_url = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///./tests/test.db")
os.environ.setdefault("DATABASE_URL", test_db_url)
os.environ.setdefault("AUTH_ENABLED", "false")

from creatorflow.core import config as _config  # noqa: E402
_config.get_settings.cache_clear()  # ensure new env vars are picked up # type: ignore[attr-defined]
_settings = _config.get_settings()

from creatorflow.api.main import app  # noqa: E402
from creatorflow.db.session import AsyncSessionLocal, engine, Base  # noqa: E402
from creatorflow.models import Profile, Channel, Status, Idea  # noqa: E402
from sqlalchemy import delete  # noqa: E402


@pytest_asyncio.fixture(autouse=True)
async def _prepare_db():
    """Create the schema if needed and clear every table before each test.
    Order matters due to FK constraints: Idea/Channel/Status -> Profile.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with AsyncSessionLocal() as session:  # type: ignore
        await session.execute(delete(Idea))
        await session.execute(delete(Channel))
        await session.execute(delete(Status))
        await session.execute(delete(Profile))
        await session.commit()
    yield


@pytest.fixture(scope="session")
def settings():
    """Expose application settings to tests if needed."""
    return _settings


@pytest.fixture()
def user_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest_asyncio.fixture()
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:  # type: ignore
        yield session


@pytest_asyncio.fixture()
async def profile(db_session: AsyncSession, user_id: uuid.UUID) -> Profile:
    p = Profile(id=user_id, display_name="Test Creator")
    db_session.add(p)
    await db_session.flush()
    return p


@pytest_asyncio.fixture()
async def client(user_id: uuid.UUID):
    # httpx >=0.28 removed the 'app=' shortcut; use ASGITransport explicitly
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport, base_url="http://test", headers={"X-User-Id": str(user_id)}
    ) as c:
        yield c
