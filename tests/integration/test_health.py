import pytest
from sqlalchemy.exc import OperationalError

from creatorflow.api import deps
from creatorflow.api.main import app


@pytest.mark.asyncio
@pytest.mark.integration
async def test_root(client):
    resp = await client.get("/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_liveness_and_readiness(client):
    live = await client.get("/api/v1/health/liveness")
    assert live.status_code == 200 and live.json() == {"status": "ok"}
    ready = await client.get("/api/v1/health/readiness")
    assert ready.status_code == 200
    assert ready.json() == {"status": "ready", "checks": {"database": True}}


class _BrokenSession:
    async def execute(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("database is down"))


@pytest.mark.asyncio
@pytest.mark.integration
async def test_readiness_degraded_when_database_unreachable(client):
    async def broken_db():
        yield _BrokenSession()

    app.dependency_overrides[deps.get_db] = broken_db
    try:
        resp = await client.get("/api/v1/health/readiness")
    finally:
        app.dependency_overrides.pop(deps.get_db, None)
    assert resp.status_code == 503
    assert resp.json() == {"status": "degraded", "checks": {"database": False}}
