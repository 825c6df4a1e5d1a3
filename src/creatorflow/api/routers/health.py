from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from creatorflow.api import deps
from creatorflow.services.health import check_db

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/liveness", summary="Process is up")
async def liveness():
    return {"status": "ok"}


@router.get("/readiness", summary="Database reachable",
            description="503 with status `degraded` while the ideas database cannot be queried; "
                        "the store and every write route depend on it.")
async def readiness(session: AsyncSession = Depends(deps.get_db)):
    database_ok = await check_db(session)
    body = {"status": "ready" if database_ok else "degraded", "checks": {"database": database_ok}}
    return JSONResponse(body, status_code=200 if database_ok else 503)
