from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
import logging

from creatorflow.core.config import get_settings
from creatorflow.core.errors import SyncFailedError
from creatorflow.core.logging import configure_logging
from creatorflow.api.routers import (
    health,
    profile,
    ideas,
    trash,
    channels,
    statuses,
    analytics,
    streams,
    session,
)

settings = get_settings()
configure_logging(settings.log_level)
log = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name)

if settings.enable_cors:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# verb -> action name shown to the user when the store round trip fails
_ACTIONS = {"GET": "Load", "POST": "Save", "PUT": "Save", "PATCH": "Save", "DELETE": "Delete"}


@app.exception_handler(SyncFailedError)
async def sync_failed_handler(request: Request, exc: SyncFailedError):
    return JSONResponse(status_code=503, content={"detail": f"{exc.action} failed"})


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    action = _ACTIONS.get(request.method, "Sync")
    log.error(
        "store round trip failed",
        extra={"path": request.url.path, "method": request.method, "error": repr(exc)},
    )
    return JSONResponse(status_code=503, content={"detail": f"{action} failed"})


def _include(router):
    app.include_router(router, prefix=settings.api_prefix)

_include(health.router)
_include(profile.router)
_include(ideas.router)
_include(trash.router)
_include(channels.router)
_include(statuses.router)
_include(analytics.router)
_include(streams.router)
_include(session.router)

@app.get("/")
async def root():
    return {"service": settings.app_name, "status": "ok"}
