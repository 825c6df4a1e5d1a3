"""Centralized FastAPI dependency definitions for the API layer.

Routers should import dependencies from here instead of directly from
their underlying implementation modules. This provides:

* A stable import surface (refactors in lower layers don't ripple up)
* Easier test overrides via ``app.dependency_overrides[deps.get_identity_client]``
* A single location to add cross-cutting concerns around dependencies later.
"""

from creatorflow.core.auth import get_current_profile, bearer_token
from creatorflow.core.config import get_settings
from creatorflow.core.identity import IdentityClient
from creatorflow.db.session import get_db
from creatorflow.services.changes import get_notifier


def get_identity_client() -> IdentityClient:
    return IdentityClient()


__all__ = [
    "get_db",
    "get_current_profile",
    "get_settings",
    "get_notifier",
    "get_identity_client",
    "bearer_token",
]
