"""Persistence adapters used by the client-side store.

An adapter is bound to one user and exposes list / insert / update / delete
for the four collections plus a change subscription. Every call is one
round trip to the backing store, bounded by a timeout; any failure of the
store surfaces as ``SyncFailedError`` naming the attempted action.

Rows are mapped onto the pydantic read schemas on the way out. A row that
does not fit its schema is quarantined (logged and kept on
``adapter.quarantined``) instead of being handed to the caller.
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Awaitable, Callable, Iterable, Mapping, Optional, TypeVar

from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from creatorflow.core.config import get_settings
from creatorflow.core.errors import MalformedRowError, SyncFailedError
from creatorflow.schemas.channel import ChannelRead
from creatorflow.schemas.idea import IdeaRead
from creatorflow.schemas.profile import ProfileRead
from creatorflow.schemas.status import StatusRead
from creatorflow.services import channel as channel_service
from creatorflow.services import idea as idea_service
from creatorflow.services import profile as profile_service
from creatorflow.services import status as status_service
from creatorflow.services import seed as seed_service
from creatorflow.services.changes import ChangeNotifier, Listener, get_notifier
from creatorflow.services.channel import ChannelDeletePolicy

log = logging.getLogger(__name__)

R = TypeVar("R", bound=BaseModel)
T = TypeVar("T")

__all__ = ["BasePersistenceAdapter", "SqlPersistenceAdapter"]


class BasePersistenceAdapter:
    """Shared plumbing: timeout, error mapping, row validation, notifications."""

    def __init__(
        self,
        user_id: uuid.UUID,
        *,
        notifier: ChangeNotifier | None = None,
        timeout: float | None = None,
    ) -> None:
        self.user_id = user_id
        self.notifier = notifier or get_notifier()
        self.timeout = timeout if timeout is not None else get_settings().sync_timeout_seconds
        self.quarantined: list[MalformedRowError] = []

    # -- plumbing -----------------------------------------------------
    def _store_errors(self) -> tuple[type[BaseException], ...]:
        """Exceptions of the backing store that mean 'the round trip failed'."""
        return ()

    async def _guard(self, action: str, op: Callable[[], Awaitable[T]]) -> T:
        try:
            return await asyncio.wait_for(op(), self.timeout)
        except asyncio.TimeoutError as e:
            log.warning("sync timed out", extra={"action": action, "user_id": self.user_id})
            raise SyncFailedError(action, "timed out") from e
        except self._store_errors() as e:
            log.error("sync failed", extra={"action": action, "user_id": self.user_id, "error": repr(e)})
            raise SyncFailedError(action, type(e).__name__) from e

    def _records(
        self, resource: str, rows: Iterable[Any], schema: type[R], *, quarantine: bool = True
    ) -> list[R]:
        out: list[R] = []
        for row in rows:
            try:
                out.append(schema.model_validate(row))
            except ValidationError as e:
                if not quarantine:
                    continue
                row_id = row.get("id") if isinstance(row, Mapping) else getattr(row, "id", None)
                err = MalformedRowError(resource, row_id, str(e.errors()[:1]))
                self.quarantined.append(err)
                log.warning("quarantined malformed row", extra={"resource": resource, "row_id": row_id})
        return out

    async def _changed(self, resource: str) -> None:
        await self.notifier.publish(self.user_id, resource)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        return self.notifier.subscribe(self.user_id, listener)


class SqlPersistenceAdapter(BasePersistenceAdapter):
    """Adapter over the relational backend (one session per round trip)."""

    def __init__(
        self,
        user_id: uuid.UUID,
        *,
        session_factory: Optional[async_sessionmaker] = None,
        notifier: ChangeNotifier | None = None,
        timeout: float | None = None,
        display_name: str = "",
        channel_delete_policy: ChannelDeletePolicy | str | None = None,
    ) -> None:
        super().__init__(user_id, notifier=notifier, timeout=timeout)
        if session_factory is None:
            from creatorflow.db.session import AsyncSessionLocal
            session_factory = AsyncSessionLocal
        self._session_factory = session_factory
        self.display_name = display_name
        self.channel_delete_policy = ChannelDeletePolicy(
            channel_delete_policy or get_settings().channel_delete_policy
        )

    def _store_errors(self) -> tuple[type[BaseException], ...]:
        return (
            SQLAlchemyError,
            OSError,
            idea_service.IdeaNotFoundError,
            idea_service.MissingPipelineError,
            channel_service.ChannelNotFoundError,
            status_service.StatusNotFoundError,
            profile_service.ProfileNotFoundError,
        )

    async def _read(self, action: str, fn: Callable[[AsyncSession], Awaitable[T]]) -> T:
        async def op() -> T:
            async with self._session_factory() as session:
                return await fn(session)
        return await self._guard(action, op)

    async def _write(
        self, action: str, resource: str | None, fn: Callable[[AsyncSession], Awaitable[T]]
    ) -> T:
        async def op() -> T:
            async with self._session_factory() as session:
                result = await fn(session)
                await session.commit()
                return result
        result = await self._guard(action, op)
        if resource:
            await self._changed(resource)
        return result

    # -- reads --------------------------------------------------------
    async def ensure_defaults(self) -> ProfileRead:
        """Provision the profile and seed the default pipeline if missing.

        Not announced on the change stream: listeners reload on change and
        reloading seeds, which would loop.
        """
        row = await self._write(
            "Load",
            None,
            lambda s: profile_service.provision_profile(s, self.user_id, display_name=self.display_name),
        )
        return ProfileRead.model_validate(row)

    async def list_ideas(self) -> list[IdeaRead]:
        rows = await self._read(
            "Load ideas",
            lambda s: idea_service.list_ideas(s, self.user_id, include_deleted=True),
        )
        return self._records("ideas", rows, IdeaRead)

    async def list_channels(self) -> list[ChannelRead]:
        rows = await self._read("Load channels", lambda s: channel_service.list_channels(s, self.user_id))
        return self._records("channels", rows, ChannelRead)

    async def list_statuses(self) -> list[StatusRead]:
        rows = await self._read("Load statuses", lambda s: status_service.list_statuses(s, self.user_id))
        return self._records("statuses", rows, StatusRead)

    async def get_profile(self) -> ProfileRead | None:
        async def fn(session):
            try:
                return await profile_service.get_profile_or_404(session, self.user_id)
            except profile_service.ProfileNotFoundError:
                return None
        row = await self._read("Load profile", fn)
        if row is None:
            return None
        records = self._records("profiles", [row], ProfileRead)
        return records[0] if records else None

    # -- ideas --------------------------------------------------------
    async def insert_idea(self, fields: Mapping[str, Any]) -> IdeaRead:
        row = await self._write(
            "Save", "ideas", lambda s: idea_service.create_idea(s, self.user_id, fields)
        )
        return IdeaRead.model_validate(row)

    async def update_idea(self, idea_id: uuid.UUID, changes: Mapping[str, Any], *, action: str = "Save") -> IdeaRead:
        row = await self._write(
            action, "ideas", lambda s: idea_service.update_idea(s, self.user_id, idea_id, changes)
        )
        return IdeaRead.model_validate(row)

    async def set_idea_deleted(self, idea_id: uuid.UUID, flag: bool) -> IdeaRead:
        fn = idea_service.soft_delete_idea if flag else idea_service.restore_idea
        row = await self._write(
            "Delete" if flag else "Restore", "ideas", lambda s: fn(s, self.user_id, idea_id)
        )
        return IdeaRead.model_validate(row)

    async def delete_idea(self, idea_id: uuid.UUID) -> bool:
        return await self._write(
            "Permanent delete",
            "ideas",
            lambda s: idea_service.permanently_delete_idea(s, self.user_id, idea_id),
        )

    async def purge_deleted_ideas(self) -> int:
        return await self._write("Empty bin", "ideas", lambda s: idea_service.empty_bin(s, self.user_id))

    async def reset(self) -> int:
        """Wipe ideas, channels and stages, then seed the defaults (the profile stays)."""
        purged = await self._write("Reset", "ideas", lambda s: seed_service.reset_workspace(s, self.user_id))
        await self._changed("channels")
        await self._changed("statuses")
        return purged

    # -- channels -----------------------------------------------------
    async def insert_channel(self, fields: Mapping[str, Any]) -> ChannelRead:
        row = await self._write(
            "Add channel", "channels", lambda s: channel_service.create_channel(s, self.user_id, **fields)
        )
        return ChannelRead.model_validate(row)

    async def update_channel(self, channel_id: uuid.UUID, changes: Mapping[str, Any]) -> ChannelRead:
        row = await self._write(
            "Update channel",
            "channels",
            lambda s: channel_service.update_channel(s, self.user_id, channel_id, **changes),
        )
        return ChannelRead.model_validate(row)

    async def delete_channel(self, channel_id: uuid.UUID, policy: ChannelDeletePolicy | str | None = None) -> int:
        policy = ChannelDeletePolicy(policy or self.channel_delete_policy)
        affected = await self._write(
            "Delete channel",
            "channels",
            lambda s: channel_service.delete_channel(s, self.user_id, channel_id, policy),
        )
        if affected:
            await self._changed("ideas")
        return affected

    # -- statuses -----------------------------------------------------
    async def insert_status(self, fields: Mapping[str, Any]) -> StatusRead:
        row = await self._write(
            "Add stage", "statuses", lambda s: status_service.create_status(s, self.user_id, **fields)
        )
        return StatusRead.model_validate(row)

    async def update_status(self, status_id: uuid.UUID, changes: Mapping[str, Any]) -> StatusRead:
        row = await self._write(
            "Update stage",
            "statuses",
            lambda s: status_service.update_status(s, self.user_id, status_id, **changes),
        )
        return StatusRead.model_validate(row)

    async def delete_status(self, status_id: uuid.UUID) -> None:
        await self._write(
            "Delete stage", "statuses", lambda s: status_service.delete_status(s, self.user_id, status_id)
        )

    # -- profile ------------------------------------------------------
    async def update_profile(self, changes: Mapping[str, Any]) -> ProfileRead:
        row = await self._write(
            "Update profile",
            "profiles",
            lambda s: profile_service.update_profile(s, self.user_id, **changes),
        )
        return ProfileRead.model_validate(row)
