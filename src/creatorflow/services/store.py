"""Client-side application state.

``DomainStore`` mirrors the four collections of one user and is the only
place mutations are issued from. Every command is exactly one adapter
round trip followed by one full reload; nothing is patched locally, so the
store never holds state the backing store does not have.

Failures never escape a command: a failed write leaves the mirrored state
as it was and appends an ``Alert`` naming the action ("Save failed",
"Restore failed", ...). A failed read keeps the previous (possibly empty)
state and is only logged.
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from creatorflow.core.errors import (
    ChannelInUseError,
    DraftValidationError,
    StatusInUseError,
    SyncFailedError,
)
from creatorflow.schemas.channel import ChannelRead
from creatorflow.schemas.idea import IdeaDraft, IdeaRead
from creatorflow.schemas.profile import ProfileRead
from creatorflow.schemas.status import StatusRead
from creatorflow.services.changes import ChangeEvent
from creatorflow.services.pipeline import sort_statuses, terminal_status

log = logging.getLogger(__name__)

__all__ = ["Alert", "DomainStore"]

_WRITE_REFUSALS = (SyncFailedError, ChannelInUseError, StatusInUseError)


@dataclass(frozen=True)
class Alert:
    title: str
    message: str
    action: str


class DomainStore:
    def __init__(self, adapter) -> None:
        self.adapter = adapter
        self.ideas: list[IdeaRead] = []
        self.channels: list[ChannelRead] = []
        self.statuses: list[StatusRead] = []
        self.profile: Optional[ProfileRead] = None
        self.loading = False
        self.alerts: list[Alert] = []
        self._in_flight: set[str] = set()
        self._unsubscribe: Optional[Callable[[], None]] = None

    # ------------------------------------------------------------------
    # lookups / derived state
    # ------------------------------------------------------------------
    @property
    def active_ideas(self) -> list[IdeaRead]:
        return [i for i in self.ideas if not i.is_deleted]

    @property
    def binned_ideas(self) -> list[IdeaRead]:
        return [i for i in self.ideas if i.is_deleted]

    @property
    def terminal_status(self) -> Optional[StatusRead]:
        return terminal_status(self.statuses)

    def idea(self, idea_id: uuid.UUID) -> Optional[IdeaRead]:
        return next((i for i in self.ideas if i.id == idea_id), None)

    def channel(self, channel_id: uuid.UUID) -> Optional[ChannelRead]:
        return next((c for c in self.channels if c.id == channel_id), None)

    def status(self, status_id: uuid.UUID) -> Optional[StatusRead]:
        return next((s for s in self.statuses if s.id == status_id), None)

    def is_busy(self, control: str) -> bool:
        """True while the command bound to ``control`` is in flight (control disabled)."""
        return control in self._in_flight

    def new_draft(self) -> IdeaDraft:
        """Editor state for a new idea: first channel, first stage, Medium priority."""
        return IdeaDraft(
            channel_id=self.channels[0].id if self.channels else None,
            status_id=self.statuses[0].id if self.statuses else None,
        )

    # ------------------------------------------------------------------
    # loading
    # ------------------------------------------------------------------
    async def start(self) -> bool:
        """First load for a session: seed defaults if the account is new, then reload."""
        try:
            await self.adapter.ensure_defaults()
        except SyncFailedError:
            log.exception("seeding defaults failed")
        return await self.load()

    async def load(self) -> bool:
        self.loading = True
        try:
            ideas, channels, statuses, profile = await asyncio.gather(
                self.adapter.list_ideas(),
                self.adapter.list_channels(),
                self.adapter.list_statuses(),
                self.adapter.get_profile(),
            )
        except SyncFailedError:
            log.exception("reload failed; keeping previous state")
            return False
        finally:
            self.loading = False
        self.ideas = list(ideas)
        self.channels = list(channels)
        self.statuses = sort_statuses(statuses)
        self.profile = profile
        return True

    def reset(self) -> None:
        """Drop everything (sign-out)."""
        self.stop_watching()
        self.ideas = []
        self.channels = []
        self.statuses = []
        self.profile = None
        self.alerts = []
        self._in_flight.clear()

    def watch(self) -> None:
        """Reload whenever the backing store reports a change."""
        if self._unsubscribe is not None:
            return

        async def _on_change(event: ChangeEvent) -> None:
            log.debug("change notification", extra={"resource": event.resource})
            await self.load()

        self._unsubscribe = self.adapter.subscribe(_on_change)

    def stop_watching(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def dismiss_alert(self, index: int = 0) -> Optional[Alert]:
        if 0 <= index < len(self.alerts):
            return self.alerts.pop(index)
        return None

    # ------------------------------------------------------------------
    # command plumbing
    # ------------------------------------------------------------------
    async def _run(self, control: str, action: str, op: Callable[[], Awaitable[Any]]) -> bool:
        if control in self._in_flight:
            log.info("duplicate submission ignored", extra={"control": control})
            return False
        self._in_flight.add(control)
        try:
            try:
                await op()
            except _WRITE_REFUSALS as e:
                self.alerts.append(Alert(title=f"{action} failed", message=str(e), action=action))
                log.warning("command failed", extra={"action": action, "error": str(e)})
                return False
            await self.load()
            return True
        finally:
            self._in_flight.discard(control)

    # ------------------------------------------------------------------
    # ideas
    # ------------------------------------------------------------------
    async def save_idea(self, draft: IdeaDraft, idea_id: uuid.UUID | None = None) -> bool:
        """Create (``idea_id`` None) or update an idea from editor state.

        Raises ``DraftValidationError`` without touching the adapter when the
        draft is not savable.
        """
        if idea_id is None:
            defaults = self.new_draft()
            draft = draft.model_copy(
                update={
                    "channel_id": draft.channel_id or defaults.channel_id,
                    "status_id": draft.status_id or defaults.status_id,
                }
            )
        problems = draft.problems()
        if problems:
            raise DraftValidationError(problems)
        fields = draft.model_dump()
        fields["title"] = draft.title.strip()
        if idea_id is None:
            return await self._run("save-idea:new", "Save", lambda: self.adapter.insert_idea(fields))
        return await self._run(
            f"save-idea:{idea_id}", "Save", lambda: self.adapter.update_idea(idea_id, fields)
        )

    async def set_idea_status(self, idea_id: uuid.UUID, status_id: uuid.UUID) -> bool:
        return await self._run(
            f"move-idea:{idea_id}",
            "Move",
            lambda: self.adapter.update_idea(idea_id, {"status_id": status_id}, action="Move"),
        )

    async def soft_delete_idea(self, idea_id: uuid.UUID) -> bool:
        return await self._run(
            f"bin-idea:{idea_id}", "Delete", lambda: self.adapter.set_idea_deleted(idea_id, True)
        )

    async def restore_idea(self, idea_id: uuid.UUID) -> bool:
        return await self._run(
            f"restore-idea:{idea_id}", "Restore", lambda: self.adapter.set_idea_deleted(idea_id, False)
        )

    async def permanently_delete_idea(self, idea_id: uuid.UUID) -> bool:
        return await self._run(
            f"purge-idea:{idea_id}", "Permanent delete", lambda: self.adapter.delete_idea(idea_id)
        )

    async def empty_bin(self) -> bool:
        return await self._run("empty-bin", "Empty bin", self.adapter.purge_deleted_ideas)

    async def reset_app(self) -> bool:
        """Wipe every idea, channel and stage; the reload picks up the reseeded defaults."""
        return await self._run("reset-app", "Reset", self.adapter.reset)

    # ------------------------------------------------------------------
    # channels
    # ------------------------------------------------------------------
    async def add_channel(self, name: str, color: str = "#52525b", icon: str = "Folder") -> bool:
        if not name.strip():
            raise DraftValidationError(["channel name is required"])
        fields = {"name": name.strip(), "color": color, "icon": icon}
        return await self._run("add-channel", "Add channel", lambda: self.adapter.insert_channel(fields))

    async def update_channel(self, channel_id: uuid.UUID, **changes) -> bool:
        return await self._run(
            f"edit-channel:{channel_id}",
            "Update channel",
            lambda: self.adapter.update_channel(channel_id, changes),
        )

    async def delete_channel(self, channel_id: uuid.UUID, policy=None) -> bool:
        return await self._run(
            f"delete-channel:{channel_id}",
            "Delete channel",
            lambda: self.adapter.delete_channel(channel_id, policy),
        )

    # ------------------------------------------------------------------
    # statuses
    # ------------------------------------------------------------------
    async def add_status(self, name: str, color: str = "#71717a", order: int | None = None) -> bool:
        if not name.strip():
            raise DraftValidationError(["stage name is required"])
        fields = {"name": name.strip(), "color": color, "order": order}
        return await self._run("add-status", "Add stage", lambda: self.adapter.insert_status(fields))

    async def update_status(self, status_id: uuid.UUID, **changes) -> bool:
        return await self._run(
            f"edit-status:{status_id}",
            "Update stage",
            lambda: self.adapter.update_status(status_id, changes),
        )

    async def reorder_status(self, status_id: uuid.UUID, new_order: int) -> bool:
        return await self._run(
            f"edit-status:{status_id}",
            "Reorder stage",
            lambda: self.adapter.update_status(status_id, {"order": new_order}),
        )

    async def delete_status(self, status_id: uuid.UUID) -> bool:
        return await self._run(
            f"delete-status:{status_id}", "Delete stage", lambda: self.adapter.delete_status(status_id)
        )

    # ------------------------------------------------------------------
    # profile
    # ------------------------------------------------------------------
    async def update_profile(self, *, display_name: str | None = None, avatar_url: str | None = None) -> bool:
        changes = {"display_name": display_name, "avatar_url": avatar_url}
        return await self._run(
            "update-profile", "Update profile", lambda: self.adapter.update_profile(changes)
        )
