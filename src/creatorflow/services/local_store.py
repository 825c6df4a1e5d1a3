"""Offline persistence adapter backed by a single JSON file.

This is the device-only baseline: no backend, no auth. The four
collections live under the fixed keys below in one JSON document, which is
rewritten atomically after every write. The same pipeline rules as the
relational backend apply (default channel / stage, completion stamp,
channel delete policy, stage delete guard).
"""
from __future__ import annotations

import asyncio
import json
import logging
import uuid
from pathlib import Path
from typing import Any, Mapping

from creatorflow.core.config import get_settings
from creatorflow.core.errors import ChannelInUseError, StatusInUseError
from creatorflow.models.base import utcnow
from creatorflow.schemas.channel import ChannelRead
from creatorflow.schemas.idea import IdeaRead, normalize_tags
from creatorflow.schemas.profile import ProfileRead
from creatorflow.schemas.status import StatusRead
from creatorflow.services.adapter import BasePersistenceAdapter
from creatorflow.services.changes import ChangeNotifier
from creatorflow.services.channel import ChannelDeletePolicy
from creatorflow.services.idea import UPDATABLE_FIELDS
from creatorflow.services.pipeline import completed_at_after_transition, sort_statuses, terminal_status
from creatorflow.services.seed import DEFAULT_CHANNELS, DEFAULT_STATUSES

log = logging.getLogger(__name__)

KEYS = {
    "ideas": "cf_ideas",
    "channels": "cf_channels",
    "statuses": "cf_statuses",
    "user": "cf_user",
}


class LocalRowNotFoundError(LookupError):
    pass


class LocalPersistenceAdapter(BasePersistenceAdapter):
    def __init__(
        self,
        path: str | Path | None = None,
        *,
        user_id: uuid.UUID | None = None,
        notifier: ChangeNotifier | None = None,
        timeout: float | None = None,
        display_name: str | None = None,
        channel_delete_policy: ChannelDeletePolicy | str | None = None,
    ) -> None:
        settings = get_settings()
        super().__init__(user_id or settings.default_user_id, notifier=notifier, timeout=timeout)
        self.path = Path(path or settings.local_store_path)
        self.display_name = display_name if display_name is not None else settings.default_display_name
        self.channel_delete_policy = ChannelDeletePolicy(
            channel_delete_policy or settings.channel_delete_policy
        )
        self._lock = asyncio.Lock()

    def _store_errors(self) -> tuple[type[BaseException], ...]:
        return (OSError, ValueError, LookupError)

    # -- file access --------------------------------------------------
    def _load_sync(self) -> dict[str, Any]:
        if not self.path.exists():
            return {key: [] for key in (KEYS["ideas"], KEYS["channels"], KEYS["statuses"])}
        data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not hold a JSON object")
        for key in (KEYS["ideas"], KEYS["channels"], KEYS["statuses"]):
            if not isinstance(data.get(key), list):
                data[key] = []
        return data

    def _save_sync(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp.replace(self.path)

    async def _read(self, action: str) -> dict[str, Any]:
        return await self._guard(action, lambda: asyncio.to_thread(self._load_sync))

    async def _mutate(self, action: str, resource: str | None, fn) -> Any:
        async def op():
            async with self._lock:
                data = await asyncio.to_thread(self._load_sync)
                result = fn(data)
                await asyncio.to_thread(self._save_sync, data)
                return result
        result = await self._guard(action, op)
        if resource:
            await self._changed(resource)
        return result

    @staticmethod
    def _find(rows: list[dict], row_id: uuid.UUID) -> dict:
        for row in rows:
            if isinstance(row, dict) and row.get("id") == str(row_id):
                return row
        raise LocalRowNotFoundError(str(row_id))

    @staticmethod
    def _dump(model) -> dict:
        return model.model_dump(mode="json")

    @staticmethod
    def _rows(data, collection: str) -> list[dict]:
        """Raw rows of ``collection``; quarantined non-object entries are left out."""
        return [r for r in data[KEYS[collection]] if isinstance(r, dict)]

    def _stages(self, data, *, quarantine: bool = True) -> list[StatusRead]:
        return sort_statuses(
            self._records("statuses", data[KEYS["statuses"]], StatusRead, quarantine=quarantine)
        )

    def _terminal_id(self, data) -> str | None:
        terminal = terminal_status(self._stages(data, quarantine=False))
        return str(terminal.id) if terminal else None

    def _check_references(self, data, values: Mapping[str, Any]) -> None:
        if values.get("channel_id") is not None:
            self._find(data[KEYS["channels"]], values["channel_id"])
        if values.get("status_id") is not None:
            self._find(data[KEYS["statuses"]], values["status_id"])

    def _sync_completion_stamps(self, data, previous_terminal_id: str | None) -> int:
        """Clear stamps left in the former terminal stage and stamp the new one."""
        current = self._terminal_id(data)
        if current == previous_terminal_id:
            return 0
        now = utcnow().isoformat()
        touched = 0
        for row in self._rows(data, "ideas"):
            if previous_terminal_id is not None and row.get("status_id") == previous_terminal_id:
                row["completed_at"] = None
            elif current is not None and row.get("status_id") == current and not row.get("completed_at"):
                row["completed_at"] = now
            else:
                continue
            row["updated_at"] = now
            touched += 1
        return touched

    # -- reads --------------------------------------------------------
    async def ensure_defaults(self) -> ProfileRead:
        def fn(data):
            now = utcnow()
            if not data[KEYS["statuses"]]:
                data[KEYS["statuses"]] = [
                    self._dump(StatusRead(id=uuid.uuid4(), created_at=now, **fields)) for fields in DEFAULT_STATUSES
                ]
            if not data[KEYS["channels"]]:
                data[KEYS["channels"]] = [
                    self._dump(ChannelRead(id=uuid.uuid4(), created_at=now, **fields)) for fields in DEFAULT_CHANNELS
                ]
            if not isinstance(data.get(KEYS["user"]), dict):
                data[KEYS["user"]] = self._dump(
                    ProfileRead(id=self.user_id, display_name=self.display_name, created_at=now)
                )
            return ProfileRead.model_validate(data[KEYS["user"]])
        return await self._mutate("Load", None, fn)

    async def list_ideas(self) -> list[IdeaRead]:
        data = await self._read("Load ideas")
        ideas = self._records("ideas", data[KEYS["ideas"]], IdeaRead)
        return sorted(ideas, key=lambda i: (i.created_at, str(i.id)), reverse=True)

    async def list_channels(self) -> list[ChannelRead]:
        data = await self._read("Load channels")
        return sorted(self._records("channels", data[KEYS["channels"]], ChannelRead), key=lambda c: c.name)

    async def list_statuses(self) -> list[StatusRead]:
        return self._stages(await self._read("Load statuses"))

    async def get_profile(self) -> ProfileRead | None:
        data = await self._read("Load profile")
        raw = data.get(KEYS["user"])
        if not isinstance(raw, dict):
            return None
        records = self._records("profiles", [raw], ProfileRead)
        return records[0] if records else None

    # -- ideas --------------------------------------------------------
    async def insert_idea(self, fields: Mapping[str, Any]) -> IdeaRead:
        def fn(data):
            now = utcnow()
            values = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS}
            self._check_references(data, values)
            stages = self._stages(data, quarantine=False)
            if values.get("channel_id") is None:
                channels = sorted(
                    self._records("channels", data[KEYS["channels"]], ChannelRead, quarantine=False),
                    key=lambda c: c.name,
                )
                if not channels:
                    raise LocalRowNotFoundError("no channel available")
                values["channel_id"] = channels[0].id
            if values.get("status_id") is None:
                if not stages:
                    raise LocalRowNotFoundError("no status available")
                values["status_id"] = stages[0].id
            terminal = terminal_status(stages)
            idea = IdeaRead(
                id=uuid.uuid4(),
                created_at=now,
                updated_at=now,
                completed_at=completed_at_after_transition(
                    previous_status_id=None,
                    previous_completed_at=None,
                    new_status_id=values["status_id"],
                    terminal_status_id=terminal.id if terminal else None,
                    now=now,
                ),
                is_deleted=False,
                **{"tags": [], **values},
            )
            data[KEYS["ideas"]].insert(0, self._dump(idea))
            return idea
        return await self._mutate("Save", "ideas", fn)

    async def update_idea(self, idea_id: uuid.UUID, changes: Mapping[str, Any], *, action: str = "Save") -> IdeaRead:
        def fn(data):
            now = utcnow()
            row = self._find(data[KEYS["ideas"]], idea_id)
            previous = IdeaRead.model_validate(row)
            values = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS}
            if "tags" in values:
                values["tags"] = normalize_tags(values["tags"])
            # an orphaned reference may be saved back unchanged
            self._check_references(
                data,
                {k: v for k, v in values.items() if k in ("channel_id", "status_id") and v != getattr(previous, k)},
            )
            new_status_id = values.get("status_id") or previous.status_id
            completed_at = previous.completed_at
            if new_status_id != previous.status_id:
                terminal = terminal_status(self._stages(data, quarantine=False))
                completed_at = completed_at_after_transition(
                    previous_status_id=previous.status_id,
                    previous_completed_at=previous.completed_at,
                    new_status_id=new_status_id,
                    terminal_status_id=terminal.id if terminal else None,
                    now=now,
                )
            merged = previous.model_copy(
                update={
                    **{k: v for k, v in values.items() if v is not None or k in ("notes", "scheduled_date")},
                    "status_id": new_status_id,
                    "completed_at": completed_at,
                    "updated_at": now,
                }
            )
            updated = IdeaRead.model_validate(merged.model_dump())
            row.clear()
            row.update(self._dump(updated))
            return updated
        return await self._mutate(action, "ideas", fn)

    async def set_idea_deleted(self, idea_id: uuid.UUID, flag: bool) -> IdeaRead:
        def fn(data):
            row = self._find(data[KEYS["ideas"]], idea_id)
            row["is_deleted"] = flag
            row["updated_at"] = utcnow().isoformat()
            return IdeaRead.model_validate(row)
        return await self._mutate("Delete" if flag else "Restore", "ideas", fn)

    async def delete_idea(self, idea_id: uuid.UUID) -> bool:
        def fn(data):
            before = len(data[KEYS["ideas"]])
            data[KEYS["ideas"]] = [
                r for r in data[KEYS["ideas"]] if not (isinstance(r, dict) and r.get("id") == str(idea_id))
            ]
            return len(data[KEYS["ideas"]]) < before
        return await self._mutate("Permanent delete", "ideas", fn)

    async def purge_deleted_ideas(self) -> int:
        def fn(data):
            keep = [r for r in data[KEYS["ideas"]] if not (isinstance(r, dict) and r.get("is_deleted"))]
            purged = len(data[KEYS["ideas"]]) - len(keep)
            data[KEYS["ideas"]] = keep
            return purged
        return await self._mutate("Empty bin", "ideas", fn)

    async def reset(self) -> int:
        """Clear every ``cf_*`` key, then seed the defaults again."""
        def fn(data):
            purged = len(data[KEYS["ideas"]])
            for key in KEYS.values():
                data.pop(key, None)
            data.update({key: [] for key in (KEYS["ideas"], KEYS["channels"], KEYS["statuses"])})
            return purged
        purged = await self._mutate("Reset", "ideas", fn)
        await self.ensure_defaults()
        await self._changed("channels")
        await self._changed("statuses")
        return purged

    # -- channels -----------------------------------------------------
    async def insert_channel(self, fields: Mapping[str, Any]) -> ChannelRead:
        def fn(data):
            channel = ChannelRead(id=uuid.uuid4(), created_at=utcnow(), **{"color": "#52525b", "icon": "Folder", **fields})
            data[KEYS["channels"]].append(self._dump(channel))
            return channel
        return await self._mutate("Add channel", "channels", fn)

    async def update_channel(self, channel_id: uuid.UUID, changes: Mapping[str, Any]) -> ChannelRead:
        def fn(data):
            row = self._find(data[KEYS["channels"]], channel_id)
            row.update({k: v for k, v in changes.items() if v is not None})
            return ChannelRead.model_validate(row)
        return await self._mutate("Update channel", "channels", fn)

    async def delete_channel(self, channel_id: uuid.UUID, policy: ChannelDeletePolicy | str | None = None) -> int:
        policy = ChannelDeletePolicy(policy or self.channel_delete_policy)

        def fn(data):
            self._find(data[KEYS["channels"]], channel_id)
            key = str(channel_id)
            referencing = [r for r in self._rows(data, "ideas") if r.get("channel_id") == key]
            affected = 0
            if referencing:
                if policy is ChannelDeletePolicy.BLOCK:
                    raise ChannelInUseError(channel_id, len(referencing))
                if policy is ChannelDeletePolicy.CASCADE:
                    data[KEYS["ideas"]] = [
                        r for r in data[KEYS["ideas"]] if not (isinstance(r, dict) and r.get("channel_id") == key)
                    ]
                    affected = len(referencing)
                elif policy is ChannelDeletePolicy.REASSIGN:
                    remaining = sorted(
                        (c for c in self._rows(data, "channels") if c.get("id") != key),
                        key=lambda c: c.get("name", ""),
                    )
                    if not remaining:
                        raise ChannelInUseError(channel_id, len(referencing))
                    now = utcnow().isoformat()
                    for row in referencing:
                        row["channel_id"] = remaining[0]["id"]
                        row["updated_at"] = now
                    affected = len(referencing)
            data[KEYS["channels"]] = [
                c for c in data[KEYS["channels"]] if not (isinstance(c, dict) and c.get("id") == key)
            ]
            return affected

        affected = await self._mutate("Delete channel", "channels", fn)
        if affected:
            await self._changed("ideas")
        return affected

    # -- statuses -----------------------------------------------------
    async def insert_status(self, fields: Mapping[str, Any]) -> StatusRead:
        def fn(data):
            values = dict(fields)
            previous_terminal = self._terminal_id(data)
            if values.get("order") is None:
                stages = self._stages(data, quarantine=False)
                values["order"] = max(s.order for s in stages) + 1 if stages else 0
            stage = StatusRead(id=uuid.uuid4(), created_at=utcnow(), **{"color": "#71717a", **values})
            data[KEYS["statuses"]].append(self._dump(stage))
            self._sync_completion_stamps(data, previous_terminal)
            return stage
        return await self._mutate("Add stage", "statuses", fn)

    async def update_status(self, status_id: uuid.UUID, changes: Mapping[str, Any]) -> StatusRead:
        def fn(data):
            row = self._find(data[KEYS["statuses"]], status_id)
            previous_terminal = self._terminal_id(data)
            row.update({k: v for k, v in changes.items() if v is not None})
            self._sync_completion_stamps(data, previous_terminal)
            return StatusRead.model_validate(row)
        return await self._mutate("Update stage", "statuses", fn)

    async def delete_status(self, status_id: uuid.UUID) -> None:
        def fn(data):
            self._find(data[KEYS["statuses"]], status_id)
            key = str(status_id)
            references = sum(1 for r in self._rows(data, "ideas") if r.get("status_id") == key)
            if references:
                raise StatusInUseError(status_id, references)
            previous_terminal = self._terminal_id(data)
            data[KEYS["statuses"]] = [
                s for s in data[KEYS["statuses"]] if not (isinstance(s, dict) and s.get("id") == key)
            ]
            self._sync_completion_stamps(data, previous_terminal)
        await self._mutate("Delete stage", "statuses", fn)

    # -- profile ------------------------------------------------------
    async def update_profile(self, changes: Mapping[str, Any]) -> ProfileRead:
        def fn(data):
            current = data.get(KEYS["user"])
            if not isinstance(current, dict):
                current = self._dump(ProfileRead(id=self.user_id, display_name=self.display_name, created_at=utcnow()))
            for key, value in changes.items():
                if key == "avatar_url" and value == "":
                    value = None
                elif value is None:
                    continue
                current[key] = value
            data[KEYS["user"]] = current
            return ProfileRead.model_validate(current)
        return await self._mutate("Update profile", "profiles", fn)
