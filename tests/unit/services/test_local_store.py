import json
import uuid
import pytest
from creatorflow.core.errors import ChannelInUseError, StatusInUseError, SyncFailedError
from creatorflow.services.changes import ChangeNotifier
from creatorflow.services.local_store import KEYS, LocalPersistenceAdapter


@pytest.fixture()
def notifier():
    return ChangeNotifier()


@pytest.fixture()
def adapter(tmp_path, notifier):
    return LocalPersistenceAdapter(
        tmp_path / "store.json", user_id=uuid.uuid4(), notifier=notifier, channel_delete_policy="block"
    )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_seed_once_and_persist_under_fixed_keys(adapter):
    profile = await adapter.ensure_defaults()
    assert profile.id == adapter.user_id
    await adapter.ensure_defaults()
    statuses = await adapter.list_statuses()
    channels = await adapter.list_channels()
    assert [s.name for s in statuses] == ["Initial", "Script Write", "Record", "Edit", "Upload"]
    assert [c.name for c in channels] == ["Tech Reviews", "Vlog Daily"]
    raw = json.loads(adapter.path.read_text(encoding="utf-8"))
    assert set(KEYS.values()) <= set(raw)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_insert_and_transition_completion(adapter, notifier):
    seen = []
    adapter.subscribe(lambda e: seen.append(e.resource))
    await adapter.ensure_defaults()
    assert seen == []
    statuses = await adapter.list_statuses()
    idea = await adapter.insert_idea({"title": "Unboxing Video", "tags": ["gear"]})
    assert idea.status_id == statuses[0].id and idea.completed_at is None
    done = await adapter.update_idea(idea.id, {"status_id": statuses[-1].id})
    assert done.completed_at is not None
    back = await adapter.update_idea(done.id, {"status_id": statuses[3].id})
    assert back.completed_at is None
    assert seen == ["ideas", "ideas", "ideas"]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_bin_restore_purge(adapter):
    await adapter.ensure_defaults()
    keep = await adapter.insert_idea({"title": "keep"})
    drop = await adapter.insert_idea({"title": "drop"})
    binned = await adapter.set_idea_deleted(drop.id, True)
    assert binned.is_deleted and binned.updated_at >= drop.updated_at
    restored = await adapter.set_idea_deleted(drop.id, False)
    assert restored.model_dump(exclude={"updated_at"}) == drop.model_dump(exclude={"updated_at"})
    await adapter.set_idea_deleted(drop.id, True)
    assert await adapter.purge_deleted_ideas() == 1
    assert [i.id for i in await adapter.list_ideas()] == [keep.id]
    assert await adapter.delete_idea(drop.id) is False


@pytest.mark.asyncio
@pytest.mark.unit
async def test_channel_and_stage_delete_guards(adapter):
    await adapter.ensure_defaults()
    tech = (await adapter.list_channels())[0]
    initial = (await adapter.list_statuses())[0]
    await adapter.insert_idea({"title": "x", "channel_id": tech.id})
    with pytest.raises(ChannelInUseError):
        await adapter.delete_channel(tech.id)
    with pytest.raises(StatusInUseError):
        await adapter.delete_status(initial.id)
    assert await adapter.delete_channel(tech.id, "cascade") == 1
    assert await adapter.list_ideas() == []


@pytest.mark.asyncio
@pytest.mark.unit
async def test_missing_rows_and_broken_file_surface_as_sync_failed(adapter):
    await adapter.ensure_defaults()
    with pytest.raises(SyncFailedError) as exc:
        await adapter.update_idea(uuid.uuid4(), {"title": "ghost"})
    assert exc.value.action == "Save"
    adapter.path.write_text("[1, 2", encoding="utf-8")
    with pytest.raises(SyncFailedError):
        await adapter.list_ideas()


@pytest.mark.asyncio
@pytest.mark.unit
async def test_malformed_rows_are_quarantined(adapter):
    await adapter.ensure_defaults()
    good = await adapter.insert_idea({"title": "good"})
    raw = json.loads(adapter.path.read_text(encoding="utf-8"))
    raw[KEYS["ideas"]].append({"id": "not-a-uuid", "title": 3})
    adapter.path.write_text(json.dumps(raw), encoding="utf-8")
    ideas = await adapter.list_ideas()
    assert [i.id for i in ideas] == [good.id]
    assert len(adapter.quarantined) == 1
    assert adapter.quarantined[0].resource == "ideas"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_profile_update_clears_avatar(adapter):
    await adapter.ensure_defaults()
    p = await adapter.update_profile({"display_name": "Sam", "avatar_url": "data:image/png;base64,AAAA"})
    assert p.display_name == "Sam" and p.avatar_url
    p = await adapter.update_profile({"display_name": None, "avatar_url": ""})
    assert p.display_name == "Sam" and p.avatar_url is None


def _append_raw(adapter, collection, row):
    raw = json.loads(adapter.path.read_text(encoding="utf-8"))
    raw[KEYS[collection]].append(row)
    adapter.path.write_text(json.dumps(raw), encoding="utf-8")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_writes_survive_non_object_rows(adapter):
    await adapter.ensure_defaults()
    binned = await adapter.insert_idea({"title": "old"})
    await adapter.set_idea_deleted(binned.id, True)
    _append_raw(adapter, "ideas", 123)
    _append_raw(adapter, "statuses", "junk")
    _append_raw(adapter, "channels", None)
    assert len(await adapter.list_ideas()) == 1
    assert await adapter.purge_deleted_ideas() == 1
    assert await adapter.delete_idea(uuid.uuid4()) is False
    stages = await adapter.list_statuses()
    channels = await adapter.list_channels()
    await adapter.delete_channel(channels[-1].id)
    await adapter.delete_status(stages[-1].id)
    raw = json.loads(adapter.path.read_text(encoding="utf-8"))
    # quarantined entries stay in the file untouched
    assert 123 in raw[KEYS["ideas"]]
    assert "junk" in raw[KEYS["statuses"]]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_idea_references_must_exist(adapter):
    await adapter.ensure_defaults()
    with pytest.raises(SyncFailedError):
        await adapter.insert_idea({"title": "x", "channel_id": uuid.uuid4()})
    idea = await adapter.insert_idea({"title": "x"})
    with pytest.raises(SyncFailedError):
        await adapter.update_idea(idea.id, {"status_id": uuid.uuid4()})
    assert len(await adapter.list_ideas()) == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_stage_writes_keep_completion_on_last_stage(adapter):
    await adapter.ensure_defaults()
    stages = {s.name: s for s in await adapter.list_statuses()}
    uploaded = await adapter.insert_idea({"title": "done", "status_id": stages["Upload"].id})
    editing = await adapter.insert_idea({"title": "wip", "status_id": stages["Edit"].id})
    assert uploaded.completed_at is not None

    publish = await adapter.insert_status({"name": "Publish"})
    assert publish.order == stages["Upload"].order + 1
    ideas = {i.id: i for i in await adapter.list_ideas()}
    assert ideas[uploaded.id].completed_at is None

    await adapter.update_status(stages["Edit"].id, {"order": 99})
    ideas = {i.id: i for i in await adapter.list_ideas()}
    assert ideas[editing.id].completed_at is not None
    assert ideas[uploaded.id].completed_at is None

    await adapter.update_status(stages["Edit"].id, {"order": 3})
    await adapter.delete_status(publish.id)
    ideas = {i.id: i for i in await adapter.list_ideas()}
    assert ideas[uploaded.id].completed_at is not None
    assert ideas[editing.id].completed_at is None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_reset_clears_everything_and_reseeds(adapter, notifier):
    await adapter.ensure_defaults()
    await adapter.insert_idea({"title": "x"})
    await adapter.insert_channel({"name": "Shorts"})
    await adapter.update_profile({"display_name": "Sam"})
    seen = []
    adapter.subscribe(lambda e: seen.append(e.resource))
    assert await adapter.reset() == 1
    assert await adapter.list_ideas() == []
    assert [c.name for c in await adapter.list_channels()] == ["Tech Reviews", "Vlog Daily"]
    assert len(await adapter.list_statuses()) == 5
    assert (await adapter.get_profile()).display_name == adapter.display_name
    assert set(seen) == {"ideas", "channels", "statuses"}
