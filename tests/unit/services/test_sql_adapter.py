import uuid
import pytest
from sqlalchemy.exc import OperationalError
from creatorflow.core.errors import SyncFailedError
from creatorflow.db.session import AsyncSessionLocal
from creatorflow.schemas.idea import IdeaDraft
from creatorflow.services.adapter import SqlPersistenceAdapter
from creatorflow.services.changes import ChangeNotifier
from creatorflow.services.store import DomainStore


@pytest.fixture()
def adapter(user_id):
    return SqlPersistenceAdapter(
        user_id, session_factory=AsyncSessionLocal, notifier=ChangeNotifier(), display_name="Sql Creator"
    )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_store_over_sql_adapter(adapter):
    store = DomainStore(adapter)
    assert await store.start()
    assert store.profile.display_name == "Sql Creator"
    assert [c.name for c in store.channels] == ["Tech Reviews", "Vlog Daily"]

    assert await store.save_idea(IdeaDraft(title="Unboxing Video"))
    idea = store.ideas[0]
    assert await store.set_idea_status(idea.id, store.terminal_status.id)
    assert store.idea(idea.id).completed_at is not None

    assert await store.soft_delete_idea(idea.id)
    assert store.binned_ideas and not store.active_ideas
    assert await store.restore_idea(idea.id)
    assert store.idea(idea.id).is_deleted is False


@pytest.mark.asyncio
@pytest.mark.unit
async def test_unknown_idea_is_a_sync_failure(adapter):
    await adapter.ensure_defaults()
    with pytest.raises(SyncFailedError) as exc:
        await adapter.set_idea_deleted(uuid.uuid4(), False)
    assert exc.value.action == "Restore"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_database_error_is_a_sync_failure(user_id):
    class BrokenSession:
        async def __aenter__(self):
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))

        async def __aexit__(self, *exc):
            return False

    adapter = SqlPersistenceAdapter(user_id, session_factory=BrokenSession, notifier=ChangeNotifier())
    store = DomainStore(adapter)
    assert await store.load() is False
    assert await store.add_channel("Shorts") is False
    assert store.alerts[-1].title == "Add channel failed"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_ensure_defaults_is_silent(adapter):
    seen = []
    adapter.subscribe(lambda e: seen.append(e.resource))
    await adapter.ensure_defaults()
    await adapter.ensure_defaults()
    assert seen == []
    assert len(await adapter.list_statuses()) == 5


@pytest.mark.asyncio
@pytest.mark.unit
async def test_unknown_references_alert_instead_of_saving(adapter):
    store = DomainStore(adapter)
    await store.start()
    draft = IdeaDraft(title="X", channel_id=uuid.uuid4(), status_id=uuid.uuid4())
    assert await store.save_idea(draft) is False
    assert store.alerts[-1].title == "Save failed"
    assert store.ideas == []


@pytest.mark.asyncio
@pytest.mark.unit
async def test_stage_changes_move_completion(adapter):
    store = DomainStore(adapter)
    await store.start()
    stages = {s.name: s for s in store.statuses}
    assert await store.save_idea(IdeaDraft(title="Done", status_id=stages["Upload"].id))
    assert await store.save_idea(IdeaDraft(title="Cutting", status_id=stages["Edit"].id))
    done = next(i for i in store.ideas if i.title == "Done")
    cutting = next(i for i in store.ideas if i.title == "Cutting")
    assert store.idea(done.id).completed_at is not None

    assert await store.add_status("Publish")
    assert store.terminal_status.name == "Publish"
    assert store.idea(done.id).completed_at is None

    assert await store.reorder_status(stages["Edit"].id, 99)
    assert store.terminal_status.id == stages["Edit"].id
    assert store.idea(cutting.id).completed_at is not None
    for idea in store.ideas:
        assert (idea.completed_at is not None) == (idea.status_id == store.terminal_status.id)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_reset_app_reseeds(adapter):
    store = DomainStore(adapter)
    await store.start()
    assert await store.save_idea(IdeaDraft(title="Gone soon"))
    assert await store.add_channel("Shorts")
    assert await store.reset_app()
    assert store.ideas == []
    assert [c.name for c in store.channels] == ["Tech Reviews", "Vlog Daily"]
    assert [s.name for s in store.statuses] == ["Initial", "Script Write", "Record", "Edit", "Upload"]
    assert store.profile.display_name == "Sql Creator"
