import uuid
import pytest
from sqlalchemy.ext.asyncio import AsyncSession
from creatorflow.core.errors import ChannelInUseError, StatusInUseError
from creatorflow.services import channel as channel_service
from creatorflow.services import idea as idea_service
from creatorflow.services import status as status_service
from creatorflow.services.channel import ChannelDeletePolicy
from creatorflow.services.seed import ensure_defaults


async def _setup(session, user_id):
    await ensure_defaults(session, user_id)
    tech, vlog = await channel_service.list_channels(session, user_id)
    idea = await idea_service.create_idea(session, user_id, {"title": "Review", "channel_id": tech.id})
    return tech, vlog, idea


@pytest.mark.asyncio
@pytest.mark.unit
async def test_block_policy_refuses_referenced_channel(db_session: AsyncSession, profile):
    tech, _, _ = await _setup(db_session, profile.id)
    with pytest.raises(ChannelInUseError) as exc:
        await channel_service.delete_channel(db_session, profile.id, tech.id, ChannelDeletePolicy.BLOCK)
    assert exc.value.references == 1
    assert len(await channel_service.list_channels(db_session, profile.id)) == 2


@pytest.mark.asyncio
@pytest.mark.unit
async def test_block_policy_counts_binned_ideas(db_session: AsyncSession, profile):
    tech, _, idea = await _setup(db_session, profile.id)
    await idea_service.soft_delete_idea(db_session, profile.id, idea.id)
    with pytest.raises(ChannelInUseError):
        await channel_service.delete_channel(db_session, profile.id, tech.id, "block")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_cascade_policy_deletes_ideas(db_session: AsyncSession, profile):
    tech, _, idea = await _setup(db_session, profile.id)
    affected = await channel_service.delete_channel(db_session, profile.id, tech.id, ChannelDeletePolicy.CASCADE)
    assert affected == 1
    assert await idea_service.list_ideas(db_session, profile.id, include_deleted=True) == []


@pytest.mark.asyncio
@pytest.mark.unit
async def test_reassign_policy_moves_ideas(db_session: AsyncSession, profile):
    tech, vlog, idea = await _setup(db_session, profile.id)
    affected = await channel_service.delete_channel(db_session, profile.id, tech.id, ChannelDeletePolicy.REASSIGN)
    assert affected == 1
    moved = await idea_service.get_idea_or_404(db_session, profile.id, idea.id)
    assert moved.channel_id == vlog.id


@pytest.mark.asyncio
@pytest.mark.unit
async def test_orphan_policy_leaves_dangling_reference(db_session: AsyncSession, profile):
    tech, _, idea = await _setup(db_session, profile.id)
    assert await channel_service.delete_channel(db_session, profile.id, tech.id, ChannelDeletePolicy.ORPHAN) == 0
    kept = await idea_service.get_idea_or_404(db_session, profile.id, idea.id)
    assert kept.channel_id == tech.id


@pytest.mark.asyncio
@pytest.mark.unit
async def test_unreferenced_channel_deletes_under_any_policy(db_session: AsyncSession, profile):
    _, vlog, _ = await _setup(db_session, profile.id)
    assert await channel_service.delete_channel(db_session, profile.id, vlog.id) == 0
    with pytest.raises(channel_service.ChannelNotFoundError):
        await channel_service.get_channel_or_404(db_session, profile.id, vlog.id)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_status_delete_guard(db_session: AsyncSession, profile):
    await _setup(db_session, profile.id)
    statuses = await status_service.list_statuses(db_session, profile.id)
    initial, upload = statuses[0], statuses[-1]
    with pytest.raises(StatusInUseError):
        await status_service.delete_status(db_session, profile.id, initial.id)
    await status_service.delete_status(db_session, profile.id, upload.id)
    remaining = await status_service.list_statuses(db_session, profile.id)
    assert [s.name for s in remaining] == ["Initial", "Script Write", "Record", "Edit"]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_status_update_missing(db_session: AsyncSession, profile):
    with pytest.raises(status_service.StatusNotFoundError):
        await status_service.update_status(db_session, profile.id, uuid.uuid4(), name="x")


async def _idea_at(session, user_id, stage_name):
    await ensure_defaults(session, user_id)
    stages = {s.name: s for s in await status_service.list_statuses(session, user_id)}
    idea = await idea_service.create_idea(session, user_id, {"title": "Unboxing", "status_id": stages[stage_name].id})
    return stages, idea


async def _reload(session, user_id, idea_id):
    session.expire_all()
    return await idea_service.get_idea_or_404(session, user_id, idea_id)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_new_last_stage_takes_over_completion(db_session: AsyncSession, profile):
    stages, idea = await _idea_at(db_session, profile.id, "Upload")
    assert idea.completed_at is not None
    publish = await status_service.create_status(db_session, profile.id, name="Publish")
    assert publish.order == stages["Upload"].order + 1
    idea = await _reload(db_session, profile.id, idea.id)
    assert idea.status_id == stages["Upload"].id
    assert idea.completed_at is None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_reordering_a_stage_last_stamps_its_ideas(db_session: AsyncSession, profile):
    stages, in_edit = await _idea_at(db_session, profile.id, "Edit")
    in_upload = await idea_service.create_idea(
        db_session, profile.id, {"title": "Vlog", "status_id": stages["Upload"].id}
    )
    await status_service.update_status(db_session, profile.id, stages["Edit"].id, order=99)
    in_edit = await _reload(db_session, profile.id, in_edit.id)
    in_upload = await _reload(db_session, profile.id, in_upload.id)
    assert in_edit.completed_at is not None
    assert in_upload.completed_at is None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_renaming_a_stage_keeps_stamps(db_session: AsyncSession, profile):
    stages, idea = await _idea_at(db_session, profile.id, "Upload")
    stamped = idea.completed_at
    await status_service.update_status(db_session, profile.id, stages["Upload"].id, name="Published")
    idea = await _reload(db_session, profile.id, idea.id)
    assert idea.completed_at == stamped


@pytest.mark.asyncio
@pytest.mark.unit
async def test_deleting_empty_last_stage_stamps_previous_one(db_session: AsyncSession, profile):
    stages, idea = await _idea_at(db_session, profile.id, "Edit")
    assert idea.completed_at is None
    await status_service.delete_status(db_session, profile.id, stages["Upload"].id)
    idea = await _reload(db_session, profile.id, idea.id)
    assert idea.completed_at is not None
