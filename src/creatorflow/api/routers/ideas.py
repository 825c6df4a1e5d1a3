import uuid
from fastapi import APIRouter, Depends, HTTPException, status, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from creatorflow.api import deps
from creatorflow.models.profile import Profile
from creatorflow.schemas.idea import IdeaCreate, IdeaRead, IdeaUpdate
from creatorflow.services.changes import ChangeNotifier
from creatorflow.services.channel import ChannelNotFoundError
from creatorflow.services.status import StatusNotFoundError
from creatorflow.services.idea import (
    create_idea,
    get_idea_or_404,
    list_ideas,
    update_idea,
    soft_delete_idea,
    restore_idea,
    permanently_delete_idea,
    IdeaNotFoundError,
    MissingPipelineError,
)

router = APIRouter(prefix="/ideas", tags=["ideas"])


@router.get("/", response_model=list[IdeaRead], summary="List ideas",
            description="Newest first. Binned ideas are hidden unless include_deleted is set.")
async def list_ideas_route(
    include_deleted: bool = Query(False, description="Include ideas in the recycle bin"),
    channel_id: uuid.UUID | None = Query(None),
    status_id: uuid.UUID | None = Query(None),
    session: AsyncSession = Depends(deps.get_db),
    profile: Profile = Depends(deps.get_current_profile),
):
    return await list_ideas(
        session, profile.id, include_deleted=include_deleted, channel_id=channel_id, status_id=status_id
    )


@router.post("/", response_model=IdeaRead, status_code=status.HTTP_201_CREATED, summary="Create an idea")
async def create_idea_route(
    payload: IdeaCreate,
    session: AsyncSession = Depends(deps.get_db),
    profile: Profile = Depends(deps.get_current_profile),
    notifier: ChangeNotifier = Depends(deps.get_notifier),
):
    try:
        idea = await create_idea(session, profile.id, payload.model_dump())
    except MissingPipelineError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ChannelNotFoundError:
        raise HTTPException(status_code=422, detail="Unknown channel_id")
    except StatusNotFoundError:
        raise HTTPException(status_code=422, detail="Unknown status_id")
    await session.commit()
    await notifier.publish(profile.id, "ideas")
    return idea


@router.get("/{idea_id}", response_model=IdeaRead, summary="Get an idea")
async def get_idea_route(
    idea_id: uuid.UUID,
    session: AsyncSession = Depends(deps.get_db),
    profile: Profile = Depends(deps.get_current_profile),
):
    try:
        return await get_idea_or_404(session, profile.id, idea_id)
    except IdeaNotFoundError:
        raise HTTPException(status_code=404, detail="Idea not found")


@router.patch("/{idea_id}", response_model=IdeaRead, summary="Update an idea",
              description="Moving into the last pipeline stage stamps completed_at; moving out clears it.")
async def update_idea_route(
    idea_id: uuid.UUID,
    payload: IdeaUpdate,
    session: AsyncSession = Depends(deps.get_db),
    profile: Profile = Depends(deps.get_current_profile),
    notifier: ChangeNotifier = Depends(deps.get_notifier),
):
    try:
        idea = await update_idea(session, profile.id, idea_id, payload.model_dump(exclude_unset=True))
    except IdeaNotFoundError:
        raise HTTPException(status_code=404, detail="Idea not found")
    except ChannelNotFoundError:
        raise HTTPException(status_code=422, detail="Unknown channel_id")
    except StatusNotFoundError:
        raise HTTPException(status_code=422, detail="Unknown status_id")
    await session.commit()
    await notifier.publish(profile.id, "ideas")
    return idea


@router.delete("/{idea_id}", response_model=IdeaRead, summary="Move an idea to the recycle bin")
async def soft_delete_idea_route(
    idea_id: uuid.UUID,
    session: AsyncSession = Depends(deps.get_db),
    profile: Profile = Depends(deps.get_current_profile),
    notifier: ChangeNotifier = Depends(deps.get_notifier),
):
    try:
        idea = await soft_delete_idea(session, profile.id, idea_id)
    except IdeaNotFoundError:
        raise HTTPException(status_code=404, detail="Idea not found")
    await session.commit()
    await notifier.publish(profile.id, "ideas")
    return idea


@router.post("/{idea_id}/restore", response_model=IdeaRead, summary="Restore an idea from the recycle bin")
async def restore_idea_route(
    idea_id: uuid.UUID,
    session: AsyncSession = Depends(deps.get_db),
    profile: Profile = Depends(deps.get_current_profile),
    notifier: ChangeNotifier = Depends(deps.get_notifier),
):
    try:
        idea = await restore_idea(session, profile.id, idea_id)
    except IdeaNotFoundError:
        raise HTTPException(status_code=404, detail="Idea not found")
    await session.commit()
    await notifier.publish(profile.id, "ideas")
    return idea


@router.delete("/{idea_id}/permanent", status_code=status.HTTP_204_NO_CONTENT,
               summary="Delete an idea permanently",
               description="Idempotent: deleting an id that is already gone also returns 204.")
async def permanently_delete_idea_route(
    idea_id: uuid.UUID,
    session: AsyncSession = Depends(deps.get_db),
    profile: Profile = Depends(deps.get_current_profile),
    notifier: ChangeNotifier = Depends(deps.get_notifier),
):
    removed = await permanently_delete_idea(session, profile.id, idea_id)
    await session.commit()
    if removed:
        await notifier.publish(profile.id, "ideas")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
