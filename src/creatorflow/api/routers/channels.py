import uuid
from fastapi import APIRouter, Depends, HTTPException, Query, Response
from fastapi import status as http_status
from sqlalchemy.ext.asyncio import AsyncSession

from creatorflow.api import deps
from creatorflow.core.errors import ChannelInUseError
from creatorflow.models.profile import Profile
from creatorflow.schemas.channel import ChannelCreate, ChannelRead, ChannelUpdate
from creatorflow.services.changes import ChangeNotifier
from creatorflow.services.channel import (
    create_channel,
    get_channel_or_404,
    list_channels,
    update_channel,
    delete_channel,
    ChannelDeletePolicy,
    ChannelNotFoundError,
)

router = APIRouter(prefix="/channels", tags=["channels"])


@router.get("/", response_model=list[ChannelRead], summary="List channels")
async def list_channels_route(
    session: AsyncSession = Depends(deps.get_db),
    profile: Profile = Depends(deps.get_current_profile),
):
    return await list_channels(session, profile.id)


@router.post("/", response_model=ChannelRead, status_code=http_status.HTTP_201_CREATED, summary="Create a channel")
async def create_channel_route(
    payload: ChannelCreate,
    session: AsyncSession = Depends(deps.get_db),
    profile: Profile = Depends(deps.get_current_profile),
    notifier: ChangeNotifier = Depends(deps.get_notifier),
):
    channel = await create_channel(session, profile.id, **payload.model_dump())
    await session.commit()
    await notifier.publish(profile.id, "channels")
    return channel


@router.get("/{channel_id}", response_model=ChannelRead, summary="Get a channel")
async def get_channel_route(
    channel_id: uuid.UUID,
    session: AsyncSession = Depends(deps.get_db),
    profile: Profile = Depends(deps.get_current_profile),
):
    try:
        return await get_channel_or_404(session, profile.id, channel_id)
    except ChannelNotFoundError:
        raise HTTPException(status_code=404, detail="Channel not found")


@router.patch("/{channel_id}", response_model=ChannelRead, summary="Update a channel")
async def update_channel_route(
    channel_id: uuid.UUID,
    payload: ChannelUpdate,
    session: AsyncSession = Depends(deps.get_db),
    profile: Profile = Depends(deps.get_current_profile),
    notifier: ChangeNotifier = Depends(deps.get_notifier),
):
    try:
        channel = await update_channel(session, profile.id, channel_id, **payload.model_dump(exclude_unset=True))
    except ChannelNotFoundError:
        raise HTTPException(status_code=404, detail="Channel not found")
    await session.commit()
    await notifier.publish(profile.id, "channels")
    return channel


@router.delete("/{channel_id}", status_code=http_status.HTTP_204_NO_CONTENT, summary="Delete a channel",
               description="Ideas still filed under the channel are handled by the delete policy; "
                           "under 'block' the request fails with 409 while any exist.")
async def delete_channel_route(
    channel_id: uuid.UUID,
    policy: ChannelDeletePolicy | None = Query(None, description="Override the configured delete policy"),
    session: AsyncSession = Depends(deps.get_db),
    profile: Profile = Depends(deps.get_current_profile),
    notifier: ChangeNotifier = Depends(deps.get_notifier),
    settings=Depends(deps.get_settings),
):
    try:
        affected = await delete_channel(
            session, profile.id, channel_id, policy or ChannelDeletePolicy(settings.channel_delete_policy)
        )
    except ChannelNotFoundError:
        raise HTTPException(status_code=404, detail="Channel not found")
    except ChannelInUseError as e:
        raise HTTPException(status_code=409, detail=str(e))
    await session.commit()
    await notifier.publish(profile.id, "channels")
    if affected:
        await notifier.publish(profile.id, "ideas")
    return Response(status_code=http_status.HTTP_204_NO_CONTENT)
