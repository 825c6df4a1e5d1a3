import uuid
from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi import status as http_status
from sqlalchemy.ext.asyncio import AsyncSession

from creatorflow.api import deps
from creatorflow.core.errors import StatusInUseError
from creatorflow.models.profile import Profile
from creatorflow.schemas.status import StatusCreate, StatusRead, StatusUpdate
from creatorflow.services.changes import ChangeNotifier
from creatorflow.services.status import (
    create_status,
    get_status_or_404,
    list_statuses,
    update_status,
    delete_status,
    StatusNotFoundError,
)

router = APIRouter(prefix="/statuses", tags=["statuses"])


@router.get("/", response_model=list[StatusRead], summary="List pipeline stages",
            description="Ordered by stage order; the last entry is the terminal (completed) stage.")
async def list_statuses_route(
    session: AsyncSession = Depends(deps.get_db),
    profile: Profile = Depends(deps.get_current_profile),
):
    return await list_statuses(session, profile.id)


@router.post("/", response_model=StatusRead, status_code=http_status.HTTP_201_CREATED, summary="Add a stage")
async def create_status_route(
    payload: StatusCreate,
    session: AsyncSession = Depends(deps.get_db),
    profile: Profile = Depends(deps.get_current_profile),
    notifier: ChangeNotifier = Depends(deps.get_notifier),
):
    row = await create_status(session, profile.id, **payload.model_dump())
    await session.commit()
    await notifier.publish(profile.id, "statuses")
    return row


@router.get("/{status_id}", response_model=StatusRead, summary="Get a stage")
async def get_status_route(
    status_id: uuid.UUID,
    session: AsyncSession = Depends(deps.get_db),
    profile: Profile = Depends(deps.get_current_profile),
):
    try:
        return await get_status_or_404(session, profile.id, status_id)
    except StatusNotFoundError:
        raise HTTPException(status_code=404, detail="Status not found")


@router.patch("/{status_id}", response_model=StatusRead, summary="Rename, recolor or reorder a stage")
async def update_status_route(
    status_id: uuid.UUID,
    payload: StatusUpdate,
    session: AsyncSession = Depends(deps.get_db),
    profile: Profile = Depends(deps.get_current_profile),
    notifier: ChangeNotifier = Depends(deps.get_notifier),
):
    try:
        row = await update_status(session, profile.id, status_id, **payload.model_dump(exclude_unset=True))
    except StatusNotFoundError:
        raise HTTPException(status_code=404, detail="Status not found")
    await session.commit()
    await notifier.publish(profile.id, "statuses")
    return row


@router.delete("/{status_id}", status_code=http_status.HTTP_204_NO_CONTENT, summary="Delete a stage",
               description="Fails with 409 while any idea (binned ones included) is at this stage.")
async def delete_status_route(
    status_id: uuid.UUID,
    session: AsyncSession = Depends(deps.get_db),
    profile: Profile = Depends(deps.get_current_profile),
    notifier: ChangeNotifier = Depends(deps.get_notifier),
):
    try:
        await delete_status(session, profile.id, status_id)
    except StatusNotFoundError:
        raise HTTPException(status_code=404, detail="Status not found")
    except StatusInUseError as e:
        raise HTTPException(status_code=409, detail=str(e))
    await session.commit()
    await notifier.publish(profile.id, "statuses")
    return Response(status_code=http_status.HTTP_204_NO_CONTENT)
