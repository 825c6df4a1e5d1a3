from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from creatorflow.api import deps
from creatorflow.models.profile import Profile
from creatorflow.schemas.idea import IdeaRead
from creatorflow.services.changes import ChangeNotifier
from creatorflow.services.idea import list_ideas, empty_bin

router = APIRouter(prefix="/trash", tags=["trash"])


class TrashEmptyResponse(BaseModel):
    status: str
    purged_ideas: int


@router.get("/", response_model=list[IdeaRead], summary="List the recycle bin")
async def list_trash_route(
    session: AsyncSession = Depends(deps.get_db),
    profile: Profile = Depends(deps.get_current_profile),
):
    return await list_ideas(session, profile.id, only_deleted=True)


@router.post("/empty", response_model=TrashEmptyResponse, summary="Permanently delete every binned idea")
async def empty_trash_route(
    session: AsyncSession = Depends(deps.get_db),
    profile: Profile = Depends(deps.get_current_profile),
    notifier: ChangeNotifier = Depends(deps.get_notifier),
):
    purged = await empty_bin(session, profile.id)
    await session.commit()
    if purged:
        await notifier.publish(profile.id, "ideas")
    return TrashEmptyResponse(status="ok", purged_ideas=purged)
