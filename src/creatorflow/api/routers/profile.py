from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from creatorflow.api import deps
from creatorflow.models.profile import Profile
from creatorflow.schemas.profile import ProfileRead, ProfileUpdate
from creatorflow.services.changes import ChangeNotifier
from creatorflow.services.profile import update_profile
from creatorflow.services.seed import reset_workspace

router = APIRouter(prefix="/profile", tags=["profile"])


class ResetResponse(BaseModel):
    status: str
    purged_ideas: int


@router.get("/me", response_model=ProfileRead, summary="Current profile")
async def read_profile(profile: Profile = Depends(deps.get_current_profile)):
    return profile


@router.patch("/me", response_model=ProfileRead, summary="Update display name or avatar",
              description="An empty avatar_url removes the avatar.")
async def update_profile_route(
    payload: ProfileUpdate,
    session: AsyncSession = Depends(deps.get_db),
    profile: Profile = Depends(deps.get_current_profile),
    notifier: ChangeNotifier = Depends(deps.get_notifier),
):
    updated = await update_profile(session, profile.id, **payload.model_dump(exclude_unset=True))
    await session.commit()
    await notifier.publish(profile.id, "profiles")
    return updated


@router.post("/me/reset", response_model=ResetResponse, summary="Reset all app data",
             description="Deletes every idea, channel and stage of the caller, then seeds the defaults again. "
                         "The profile itself is kept.")
async def reset_workspace_route(
    session: AsyncSession = Depends(deps.get_db),
    profile: Profile = Depends(deps.get_current_profile),
    notifier: ChangeNotifier = Depends(deps.get_notifier),
):
    purged = await reset_workspace(session, profile.id)
    await session.commit()
    for resource in ("ideas", "channels", "statuses"):
        await notifier.publish(profile.id, resource)
    return ResetResponse(status="ok", purged_ideas=purged)
