from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from creatorflow.api import deps
from creatorflow.models.profile import Profile
from creatorflow.services.changes import ChangeNotifier

router = APIRouter(prefix="/streams", tags=["streams"])


@router.get("/changes", summary="Change notifications (SSE)",
            description="One `change` event per committed write to the caller's ideas, channels, "
                        "statuses or profile. Events carry no row data; clients re-fetch.")
async def changes(
    request: Request,
    profile: Profile = Depends(deps.get_current_profile),
    notifier: ChangeNotifier = Depends(deps.get_notifier),
):
    user_id = profile.id

    async def event_source():
        async for event in notifier.stream(user_id):
            if await request.is_disconnected():
                break
            yield event.as_sse()

    return StreamingResponse(
        event_source(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
