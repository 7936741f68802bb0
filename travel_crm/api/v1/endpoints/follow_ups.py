from typing import List

from fastapi import APIRouter, Depends, Query

from travel_crm.repositories.follow_up_repository import FollowUpRepository
from travel_crm.schemas.common import Actor
from travel_crm.schemas.follow_up import DueFollowUp
from travel_crm.services.follow_up_recorder import FollowUpRecorder
from travel_crm.api.deps import get_actor, get_follow_up_recorder, get_follow_up_repo

router = APIRouter(prefix="/follow-ups", tags=["Follow-ups"])


@router.get("/due", response_model=List[DueFollowUp])
async def due_follow_ups(
    today_only: bool = Query(False, description="Only follow-ups due today"),
    actor: Actor = Depends(get_actor),
    recorder: FollowUpRecorder = Depends(get_follow_up_recorder),
    follow_up_repo: FollowUpRepository = Depends(get_follow_up_repo),
) -> List[DueFollowUp]:
    """Open follow-ups, taken from each active lead's latest entry."""
    return await recorder.due_follow_ups(actor, follow_up_repo, today_only=today_only)
