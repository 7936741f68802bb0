from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from travel_crm.repositories.reminder_repository import ReminderRepository
from travel_crm.schemas.common import Actor, ReminderStatus
from travel_crm.schemas.reminder import ReminderOut
from travel_crm.services.reminder_scheduler import ReminderScheduler
from travel_crm.api.deps import get_actor, get_reminder_repo, get_reminder_scheduler

router = APIRouter(prefix="/reminders", tags=["Reminders"])


@router.get("", response_model=List[ReminderOut])
async def list_reminders(
    status: Optional[ReminderStatus] = Query(None),
    actor: Actor = Depends(get_actor),
    scheduler: ReminderScheduler = Depends(get_reminder_scheduler),
    reminder_repo: ReminderRepository = Depends(get_reminder_repo),
) -> List[ReminderOut]:
    reminders = await scheduler.list_for(actor, reminder_repo, status=status)
    return [ReminderOut.model_validate(r) for r in reminders]
