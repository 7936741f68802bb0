from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy import select

from travel_crm.models.reminder import Reminder
from travel_crm.repositories.base import BaseRepository


class ReminderRepository(BaseRepository):
    """Queries against the ``reminders`` table."""

    async def create(self, **kwargs: Any) -> Reminder:
        reminder = Reminder(**kwargs)
        self._db.add(reminder)
        return reminder

    async def list_reminders(
        self,
        *,
        sales_person_id: Optional[UUID] = None,
        status: Optional[str] = None,
    ) -> List[Reminder]:
        """Return reminders soonest first."""
        query = select(Reminder)
        if sales_person_id is not None:
            query = query.where(Reminder.sales_person_id == sales_person_id)
        if status is not None:
            query = query.where(Reminder.status == status)
        result = await self._db.execute(
            query.order_by(Reminder.reminder_date.asc(), Reminder.reminder_time.asc())
        )
        return list(result.scalars().all())
