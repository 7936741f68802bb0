import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional
from uuid import UUID

from travel_crm.core.constants import REMINDER_DAYS_BEFORE_TRAVEL
from travel_crm.core.exceptions import InvalidStatusTransitionError
from travel_crm.core.scheduling import default_reminder_time, local_datetime
from travel_crm.models.lead import Lead
from travel_crm.models.reminder import Reminder
from travel_crm.repositories.lead_repository import LeadRepository
from travel_crm.repositories.reminder_repository import ReminderRepository
from travel_crm.schemas.common import Actor, LeadStatus, ReminderStatus
from travel_crm.schemas.reminder import ReminderCreate
from travel_crm.services.calendar_client import CalendarClient
from travel_crm.services.lead_access import get_lead_for_actor

logger = logging.getLogger(__name__)

_BOOKED_STATUSES = frozenset(
    {LeadStatus.confirmed.value, LeadStatus.allocated_to_operations.value}
)


def reminder_date_for(travel_date: date) -> date:
    """The reminder always falls exactly a week before travel."""
    return travel_date - timedelta(days=REMINDER_DAYS_BEFORE_TRAVEL)


class ReminderScheduler:
    """Calendar reminders and feedback requests for booked leads."""

    def __init__(self, calendar: Optional[CalendarClient] = None) -> None:
        self._calendar = calendar or CalendarClient()

    async def schedule(
        self,
        lead: Lead,
        agent_id: UUID,
        travel_date: date,
        reminder_repo: ReminderRepository,
        reminder_time: Optional[time] = None,
    ) -> Reminder:
        """Create the calendar event, then persist the reminder row.

        A :class:`CalendarServiceError` propagates before anything is
        written, so a reminder row always carries a real event id.
        """
        reminder_time = reminder_time or default_reminder_time()
        reminder_date = reminder_date_for(travel_date)

        event_id = await self._calendar.create_reminder(
            title=f"Travel Reminder: {lead.client_name}",
            description=(
                f"Client: {lead.client_name}\n"
                f"Location: {lead.place}\n"
                f"Pax: {lead.no_of_pax}\n"
                f"Travel Date: {travel_date.isoformat()}\n\n"
                f"This is a {REMINDER_DAYS_BEFORE_TRAVEL}-day advance "
                "reminder for the travel date."
            ),
            start=local_datetime(reminder_date, reminder_time),
            lead_id=lead.id,
            lead_name=lead.client_name,
        )

        reminder = await reminder_repo.create(
            lead_id=lead.id,
            sales_person_id=agent_id,
            travel_date=travel_date,
            reminder_date=reminder_date,
            reminder_time=reminder_time,
            calendar_event_id=event_id,
            status=ReminderStatus.pending.value,
        )
        await reminder_repo.commit()
        logger.info(
            "Reminder for lead %s set on %s (event %s)",
            lead.id,
            reminder_date.isoformat(),
            event_id,
        )
        return reminder

    async def add_manual_reminder(
        self,
        actor: Actor,
        lead_id: UUID,
        payload: ReminderCreate,
        lead_repo: LeadRepository,
        reminder_repo: ReminderRepository,
    ) -> Reminder:
        lead = await get_lead_for_actor(lead_id, actor, lead_repo)
        if lead.status != LeadStatus.confirmed.value:
            raise InvalidStatusTransitionError(
                "Reminders can only be added to confirmed leads "
                f"(status: {lead.status})"
            )
        return await self.schedule(
            lead,
            actor.user_id,
            payload.travel_date,
            reminder_repo,
            reminder_time=payload.reminder_time,
        )

    async def request_feedback(
        self, actor: Actor, lead_id: UUID, lead_repo: LeadRepository
    ) -> datetime:
        """Stamp ``feedback_requested_at``; repeating overwrites the stamp."""
        lead = await get_lead_for_actor(lead_id, actor, lead_repo)
        if lead.status not in _BOOKED_STATUSES:
            raise InvalidStatusTransitionError(
                "Feedback can only be requested for booked leads "
                f"(status: {lead.status})"
            )
        requested_at = datetime.now(timezone.utc)
        lead.feedback_requested_at = requested_at
        await lead_repo.commit()
        return requested_at

    async def list_for(
        self,
        actor: Actor,
        reminder_repo: ReminderRepository,
        status: Optional[ReminderStatus] = None,
    ) -> List[Reminder]:
        """Admins see every reminder, agents only their own."""
        return await reminder_repo.list_reminders(
            sales_person_id=None if actor.is_admin else actor.user_id,
            status=status.value if status else None,
        )
