import logging
from typing import List, Optional
from uuid import UUID

from travel_crm.core.exceptions import CalendarServiceError, InvalidLeadDataError
from travel_crm.core.scheduling import today_local
from travel_crm.models.follow_up import FollowUp
from travel_crm.models.lead import Lead
from travel_crm.repositories.confirmation_repository import ConfirmationRepository
from travel_crm.repositories.follow_up_repository import FollowUpRepository
from travel_crm.repositories.itinerary_repository import ItineraryRepository
from travel_crm.repositories.lead_repository import LeadRepository
from travel_crm.repositories.notification_repository import NotificationRepository
from travel_crm.repositories.reminder_repository import ReminderRepository
from travel_crm.schemas.common import Actor, FollowUpType
from travel_crm.schemas.confirmation import ConfirmationCreate
from travel_crm.schemas.follow_up import (
    DueFollowUp,
    FollowUpCreate,
    FollowUpRecordResponse,
)
from travel_crm.services.lead_access import get_lead_for_actor
from travel_crm.services.lead_lifecycle import next_status, trigger_for_action
from travel_crm.services.notification_dispatcher import NotificationDispatcher
from travel_crm.services.reminder_scheduler import ReminderScheduler

logger = logging.getLogger(__name__)


class FollowUpRecorder:
    """Orchestrates the follow-up workflow.

    One call appends exactly one follow-up row; identical submissions
    produce identical duplicate rows.  The follow-up row, the lead's new
    status and (for confirmations) the booking row are committed
    together.  The reminder and notifications follow as separate side
    effects: a calendar failure is returned as a warning, a notification
    insert failure raises, and neither undoes the recorded action.
    """

    def __init__(
        self,
        reminder_scheduler: ReminderScheduler,
        dispatcher: NotificationDispatcher,
    ) -> None:
        self._reminder_scheduler = reminder_scheduler
        self._dispatcher = dispatcher

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def record(
        self,
        actor: Actor,
        lead_id: UUID,
        data: FollowUpCreate,
        lead_repo: LeadRepository,
        follow_up_repo: FollowUpRepository,
        confirmation_repo: ConfirmationRepository,
        itinerary_repo: ItineraryRepository,
        reminder_repo: ReminderRepository,
        notification_repo: NotificationRepository,
    ) -> FollowUpRecordResponse:
        # 1. Ownership and transition are checked before any write
        lead = await get_lead_for_actor(lead_id, actor, lead_repo)
        new_status = next_status(lead.status, trigger_for_action(data.action_type))
        if data.itinerary_id is not None:
            await self._require_itinerary(data.itinerary_id, itinerary_repo)

        confirming = data.action_type == FollowUpType.confirmed_advance_paid

        # 2. State-defining writes, one transaction
        if confirming:
            await confirmation_repo.create(
                lead_id=lead.id,
                confirmed_by=actor.user_id,
                itinerary_id=data.itinerary_id,
                total_amount=data.total_amount,
                advance_amount=data.advance_amount,
                transaction_id=data.transaction_id,
                payment_mode=data.payment_mode.value if data.payment_mode else None,
                travel_date=data.travel_date,
                remark=data.remark,
            )
            lead.travel_date = data.travel_date
            lead.travel_month = None

        await lead_repo.update_status(lead, new_status.value)
        follow_up = await follow_up_repo.create(
            lead_id=lead.id,
            sales_person_id=actor.user_id,
            **self._follow_up_columns(data),
        )
        await lead_repo.commit()
        logger.info(
            "Follow-up %s recorded on lead %s; status now %s",
            data.action_type.value,
            lead.id,
            new_status.value,
        )

        # 3. Side effects
        warnings: List[str] = []
        reminder_id: Optional[UUID] = None
        if confirming:
            try:
                reminder = await self._reminder_scheduler.schedule(
                    lead,
                    lead.assigned_to or actor.user_id,
                    data.travel_date,
                    reminder_repo,
                    reminder_time=data.reminder_time,
                )
                reminder_id = reminder.id
            except CalendarServiceError as exc:
                logger.warning(
                    "Lead %s confirmed but no reminder was scheduled: %s",
                    lead.id,
                    exc.detail,
                )
                warnings.append(f"Reminder not scheduled: {exc.detail}")

        await self._dispatcher.follow_up_recorded(
            lead, follow_up, actor, notification_repo
        )

        return FollowUpRecordResponse(
            follow_up_id=follow_up.id,
            lead_id=lead.id,
            status=new_status,
            due_amount=data.due_amount,
            reminder_id=reminder_id,
            warnings=warnings,
        )

    async def confirm_lead(
        self,
        actor: Actor,
        lead_id: UUID,
        data: ConfirmationCreate,
        lead_repo: LeadRepository,
        follow_up_repo: FollowUpRepository,
        confirmation_repo: ConfirmationRepository,
        itinerary_repo: ItineraryRepository,
        reminder_repo: ReminderRepository,
        notification_repo: NotificationRepository,
    ) -> FollowUpRecordResponse:
        """Confirm a booking from the dedicated confirmation form.

        Goes through :meth:`record` as a ``confirmed_advance_paid``
        follow-up so both entry points leave identical rows behind.
        """
        follow_up = FollowUpCreate(
            action_type=FollowUpType.confirmed_advance_paid,
            remark=data.remark or f"Confirmed via {data.payment_mode.value}",
            itinerary_id=data.itinerary_id,
            travel_date=data.travel_date,
            total_amount=data.total_amount,
            advance_amount=data.advance_amount,
            transaction_id=data.transaction_id,
            payment_mode=data.payment_mode,
            reminder_time=data.reminder_time,
        )
        return await self.record(
            actor,
            lead_id,
            follow_up,
            lead_repo,
            follow_up_repo,
            confirmation_repo,
            itinerary_repo,
            reminder_repo,
            notification_repo,
        )

    async def history(
        self,
        actor: Actor,
        lead_id: UUID,
        lead_repo: LeadRepository,
        follow_up_repo: FollowUpRepository,
    ) -> List[FollowUp]:
        lead = await get_lead_for_actor(lead_id, actor, lead_repo)
        return await follow_up_repo.list_for_lead(lead.id)

    async def due_follow_ups(
        self,
        actor: Actor,
        follow_up_repo: FollowUpRepository,
        today_only: bool = False,
    ) -> List[DueFollowUp]:
        rows = await follow_up_repo.list_due(
            assigned_to=None if actor.is_admin else actor.user_id,
            on_date=today_local() if today_only else None,
        )
        return [self._due_item(follow_up, lead) for follow_up, lead in rows]

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    async def _require_itinerary(
        itinerary_id: UUID, itinerary_repo: ItineraryRepository
    ) -> None:
        if await itinerary_repo.get_by_id(itinerary_id) is None:
            raise InvalidLeadDataError(f"Itinerary {itinerary_id} does not exist")

    @staticmethod
    def _follow_up_columns(data: FollowUpCreate) -> dict:
        """Keep only the fields that belong to the recorded action."""
        columns = {
            "action_type": data.action_type.value,
            "remark": data.remark,
            "itinerary_id": data.itinerary_id,
            "next_follow_up_date": data.next_follow_up_date,
            "next_follow_up_time": data.next_follow_up_time,
        }
        if data.action_type == FollowUpType.confirmed_advance_paid:
            columns.update(
                total_amount=data.total_amount,
                advance_amount=data.advance_amount,
                due_amount=data.due_amount,
                transaction_id=data.transaction_id,
                next_follow_up_date=None,
                next_follow_up_time=None,
            )
        elif data.action_type == FollowUpType.dead:
            columns.update(
                dead_reason=data.dead_reason.strip(),
                next_follow_up_date=None,
                next_follow_up_time=None,
            )
        return columns

    @staticmethod
    def _due_item(follow_up: FollowUp, lead: Lead) -> DueFollowUp:
        return DueFollowUp(
            follow_up_id=follow_up.id,
            lead_id=lead.id,
            client_name=lead.client_name,
            place=lead.place,
            no_of_pax=lead.no_of_pax,
            next_follow_up_date=follow_up.next_follow_up_date,
            next_follow_up_time=follow_up.next_follow_up_time,
            remark=follow_up.remark,
        )
