import logging
from typing import List, Optional
from uuid import UUID

from travel_crm.models.lead import Lead
from travel_crm.repositories.follow_up_repository import FollowUpRepository
from travel_crm.repositories.lead_repository import LeadRepository
from travel_crm.repositories.notification_repository import NotificationRepository
from travel_crm.repositories.user_repository import UserRepository
from travel_crm.schemas.common import Actor, FollowUpType, LeadStatus
from travel_crm.services.lead_access import get_lead_for_actor
from travel_crm.services.lead_lifecycle import LifecycleTrigger, next_status
from travel_crm.services.notification_dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)


class LeadStatusService:
    """Status operations outside the follow-up form, plus lead listings."""

    def __init__(self, dispatcher: NotificationDispatcher) -> None:
        self._dispatcher = dispatcher

    async def mark_no_response(
        self,
        actor: Actor,
        lead_id: UUID,
        lead_repo: LeadRepository,
        follow_up_repo: FollowUpRepository,
        remark: Optional[str] = None,
    ) -> Lead:
        lead = await get_lead_for_actor(lead_id, actor, lead_repo)
        new_status = next_status(lead.status, LifecycleTrigger.mark_no_response)

        await lead_repo.update_status(lead, new_status.value)
        await follow_up_repo.create(
            lead_id=lead.id,
            sales_person_id=actor.user_id,
            action_type=FollowUpType.no_response.value,
            remark=remark
            or f"Marked as no response after {lead.call_count or 0} call attempts",
        )
        await lead_repo.commit()
        logger.info("Lead %s marked no response", lead.id)
        return lead

    async def allocate_to_operations(
        self,
        actor: Actor,
        lead_id: UUID,
        lead_repo: LeadRepository,
        user_repo: UserRepository,
        follow_up_repo: FollowUpRepository,
        notification_repo: NotificationRepository,
    ) -> Lead:
        """Hand a confirmed lead to operations and tell an admin.

        The admin is the earliest-created active one; with no admin on
        record the allocation still stands and no notification is sent.
        """
        lead = await get_lead_for_actor(lead_id, actor, lead_repo)
        new_status = next_status(lead.status, LifecycleTrigger.allocate_to_operations)

        await lead_repo.update_status(lead, new_status.value)
        await follow_up_repo.create(
            lead_id=lead.id,
            sales_person_id=actor.user_id,
            action_type=FollowUpType.allocated_to_operations.value,
            remark="Allocated to operations",
        )
        await lead_repo.commit()
        logger.info("Lead %s allocated to operations", lead.id)

        admin = await user_repo.get_first_admin()
        if admin is None:
            logger.warning("No admin found to notify about lead %s", lead.id)
            return lead
        acting_user = await user_repo.get_by_id(actor.user_id)
        actor_name = acting_user.full_name if acting_user else str(actor.user_id)
        await self._dispatcher.allocated_to_operations(
            lead, admin.id, actor_name, notification_repo
        )
        return lead

    async def get_lead(
        self, actor: Actor, lead_id: UUID, lead_repo: LeadRepository
    ) -> Lead:
        return await get_lead_for_actor(lead_id, actor, lead_repo)

    async def list_leads(
        self,
        actor: Actor,
        lead_repo: LeadRepository,
        status: Optional[LeadStatus] = None,
        agent_id: Optional[UUID] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> List[Lead]:
        """Admins may filter by agent; sales agents always see their own."""
        owner = agent_id if actor.is_admin else actor.user_id
        return await lead_repo.list_leads(
            status=status.value if status else None,
            assigned_to=owner,
            skip=skip,
            limit=limit,
        )

    async def list_almost_confirmed(
        self, actor: Actor, lead_repo: LeadRepository
    ) -> List[Lead]:
        return await lead_repo.list_almost_confirmed(
            assigned_to=None if actor.is_admin else actor.user_id
        )
