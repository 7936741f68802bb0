import logging
from uuid import UUID

from travel_crm.core.exceptions import (
    InvalidAssigneeError,
    LeadAccessDeniedError,
    NoAgentsAvailableError,
)
from travel_crm.models.lead import Lead
from travel_crm.models.user import User
from travel_crm.repositories.follow_up_repository import FollowUpRepository
from travel_crm.repositories.lead_repository import LeadRepository
from travel_crm.repositories.notification_repository import NotificationRepository
from travel_crm.repositories.user_repository import UserRepository
from travel_crm.schemas.common import Actor, FollowUpType
from travel_crm.schemas.lead import LeadReassign
from travel_crm.services.lead_access import get_lead_for_actor
from travel_crm.services.lead_lifecycle import LifecycleTrigger, next_status
from travel_crm.services.notification_dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)


class LeadAssignmentManager:
    """Decides which sales agent owns a lead.

    Manual assignment validates the chosen agent.  Auto assignment is a
    round-robin by recency: the active agent assigned longest ago (or
    never) gets the lead and moves to the back of the queue.  The pick
    and the ``last_assigned_at`` stamp are a single atomic statement in
    :meth:`UserRepository.claim_next_agent`.
    """

    def __init__(self, dispatcher: NotificationDispatcher) -> None:
        self._dispatcher = dispatcher

    async def resolve_manual(self, agent_id: UUID, user_repo: UserRepository) -> User:
        """Return *agent_id*'s user if it is an active sales agent."""
        agent = await user_repo.get_active_sales_agent(agent_id)
        if agent is None:
            raise InvalidAssigneeError(
                f"User {agent_id} is not an active sales agent"
            )
        return agent

    async def claim_next_agent(self, user_repo: UserRepository) -> UUID:
        """Take the next agent in the rotation.

        The ``last_assigned_at`` update joins the caller's transaction, so
        it is rolled back together with the lead insert on failure.
        """
        agent_id = await user_repo.claim_next_agent()
        if agent_id is None:
            raise NoAgentsAvailableError()
        logger.info("Auto-assign picked agent %s", agent_id)
        return agent_id

    async def reassign_lead(
        self,
        actor: Actor,
        lead_id: UUID,
        payload: LeadReassign,
        lead_repo: LeadRepository,
        user_repo: UserRepository,
        follow_up_repo: FollowUpRepository,
        notification_repo: NotificationRepository,
    ) -> Lead:
        """Move a lead to another agent.

        Status is unchanged unless ``reopen`` is set, which takes a
        ``no_response`` lead back to ``allocated``.  The rotation stamp
        and ``assigned_by`` are not touched, so follow-up reports keep
        going to the original assigner.  A ``reassigned`` follow-up row
        records who the lead came from and the new agent is notified.
        """
        if not actor.is_admin:
            raise LeadAccessDeniedError("Only admins can reassign leads")

        lead = await get_lead_for_actor(lead_id, actor, lead_repo)
        new_agent = await self.resolve_manual(payload.new_agent_id, user_repo)
        if lead.assigned_to == new_agent.id:
            raise InvalidAssigneeError("Lead is already assigned to this agent")

        previous = (
            await user_repo.get_by_id(lead.assigned_to) if lead.assigned_to else None
        )
        previous_name = previous.full_name if previous else "unassigned"

        if payload.reopen:
            new_status = next_status(lead.status, LifecycleTrigger.reopen)
            await lead_repo.update_status(lead, new_status.value)

        lead.assigned_to = new_agent.id
        await follow_up_repo.create(
            lead_id=lead.id,
            sales_person_id=actor.user_id,
            action_type=FollowUpType.reassigned.value,
            remark=f"Lead reassigned from {previous_name}",
        )
        await lead_repo.commit()
        logger.info(
            "Lead %s reassigned from %s to %s", lead.id, previous_name, new_agent.id
        )

        await self._dispatcher.lead_assigned(
            lead, new_agent.id, notification_repo, previous_agent_name=previous_name
        )
        return lead
