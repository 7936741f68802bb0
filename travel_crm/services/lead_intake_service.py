import logging
from typing import Any, Dict, Optional, Tuple
from uuid import UUID

from travel_crm.core.exceptions import InvalidAssigneeError, InvalidLeadDataError
from travel_crm.models.call_log import CallLog
from travel_crm.models.lead import Lead
from travel_crm.repositories.call_log_repository import CallLogRepository
from travel_crm.repositories.lead_repository import LeadRepository
from travel_crm.repositories.notification_repository import NotificationRepository
from travel_crm.repositories.user_repository import UserRepository
from travel_crm.schemas.common import Actor
from travel_crm.schemas.lead import CallLogCreate, LeadCreate
from travel_crm.services.lead_access import get_lead_for_actor
from travel_crm.services.lead_assignment import LeadAssignmentManager
from travel_crm.services.lead_lifecycle import initial_status
from travel_crm.services.notification_dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)


class LeadIntakeService:
    """Orchestrates lead creation and call logging.

    Dependencies are injected via the constructor so the class remains
    stateless and easily testable.
    """

    def __init__(
        self,
        assignment_manager: LeadAssignmentManager,
        dispatcher: NotificationDispatcher,
    ) -> None:
        self._assignment_manager = assignment_manager
        self._dispatcher = dispatcher

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def create_lead(
        self,
        actor: Actor,
        lead_data: LeadCreate,
        lead_repo: LeadRepository,
        user_repo: UserRepository,
        notification_repo: NotificationRepository,
    ) -> Lead:
        """Create a lead and hand it to its owning agent.

        Steps:
        1. Resolve the owner (admin: manual or auto; sales: self)
        2. Insert the lead with its initial status
        3. Commit, then notify the owner

        Raises:
            InvalidAssigneeError: manual pick is not an active sales agent.
            NoAgentsAvailableError: auto-assign found nobody.
            InvalidLeadDataError: an admin gave neither mode.
        """
        agent_id, assigned_by = await self._resolve_owner(actor, lead_data, user_repo)

        lead = await lead_repo.create(
            **self._lead_columns(lead_data),
            status=initial_status(lead_data.lead_type).value,
            assigned_to=agent_id,
            assigned_by=assigned_by,
        )
        await lead_repo.commit()
        logger.info(
            "Lead %s created (%s) and assigned to %s", lead.id, lead.status, agent_id
        )

        # Self-service leads need no "assigned to you" notice
        if assigned_by is not None:
            await self._dispatcher.lead_assigned(lead, agent_id, notification_repo)
        return lead

    async def log_call(
        self,
        actor: Actor,
        lead_id: UUID,
        call: CallLogCreate,
        lead_repo: LeadRepository,
        call_log_repo: CallLogRepository,
    ) -> Tuple[CallLog, int]:
        """Record a call and bump the lead's attempt counter.

        Returns the call row and the new ``call_count``.
        """
        lead = await get_lead_for_actor(lead_id, actor, lead_repo)
        duration = int((call.call_end_time - call.call_start_time).total_seconds())

        call_log = await call_log_repo.create(
            lead_id=lead.id,
            sales_person_id=actor.user_id,
            call_start_time=call.call_start_time,
            call_end_time=call.call_end_time,
            call_duration=duration,
        )
        call_count = await lead_repo.increment_call_count(lead.id)
        await lead_repo.commit()
        return call_log, call_count

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _resolve_owner(
        self, actor: Actor, lead_data: LeadCreate, user_repo: UserRepository
    ) -> Tuple[UUID, Optional[UUID]]:
        """Return ``(assigned_to, assigned_by)`` for a new lead."""
        if not actor.is_admin:
            if lead_data.auto_assign or (
                lead_data.assigned_to is not None
                and lead_data.assigned_to != actor.user_id
            ):
                raise InvalidAssigneeError(
                    "Sales agents can only create leads for themselves"
                )
            await self._assignment_manager.resolve_manual(actor.user_id, user_repo)
            return actor.user_id, None

        if lead_data.assigned_to is not None:
            agent = await self._assignment_manager.resolve_manual(
                lead_data.assigned_to, user_repo
            )
            return agent.id, actor.user_id
        if lead_data.auto_assign:
            agent_id = await self._assignment_manager.claim_next_agent(user_repo)
            return agent_id, actor.user_id
        raise InvalidLeadDataError("Choose an agent or set auto_assign")

    @staticmethod
    def _lead_columns(lead_data: LeadCreate) -> Dict[str, Any]:
        columns = lead_data.model_dump(exclude={"assigned_to", "auto_assign"})
        columns["lead_source"] = lead_data.lead_source.value
        columns["lead_type"] = lead_data.lead_type.value
        return columns