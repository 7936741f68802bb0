from uuid import UUID

from travel_crm.core.exceptions import LeadAccessDeniedError, LeadNotFoundError
from travel_crm.models.lead import Lead
from travel_crm.repositories.lead_repository import LeadRepository
from travel_crm.schemas.common import Actor


def ensure_can_act(actor: Actor, lead: Lead) -> None:
    """Only the owning agent or an admin may act on a lead."""
    if actor.is_admin or lead.assigned_to == actor.user_id:
        return
    raise LeadAccessDeniedError()


async def get_lead_for_actor(
    lead_id: UUID, actor: Actor, lead_repo: LeadRepository
) -> Lead:
    """Fetch a lead and check the actor may act on it."""
    lead = await lead_repo.get_by_id(lead_id)
    if lead is None:
        raise LeadNotFoundError(f"Lead {lead_id} not found")
    ensure_can_act(actor, lead)
    return lead
