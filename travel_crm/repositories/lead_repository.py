from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy import select, update

from travel_crm.core.constants import ACTIVE_STATUSES
from travel_crm.models.follow_up import FollowUp
from travel_crm.models.lead import Lead
from travel_crm.repositories.base import BaseRepository
from travel_crm.schemas.common import FollowUpType


class LeadRepository(BaseRepository):
    """Encapsulates every SQL query that touches the ``leads`` table."""

    async def get_by_id(self, lead_id: UUID) -> Optional[Lead]:
        """Return a single lead by primary key, or ``None``."""
        result = await self._db.execute(select(Lead).where(Lead.id == lead_id))
        return result.scalar_one_or_none()

    async def create(self, **kwargs: Any) -> Lead:
        """Insert a new lead and return the model instance."""
        lead = Lead(**kwargs)
        self._db.add(lead)
        return lead

    async def update_status(self, lead: Lead, new_status: str) -> None:
        """Update the status column on an existing lead instance."""
        lead.status = new_status

    async def increment_call_count(self, lead_id: UUID) -> int:
        """Add one to ``call_count`` in the database and return the new value."""
        result = await self._db.execute(
            update(Lead)
            .where(Lead.id == lead_id)
            .values(call_count=Lead.call_count + 1)
            .returning(Lead.call_count)
            .execution_options(synchronize_session=False)
        )
        return result.scalar_one()

    async def list_leads(
        self,
        *,
        status: Optional[str] = None,
        assigned_to: Optional[UUID] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> List[Lead]:
        """Return leads newest first, optionally filtered by status and owner."""
        query = select(Lead)
        if status is not None:
            query = query.where(Lead.status == status)
        if assigned_to is not None:
            query = query.where(Lead.assigned_to == assigned_to)
        result = await self._db.execute(
            query.order_by(Lead.created_at.desc()).offset(skip).limit(limit)
        )
        return list(result.scalars().all())

    async def list_almost_confirmed(
        self, assigned_to: Optional[UUID] = None
    ) -> List[Lead]:
        """Return active leads whose most recent follow-up is ``almost_confirmed``.

        Almost-confirmed is not a lead status; it is a view over the
        follow-up history.
        """
        latest = (
            select(FollowUp.lead_id, FollowUp.action_type)
            .distinct(FollowUp.lead_id)
            .order_by(FollowUp.lead_id, FollowUp.created_at.desc())
            .subquery()
        )
        query = (
            select(Lead)
            .join(latest, latest.c.lead_id == Lead.id)
            .where(
                latest.c.action_type == FollowUpType.almost_confirmed.value,
                Lead.status.in_(ACTIVE_STATUSES),
            )
        )
        if assigned_to is not None:
            query = query.where(Lead.assigned_to == assigned_to)
        result = await self._db.execute(query.order_by(Lead.updated_at.desc()))
        return list(result.scalars().all())
