from datetime import date
from typing import Any, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import Row, select

from travel_crm.core.constants import ACTIVE_STATUSES
from travel_crm.models.follow_up import FollowUp
from travel_crm.models.lead import Lead
from travel_crm.repositories.base import BaseRepository


class FollowUpRepository(BaseRepository):
    """Queries against the append-only ``follow_ups`` table.

    Rows are never updated or deleted once written.
    """

    async def create(self, **kwargs: Any) -> FollowUp:
        """Insert a new follow-up row."""
        follow_up = FollowUp(**kwargs)
        self._db.add(follow_up)
        return follow_up

    async def list_for_lead(self, lead_id: UUID) -> List[FollowUp]:
        """Return the full history of a lead, oldest first."""
        result = await self._db.execute(
            select(FollowUp)
            .where(FollowUp.lead_id == lead_id)
            .order_by(FollowUp.created_at.asc())
        )
        return list(result.scalars().all())

    async def list_due(
        self,
        *,
        assigned_to: Optional[UUID] = None,
        on_date: Optional[date] = None,
    ) -> Sequence[Row]:
        """Return ``(FollowUp, Lead)`` pairs for scheduled next follow-ups.

        Only the latest follow-up of each still-active lead counts; an
        older scheduled date is superseded by whatever the agent recorded
        afterwards.  With *on_date* only that day's follow-ups are
        returned, otherwise every scheduled one.
        """
        latest = (
            select(FollowUp.id)
            .distinct(FollowUp.lead_id)
            .order_by(FollowUp.lead_id, FollowUp.created_at.desc())
            .subquery()
        )
        query = (
            select(FollowUp, Lead)
            .join(latest, latest.c.id == FollowUp.id)
            .join(Lead, Lead.id == FollowUp.lead_id)
            .where(
                FollowUp.next_follow_up_date.is_not(None),
                Lead.status.in_(ACTIVE_STATUSES),
            )
        )
        if assigned_to is not None:
            query = query.where(Lead.assigned_to == assigned_to)
        if on_date is not None:
            query = query.where(FollowUp.next_follow_up_date == on_date)
        result = await self._db.execute(
            query.order_by(
                FollowUp.next_follow_up_date.asc(),
                FollowUp.next_follow_up_time.asc(),
            )
        )
        return result.all()
