from decimal import Decimal
from typing import List
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert

from travel_crm.models.target import Target
from travel_crm.repositories.base import BaseRepository


class TargetRepository(BaseRepository):
    """Queries against the ``targets`` table."""

    async def upsert(
        self,
        *,
        user_id: UUID,
        month: int,
        year: int,
        target_leads: int,
        target_conversions: int,
        target_revenue: Decimal,
    ) -> Target:
        """Insert or replace the target for one agent and month.

        Uses ``ON CONFLICT`` on ``(user_id, month, year)``.
        """
        values = {
            "target_leads": target_leads,
            "target_conversions": target_conversions,
            "target_revenue": target_revenue,
        }
        stmt = (
            insert(Target)
            .values(user_id=user_id, month=month, year=year, **values)
            .on_conflict_do_update(
                constraint="uq_target_user_period",
                set_={**values, "updated_at": func.now()},
            )
            .returning(Target)
        )
        result = await self._db.execute(stmt)
        return result.scalar_one()

    async def list_for_period(self, month: int, year: int) -> List[Target]:
        result = await self._db.execute(
            select(Target).where(Target.month == month, Target.year == year)
        )
        return list(result.scalars().all())
