from typing import Optional
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.orm import aliased

from travel_crm.models.user import User
from travel_crm.repositories.base import BaseRepository
from travel_crm.schemas.common import UserRole, UserStatus


class UserRepository(BaseRepository):
    """Encapsulates every SQL query that touches the ``users`` table."""

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Return a single user by primary key, or ``None``."""
        result = await self._db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_active_sales_agent(self, user_id: UUID) -> Optional[User]:
        """Return the user only if it is an active sales agent."""
        result = await self._db.execute(
            select(User).where(
                User.id == user_id,
                User.role == UserRole.sales.value,
                User.status == UserStatus.active.value,
            )
        )
        return result.scalar_one_or_none()

    async def claim_next_agent(self) -> Optional[UUID]:
        """Pick the least-recently-assigned active agent and stamp it.

        Selection and the ``last_assigned_at`` update run as one
        ``UPDATE ... RETURNING`` statement.  ``FOR UPDATE SKIP LOCKED``
        on the inner select keeps two concurrent claims from landing on
        the same agent.  Agents that were never assigned come first;
        ties fall back to ``id`` order.

        Returns ``None`` when there is no active sales agent.
        """
        # Aliased so the subquery is not correlated to the outer UPDATE
        pool = aliased(User)
        candidate = (
            select(pool.id)
            .where(
                pool.role == UserRole.sales.value,
                pool.status == UserStatus.active.value,
            )
            .order_by(pool.last_assigned_at.asc().nulls_first(), pool.id.asc())
            .limit(1)
            .with_for_update(skip_locked=True)
            .scalar_subquery()
        )
        result = await self._db.execute(
            update(User)
            .where(User.id == candidate)
            .values(last_assigned_at=func.clock_timestamp())
            .returning(User.id)
            .execution_options(synchronize_session=False)
        )
        return result.scalar_one_or_none()

    async def get_first_admin(self) -> Optional[User]:
        """Return the earliest-created active admin.

        Ordered by ``created_at`` then ``id`` so the pick is stable when
        several admins exist.
        """
        result = await self._db.execute(
            select(User)
            .where(
                User.role == UserRole.admin.value,
                User.status == UserStatus.active.value,
            )
            .order_by(User.created_at.asc(), User.id.asc())
            .limit(1)
        )
        return result.scalar_one_or_none()
