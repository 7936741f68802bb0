from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy import select, update

from travel_crm.models.notification import Notification
from travel_crm.repositories.base import BaseRepository


class NotificationRepository(BaseRepository):
    """Queries against the ``notifications`` table.

    Rows are only ever inserted; ``is_read`` is the one mutable column.
    """

    async def create(self, **kwargs: Any) -> Notification:
        notification = Notification(**kwargs)
        self._db.add(notification)
        return notification

    async def list_for_user(
        self, user_id: UUID, *, unread_only: bool = False, limit: int = 50
    ) -> List[Notification]:
        query = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            query = query.where(Notification.is_read.is_(False))
        result = await self._db.execute(
            query.order_by(Notification.created_at.desc()).limit(limit)
        )
        return list(result.scalars().all())

    async def mark_read(
        self, user_id: UUID, notification_id: Optional[UUID] = None
    ) -> int:
        """Mark one (or, without *notification_id*, every) notification read.

        Returns the number of rows changed.
        """
        query = (
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
        if notification_id is not None:
            query = query.where(Notification.id == notification_id)
        result = await self._db.execute(query)
        return result.rowcount or 0
