import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from travel_crm.core.exceptions import StoreError, TravelCrmError

logger = logging.getLogger(__name__)


class BaseRepository:
    """Thin base class that holds the database session.

    Every concrete repository receives an ``AsyncSession`` at
    construction time so that multiple repositories can share the same
    unit-of-work within a single request.
    """

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def commit(self) -> None:
        """Commit the current transaction, rolling back on failure.

        Flush listeners raise domain errors from inside the commit; those
        are re-raised unchanged once the session has been rolled back.
        """
        try:
            await self._db.commit()
        except TravelCrmError as exc:
            logger.warning("Commit rejected, rolling back: %s", exc.detail)
            await self._db.rollback()
            raise
        except SQLAlchemyError as exc:
            logger.error("Commit failed, rolling back: %s", exc)
            await self._db.rollback()
            raise StoreError(
                f"Database rejected the write: {exc.__class__.__name__}"
            ) from exc
