from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select

from travel_crm.models.itinerary import Itinerary
from travel_crm.repositories.base import BaseRepository


class ItineraryRepository(BaseRepository):
    """Read-only queries against the ``itineraries`` table."""

    async def get_by_id(self, itinerary_id: UUID) -> Optional[Itinerary]:
        result = await self._db.execute(
            select(Itinerary).where(Itinerary.id == itinerary_id)
        )
        return result.scalar_one_or_none()

    async def list_itineraries(
        self, destination: Optional[str] = None
    ) -> List[Itinerary]:
        """Return itineraries, optionally for one destination (case-insensitive)."""
        query = select(Itinerary)
        if destination:
            query = query.where(
                func.lower(Itinerary.destination) == destination.lower()
            )
        result = await self._db.execute(
            query.order_by(Itinerary.destination.asc(), Itinerary.name.asc())
        )
        return list(result.scalars().all())
