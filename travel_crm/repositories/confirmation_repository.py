from typing import Any

from travel_crm.models.confirmation import Confirmation
from travel_crm.repositories.base import BaseRepository


class ConfirmationRepository(BaseRepository):
    """Queries against the ``confirmations`` table.

    A lead may collect several rows; the newest one represents the booking.
    """

    async def create(self, **kwargs: Any) -> Confirmation:
        confirmation = Confirmation(**kwargs)
        self._db.add(confirmation)
        return confirmation
