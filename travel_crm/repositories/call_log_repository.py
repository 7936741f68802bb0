from typing import Any

from travel_crm.models.call_log import CallLog
from travel_crm.repositories.base import BaseRepository


class CallLogRepository(BaseRepository):
    """Queries against the ``call_logs`` table."""

    async def create(self, **kwargs: Any) -> CallLog:
        call_log = CallLog(**kwargs)
        self._db.add(call_log)
        return call_log
