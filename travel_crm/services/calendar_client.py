import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

import httpx

from travel_crm.core.config import settings
from travel_crm.core.exceptions import CalendarServiceError

logger = logging.getLogger(__name__)


class CalendarClient:
    """Creates reminder events in the external calendar service.

    Any failure, including an unconfigured service URL, raises
    :class:`CalendarServiceError`; callers decide whether that blocks
    the operation.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._base_url: str = (
            base_url if base_url is not None else settings.CALENDAR_SERVICE_URL
        )
        self._timeout: float = (
            timeout if timeout is not None else settings.EXTERNAL_SERVICE_TIMEOUT
        )

    async def create_reminder(
        self,
        title: str,
        description: str,
        start: datetime,
        lead_id: UUID,
        lead_name: str,
    ) -> str:
        """Create a calendar event and return its id."""
        if not self._base_url:
            raise CalendarServiceError("Calendar service is not configured")

        payload = {
            "title": title,
            "description": description,
            "startDate": start.isoformat(),
            "leadId": str(lead_id),
            "leadName": lead_name,
        }
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(
                    f"{self._base_url.rstrip('/')}/events", json=payload
                )
                response.raise_for_status()
                body = response.json()
        except httpx.TimeoutException:
            logger.error("Calendar service timed out: %s", self._base_url)
            raise CalendarServiceError("Calendar service timed out")
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Calendar service returned %s: %s",
                exc.response.status_code,
                self._base_url,
            )
            raise CalendarServiceError(
                f"Calendar service returned {exc.response.status_code}"
            )
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Calendar service unreachable: %s (%s)", self._base_url, exc)
            raise CalendarServiceError("Calendar service unavailable")

        event_id = body.get("eventId") if isinstance(body, dict) else None
        if not event_id:
            raise CalendarServiceError("Calendar service returned no event id")
        return str(event_id)
