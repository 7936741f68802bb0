import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

import httpx

from travel_crm.core.config import settings
from travel_crm.core.exceptions import ExternalServiceError
from travel_crm.schemas.common import PushType

logger = logging.getLogger(__name__)


class PushClient:
    """Sends or schedules device push notifications.

    The payload always carries ``{"type", "leadId"}`` so the mobile
    client can deep-link back into the lead.  With no service URL
    configured, requests are logged and skipped.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._base_url: str = (
            base_url if base_url is not None else settings.PUSH_SERVICE_URL
        )
        self._timeout: float = (
            timeout if timeout is not None else settings.EXTERNAL_SERVICE_TIMEOUT
        )

    @property
    def is_enabled(self) -> bool:
        return bool(self._base_url)

    async def send(
        self,
        user_id: UUID,
        push_type: PushType,
        lead_id: UUID,
        title: str,
        body: str,
        send_at: Optional[datetime] = None,
    ) -> None:
        """Deliver now, or at *send_at* when given.

        Raises :class:`ExternalServiceError` when the service rejects or
        cannot be reached.
        """
        if not self.is_enabled:
            logger.info(
                "Push delivery disabled; skipping %s for lead %s",
                push_type.value,
                lead_id,
            )
            return

        payload = {
            "userId": str(user_id),
            "title": title,
            "body": body,
            "data": {"type": push_type.value, "leadId": str(lead_id)},
            "sendAt": send_at.isoformat() if send_at else None,
        }
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(
                    f"{self._base_url.rstrip('/')}/notifications", json=payload
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise ExternalServiceError(
                f"Push service returned {exc.response.status_code}"
            )
        except httpx.HTTPError as exc:
            raise ExternalServiceError(f"Push service unavailable: {exc}")
