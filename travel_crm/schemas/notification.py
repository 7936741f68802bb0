from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from travel_crm.schemas.common import NotificationType, SuccessResponse


class NotificationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    type: NotificationType
    title: str
    message: str
    lead_id: Optional[UUID] = None
    is_read: bool
    created_at: Optional[datetime] = None


class ChatMessageCreate(BaseModel):
    """Admin-to-agent message delivered as a ``message`` notification."""

    recipient_id: UUID
    message: str = Field(..., min_length=1, max_length=2000)


class MarkReadResponse(SuccessResponse):
    updated: int
