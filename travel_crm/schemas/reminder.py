from datetime import date, datetime, time
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from travel_crm.schemas.common import ReminderStatus


class ReminderCreate(BaseModel):
    """Manual reminder for an already confirmed lead."""

    travel_date: date
    reminder_time: Optional[time] = None


class ReminderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    lead_id: UUID
    sales_person_id: Optional[UUID] = None
    travel_date: date
    reminder_date: date
    reminder_time: time
    calendar_event_id: str
    status: ReminderStatus
    created_at: Optional[datetime] = None
