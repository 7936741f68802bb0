import uuid

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    String,
    Time,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from travel_crm.core.constants import (
    REMINDER_DATE_CHECK_CLAUSE,
    REMINDER_STATUS_CHECK_CLAUSE,
)
from travel_crm.models.base import Base


class Reminder(Base):
    """Pre-travel nudge for a confirmed lead, mirrored as a calendar event."""

    __tablename__ = "reminders"
    id = Column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=func.gen_random_uuid(),
    )
    lead_id = Column(
        UUID(as_uuid=True),
        ForeignKey("leads.id", ondelete="CASCADE"),
        nullable=False,
    )
    sales_person_id = Column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL")
    )
    travel_date = Column(Date, nullable=False)
    reminder_date = Column(Date, nullable=False)
    reminder_time = Column(Time, nullable=False)
    calendar_event_id = Column(String(255), nullable=False)
    status = Column(String(20), nullable=False, server_default="pending")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    lead = relationship("Lead", back_populates="reminders")

    __table_args__ = (
        Index("idx_reminders_agent_date", "sales_person_id", "reminder_date"),
        CheckConstraint(REMINDER_DATE_CHECK_CLAUSE, name="ck_reminder_seven_days"),
        CheckConstraint(REMINDER_STATUS_CHECK_CLAUSE, name="ck_reminder_status"),
    )
