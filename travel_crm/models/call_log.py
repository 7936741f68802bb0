import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from travel_crm.models.base import Base


class CallLog(Base):
    __tablename__ = "call_logs"
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
    call_start_time = Column(DateTime(timezone=True), nullable=False)
    call_end_time = Column(DateTime(timezone=True), nullable=False)
    call_duration = Column(Integer, nullable=False)  # seconds

    lead = relationship("Lead", back_populates="call_logs")

    __table_args__ = (
        Index("idx_call_logs_agent_start", "sales_person_id", "call_start_time"),
        CheckConstraint("call_duration >= 0", name="ck_call_duration_nonneg"),
        CheckConstraint(
            "call_end_time >= call_start_time", name="ck_call_end_after_start"
        ),
    )
