import uuid

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    Time,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from travel_crm.core.constants import FOLLOW_UP_TYPE_CHECK_CLAUSE
from travel_crm.models.base import Base


class FollowUp(Base):
    """Append-only audit entry for one action taken on a lead.

    Rows are inserted once and never updated or deleted.  Financial
    columns are only populated for ``confirmed_advance_paid`` and
    ``due_amount`` is always ``total_amount - advance_amount``.
    """

    __tablename__ = "follow_ups"
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
    action_type = Column(String(40), nullable=False)
    remark = Column(Text, nullable=False)
    next_follow_up_date = Column(Date)
    next_follow_up_time = Column(Time)
    itinerary_id = Column(
        UUID(as_uuid=True), ForeignKey("itineraries.id", ondelete="SET NULL")
    )
    total_amount = Column(Numeric(15, 2))
    advance_amount = Column(Numeric(15, 2))
    due_amount = Column(Numeric(15, 2))
    transaction_id = Column(String(100))
    dead_reason = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    lead = relationship("Lead", back_populates="follow_ups")

    __table_args__ = (
        Index("idx_follow_ups_lead_created", "lead_id", "created_at"),
        Index(
            "idx_follow_ups_agent_next_date",
            "sales_person_id",
            "next_follow_up_date",
        ),
        CheckConstraint(FOLLOW_UP_TYPE_CHECK_CLAUSE, name="ck_follow_up_type"),
        CheckConstraint("length(trim(remark)) > 0", name="ck_follow_up_remark"),
        CheckConstraint(
            "due_amount IS NULL OR due_amount = total_amount - advance_amount",
            name="ck_follow_up_due_amount",
        ),
        CheckConstraint(
            "action_type <> 'dead' OR dead_reason IS NOT NULL",
            name="ck_follow_up_dead_reason",
        ),
    )
