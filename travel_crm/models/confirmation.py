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
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from travel_crm.core.constants import PAYMENT_MODE_CHECK_CLAUSE
from travel_crm.models.base import Base


class Confirmation(Base):
    """Booking and payment record written when a lead converts.

    Used by analytics for conversion counts and revenue (sum of
    ``total_amount``).  It sits alongside the follow-up history rather
    than replacing it.
    """

    __tablename__ = "confirmations"
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
    confirmed_by = Column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL")
    )
    itinerary_id = Column(
        UUID(as_uuid=True), ForeignKey("itineraries.id", ondelete="SET NULL")
    )
    total_amount = Column(Numeric(15, 2), nullable=False)
    advance_amount = Column(Numeric(15, 2), nullable=False)
    transaction_id = Column(String(100), nullable=False)
    payment_mode = Column(String(20))
    travel_date = Column(Date, nullable=False)
    remark = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    lead = relationship("Lead", back_populates="confirmations")

    __table_args__ = (
        Index("idx_confirmations_confirmed_by_created", "confirmed_by", "created_at"),
        CheckConstraint(
            "advance_amount >= 0 AND advance_amount <= total_amount",
            name="ck_confirmation_amounts",
        ),
        CheckConstraint(
            f"payment_mode IS NULL OR {PAYMENT_MODE_CHECK_CLAUSE}",
            name="ck_confirmation_payment_mode",
        ),
    )
