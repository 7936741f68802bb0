import uuid

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from travel_crm.models.base import Base


class Target(Base):
    """Monthly sales goals for one agent (leads, conversions, revenue)."""

    __tablename__ = "targets"
    id = Column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=func.gen_random_uuid(),
    )
    user_id = Column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    target_leads = Column(Integer, nullable=False, server_default="0")
    target_conversions = Column(Integer, nullable=False, server_default="0")
    target_revenue = Column(Numeric(15, 2), nullable=False, server_default="0")
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    user = relationship("User", back_populates="targets")

    __table_args__ = (
        UniqueConstraint("user_id", "month", "year", name="uq_target_user_period"),
        CheckConstraint("month BETWEEN 1 AND 12", name="ck_target_month"),
        CheckConstraint(
            "target_leads >= 0 AND target_conversions >= 0 AND target_revenue >= 0",
            name="ck_target_nonneg",
        ),
    )
