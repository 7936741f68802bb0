import uuid

from sqlalchemy import (
    Column,
    Date,
    String,
    Numeric,
    Integer,
    DateTime,
    Text,
    CheckConstraint,
    ForeignKey,
    Index,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sqlalchemy import text

from travel_crm.core.constants import (
    LEAD_SOURCE_CHECK_CLAUSE,
    LEAD_STATUS_CHECK_CLAUSE,
    LEAD_TYPE_CHECK_CLAUSE,
)
from travel_crm.models.base import Base


class Lead(Base):
    """A prospective traveller's inquiry moving through the sales pipeline.

    Exactly one of ``travel_date`` (exact) and ``travel_month``
    (approximate, ``YYYY-MM``) is set.  Confirmation replaces the month
    with the booked date.  Status follows the transition table in
    :mod:`travel_crm.services.lead_lifecycle`; the CHECK constraints here
    only guard the value domains.
    """

    __tablename__ = "leads"
    id = Column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=func.gen_random_uuid(),
    )
    client_name = Column(String(200), nullable=False)
    country_code = Column(String(6), nullable=False, server_default="+91")
    contact_number = Column(String(20), nullable=False)
    place = Column(String(120), nullable=False)
    no_of_pax = Column(Integer, nullable=False)
    expected_budget = Column(Numeric(15, 2), nullable=False, server_default="0")
    travel_date = Column(Date)
    travel_month = Column(String(7))
    lead_source = Column(String(30), nullable=False, server_default="Other")
    lead_type = Column(String(20), nullable=False, server_default="normal")
    status = Column(String(40), nullable=False, server_default="allocated")
    call_count = Column(Integer, nullable=False, server_default=text("0"))
    remark = Column(Text)
    feedback_requested_at = Column(DateTime(timezone=True))
    assigned_to = Column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL")
    )
    assigned_by = Column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL")
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Admin deletion removes history through ON DELETE CASCADE, never the ORM
    follow_ups = relationship(
        "FollowUp",
        back_populates="lead",
        cascade="save-update, merge",
        passive_deletes="all",
    )
    confirmations = relationship(
        "Confirmation", back_populates="lead", cascade="all, delete-orphan"
    )
    reminders = relationship(
        "Reminder", back_populates="lead", cascade="all, delete-orphan"
    )
    call_logs = relationship(
        "CallLog", back_populates="lead", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("idx_leads_assigned_status", "assigned_to", "status"),
        Index("idx_leads_created_at", "created_at"),
        CheckConstraint("no_of_pax > 0", name="ck_lead_pax_positive"),
        CheckConstraint("expected_budget >= 0", name="ck_lead_budget_nonneg"),
        CheckConstraint("call_count >= 0", name="ck_lead_call_count_nonneg"),
        CheckConstraint(
            "(travel_date IS NULL) <> (travel_month IS NULL)",
            name="ck_lead_travel_date_xor_month",
        ),
        CheckConstraint(LEAD_STATUS_CHECK_CLAUSE, name="ck_lead_status"),
        CheckConstraint(LEAD_TYPE_CHECK_CLAUSE, name="ck_lead_type"),
        CheckConstraint(LEAD_SOURCE_CHECK_CLAUSE, name="ck_lead_source"),
    )
