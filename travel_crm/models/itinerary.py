import uuid

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from travel_crm.core.constants import TRANSPORT_MODE_CHECK_CLAUSE
from travel_crm.models.base import Base


class Itinerary(Base):
    """A priced package variant for one destination and transport mode.

    Referenced by follow-ups and confirmations; the lead workflow never
    modifies it.  ``cost_inr`` of zero means "derive from USD at the
    current rate".
    """

    __tablename__ = "itineraries"
    id = Column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=func.gen_random_uuid(),
    )
    name = Column(String(200), nullable=False)
    destination = Column(String(120), nullable=False)
    transport_mode = Column(String(20), nullable=False)
    days = Column(Integer, nullable=False, server_default="1")
    cost_usd = Column(Numeric(12, 2), nullable=False, server_default="0")
    cost_inr = Column(Numeric(15, 2), nullable=False, server_default="0")
    details = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint(TRANSPORT_MODE_CHECK_CLAUSE, name="ck_itinerary_transport"),
        CheckConstraint("days > 0", name="ck_itinerary_days"),
        CheckConstraint(
            "cost_usd >= 0 AND cost_inr >= 0", name="ck_itinerary_costs_nonneg"
        ),
    )
