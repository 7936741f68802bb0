import uuid

from sqlalchemy import Column, String, DateTime, CheckConstraint, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from travel_crm.core.constants import USER_ROLE_CHECK_CLAUSE, USER_STATUS_CHECK_CLAUSE
from travel_crm.models.base import Base


class User(Base):
    """An admin or a sales agent.

    ``last_assigned_at`` drives the round-robin auto-assignment: the
    active sales agent with the oldest (or null) timestamp receives the
    next auto-assigned lead and is stamped with the current time.
    """

    __tablename__ = "users"
    id = Column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=func.gen_random_uuid(),
    )
    full_name = Column(String(200), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    phone = Column(String(20))
    role = Column(String(20), nullable=False, server_default="sales")
    status = Column(String(20), nullable=False, server_default="active")
    last_assigned_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    targets = relationship(
        "Target", back_populates="user", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint(USER_ROLE_CHECK_CLAUSE, name="ck_user_role"),
        CheckConstraint(USER_STATUS_CHECK_CLAUSE, name="ck_user_status"),
        Index(
            "idx_users_rotation",
            "role",
            "status",
            "last_assigned_at",
        ),
    )
