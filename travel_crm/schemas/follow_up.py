"""Follow-up Pydantic schemas.

``FollowUpCreate`` enforces the per-action field requirements so that
an incomplete form is rejected before anything is written.
"""

from datetime import date, datetime, time
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)
from typing_extensions import Self

from travel_crm.schemas.common import (
    ACTIONS_REQUIRING_NEXT_FOLLOW_UP,
    AGENT_FOLLOW_UP_ACTIONS,
    FollowUpType,
    LeadStatus,
    PaymentMode,
    SuccessResponse,
)


class FollowUpCreate(BaseModel):
    """Request body for recording an agent action on a lead."""

    action_type: FollowUpType
    remark: str
    next_follow_up_date: Optional[date] = None
    next_follow_up_time: Optional[time] = None
    itinerary_id: Optional[UUID] = None

    # confirmed_advance_paid
    travel_date: Optional[date] = None
    total_amount: Optional[Decimal] = Field(None, ge=0)
    advance_amount: Optional[Decimal] = Field(None, ge=0)
    transaction_id: Optional[str] = None
    payment_mode: Optional[PaymentMode] = None
    reminder_time: Optional[time] = None

    # dead
    dead_reason: Optional[str] = None

    @field_validator("remark")
    @classmethod
    def remark_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("remark must not be empty")
        return value

    @field_validator("action_type")
    @classmethod
    def action_is_agent_recordable(cls, value: FollowUpType) -> FollowUpType:
        if value.value not in AGENT_FOLLOW_UP_ACTIONS:
            raise ValueError(
                f"{value.value} is recorded by its own operation, not as a follow-up"
            )
        return value

    @model_validator(mode="after")
    def validate_action_fields(self) -> Self:
        action = self.action_type.value

        if action in ACTIONS_REQUIRING_NEXT_FOLLOW_UP:
            if self.next_follow_up_date is None or self.next_follow_up_time is None:
                raise ValueError(
                    f"{action} requires next_follow_up_date and next_follow_up_time"
                )

        if self.action_type == FollowUpType.confirmed_advance_paid:
            missing = [
                name
                for name in (
                    "travel_date",
                    "total_amount",
                    "advance_amount",
                    "transaction_id",
                )
                if getattr(self, name) in (None, "")
            ]
            if missing:
                raise ValueError(
                    "confirmed_advance_paid requires " + ", ".join(missing)
                )
            if self.advance_amount > self.total_amount:
                raise ValueError("advance_amount cannot exceed total_amount")

        if self.action_type == FollowUpType.dead:
            if not self.dead_reason or not self.dead_reason.strip():
                raise ValueError("dead requires dead_reason")

        return self

    @computed_field  # type: ignore[prop-decorator]
    @property
    def due_amount(self) -> Optional[Decimal]:
        """Always derived, never entered: ``total_amount - advance_amount``."""
        if self.total_amount is None or self.advance_amount is None:
            return None
        return self.total_amount - self.advance_amount


class FollowUpOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    lead_id: UUID
    sales_person_id: Optional[UUID] = None
    action_type: FollowUpType
    remark: str
    next_follow_up_date: Optional[date] = None
    next_follow_up_time: Optional[time] = None
    itinerary_id: Optional[UUID] = None
    total_amount: Optional[Decimal] = None
    advance_amount: Optional[Decimal] = None
    due_amount: Optional[Decimal] = None
    transaction_id: Optional[str] = None
    dead_reason: Optional[str] = None
    created_at: Optional[datetime] = None


class FollowUpRecordResponse(SuccessResponse):
    """Outcome of a recorded follow-up.

    ``warnings`` lists side effects (calendar, push) that failed without
    undoing the recorded action.
    """

    follow_up_id: UUID
    lead_id: UUID
    status: LeadStatus
    due_amount: Optional[Decimal] = None
    reminder_id: Optional[UUID] = None
    warnings: List[str] = Field(default_factory=list)


class DueFollowUp(BaseModel):
    """A scheduled next follow-up shown on the agent's follow-up list."""

    follow_up_id: UUID
    lead_id: UUID
    client_name: str
    place: str
    no_of_pax: int
    next_follow_up_date: date
    next_follow_up_time: Optional[time] = None
    remark: str
