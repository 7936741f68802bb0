"""Lead-specific Pydantic schemas (intake, reassignment, calls, responses)."""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing_extensions import Self

from travel_crm.schemas.common import (
    TRAVEL_MONTH_PATTERN,
    LeadSource,
    LeadStatus,
    LeadType,
    SuccessResponse,
)


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class LeadCreate(BaseModel):
    """Lead intake form.

    Admins either name the agent (``assigned_to``) or ask for
    round-robin assignment (``auto_assign``).  Sales agents creating
    their own lead leave both unset.
    """

    client_name: str = Field(..., min_length=1, max_length=200)
    country_code: str = Field("+91", pattern=r"^\+\d{1,4}$")
    contact_number: str = Field(..., pattern=r"^\d{6,15}$")
    place: str = Field(..., min_length=1, max_length=120)
    no_of_pax: int = Field(..., gt=0)
    expected_budget: Decimal = Field(Decimal("0"), ge=0)
    travel_date: Optional[date] = None
    travel_month: Optional[str] = Field(None, pattern=TRAVEL_MONTH_PATTERN)
    lead_source: LeadSource = LeadSource.OTHER
    lead_type: LeadType = LeadType.normal
    remark: Optional[str] = None
    assigned_to: Optional[UUID] = None
    auto_assign: bool = False

    @model_validator(mode="after")
    def validate_travel_window(self) -> Self:
        """Exactly one of ``travel_date`` and ``travel_month`` is required."""
        if (self.travel_date is None) == (self.travel_month is None):
            raise ValueError(
                "Provide exactly one of travel_date (exact) or travel_month (YYYY-MM)"
            )
        return self

    @model_validator(mode="after")
    def validate_assignment_mode(self) -> Self:
        if self.assigned_to is not None and self.auto_assign:
            raise ValueError("assigned_to and auto_assign are mutually exclusive")
        return self


class LeadReassign(BaseModel):
    """Request body for moving a lead to another agent."""

    new_agent_id: UUID
    reopen: bool = Field(
        False,
        description="Move a no_response lead back to allocated while reassigning.",
    )


class CallLogCreate(BaseModel):
    call_start_time: datetime
    call_end_time: datetime

    @model_validator(mode="after")
    def validate_call_window(self) -> Self:
        if self.call_end_time < self.call_start_time:
            raise ValueError("call_end_time must not be before call_start_time")
        return self


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class LeadOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    client_name: str
    country_code: str
    contact_number: str
    place: str
    no_of_pax: int
    expected_budget: Decimal
    travel_date: Optional[date] = None
    travel_month: Optional[str] = None
    lead_source: str
    lead_type: str
    status: LeadStatus
    call_count: int
    remark: Optional[str] = None
    feedback_requested_at: Optional[datetime] = None
    assigned_to: Optional[UUID] = None
    assigned_by: Optional[UUID] = None
    created_at: Optional[datetime] = None


class LeadCreateResponse(SuccessResponse):
    lead_id: UUID
    assigned_to: UUID
    status: LeadStatus


class LeadStatusResponse(SuccessResponse):
    """Returned by operations that move a lead between statuses."""

    lead_id: UUID
    status: LeadStatus
    assigned_to: Optional[UUID] = None


class CallLogResponse(SuccessResponse):
    call_log_id: UUID
    lead_id: UUID
    call_duration: int
    call_count: int


class FeedbackRequestResponse(SuccessResponse):
    lead_id: UUID
    feedback_requested_at: datetime
