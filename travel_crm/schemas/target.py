from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class TargetUpsert(BaseModel):
    """Monthly goal for one sales agent; replaces any existing one."""

    user_id: UUID
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=2000, le=2100)
    target_leads: int = Field(0, ge=0)
    target_conversions: int = Field(0, ge=0)
    target_revenue: Decimal = Field(Decimal("0"), ge=0)


class TargetOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    month: int
    year: int
    target_leads: int
    target_conversions: int
    target_revenue: Decimal
