from datetime import date, time
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator
from typing_extensions import Self

from travel_crm.schemas.common import PaymentMode


class ConfirmationCreate(BaseModel):
    """Request body for the dedicated confirm-lead operation."""

    itinerary_id: UUID
    travel_date: date
    total_amount: Decimal = Field(..., gt=0)
    advance_amount: Decimal = Field(..., ge=0)
    payment_mode: PaymentMode
    transaction_id: str = Field(..., min_length=1, max_length=100)
    remark: Optional[str] = None
    reminder_time: Optional[time] = None

    @field_validator("transaction_id")
    @classmethod
    def transaction_id_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("transaction_id must not be empty")
        return value

    @model_validator(mode="after")
    def validate_amounts(self) -> Self:
        if self.advance_amount > self.total_amount:
            raise ValueError("advance_amount cannot exceed total_amount")
        return self
