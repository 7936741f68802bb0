from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from travel_crm.schemas.common import TransportMode


class ItineraryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    destination: str
    transport_mode: TransportMode
    days: int
    cost_usd: Decimal
    cost_inr: Decimal
    details: Optional[str] = None
    created_at: Optional[datetime] = None


class PricedItinerary(ItineraryOut):
    """Itinerary with the INR price an agent quotes to the client."""

    exchange_rate: Decimal
    quoted_inr: Decimal
