from decimal import Decimal
from enum import Enum
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from travel_crm.schemas.common import LeadSource


class DateRange(str, Enum):
    all_time = "all"
    today = "today"
    seven_days = "7d"
    thirty_days = "30d"
    ninety_days = "90d"
    this_month = "month"
    custom = "custom"


class AgentPerformance(BaseModel):
    """Call, conversion and revenue rollup for one agent or the whole team."""

    agent_id: Optional[UUID] = None
    total_calls: int = 0
    today_calls: int = 0
    total_conversions: int = 0
    today_conversions: int = 0
    total_leads: int = 0
    conversion_rate: float = Field(0.0, description="Percent of leads confirmed")
    total_revenue: Decimal = Decimal("0")
    average_call_duration: float = Field(0.0, description="Seconds per call")


class TargetProgress(BaseModel):
    target_leads: int
    target_conversions: int
    target_revenue: Decimal
    leads_pct: float
    conversions_pct: float
    revenue_pct: float


class LeaderboardEntry(BaseModel):
    rank: int
    agent_id: UUID
    full_name: str
    leads: int
    conversions: int
    revenue: Decimal
    conversion_rate: float
    target: Optional[TargetProgress] = None


class LeaderboardResponse(BaseModel):
    month: int
    year: int
    entries: List[LeaderboardEntry] = Field(default_factory=list)


class SourceStat(BaseModel):
    lead_source: LeadSource
    leads: int
    conversions: int
    conversion_rate: float
