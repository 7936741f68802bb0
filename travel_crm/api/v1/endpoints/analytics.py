from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request

from travel_crm.core.rate_limit import WRITE_RATE_LIMIT, limiter
from travel_crm.repositories.target_repository import TargetRepository
from travel_crm.repositories.user_repository import UserRepository
from travel_crm.schemas.analytics import (
    AgentPerformance,
    DateRange,
    LeaderboardResponse,
    SourceStat,
)
from travel_crm.schemas.common import Actor
from travel_crm.schemas.target import TargetOut, TargetUpsert
from travel_crm.services.analytics import LeadAnalytics
from travel_crm.api.deps import (
    get_actor,
    get_analytics_service,
    get_target_repo,
    get_user_repo,
)

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get("/performance", response_model=AgentPerformance)
async def agent_performance(
    agent_id: Optional[UUID] = Query(None, description="Admins only; omit for team"),
    date_range: DateRange = Query(DateRange.all_time),
    start_date: Optional[datetime] = Query(None, description="For custom range"),
    end_date: Optional[datetime] = Query(None, description="For custom range"),
    actor: Actor = Depends(get_actor),
    service: LeadAnalytics = Depends(get_analytics_service),
) -> AgentPerformance:
    """Call, conversion and revenue totals for one agent or the team."""
    return await service.agent_performance(
        actor,
        agent_id,
        date_range,
        start_date=start_date,
        end_date=end_date,
    )


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def leaderboard(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=2000, le=2100),
    service: LeadAnalytics = Depends(get_analytics_service),
) -> LeaderboardResponse:
    """Monthly agent ranking with target progress (defaults to this month)."""
    return await service.leaderboard(month=month, year=year)


@router.get("/sources", response_model=List[SourceStat])
async def source_breakdown(
    date_range: DateRange = Query(DateRange.all_time),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    actor: Actor = Depends(get_actor),
    service: LeadAnalytics = Depends(get_analytics_service),
) -> List[SourceStat]:
    """Leads and conversions per lead source."""
    return await service.source_breakdown(
        actor, date_range, start_date=start_date, end_date=end_date
    )


@router.put("/targets", response_model=TargetOut)
@limiter.limit(WRITE_RATE_LIMIT)
async def set_target(
    request: Request,
    request_body: TargetUpsert,
    actor: Actor = Depends(get_actor),
    service: LeadAnalytics = Depends(get_analytics_service),
    user_repo: UserRepository = Depends(get_user_repo),
    target_repo: TargetRepository = Depends(get_target_repo),
) -> TargetOut:
    target = await service.set_target(actor, request_body, user_repo, target_repo)
    return TargetOut.model_validate(target)


@router.get("/targets", response_model=List[TargetOut])
async def list_targets(
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=2000, le=2100),
    service: LeadAnalytics = Depends(get_analytics_service),
    target_repo: TargetRepository = Depends(get_target_repo),
) -> List[TargetOut]:
    targets = await service.list_targets(target_repo, month, year)
    return [TargetOut.model_validate(t) for t in targets]
