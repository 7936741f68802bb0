"""Read-only sales analytics.

The arithmetic lives in small pure functions so it can be checked
without a database; :class:`LeadAnalytics` only wires them to the
repository and the cache.
"""

import logging
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple
from uuid import UUID

from travel_crm.core.cache import CacheService
from travel_crm.core.config import settings
from travel_crm.core.exceptions import InvalidAssigneeError, LeadAccessDeniedError
from travel_crm.core.scheduling import local_datetime, start_of_today, today_local
from travel_crm.models.target import Target
from travel_crm.repositories.analytics_repository import AnalyticsRepository
from travel_crm.repositories.target_repository import TargetRepository
from travel_crm.repositories.user_repository import UserRepository
from travel_crm.schemas.analytics import (
    AgentPerformance,
    DateRange,
    LeaderboardEntry,
    LeaderboardResponse,
    SourceStat,
    TargetProgress,
)
from travel_crm.schemas.common import Actor
from travel_crm.schemas.target import TargetUpsert

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


def conversion_rate(conversions: int, leads: int) -> float:
    """Percentage of leads converted; 0 when there are no leads."""
    if not leads:
        return 0.0
    return round(conversions * 100.0 / leads, 2)


def average_call_duration(total_duration: int, calls: int) -> float:
    """Mean call length in seconds; 0 when there are no calls."""
    if not calls:
        return 0.0
    return round(total_duration / calls, 2)


def _percent(actual, goal) -> float:
    if not goal:
        return 0.0
    return round(float(actual) * 100.0 / float(goal), 2)


def rank_leaderboard(rows: Iterable[Dict[str, Any]]) -> List[LeaderboardEntry]:
    """Order agents by conversions, then revenue, both descending."""
    ordered = sorted(
        rows,
        key=lambda r: (-int(r["conversions"]), -Decimal(r["revenue"]), r["full_name"]),
    )
    entries: List[LeaderboardEntry] = []
    for position, row in enumerate(ordered, start=1):
        target = None
        if row.get("target_leads") is not None:
            target = TargetProgress(
                target_leads=row["target_leads"],
                target_conversions=row["target_conversions"],
                target_revenue=row["target_revenue"],
                leads_pct=_percent(row["leads"], row["target_leads"]),
                conversions_pct=_percent(row["conversions"], row["target_conversions"]),
                revenue_pct=_percent(row["revenue"], row["target_revenue"]),
            )
        entries.append(
            LeaderboardEntry(
                rank=position,
                agent_id=row["agent_id"],
                full_name=row["full_name"],
                leads=row["leads"],
                conversions=row["conversions"],
                revenue=row["revenue"],
                conversion_rate=conversion_rate(row["conversions"], row["leads"]),
                target=target,
            )
        )
    return entries


def month_bounds(month: int, year: int) -> Tuple[datetime, datetime]:
    """Start of *month* and start of the following month, business timezone."""
    start = local_datetime(date(year, month, 1), time.min)
    next_year, next_month = (year + 1, 1) if month == 12 else (year, month + 1)
    end = local_datetime(date(next_year, next_month, 1), time.min)
    return start, end


def resolve_window(
    date_range: Optional[DateRange],
    *,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """Return the ``(since, until)`` bounds for a named range."""
    if date_range is None or date_range == DateRange.all_time:
        return None, None
    if date_range == DateRange.custom:
        return start_date, end_date
    today = start_of_today()
    if date_range == DateRange.today:
        return today, None
    if date_range == DateRange.this_month:
        current = today_local()
        return month_bounds(current.month, current.year)
    mapping = {
        DateRange.seven_days: timedelta(days=7),
        DateRange.thirty_days: timedelta(days=30),
        DateRange.ninety_days: timedelta(days=90),
    }
    return today - mapping[date_range], None


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class LeadAnalytics:
    def __init__(
        self, repo: AnalyticsRepository, cache: Optional[CacheService] = None
    ) -> None:
        self._repo = repo
        self._cache: CacheService = cache or CacheService()

    async def agent_performance(
        self,
        actor: Actor,
        agent_id: Optional[UUID] = None,
        date_range: Optional[DateRange] = None,
        *,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> AgentPerformance:
        """Totals for one agent, or the team when an admin gives no agent.

        Sales agents always get their own figures.
        """
        if not actor.is_admin:
            agent_id = actor.user_id
        since, until = resolve_window(
            date_range, start_date=start_date, end_date=end_date
        )
        totals = await self._repo.agent_totals(
            agent_id=agent_id,
            since=since,
            until=until,
            today_start=start_of_today(),
        )
        return AgentPerformance(
            agent_id=agent_id,
            total_calls=totals["total_calls"],
            today_calls=totals["today_calls"],
            total_conversions=totals["total_conversions"],
            today_conversions=totals["today_conversions"],
            total_leads=totals["total_leads"],
            conversion_rate=conversion_rate(
                totals["total_conversions"], totals["total_leads"]
            ),
            total_revenue=totals["total_revenue"],
            average_call_duration=average_call_duration(
                totals["total_call_duration"], totals["total_calls"]
            ),
        )

    async def leaderboard(
        self, month: Optional[int] = None, year: Optional[int] = None
    ) -> LeaderboardResponse:
        """Rank agents for one calendar month against that month's targets.

        Results are cached in Redis for ``REDIS_CACHE_TTL`` seconds.
        """
        current = today_local()
        month = month or current.month
        year = year or current.year

        cache_key = self._leaderboard_key(month, year)
        cached = await self._cache.get_json(cache_key)
        if cached is not None:
            return LeaderboardResponse.model_validate(cached)

        since, until = month_bounds(month, year)
        rows = await self._repo.leaderboard_rows(
            month=month, year=year, since=since, until=until
        )
        response = LeaderboardResponse(
            month=month, year=year, entries=rank_leaderboard(rows)
        )
        await self._cache.set_json(
            cache_key, response.model_dump(mode="json"), ttl=settings.REDIS_CACHE_TTL
        )
        return response

    async def source_breakdown(
        self,
        actor: Actor,
        date_range: Optional[DateRange] = None,
        *,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[SourceStat]:
        since, until = resolve_window(
            date_range, start_date=start_date, end_date=end_date
        )
        rows = await self._repo.source_breakdown(
            agent_id=None if actor.is_admin else actor.user_id,
            since=since,
            until=until,
        )
        return [
            SourceStat(
                lead_source=row["lead_source"],
                leads=row["leads"],
                conversions=row["conversions"],
                conversion_rate=conversion_rate(row["conversions"], row["leads"]),
            )
            for row in rows
        ]

    async def set_target(
        self,
        actor: Actor,
        data: TargetUpsert,
        user_repo: UserRepository,
        target_repo: TargetRepository,
    ) -> Target:
        """Create or replace an agent's monthly target (admins only)."""
        if not actor.is_admin:
            raise LeadAccessDeniedError("Only admins can set targets")
        if await user_repo.get_active_sales_agent(data.user_id) is None:
            raise InvalidAssigneeError(
                f"User {data.user_id} is not an active sales agent"
            )
        target = await target_repo.upsert(**data.model_dump())
        await target_repo.commit()
        await self._cache.delete(self._leaderboard_key(data.month, data.year))
        logger.info(
            "Target for %s set for %02d/%d", data.user_id, data.month, data.year
        )
        return target

    async def list_targets(
        self, target_repo: TargetRepository, month: int, year: int
    ) -> List[Target]:
        return await target_repo.list_for_period(month, year)

    @staticmethod
    def _leaderboard_key(month: int, year: int) -> str:
        return f"leaderboard:{year}:{month:02d}"
