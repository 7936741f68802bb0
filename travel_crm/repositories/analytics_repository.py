from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import func, select, text

from travel_crm.models.call_log import CallLog
from travel_crm.models.confirmation import Confirmation
from travel_crm.models.lead import Lead
from travel_crm.repositories.base import BaseRepository


class AnalyticsRepository(BaseRepository):
    """Encapsulates every analytics SQL query.

    All methods are read-only and return raw numbers; rates and
    rankings are derived in :mod:`travel_crm.services.analytics`.
    """

    @staticmethod
    def _window(column, since: Optional[datetime], until: Optional[datetime]):
        clauses = []
        if since is not None:
            clauses.append(column >= since)
        if until is not None:
            clauses.append(column < until)
        return clauses

    async def agent_totals(
        self,
        *,
        agent_id: Optional[UUID] = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
        today_start: datetime,
    ) -> Dict[str, Any]:
        """Return call, conversion, lead and revenue totals.

        ``today_*`` figures count rows at or after *today_start*; the
        others honour the *since*/*until* window.  Without *agent_id*
        the figures cover the whole team.
        """
        calls = select(
            func.count(CallLog.id).label("total_calls"),
            func.count(CallLog.id)
            .filter(CallLog.call_start_time >= today_start)
            .label("today_calls"),
            func.coalesce(func.sum(CallLog.call_duration), 0).label(
                "total_call_duration"
            ),
        ).where(*self._window(CallLog.call_start_time, since, until))
        if agent_id is not None:
            calls = calls.where(CallLog.sales_person_id == agent_id)

        conversions = select(
            func.count(Confirmation.id).label("total_conversions"),
            func.count(Confirmation.id)
            .filter(Confirmation.created_at >= today_start)
            .label("today_conversions"),
            func.coalesce(func.sum(Confirmation.total_amount), 0).label(
                "total_revenue"
            ),
        ).where(*self._window(Confirmation.created_at, since, until))
        if agent_id is not None:
            conversions = conversions.where(Confirmation.confirmed_by == agent_id)

        leads = select(func.count(Lead.id).label("total_leads")).where(
            *self._window(Lead.created_at, since, until)
        )
        if agent_id is not None:
            leads = leads.where(Lead.assigned_to == agent_id)

        totals: Dict[str, Any] = {}
        for query in (calls, conversions, leads):
            result = await self._db.execute(query)
            totals.update(dict(result.mappings().one()))
        return totals

    _SQL_LEADERBOARD = """
        WITH lead_counts AS (
            SELECT assigned_to AS agent_id, COUNT(*) AS leads
            FROM leads
            WHERE (CAST(:since AS TIMESTAMPTZ) IS NULL
                   OR created_at >= CAST(:since AS TIMESTAMPTZ))
              AND (CAST(:until AS TIMESTAMPTZ) IS NULL
                   OR created_at < CAST(:until AS TIMESTAMPTZ))
            GROUP BY assigned_to
        ),
        conversion_totals AS (
            SELECT
                confirmed_by AS agent_id,
                COUNT(*) AS conversions,
                COALESCE(SUM(total_amount), 0) AS revenue
            FROM confirmations
            WHERE (CAST(:since AS TIMESTAMPTZ) IS NULL
                   OR created_at >= CAST(:since AS TIMESTAMPTZ))
              AND (CAST(:until AS TIMESTAMPTZ) IS NULL
                   OR created_at < CAST(:until AS TIMESTAMPTZ))
            GROUP BY confirmed_by
        )
        SELECT
            u.id AS agent_id,
            u.full_name,
            COALESCE(lc.leads, 0) AS leads,
            COALESCE(ct.conversions, 0) AS conversions,
            COALESCE(ct.revenue, 0) AS revenue,
            t.target_leads,
            t.target_conversions,
            t.target_revenue
        FROM users u
        LEFT JOIN lead_counts lc ON lc.agent_id = u.id
        LEFT JOIN conversion_totals ct ON ct.agent_id = u.id
        LEFT JOIN targets t
            ON t.user_id = u.id AND t.month = :month AND t.year = :year
        WHERE u.role = 'sales'
    """

    async def leaderboard_rows(
        self,
        *,
        month: int,
        year: int,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """Return one row per sales agent with totals and that month's target."""
        result = await self._db.execute(
            text(self._SQL_LEADERBOARD),
            {"since": since, "until": until, "month": month, "year": year},
        )
        return [dict(r) for r in result.mappings()]

    _SQL_SOURCE_BREAKDOWN = """
        SELECT
            lead_source,
            COUNT(*) AS leads,
            COUNT(*) FILTER (
                WHERE status IN ('confirmed', 'allocated_to_operations')
            ) AS conversions
        FROM leads
        WHERE (CAST(:agent_id AS UUID) IS NULL
               OR assigned_to = CAST(:agent_id AS UUID))
          AND (CAST(:since AS TIMESTAMPTZ) IS NULL
               OR created_at >= CAST(:since AS TIMESTAMPTZ))
          AND (CAST(:until AS TIMESTAMPTZ) IS NULL
               OR created_at < CAST(:until AS TIMESTAMPTZ))
        GROUP BY lead_source
        ORDER BY leads DESC, lead_source
    """

    async def source_breakdown(
        self,
        *,
        agent_id: Optional[UUID] = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        result = await self._db.execute(
            text(self._SQL_SOURCE_BREAKDOWN),
            {"agent_id": agent_id, "since": since, "until": until},
        )
        return [dict(r) for r in result.mappings()]
