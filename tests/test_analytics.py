"""Analytics arithmetic, windows and leaderboard caching."""

import json
from datetime import datetime, timedelta
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from travel_crm.core.exceptions import InvalidAssigneeError, LeadAccessDeniedError
from travel_crm.core.scheduling import start_of_today
from travel_crm.schemas.analytics import DateRange
from travel_crm.schemas.target import TargetUpsert
from travel_crm.services.analytics import (
    LeadAnalytics,
    average_call_duration,
    conversion_rate,
    month_bounds,
    rank_leaderboard,
    resolve_window,
)

from conftest import make_user


def _row(name, leads, conversions, revenue, **extra):
    row = dict(
        agent_id=uuid4(),
        full_name=name,
        leads=leads,
        conversions=conversions,
        revenue=Decimal(revenue),
        target_leads=None,
        target_conversions=None,
        target_revenue=None,
    )
    row.update(extra)
    return row


class TestPureHelpers:
    def test_conversion_rate(self):
        assert conversion_rate(3, 12) == 25.0
        assert conversion_rate(1, 3) == 33.33

    def test_conversion_rate_without_leads(self):
        assert conversion_rate(0, 0) == 0.0

    def test_average_call_duration(self):
        assert average_call_duration(600, 4) == 150.0
        assert average_call_duration(0, 0) == 0.0

    def test_leaderboard_orders_by_conversions_then_revenue(self):
        entries = rank_leaderboard(
            [
                _row("Ravi", 10, 2, "90000"),
                _row("Meera", 8, 3, "50000"),
                _row("Arjun", 12, 3, "120000"),
            ]
        )
        assert [e.full_name for e in entries] == ["Arjun", "Meera", "Ravi"]
        assert [e.rank for e in entries] == [1, 2, 3]
        assert entries[1].conversion_rate == 37.5

    def test_leaderboard_target_progress(self):
        (entry,) = rank_leaderboard(
            [
                _row(
                    "Meera",
                    5,
                    2,
                    "100000",
                    target_leads=10,
                    target_conversions=4,
                    target_revenue=Decimal("400000"),
                )
            ]
        )
        assert entry.target.leads_pct == 50.0
        assert entry.target.conversions_pct == 50.0
        assert entry.target.revenue_pct == 25.0

    def test_leaderboard_without_target(self):
        (entry,) = rank_leaderboard([_row("Ravi", 1, 0, "0")])
        assert entry.target is None

    def test_month_bounds(self):
        start, end = month_bounds(3, 2026)
        assert (start.year, start.month, start.day) == (2026, 3, 1)
        assert (end.year, end.month, end.day) == (2026, 4, 1)
        assert start.tzinfo is not None

    def test_month_bounds_december(self):
        start, end = month_bounds(12, 2026)
        assert (start.year, start.month) == (2026, 12)
        assert (end.year, end.month, end.day) == (2027, 1, 1)

    def test_resolve_window_all_time(self):
        assert resolve_window(DateRange.all_time) == (None, None)
        assert resolve_window(None) == (None, None)

    def test_resolve_window_relative(self):
        since, until = resolve_window(DateRange.seven_days)
        assert since == start_of_today() - timedelta(days=7)
        assert until is None

    def test_resolve_window_custom(self):
        start = datetime(2026, 5, 1)
        end = datetime(2026, 6, 1)
        assert resolve_window(
            DateRange.custom, start_date=start, end_date=end
        ) == (start, end)


def _totals(**overrides):
    totals = dict(
        total_calls=4,
        today_calls=1,
        total_conversions=2,
        today_conversions=0,
        total_leads=8,
        total_revenue=Decimal("240000"),
        total_call_duration=480,
    )
    totals.update(overrides)
    return totals


class TestLeadAnalytics:
    @pytest.mark.asyncio
    async def test_sales_agent_sees_own_performance(self, agent, mock_cache):
        repo = AsyncMock()
        repo.agent_totals = AsyncMock(return_value=_totals())
        analytics = LeadAnalytics(repo, mock_cache)

        result = await analytics.agent_performance(agent, agent_id=uuid4())

        assert result.agent_id == agent.user_id
        assert repo.agent_totals.await_args.kwargs["agent_id"] == agent.user_id
        assert result.conversion_rate == 25.0
        assert result.average_call_duration == 120.0

    @pytest.mark.asyncio
    async def test_admin_team_performance(self, admin, mock_cache):
        repo = AsyncMock()
        repo.agent_totals = AsyncMock(return_value=_totals(total_leads=0))
        analytics = LeadAnalytics(repo, mock_cache)

        result = await analytics.agent_performance(admin)

        assert result.agent_id is None
        assert result.conversion_rate == 0.0

    @pytest.mark.asyncio
    async def test_leaderboard_miss_queries_and_caches(self, mock_cache, mock_redis):
        repo = AsyncMock()
        repo.leaderboard_rows = AsyncMock(
            return_value=[_row("Meera", 4, 1, "80000")]
        )
        analytics = LeadAnalytics(repo, mock_cache)

        result = await analytics.leaderboard(month=12, year=2026)

        assert result.month == 12
        assert result.entries[0].full_name == "Meera"
        mock_redis.get.assert_awaited_once_with("leaderboard:2026:12")
        key, ttl, payload = mock_redis.setex.await_args.args
        assert key == "leaderboard:2026:12"
        assert json.loads(payload)["entries"][0]["full_name"] == "Meera"

    @pytest.mark.asyncio
    async def test_leaderboard_hit_skips_database(self, mock_cache, mock_redis):
        cached = {
            "month": 7,
            "year": 2026,
            "entries": [
                {
                    "rank": 1,
                    "agent_id": str(uuid4()),
                    "full_name": "Arjun",
                    "leads": 3,
                    "conversions": 1,
                    "revenue": "50000",
                    "conversion_rate": 33.33,
                    "target": None,
                }
            ],
        }
        mock_redis.get = AsyncMock(return_value=json.dumps(cached))
        repo = AsyncMock()
        analytics = LeadAnalytics(repo, mock_cache)

        result = await analytics.leaderboard(month=7, year=2026)

        assert result.entries[0].full_name == "Arjun"
        repo.leaderboard_rows.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_source_breakdown_scoped_to_agent(self, agent, mock_cache):
        repo = AsyncMock()
        repo.source_breakdown = AsyncMock(
            return_value=[{"lead_source": "Instagram", "leads": 4, "conversions": 1}]
        )
        analytics = LeadAnalytics(repo, mock_cache)

        (stat,) = await analytics.source_breakdown(agent)

        assert repo.source_breakdown.await_args.kwargs["agent_id"] == agent.user_id
        assert stat.conversion_rate == 25.0


class TestTargets:
    @pytest.mark.asyncio
    async def test_sales_agent_cannot_set_target(self, agent, mock_cache):
        analytics = LeadAnalytics(AsyncMock(), mock_cache)
        with pytest.raises(LeadAccessDeniedError):
            await analytics.set_target(
                agent,
                TargetUpsert(user_id=agent.user_id, month=1, year=2027),
                AsyncMock(),
                AsyncMock(),
            )

    @pytest.mark.asyncio
    async def test_target_requires_active_sales_agent(self, admin, mock_cache):
        user_repo = AsyncMock()
        user_repo.get_active_sales_agent = AsyncMock(return_value=None)
        analytics = LeadAnalytics(AsyncMock(), mock_cache)

        with pytest.raises(InvalidAssigneeError):
            await analytics.set_target(
                admin,
                TargetUpsert(user_id=uuid4(), month=1, year=2027),
                user_repo,
                AsyncMock(),
            )

    @pytest.mark.asyncio
    async def test_set_target_invalidates_leaderboard(
        self, admin, mock_cache, mock_redis
    ):
        sales = make_user()
        user_repo = AsyncMock()
        user_repo.get_active_sales_agent = AsyncMock(return_value=sales)
        target_repo = AsyncMock()
        target_repo.upsert = AsyncMock(return_value=SimpleNamespace(id=uuid4()))
        analytics = LeadAnalytics(AsyncMock(), mock_cache)

        await analytics.set_target(
            admin,
            TargetUpsert(user_id=sales.id, month=3, year=2027, target_leads=20),
            user_repo,
            target_repo,
        )

        assert target_repo.upsert.await_args.kwargs["target_leads"] == 20
        target_repo.commit.assert_awaited_once()
        mock_redis.delete.assert_awaited_once_with("leaderboard:2027:03")
