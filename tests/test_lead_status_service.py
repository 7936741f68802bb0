"""No-response, allocation to operations and lead listings."""

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from travel_crm.core.exceptions import InvalidStatusTransitionError
from travel_crm.schemas.common import LeadStatus
from travel_crm.services.lead_status_service import LeadStatusService

from conftest import echo_row, make_lead, make_user


def _service():
    dispatcher = MagicMock()
    dispatcher.allocated_to_operations = AsyncMock()
    return LeadStatusService(dispatcher=dispatcher), dispatcher


def _lead_repo(lead):
    repo = AsyncMock()
    repo.get_by_id = AsyncMock(return_value=lead)

    async def _update_status(target, status):
        target.status = status

    repo.update_status = AsyncMock(side_effect=_update_status)
    return repo


def _follow_up_repo():
    repo = AsyncMock()
    repo.create = AsyncMock(side_effect=echo_row())
    return repo


class TestMarkNoResponse:
    @pytest.mark.asyncio
    async def test_marks_and_logs_attempts(self, agent):
        service, _ = _service()
        lead = make_lead(assigned_to=agent.user_id, status="follow_up", call_count=4)
        lead_repo, follow_up_repo = _lead_repo(lead), _follow_up_repo()

        result = await service.mark_no_response(
            agent, lead.id, lead_repo, follow_up_repo
        )

        assert result.status == "no_response"
        row = follow_up_repo.create.await_args.kwargs
        assert row["action_type"] == "no_response"
        assert row["remark"] == "Marked as no response after 4 call attempts"
        lead_repo.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_custom_remark(self, agent):
        service, _ = _service()
        lead = make_lead(assigned_to=agent.user_id)
        follow_up_repo = _follow_up_repo()

        await service.mark_no_response(
            agent, lead.id, _lead_repo(lead), follow_up_repo, remark="Phone off"
        )

        assert follow_up_repo.create.await_args.kwargs["remark"] == "Phone off"

    @pytest.mark.asyncio
    async def test_dead_lead_rejected(self, agent):
        service, _ = _service()
        lead = make_lead(assigned_to=agent.user_id, status="dead")
        follow_up_repo = _follow_up_repo()

        with pytest.raises(InvalidStatusTransitionError):
            await service.mark_no_response(
                agent, lead.id, _lead_repo(lead), follow_up_repo
            )
        follow_up_repo.create.assert_not_awaited()


class TestAllocateToOperations:
    @pytest.mark.asyncio
    async def test_confirmed_lead_goes_to_operations(self, agent):
        service, dispatcher = _service()
        lead = make_lead(assigned_to=agent.user_id, status="confirmed")
        admin_user = make_user(role="admin", full_name="Ops Admin")
        acting = make_user(id=agent.user_id, full_name="Ananya Rao")
        user_repo = AsyncMock()
        user_repo.get_first_admin = AsyncMock(return_value=admin_user)
        user_repo.get_by_id = AsyncMock(return_value=acting)
        follow_up_repo = _follow_up_repo()
        notification_repo = AsyncMock()

        result = await service.allocate_to_operations(
            agent, lead.id, _lead_repo(lead), user_repo, follow_up_repo, notification_repo
        )

        assert result.status == LeadStatus.allocated_to_operations.value
        assert (
            follow_up_repo.create.await_args.kwargs["action_type"]
            == "allocated_to_operations"
        )
        dispatcher.allocated_to_operations.assert_awaited_once_with(
            lead, admin_user.id, "Ananya Rao", notification_repo
        )

    @pytest.mark.asyncio
    async def test_without_admin_allocation_still_stands(self, agent):
        service, dispatcher = _service()
        lead = make_lead(assigned_to=agent.user_id, status="confirmed")
        lead_repo = _lead_repo(lead)
        user_repo = AsyncMock()
        user_repo.get_first_admin = AsyncMock(return_value=None)

        result = await service.allocate_to_operations(
            agent, lead.id, lead_repo, user_repo, _follow_up_repo(), AsyncMock()
        )

        assert result.status == "allocated_to_operations"
        lead_repo.commit.assert_awaited_once()
        dispatcher.allocated_to_operations.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unconfirmed_lead_rejected(self, agent):
        service, _ = _service()
        lead = make_lead(assigned_to=agent.user_id, status="follow_up")

        with pytest.raises(InvalidStatusTransitionError):
            await service.allocate_to_operations(
                agent,
                lead.id,
                _lead_repo(lead),
                AsyncMock(),
                _follow_up_repo(),
                AsyncMock(),
            )


class TestListings:
    @pytest.mark.asyncio
    async def test_agent_sees_only_own_leads(self, agent):
        service, _ = _service()
        lead_repo = AsyncMock()
        lead_repo.list_leads = AsyncMock(return_value=[])

        await service.list_leads(
            agent, lead_repo, status=LeadStatus.hot, agent_id=uuid4()
        )

        lead_repo.list_leads.assert_awaited_once_with(
            status="hot", assigned_to=agent.user_id, skip=0, limit=50
        )

    @pytest.mark.asyncio
    async def test_admin_may_filter_by_agent(self, admin):
        service, _ = _service()
        lead_repo = AsyncMock()
        lead_repo.list_leads = AsyncMock(return_value=[])
        target = uuid4()

        await service.list_leads(admin, lead_repo, agent_id=target, limit=10)

        lead_repo.list_leads.assert_awaited_once_with(
            status=None, assigned_to=target, skip=0, limit=10
        )

    @pytest.mark.asyncio
    async def test_almost_confirmed_scope(self, agent, admin):
        service, _ = _service()
        lead_repo = AsyncMock()
        lead_repo.list_almost_confirmed = AsyncMock(return_value=[])

        await service.list_almost_confirmed(agent, lead_repo)
        await service.list_almost_confirmed(admin, lead_repo)

        calls = lead_repo.list_almost_confirmed.await_args_list
        assert calls[0].kwargs == {"assigned_to": agent.user_id}
        assert calls[1].kwargs == {"assigned_to": None}
