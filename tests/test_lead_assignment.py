"""Lead assignment: manual picks, round-robin claims and reassignment."""

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.dialects import postgresql

from travel_crm.core.exceptions import (
    InvalidAssigneeError,
    InvalidStatusTransitionError,
    LeadAccessDeniedError,
    NoAgentsAvailableError,
)
from travel_crm.repositories.user_repository import UserRepository
from travel_crm.schemas.lead import LeadReassign
from travel_crm.services.lead_assignment import LeadAssignmentManager

from conftest import echo_row, make_lead, make_user


def _manager():
    dispatcher = MagicMock()
    dispatcher.lead_assigned = AsyncMock()
    return LeadAssignmentManager(dispatcher=dispatcher), dispatcher


def _repos(lead, *users):
    lead_repo = AsyncMock()
    lead_repo.get_by_id = AsyncMock(return_value=lead)

    async def _update_status(target, status):
        target.status = status

    lead_repo.update_status = AsyncMock(side_effect=_update_status)

    by_id = {u.id: u for u in users}
    user_repo = AsyncMock()
    user_repo.get_by_id = AsyncMock(side_effect=lambda uid: by_id.get(uid))
    user_repo.get_active_sales_agent = AsyncMock(
        side_effect=lambda uid: by_id.get(uid)
        if uid in by_id and by_id[uid].role == "sales" and by_id[uid].status == "active"
        else None
    )

    follow_up_repo = AsyncMock()
    follow_up_repo.create = AsyncMock(side_effect=echo_row())
    return lead_repo, user_repo, follow_up_repo, AsyncMock()


class TestResolveManual:
    @pytest.mark.asyncio
    async def test_active_sales_agent_accepted(self):
        manager, _ = _manager()
        agent = make_user()
        _, user_repo, _, _ = _repos(make_lead(), agent)
        assert await manager.resolve_manual(agent.id, user_repo) is agent

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "user",
        [
            make_user(status="inactive"),
            make_user(role="admin"),
        ],
    )
    async def test_inactive_or_admin_rejected(self, user):
        manager, _ = _manager()
        _, user_repo, _, _ = _repos(make_lead(), user)
        with pytest.raises(InvalidAssigneeError):
            await manager.resolve_manual(user.id, user_repo)

    @pytest.mark.asyncio
    async def test_unknown_user_rejected(self):
        manager, _ = _manager()
        _, user_repo, _, _ = _repos(make_lead())
        with pytest.raises(InvalidAssigneeError):
            await manager.resolve_manual(uuid4(), user_repo)


class TestClaimNextAgent:
    @pytest.mark.asyncio
    async def test_returns_claimed_agent(self):
        manager, _ = _manager()
        agent_id = uuid4()
        user_repo = AsyncMock()
        user_repo.claim_next_agent = AsyncMock(return_value=agent_id)
        assert await manager.claim_next_agent(user_repo) == agent_id

    @pytest.mark.asyncio
    async def test_no_agents_raises(self):
        manager, _ = _manager()
        user_repo = AsyncMock()
        user_repo.claim_next_agent = AsyncMock(return_value=None)
        with pytest.raises(NoAgentsAvailableError):
            await manager.claim_next_agent(user_repo)


class TestClaimStatement:
    """The rotation pick and stamp must be a single locked statement.

    The visiting order itself comes from the ``ORDER BY`` and is run
    against PostgreSQL in ``test_rotation_postgres.py``.
    """

    @pytest.mark.asyncio
    async def test_claim_is_one_atomic_update(self):
        result = MagicMock()
        result.scalar_one_or_none.return_value = None
        db = AsyncMock()
        db.execute = AsyncMock(return_value=result)

        await UserRepository(db).claim_next_agent()

        db.execute.assert_awaited_once()
        statement = db.execute.await_args.args[0]
        sql = str(statement.compile(dialect=postgresql.dialect())).upper()
        assert sql.startswith("UPDATE USERS")
        assert "FROM USERS AS USERS_1" in sql
        assert (
            "ORDER BY USERS_1.LAST_ASSIGNED_AT ASC NULLS FIRST, USERS_1.ID ASC" in sql
        )
        assert "FOR UPDATE SKIP LOCKED" in sql
        assert "RETURNING USERS.ID" in sql


class TestReassignLead:
    @pytest.mark.asyncio
    async def test_moves_lead_and_records_history(self, admin):
        manager, dispatcher = _manager()
        old_agent = make_user(full_name="Vikram Shah")
        new_agent = make_user(full_name="Meera Iyer")
        original_assigner = uuid4()
        lead = make_lead(
            assigned_to=old_agent.id,
            assigned_by=original_assigner,
            status="follow_up",
        )
        lead_repo, user_repo, follow_up_repo, notification_repo = _repos(
            lead, old_agent, new_agent
        )

        result = await manager.reassign_lead(
            admin,
            lead.id,
            LeadReassign(new_agent_id=new_agent.id),
            lead_repo,
            user_repo,
            follow_up_repo,
            notification_repo,
        )

        assert result.assigned_to == new_agent.id
        assert result.assigned_by == original_assigner
        assert result.status == "follow_up"
        follow_up_repo.create.assert_awaited_once()
        row = follow_up_repo.create.await_args.kwargs
        assert row["action_type"] == "reassigned"
        assert row["remark"] == "Lead reassigned from Vikram Shah"
        lead_repo.commit.assert_awaited_once()
        dispatcher.lead_assigned.assert_awaited_once_with(
            lead, new_agent.id, notification_repo, previous_agent_name="Vikram Shah"
        )
        # rotation stamp is untouched
        user_repo.claim_next_agent.assert_not_called()

    @pytest.mark.asyncio
    async def test_self_service_lead_keeps_no_assigner(self, admin):
        manager, _ = _manager()
        owner = make_user(full_name="Vikram Shah")
        new_agent = make_user()
        lead = make_lead(assigned_to=owner.id, assigned_by=None)
        lead_repo, user_repo, follow_up_repo, notification_repo = _repos(
            lead, owner, new_agent
        )

        result = await manager.reassign_lead(
            admin,
            lead.id,
            LeadReassign(new_agent_id=new_agent.id),
            lead_repo,
            user_repo,
            follow_up_repo,
            notification_repo,
        )

        assert result.assigned_to == new_agent.id
        assert result.assigned_by is None

    @pytest.mark.asyncio
    async def test_reopen_moves_no_response_to_allocated(self, admin):
        manager, _ = _manager()
        new_agent = make_user()
        lead = make_lead(status="no_response")
        lead_repo, user_repo, follow_up_repo, notification_repo = _repos(
            lead, new_agent
        )

        result = await manager.reassign_lead(
            admin,
            lead.id,
            LeadReassign(new_agent_id=new_agent.id, reopen=True),
            lead_repo,
            user_repo,
            follow_up_repo,
            notification_repo,
        )

        assert result.status == "allocated"

    @pytest.mark.asyncio
    async def test_reopen_rejected_for_live_lead(self, admin):
        manager, _ = _manager()
        new_agent = make_user()
        lead = make_lead(status="follow_up")
        lead_repo, user_repo, follow_up_repo, notification_repo = _repos(
            lead, new_agent
        )

        with pytest.raises(InvalidStatusTransitionError):
            await manager.reassign_lead(
                admin,
                lead.id,
                LeadReassign(new_agent_id=new_agent.id, reopen=True),
                lead_repo,
                user_repo,
                follow_up_repo,
                notification_repo,
            )
        lead_repo.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_sales_agent_cannot_reassign(self, agent):
        manager, _ = _manager()
        lead = make_lead(assigned_to=agent.user_id)
        lead_repo, user_repo, follow_up_repo, notification_repo = _repos(lead)

        with pytest.raises(LeadAccessDeniedError):
            await manager.reassign_lead(
                agent,
                lead.id,
                LeadReassign(new_agent_id=uuid4()),
                lead_repo,
                user_repo,
                follow_up_repo,
                notification_repo,
            )

    @pytest.mark.asyncio
    async def test_same_agent_rejected(self, admin):
        manager, _ = _manager()
        current = make_user()
        lead = make_lead(assigned_to=current.id)
        lead_repo, user_repo, follow_up_repo, notification_repo = _repos(
            lead, current
        )

        with pytest.raises(InvalidAssigneeError):
            await manager.reassign_lead(
                admin,
                lead.id,
                LeadReassign(new_agent_id=current.id),
                lead_repo,
                user_repo,
                follow_up_repo,
                notification_repo,
            )
