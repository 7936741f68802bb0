"""Follow-up recording, including the confirmation flow and its side effects."""

from datetime import date, time
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from travel_crm.core.exceptions import (
    CalendarServiceError,
    InvalidLeadDataError,
    InvalidStatusTransitionError,
    LeadAccessDeniedError,
    StoreError,
)
from travel_crm.schemas.common import PaymentMode
from travel_crm.schemas.confirmation import ConfirmationCreate
from travel_crm.schemas.follow_up import FollowUpCreate
from travel_crm.services.follow_up_recorder import FollowUpRecorder

from conftest import echo_row, make_lead


class _Repos:
    """The repository bundle ``FollowUpRecorder.record`` needs."""

    def __init__(self, lead, itinerary_exists=True):
        self.lead = AsyncMock()
        self.lead.get_by_id = AsyncMock(return_value=lead)

        async def _update_status(target, status):
            target.status = status

        self.lead.update_status = AsyncMock(side_effect=_update_status)
        self.follow_up = AsyncMock()
        self.follow_up.create = AsyncMock(side_effect=echo_row())
        self.confirmation = AsyncMock()
        self.confirmation.create = AsyncMock(side_effect=echo_row())
        self.itinerary = AsyncMock()
        self.itinerary.get_by_id = AsyncMock(
            return_value=MagicMock() if itinerary_exists else None
        )
        self.reminder = AsyncMock()
        self.notification = AsyncMock()

    def args(self):
        return (
            self.lead,
            self.follow_up,
            self.confirmation,
            self.itinerary,
            self.reminder,
            self.notification,
        )


def _recorder(scheduler_error=None):
    scheduler = MagicMock()
    if scheduler_error is not None:
        scheduler.schedule = AsyncMock(side_effect=scheduler_error)
    else:
        scheduler.schedule = AsyncMock(
            side_effect=lambda *a, **kw: MagicMock(id=uuid4())
        )
    dispatcher = MagicMock()
    dispatcher.follow_up_recorded = AsyncMock()
    return FollowUpRecorder(reminder_scheduler=scheduler, dispatcher=dispatcher)


def _confirmation(**overrides):
    payload = dict(
        action_type="confirmed_advance_paid",
        remark="Advance received via UPI",
        itinerary_id=str(uuid4()),
        travel_date="2027-03-20",
        total_amount="100000",
        advance_amount="30000",
        transaction_id="UPI-778899",
        payment_mode="upi",
    )
    payload.update(overrides)
    return FollowUpCreate(**payload)


class TestRecordFollowUp:
    @pytest.mark.asyncio
    async def test_itinerary_sent_moves_to_follow_up(self, agent):
        lead = make_lead(assigned_to=agent.user_id, status="hot")
        repos = _Repos(lead)
        recorder = _recorder()

        result = await recorder.record(
            agent,
            lead.id,
            FollowUpCreate(
                action_type="itinerary_sent",
                remark="Shared 6-day Bali plan",
                itinerary_id=str(uuid4()),
                next_follow_up_date="2026-10-20",
                next_follow_up_time="11:00",
            ),
            *repos.args(),
        )

        assert result.status == "follow_up"
        assert lead.status == "follow_up"
        row = repos.follow_up.create.await_args.kwargs
        assert row["action_type"] == "itinerary_sent"
        assert row["sales_person_id"] == agent.user_id
        assert row["next_follow_up_time"] == time(11, 0)
        repos.confirmation.create.assert_not_awaited()
        repos.lead.commit.assert_awaited_once()
        recorder._dispatcher.follow_up_recorded.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_almost_confirmed_keeps_status(self, agent):
        lead = make_lead(assigned_to=agent.user_id, status="follow_up")
        repos = _Repos(lead)

        result = await _recorder().record(
            agent,
            lead.id,
            FollowUpCreate(action_type="almost_confirmed", remark="Keen on dates"),
            *repos.args(),
        )

        assert result.status == "follow_up"
        repos.follow_up.create.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_dead_stores_reason_and_no_next_date(self, agent):
        lead = make_lead(assigned_to=agent.user_id, status="follow_up")
        repos = _Repos(lead)

        result = await _recorder().record(
            agent,
            lead.id,
            FollowUpCreate(
                action_type="dead",
                remark="Not travelling",
                dead_reason="  Budget too low ",
                next_follow_up_date="2026-10-20",
                next_follow_up_time="10:00",
            ),
            *repos.args(),
        )

        assert result.status == "dead"
        row = repos.follow_up.create.await_args.kwargs
        assert row["dead_reason"] == "Budget too low"
        assert row["next_follow_up_date"] is None
        assert row["next_follow_up_time"] is None

    @pytest.mark.asyncio
    async def test_illegal_transition_writes_nothing(self, agent):
        lead = make_lead(assigned_to=agent.user_id, status="dead")
        repos = _Repos(lead)
        recorder = _recorder()

        with pytest.raises(InvalidStatusTransitionError):
            await recorder.record(
                agent,
                lead.id,
                FollowUpCreate(
                    action_type="follow_up",
                    remark="Try again",
                    next_follow_up_date="2026-10-20",
                    next_follow_up_time="10:00",
                ),
                *repos.args(),
            )

        repos.follow_up.create.assert_not_awaited()
        repos.lead.commit.assert_not_awaited()
        recorder._dispatcher.follow_up_recorded.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_other_agent_denied(self, agent):
        lead = make_lead(status="follow_up")
        repos = _Repos(lead)

        with pytest.raises(LeadAccessDeniedError):
            await _recorder().record(
                agent,
                lead.id,
                FollowUpCreate(action_type="almost_confirmed", remark="x"),
                *repos.args(),
            )
        repos.follow_up.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_itinerary_rejected(self, agent):
        lead = make_lead(assigned_to=agent.user_id)
        repos = _Repos(lead, itinerary_exists=False)

        with pytest.raises(InvalidLeadDataError):
            await _recorder().record(agent, lead.id, _confirmation(), *repos.args())
        repos.confirmation.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_identical_submissions_append_two_rows(self, agent):
        lead = make_lead(assigned_to=agent.user_id, status="follow_up")
        repos = _Repos(lead)
        recorder = _recorder()
        data = FollowUpCreate(
            action_type="follow_up",
            remark="Call back",
            next_follow_up_date="2026-10-21",
            next_follow_up_time="15:00",
        )

        first = await recorder.record(agent, lead.id, data, *repos.args())
        second = await recorder.record(agent, lead.id, data, *repos.args())

        assert repos.follow_up.create.await_count == 2
        assert first.follow_up_id != second.follow_up_id


class TestConfirmation:
    @pytest.mark.asyncio
    async def test_confirmation_writes_booking_and_reminder(self, agent):
        lead = make_lead(
            assigned_to=agent.user_id, status="follow_up", travel_month="2027-03"
        )
        repos = _Repos(lead)
        recorder = _recorder()

        result = await recorder.record(agent, lead.id, _confirmation(), *repos.args())

        assert result.status == "confirmed"
        assert result.due_amount == Decimal("70000")
        assert result.reminder_id is not None
        assert result.warnings == []
        assert lead.travel_date == date(2027, 3, 20)
        assert lead.travel_month is None

        booking = repos.confirmation.create.await_args.kwargs
        assert booking["total_amount"] == Decimal("100000")
        assert booking["advance_amount"] == Decimal("30000")
        assert booking["payment_mode"] == "upi"
        assert booking["confirmed_by"] == agent.user_id

        row = repos.follow_up.create.await_args.kwargs
        assert row["due_amount"] == Decimal("70000")
        assert row["transaction_id"] == "UPI-778899"
        assert row["next_follow_up_date"] is None

        args = recorder._reminder_scheduler.schedule.await_args
        assert args.args[1] == agent.user_id
        assert args.args[2] == date(2027, 3, 20)

    @pytest.mark.asyncio
    async def test_calendar_failure_keeps_confirmation(self, agent):
        lead = make_lead(assigned_to=agent.user_id, status="allocated")
        repos = _Repos(lead)
        recorder = _recorder(scheduler_error=CalendarServiceError("timed out"))

        result = await recorder.record(agent, lead.id, _confirmation(), *repos.args())

        assert result.status == "confirmed"
        assert result.reminder_id is None
        assert result.warnings == ["Reminder not scheduled: timed out"]
        repos.lead.commit.assert_awaited_once()
        recorder._dispatcher.follow_up_recorded.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_notification_failure_surfaces_after_commit(self, agent):
        lead = make_lead(assigned_to=agent.user_id, status="follow_up")
        repos = _Repos(lead)
        recorder = _recorder()
        recorder._dispatcher.follow_up_recorded = AsyncMock(
            side_effect=StoreError("insert failed")
        )

        with pytest.raises(StoreError):
            await recorder.record(agent, lead.id, _confirmation(), *repos.args())

        # The confirmation itself was already committed
        repos.lead.commit.assert_awaited_once()
        assert lead.status == "confirmed"

    @pytest.mark.asyncio
    async def test_confirmed_lead_cannot_confirm_again(self, agent):
        lead = make_lead(assigned_to=agent.user_id, status="confirmed")
        repos = _Repos(lead)

        with pytest.raises(InvalidStatusTransitionError):
            await _recorder().record(agent, lead.id, _confirmation(), *repos.args())
        repos.confirmation.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_confirm_lead_uses_the_same_path(self, agent):
        lead = make_lead(assigned_to=agent.user_id, status="follow_up")
        repos = _Repos(lead)
        recorder = _recorder()

        result = await recorder.confirm_lead(
            agent,
            lead.id,
            ConfirmationCreate(
                itinerary_id=uuid4(),
                travel_date=date(2027, 1, 5),
                total_amount=Decimal("50000"),
                advance_amount=Decimal("50000"),
                payment_mode=PaymentMode.bank_transfer,
                transaction_id="NEFT-1",
                reminder_time=time(8, 30),
            ),
            *repos.args(),
        )

        assert result.status == "confirmed"
        assert result.due_amount == Decimal("0")
        row = repos.follow_up.create.await_args.kwargs
        assert row["action_type"] == "confirmed_advance_paid"
        assert row["remark"] == "Confirmed via bank_transfer"
        assert repos.confirmation.create.await_args.kwargs["payment_mode"] == (
            "bank_transfer"
        )
        schedule_kwargs = recorder._reminder_scheduler.schedule.await_args.kwargs
        assert schedule_kwargs["reminder_time"] == time(8, 30)


class TestListings:
    @pytest.mark.asyncio
    async def test_history_checks_access(self, agent):
        lead = make_lead(assigned_to=agent.user_id)
        lead_repo = AsyncMock()
        lead_repo.get_by_id = AsyncMock(return_value=lead)
        follow_up_repo = AsyncMock()
        follow_up_repo.list_for_lead = AsyncMock(return_value=["a", "b"])

        history = await _recorder().history(agent, lead.id, lead_repo, follow_up_repo)

        assert history == ["a", "b"]
        follow_up_repo.list_for_lead.assert_awaited_once_with(lead.id)

    @pytest.mark.asyncio
    async def test_due_follow_ups_scoped_to_agent(self, agent):
        lead = make_lead(assigned_to=agent.user_id)
        follow_up = MagicMock(
            id=uuid4(),
            next_follow_up_date=date(2026, 10, 18),
            next_follow_up_time=time(10, 0),
            remark="Call back",
        )
        follow_up_repo = AsyncMock()
        follow_up_repo.list_due = AsyncMock(return_value=[(follow_up, lead)])

        items = await _recorder().due_follow_ups(agent, follow_up_repo)

        assert len(items) == 1
        assert items[0].client_name == lead.client_name
        assert items[0].lead_id == lead.id
        follow_up_repo.list_due.assert_awaited_once_with(
            assigned_to=agent.user_id, on_date=None
        )

    @pytest.mark.asyncio
    async def test_admin_sees_all_due_follow_ups(self, admin):
        follow_up_repo = AsyncMock()
        follow_up_repo.list_due = AsyncMock(return_value=[])

        await _recorder().due_follow_ups(admin, follow_up_repo)

        follow_up_repo.list_due.assert_awaited_once_with(assigned_to=None, on_date=None)
