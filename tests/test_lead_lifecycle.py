"""Transition table of the lead lifecycle."""

import pytest

from travel_crm.core.exceptions import InvalidStatusTransitionError
from travel_crm.schemas.common import FollowUpType, LeadStatus, LeadType
from travel_crm.services.lead_lifecycle import (
    LifecycleTrigger,
    initial_status,
    next_status,
    trigger_for_action,
)


class TestInitialStatus:
    def test_hot_lead_starts_hot(self):
        assert initial_status(LeadType.hot) == LeadStatus.hot

    @pytest.mark.parametrize("lead_type", [LeadType.normal, LeadType.urgent])
    def test_other_leads_start_allocated(self, lead_type):
        assert initial_status(lead_type) == LeadStatus.allocated


class TestValidTransitions:
    @pytest.mark.parametrize(
        "current,trigger,expected",
        [
            ("allocated", LifecycleTrigger.itinerary_sent, LeadStatus.follow_up),
            ("hot", LifecycleTrigger.itinerary_sent, LeadStatus.follow_up),
            ("follow_up", LifecycleTrigger.itinerary_updated, LeadStatus.follow_up),
            ("allocated", LifecycleTrigger.follow_up, LeadStatus.follow_up),
            ("follow_up", LifecycleTrigger.follow_up, LeadStatus.follow_up),
            ("allocated", LifecycleTrigger.confirmed_advance_paid, LeadStatus.confirmed),
            ("follow_up", LifecycleTrigger.confirmed_advance_paid, LeadStatus.confirmed),
            ("hot", LifecycleTrigger.dead, LeadStatus.dead),
            ("confirmed", LifecycleTrigger.dead, LeadStatus.dead),
            ("follow_up", LifecycleTrigger.mark_no_response, LeadStatus.no_response),
            (
                "confirmed",
                LifecycleTrigger.allocate_to_operations,
                LeadStatus.allocated_to_operations,
            ),
            ("no_response", LifecycleTrigger.reopen, LeadStatus.allocated),
        ],
    )
    def test_transition(self, current, trigger, expected):
        assert next_status(current, trigger) == expected

    @pytest.mark.parametrize("current", ["allocated", "hot", "follow_up"])
    def test_almost_confirmed_keeps_status(self, current):
        assert next_status(current, LifecycleTrigger.almost_confirmed) == LeadStatus(
            current
        )


class TestInvalidTransitions:
    @pytest.mark.parametrize(
        "current,trigger",
        [
            ("confirmed", LifecycleTrigger.itinerary_sent),
            ("confirmed", LifecycleTrigger.confirmed_advance_paid),
            ("dead", LifecycleTrigger.follow_up),
            ("dead", LifecycleTrigger.dead),
            ("no_response", LifecycleTrigger.follow_up),
            ("no_response", LifecycleTrigger.mark_no_response),
            ("allocated_to_operations", LifecycleTrigger.dead),
            ("allocated", LifecycleTrigger.allocate_to_operations),
            ("follow_up", LifecycleTrigger.allocate_to_operations),
            ("allocated", LifecycleTrigger.reopen),
            ("dead", LifecycleTrigger.reopen),
        ],
    )
    def test_rejected(self, current, trigger):
        with pytest.raises(InvalidStatusTransitionError):
            next_status(current, trigger)


class TestTriggerForAction:
    @pytest.mark.parametrize(
        "action",
        [
            FollowUpType.itinerary_sent,
            FollowUpType.itinerary_updated,
            FollowUpType.follow_up,
            FollowUpType.almost_confirmed,
            FollowUpType.confirmed_advance_paid,
            FollowUpType.dead,
        ],
    )
    def test_form_actions_map_to_triggers(self, action):
        assert trigger_for_action(action).value == action.value

    @pytest.mark.parametrize(
        "action",
        [
            FollowUpType.no_response,
            FollowUpType.reassigned,
            FollowUpType.allocated_to_operations,
        ],
    )
    def test_operation_entries_are_not_form_actions(self, action):
        with pytest.raises(InvalidStatusTransitionError):
            trigger_for_action(action)
