"""Lead lifecycle state machine.

Every status change in the workflow goes through :func:`next_status`.
The transition table below is the single place that says which trigger
may move a lead from which status to which.
"""

import logging
from enum import Enum
from typing import Dict, FrozenSet, NamedTuple, Optional

from travel_crm.core.constants import ACTIVE_STATUSES, IN_FLOW_STATUSES
from travel_crm.core.exceptions import InvalidStatusTransitionError
from travel_crm.schemas.common import FollowUpType, LeadStatus, LeadType

logger = logging.getLogger(__name__)


class LifecycleTrigger(str, Enum):
    """Events that can move a lead between statuses."""

    itinerary_sent = "itinerary_sent"
    itinerary_updated = "itinerary_updated"
    follow_up = "follow_up"
    almost_confirmed = "almost_confirmed"
    confirmed_advance_paid = "confirmed_advance_paid"
    dead = "dead"
    mark_no_response = "mark_no_response"
    allocate_to_operations = "allocate_to_operations"
    reopen = "reopen"


class Transition(NamedTuple):
    allowed_from: FrozenSet[str]
    # ``None`` keeps the current status
    to: Optional[LeadStatus]


TRANSITIONS: Dict[LifecycleTrigger, Transition] = {
    LifecycleTrigger.itinerary_sent: Transition(IN_FLOW_STATUSES, LeadStatus.follow_up),
    LifecycleTrigger.itinerary_updated: Transition(
        IN_FLOW_STATUSES, LeadStatus.follow_up
    ),
    LifecycleTrigger.follow_up: Transition(IN_FLOW_STATUSES, LeadStatus.follow_up),
    # Almost-confirmed is a view over the follow-up log, not a status
    LifecycleTrigger.almost_confirmed: Transition(IN_FLOW_STATUSES, None),
    LifecycleTrigger.confirmed_advance_paid: Transition(
        IN_FLOW_STATUSES, LeadStatus.confirmed
    ),
    LifecycleTrigger.dead: Transition(ACTIVE_STATUSES, LeadStatus.dead),
    LifecycleTrigger.mark_no_response: Transition(
        ACTIVE_STATUSES, LeadStatus.no_response
    ),
    LifecycleTrigger.allocate_to_operations: Transition(
        frozenset({LeadStatus.confirmed.value}), LeadStatus.allocated_to_operations
    ),
    LifecycleTrigger.reopen: Transition(
        frozenset({LeadStatus.no_response.value}), LeadStatus.allocated
    ),
}


def initial_status(lead_type: LeadType) -> LeadStatus:
    """Status of a freshly created lead."""
    if lead_type == LeadType.hot:
        return LeadStatus.hot
    return LeadStatus.allocated


def trigger_for_action(action_type: FollowUpType) -> LifecycleTrigger:
    """Map a follow-up action to its lifecycle trigger.

    Raises :class:`InvalidStatusTransitionError` for follow-up types that
    are written by dedicated operations rather than the follow-up form.
    """
    try:
        return LifecycleTrigger(action_type.value)
    except ValueError:
        raise InvalidStatusTransitionError(
            f"{action_type.value} cannot be recorded as a follow-up action"
        )


def next_status(current: str, trigger: LifecycleTrigger) -> LeadStatus:
    """Validate *trigger* against *current* and return the resulting status.

    Illegal requests raise :class:`InvalidStatusTransitionError`; there is
    no silent no-op.
    """
    transition = TRANSITIONS[trigger]
    if current not in transition.allowed_from:
        raise InvalidStatusTransitionError(
            f"Cannot apply {trigger.value} to a lead in status {current}"
        )
    new_status = transition.to or LeadStatus(current)
    logger.debug("Lifecycle %s: %s -> %s", trigger.value, current, new_status.value)
    return new_status
