from typing import FrozenSet

from travel_crm.schemas.common import (
    FollowUpType,
    LeadSource,
    LeadStatus,
    LeadType,
    NotificationType,
    PaymentMode,
    ReminderStatus,
    TransportMode,
    UserRole,
    UserStatus,
)


def _check_clause(column: str, values) -> str:
    """Build an SQL ``IN`` CHECK clause from enum members."""
    return f"{column} IN ({', '.join(repr(v.value) for v in values)})"


LEAD_STATUSES: FrozenSet[str] = frozenset(s.value for s in LeadStatus)

# Terminal states; only an admin override (reopen) leaves them
TERMINAL_STATUSES: FrozenSet[str] = frozenset(
    {
        LeadStatus.allocated_to_operations.value,
        LeadStatus.dead.value,
        LeadStatus.no_response.value,
    }
)

ACTIVE_STATUSES: FrozenSet[str] = LEAD_STATUSES - TERMINAL_STATUSES

# Statuses from which the sales flow (itinerary, follow-up, confirm) may move
IN_FLOW_STATUSES: FrozenSet[str] = frozenset(
    {
        LeadStatus.allocated.value,
        LeadStatus.hot.value,
        LeadStatus.follow_up.value,
    }
)

LEAD_STATUS_CHECK_CLAUSE: str = _check_clause("status", LeadStatus)
LEAD_TYPE_CHECK_CLAUSE: str = _check_clause("lead_type", LeadType)
LEAD_SOURCE_CHECK_CLAUSE: str = _check_clause("lead_source", LeadSource)
FOLLOW_UP_TYPE_CHECK_CLAUSE: str = _check_clause("action_type", FollowUpType)
USER_ROLE_CHECK_CLAUSE: str = _check_clause("role", UserRole)
USER_STATUS_CHECK_CLAUSE: str = _check_clause("status", UserStatus)
REMINDER_STATUS_CHECK_CLAUSE: str = _check_clause("status", ReminderStatus)
NOTIFICATION_TYPE_CHECK_CLAUSE: str = _check_clause("type", NotificationType)
PAYMENT_MODE_CHECK_CLAUSE: str = _check_clause("payment_mode", PaymentMode)
TRANSPORT_MODE_CHECK_CLAUSE: str = _check_clause("transport_mode", TransportMode)

# Fixed by the reminder CHECK constraint; not configurable
REMINDER_DAYS_BEFORE_TRAVEL: int = 7
REMINDER_DATE_CHECK_CLAUSE: str = (
    f"reminder_date = travel_date - {REMINDER_DAYS_BEFORE_TRAVEL}"
)
