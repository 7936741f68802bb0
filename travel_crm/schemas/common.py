from enum import Enum
from typing import FrozenSet
from uuid import UUID

from pydantic import BaseModel


class UserRole(str, Enum):
    admin = "admin"
    sales = "sales"


class UserStatus(str, Enum):
    active = "active"
    inactive = "inactive"


class LeadType(str, Enum):
    normal = "normal"
    urgent = "urgent"
    hot = "hot"


class LeadSource(str, Enum):
    INSTAGRAM = "Instagram"
    FACEBOOK = "Facebook"
    GOOGLE_ADS = "Google Ads"
    WEBSITE = "Website"
    WHATSAPP = "WhatsApp"
    PHONE = "Phone"
    OTHER = "Other"


class LeadStatus(str, Enum):
    allocated = "allocated"
    hot = "hot"
    follow_up = "follow_up"
    confirmed = "confirmed"
    allocated_to_operations = "allocated_to_operations"
    dead = "dead"
    no_response = "no_response"


class FollowUpType(str, Enum):
    # Actions an agent records through the follow-up form
    itinerary_sent = "itinerary_sent"
    itinerary_updated = "itinerary_updated"
    follow_up = "follow_up"
    almost_confirmed = "almost_confirmed"
    confirmed_advance_paid = "confirmed_advance_paid"
    dead = "dead"
    # Entries written by dedicated operations
    no_response = "no_response"
    reassigned = "reassigned"
    allocated_to_operations = "allocated_to_operations"


class PaymentMode(str, Enum):
    upi = "upi"
    cash = "cash"
    bank_transfer = "bank_transfer"
    card = "card"


class ReminderStatus(str, Enum):
    pending = "pending"
    done = "done"
    cancelled = "cancelled"


class NotificationType(str, Enum):
    lead_assigned = "lead_assigned"
    follow_up = "follow_up"
    message = "message"
    allocation = "allocation"
    trip_confirmed = "trip_confirmed"


class PushType(str, Enum):
    """Deep-link kinds understood by the mobile client."""

    lead_assignment = "lead_assignment"
    follow_up = "follow_up"
    trip_confirmed = "trip_confirmed"


class TransportMode(str, Enum):
    driver = "driver"
    self_drive = "self_drive"
    scooter = "scooter"


class Actor(BaseModel):
    """Who is performing an operation.

    Passed explicitly into every service call that reads scoped rows or
    mutates state.
    """

    user_id: UUID
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin


class SuccessResponse(BaseModel):
    """Generic success response base."""

    success: bool = True


# Follow-up actions an agent may record through the follow-up form
AGENT_FOLLOW_UP_ACTIONS: FrozenSet[str] = frozenset(
    {
        FollowUpType.itinerary_sent.value,
        FollowUpType.itinerary_updated.value,
        FollowUpType.follow_up.value,
        FollowUpType.almost_confirmed.value,
        FollowUpType.confirmed_advance_paid.value,
        FollowUpType.dead.value,
    }
)

# Actions that must carry a next follow-up date and time
ACTIONS_REQUIRING_NEXT_FOLLOW_UP: FrozenSet[str] = frozenset(
    {
        FollowUpType.itinerary_sent.value,
        FollowUpType.itinerary_updated.value,
        FollowUpType.follow_up.value,
    }
)

# Travel month is stored as ``YYYY-MM``
TRAVEL_MONTH_PATTERN: str = r"^\d{4}-(0[1-9]|1[0-2])$"
