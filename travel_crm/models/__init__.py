from travel_crm.models.base import Base
from travel_crm.models.user import User
from travel_crm.models.target import Target
from travel_crm.models.itinerary import Itinerary
from travel_crm.models.lead import Lead
from travel_crm.models.follow_up import FollowUp
from travel_crm.models.confirmation import Confirmation
from travel_crm.models.reminder import Reminder
from travel_crm.models.notification import Notification
from travel_crm.models.call_log import CallLog

# Import event listeners to register them
from travel_crm.models import listeners  # noqa: F401

__all__ = [
    "Base",
    "User",
    "Target",
    "Itinerary",
    "Lead",
    "FollowUp",
    "Confirmation",
    "Reminder",
    "Notification",
    "CallLog",
]
