"""Repository layer - all database access goes through here.

Repositories encapsulate SQLAlchemy queries and raw SQL so that the
service layer only contains business logic.
"""

from travel_crm.repositories.user_repository import UserRepository
from travel_crm.repositories.lead_repository import LeadRepository
from travel_crm.repositories.follow_up_repository import FollowUpRepository
from travel_crm.repositories.confirmation_repository import ConfirmationRepository
from travel_crm.repositories.reminder_repository import ReminderRepository
from travel_crm.repositories.notification_repository import NotificationRepository
from travel_crm.repositories.call_log_repository import CallLogRepository
from travel_crm.repositories.itinerary_repository import ItineraryRepository
from travel_crm.repositories.target_repository import TargetRepository
from travel_crm.repositories.analytics_repository import AnalyticsRepository

__all__ = [
    "UserRepository",
    "LeadRepository",
    "FollowUpRepository",
    "ConfirmationRepository",
    "ReminderRepository",
    "NotificationRepository",
    "CallLogRepository",
    "ItineraryRepository",
    "TargetRepository",
    "AnalyticsRepository",
]
