"""Pydantic schemas package - re-exports for convenience."""

# Common enums
from travel_crm.schemas.common import (
    Actor as Actor,
    FollowUpType as FollowUpType,
    LeadSource as LeadSource,
    LeadStatus as LeadStatus,
    LeadType as LeadType,
    NotificationType as NotificationType,
    PaymentMode as PaymentMode,
    PushType as PushType,
    ReminderStatus as ReminderStatus,
    SuccessResponse as SuccessResponse,
    TransportMode as TransportMode,
    UserRole as UserRole,
    UserStatus as UserStatus,
)

# Lead schemas
from travel_crm.schemas.lead import (
    CallLogCreate as CallLogCreate,
    CallLogResponse as CallLogResponse,
    FeedbackRequestResponse as FeedbackRequestResponse,
    LeadCreate as LeadCreate,
    LeadCreateResponse as LeadCreateResponse,
    LeadOut as LeadOut,
    LeadReassign as LeadReassign,
    LeadStatusResponse as LeadStatusResponse,
)

# Follow-up and confirmation schemas
from travel_crm.schemas.follow_up import (
    DueFollowUp as DueFollowUp,
    FollowUpCreate as FollowUpCreate,
    FollowUpOut as FollowUpOut,
    FollowUpRecordResponse as FollowUpRecordResponse,
)
from travel_crm.schemas.confirmation import ConfirmationCreate as ConfirmationCreate

# Reminder and notification schemas
from travel_crm.schemas.reminder import (
    ReminderCreate as ReminderCreate,
    ReminderOut as ReminderOut,
)
from travel_crm.schemas.notification import (
    ChatMessageCreate as ChatMessageCreate,
    MarkReadResponse as MarkReadResponse,
    NotificationOut as NotificationOut,
)

# Targets, itineraries and analytics
from travel_crm.schemas.target import (
    TargetOut as TargetOut,
    TargetUpsert as TargetUpsert,
)
from travel_crm.schemas.itinerary import (
    ItineraryOut as ItineraryOut,
    PricedItinerary as PricedItinerary,
)
from travel_crm.schemas.analytics import (
    AgentPerformance as AgentPerformance,
    DateRange as DateRange,
    LeaderboardEntry as LeaderboardEntry,
    LeaderboardResponse as LeaderboardResponse,
    SourceStat as SourceStat,
    TargetProgress as TargetProgress,
)
