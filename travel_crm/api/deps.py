"""API-layer dependency functions.

Re-exports all dependency factories from ``travel_crm.dependencies`` so
that endpoint modules only need to import from ``travel_crm.api.deps``.
"""

from travel_crm.dependencies import (
    # Acting user
    get_actor,
    # Repository factories
    get_user_repo,
    get_lead_repo,
    get_follow_up_repo,
    get_confirmation_repo,
    get_reminder_repo,
    get_notification_repo,
    get_call_log_repo,
    get_itinerary_repo,
    get_target_repo,
    get_analytics_repo,
    # Service factories
    get_notification_dispatcher,
    get_reminder_scheduler,
    get_assignment_manager,
    get_lead_intake_service,
    get_follow_up_recorder,
    get_lead_status_service,
    get_analytics_service,
    get_itinerary_pricing_service,
    # Redis
    get_redis_client,
    get_cache_service,
)

__all__ = [
    "get_actor",
    "get_user_repo",
    "get_lead_repo",
    "get_follow_up_repo",
    "get_confirmation_repo",
    "get_reminder_repo",
    "get_notification_repo",
    "get_call_log_repo",
    "get_itinerary_repo",
    "get_target_repo",
    "get_analytics_repo",
    "get_notification_dispatcher",
    "get_reminder_scheduler",
    "get_assignment_manager",
    "get_lead_intake_service",
    "get_follow_up_recorder",
    "get_lead_status_service",
    "get_analytics_service",
    "get_itinerary_pricing_service",
    "get_redis_client",
    "get_cache_service",
]
