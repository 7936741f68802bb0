import logging
from typing import AsyncIterator, Optional
from uuid import UUID

from fastapi import Depends, Header
from redis.asyncio import Redis
from redis.exceptions import RedisError
from sqlalchemy.ext.asyncio import AsyncSession

from travel_crm.core.config import settings
from travel_crm.core.database import get_db
from travel_crm.schemas.common import Actor, UserRole

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Acting user
# ---------------------------------------------------------------------------


async def get_actor(
    x_actor_id: UUID = Header(..., description="Id of the acting user"),
    x_actor_role: UserRole = Header(..., description="Role of the acting user"),
) -> Actor:
    """Build the :class:`Actor` from trusted gateway headers.

    Authentication happens upstream; missing or malformed headers fail
    request validation (HTTP 422).
    """
    return Actor(user_id=x_actor_id, role=x_actor_role)


# ---------------------------------------------------------------------------
# Redis client factory
# ---------------------------------------------------------------------------


async def get_redis_client() -> AsyncIterator[Optional[Redis]]:
    """Yield an async Redis client, or ``None`` when Redis is unreachable.

    The client is closed once the request is finished.
    """
    client = Redis.from_url(settings.REDIS_URL, decode_responses=True)
    try:
        await client.ping()
    except (RedisError, OSError):
        logger.warning("Redis unavailable; caching disabled for this request")
        await client.aclose()
        yield None
        return
    try:
        yield client
    finally:
        await client.aclose()


async def get_cache_service(
    redis_client: Optional[Redis] = Depends(get_redis_client),
):
    """Build a :class:`CacheService` backed by the shared Redis client."""
    from travel_crm.core.cache import CacheService

    return CacheService(redis_client=redis_client)


# ---------------------------------------------------------------------------
# Repository factory functions (one per repository, each gets the shared db)
# ---------------------------------------------------------------------------


async def get_user_repo(db: AsyncSession = Depends(get_db)):
    from travel_crm.repositories.user_repository import UserRepository

    return UserRepository(db)


async def get_lead_repo(db: AsyncSession = Depends(get_db)):
    from travel_crm.repositories.lead_repository import LeadRepository

    return LeadRepository(db)


async def get_follow_up_repo(db: AsyncSession = Depends(get_db)):
    from travel_crm.repositories.follow_up_repository import FollowUpRepository

    return FollowUpRepository(db)


async def get_confirmation_repo(db: AsyncSession = Depends(get_db)):
    from travel_crm.repositories.confirmation_repository import (
        ConfirmationRepository,
    )

    return ConfirmationRepository(db)


async def get_reminder_repo(db: AsyncSession = Depends(get_db)):
    from travel_crm.repositories.reminder_repository import ReminderRepository

    return ReminderRepository(db)


async def get_notification_repo(db: AsyncSession = Depends(get_db)):
    from travel_crm.repositories.notification_repository import (
        NotificationRepository,
    )

    return NotificationRepository(db)


async def get_call_log_repo(db: AsyncSession = Depends(get_db)):
    from travel_crm.repositories.call_log_repository import CallLogRepository

    return CallLogRepository(db)


async def get_itinerary_repo(db: AsyncSession = Depends(get_db)):
    from travel_crm.repositories.itinerary_repository import ItineraryRepository

    return ItineraryRepository(db)


async def get_target_repo(db: AsyncSession = Depends(get_db)):
    from travel_crm.repositories.target_repository import TargetRepository

    return TargetRepository(db)


async def get_analytics_repo(db: AsyncSession = Depends(get_db)):
    from travel_crm.repositories.analytics_repository import AnalyticsRepository

    return AnalyticsRepository(db)


# ---------------------------------------------------------------------------
# Service factory functions
# ---------------------------------------------------------------------------


async def get_notification_dispatcher():
    from travel_crm.services.notification_dispatcher import NotificationDispatcher
    from travel_crm.services.push_client import PushClient

    return NotificationDispatcher(push_client=PushClient())


async def get_reminder_scheduler():
    from travel_crm.services.calendar_client import CalendarClient
    from travel_crm.services.reminder_scheduler import ReminderScheduler

    return ReminderScheduler(calendar=CalendarClient())


async def get_assignment_manager(
    dispatcher=Depends(get_notification_dispatcher),
):
    from travel_crm.services.lead_assignment import LeadAssignmentManager

    return LeadAssignmentManager(dispatcher=dispatcher)


async def get_lead_intake_service(
    assignment_manager=Depends(get_assignment_manager),
    dispatcher=Depends(get_notification_dispatcher),
):
    """Build a :class:`LeadIntakeService` with injected dependencies."""
    from travel_crm.services.lead_intake_service import LeadIntakeService

    return LeadIntakeService(
        assignment_manager=assignment_manager, dispatcher=dispatcher
    )


async def get_follow_up_recorder(
    reminder_scheduler=Depends(get_reminder_scheduler),
    dispatcher=Depends(get_notification_dispatcher),
):
    """Build a :class:`FollowUpRecorder` with injected dependencies."""
    from travel_crm.services.follow_up_recorder import FollowUpRecorder

    return FollowUpRecorder(
        reminder_scheduler=reminder_scheduler, dispatcher=dispatcher
    )


async def get_lead_status_service(
    dispatcher=Depends(get_notification_dispatcher),
):
    from travel_crm.services.lead_status_service import LeadStatusService

    return LeadStatusService(dispatcher=dispatcher)


async def get_analytics_service(
    analytics_repo=Depends(get_analytics_repo),
    cache=Depends(get_cache_service),
):
    """Build a :class:`LeadAnalytics` service with injected repository."""
    from travel_crm.services.analytics import LeadAnalytics

    return LeadAnalytics(repo=analytics_repo, cache=cache)


async def get_itinerary_pricing_service(
    cache=Depends(get_cache_service),
):
    from travel_crm.services.exchange_rate import ExchangeRateService
    from travel_crm.services.itinerary_pricing import ItineraryPricingService

    return ItineraryPricingService(exchange_rates=ExchangeRateService(cache=cache))
