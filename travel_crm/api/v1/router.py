from fastapi import APIRouter

from travel_crm.api.v1.endpoints import (
    analytics,
    follow_ups,
    health,
    itineraries,
    leads,
    notifications,
    reminders,
)

router = APIRouter(prefix="/api/v1")

router.include_router(leads.router)
router.include_router(follow_ups.router)
router.include_router(reminders.router)
router.include_router(notifications.router)
router.include_router(itineraries.router)
router.include_router(analytics.router)
router.include_router(health.router)
