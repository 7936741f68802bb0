from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query, Request

from travel_crm.core.rate_limit import WRITE_RATE_LIMIT, limiter
from travel_crm.repositories.call_log_repository import CallLogRepository
from travel_crm.repositories.confirmation_repository import ConfirmationRepository
from travel_crm.repositories.follow_up_repository import FollowUpRepository
from travel_crm.repositories.itinerary_repository import ItineraryRepository
from travel_crm.repositories.lead_repository import LeadRepository
from travel_crm.repositories.notification_repository import NotificationRepository
from travel_crm.repositories.reminder_repository import ReminderRepository
from travel_crm.repositories.user_repository import UserRepository
from travel_crm.schemas.common import Actor, LeadStatus
from travel_crm.schemas.confirmation import ConfirmationCreate
from travel_crm.schemas.follow_up import (
    FollowUpCreate,
    FollowUpOut,
    FollowUpRecordResponse,
)
from travel_crm.schemas.lead import (
    CallLogCreate,
    CallLogResponse,
    FeedbackRequestResponse,
    LeadCreate,
    LeadCreateResponse,
    LeadOut,
    LeadReassign,
    LeadStatusResponse,
)
from travel_crm.schemas.reminder import ReminderCreate, ReminderOut
from travel_crm.services.follow_up_recorder import FollowUpRecorder
from travel_crm.services.lead_assignment import LeadAssignmentManager
from travel_crm.services.lead_intake_service import LeadIntakeService
from travel_crm.services.lead_status_service import LeadStatusService
from travel_crm.services.reminder_scheduler import ReminderScheduler
from travel_crm.api.deps import (
    get_actor,
    get_assignment_manager,
    get_call_log_repo,
    get_confirmation_repo,
    get_follow_up_recorder,
    get_follow_up_repo,
    get_itinerary_repo,
    get_lead_intake_service,
    get_lead_repo,
    get_lead_status_service,
    get_notification_repo,
    get_reminder_repo,
    get_reminder_scheduler,
    get_user_repo,
)

router = APIRouter(prefix="/leads", tags=["Leads"])


# --- Intake and assignment ---


@router.post("", response_model=LeadCreateResponse, status_code=201)
@limiter.limit(WRITE_RATE_LIMIT)
async def create_lead(
    request: Request,
    request_body: LeadCreate,
    actor: Actor = Depends(get_actor),
    service: LeadIntakeService = Depends(get_lead_intake_service),
    lead_repo: LeadRepository = Depends(get_lead_repo),
    user_repo: UserRepository = Depends(get_user_repo),
    notification_repo: NotificationRepository = Depends(get_notification_repo),
) -> LeadCreateResponse:
    """Create a lead.

    Admins pick an agent (``assigned_to``) or set ``auto_assign``; sales
    agents create leads for themselves.
    """
    lead = await service.create_lead(
        actor, request_body, lead_repo, user_repo, notification_repo
    )
    return LeadCreateResponse(
        lead_id=lead.id, assigned_to=lead.assigned_to, status=lead.status
    )


@router.get("", response_model=List[LeadOut])
async def list_leads(
    status: Optional[LeadStatus] = Query(None, description="Filter by status"),
    agent_id: Optional[UUID] = Query(None, description="Admins only"),
    skip: int = Query(0, ge=0, description="Number of rows to skip"),
    limit: int = Query(50, ge=1, le=500, description="Max rows to return"),
    actor: Actor = Depends(get_actor),
    service: LeadStatusService = Depends(get_lead_status_service),
    lead_repo: LeadRepository = Depends(get_lead_repo),
) -> List[LeadOut]:
    leads = await service.list_leads(
        actor, lead_repo, status=status, agent_id=agent_id, skip=skip, limit=limit
    )
    return [LeadOut.model_validate(lead) for lead in leads]


@router.get("/almost-confirmed", response_model=List[LeadOut])
async def list_almost_confirmed(
    actor: Actor = Depends(get_actor),
    service: LeadStatusService = Depends(get_lead_status_service),
    lead_repo: LeadRepository = Depends(get_lead_repo),
) -> List[LeadOut]:
    """Leads whose latest follow-up is ``almost_confirmed``."""
    leads = await service.list_almost_confirmed(actor, lead_repo)
    return [LeadOut.model_validate(lead) for lead in leads]


@router.get("/{lead_id}", response_model=LeadOut)
async def get_lead(
    lead_id: UUID,
    actor: Actor = Depends(get_actor),
    service: LeadStatusService = Depends(get_lead_status_service),
    lead_repo: LeadRepository = Depends(get_lead_repo),
) -> LeadOut:
    lead = await service.get_lead(actor, lead_id, lead_repo)
    return LeadOut.model_validate(lead)


@router.post("/{lead_id}/reassign", response_model=LeadStatusResponse)
@limiter.limit(WRITE_RATE_LIMIT)
async def reassign_lead(
    request: Request,
    lead_id: UUID,
    request_body: LeadReassign,
    actor: Actor = Depends(get_actor),
    manager: LeadAssignmentManager = Depends(get_assignment_manager),
    lead_repo: LeadRepository = Depends(get_lead_repo),
    user_repo: UserRepository = Depends(get_user_repo),
    follow_up_repo: FollowUpRepository = Depends(get_follow_up_repo),
    notification_repo: NotificationRepository = Depends(get_notification_repo),
) -> LeadStatusResponse:
    lead = await manager.reassign_lead(
        actor,
        lead_id,
        request_body,
        lead_repo,
        user_repo,
        follow_up_repo,
        notification_repo,
    )
    return LeadStatusResponse(
        lead_id=lead.id, status=lead.status, assigned_to=lead.assigned_to
    )


# --- Status operations ---


@router.post("/{lead_id}/no-response", response_model=LeadStatusResponse)
@limiter.limit(WRITE_RATE_LIMIT)
async def mark_no_response(
    request: Request,
    lead_id: UUID,
    remark: Optional[str] = Body(None, embed=True),
    actor: Actor = Depends(get_actor),
    service: LeadStatusService = Depends(get_lead_status_service),
    lead_repo: LeadRepository = Depends(get_lead_repo),
    follow_up_repo: FollowUpRepository = Depends(get_follow_up_repo),
) -> LeadStatusResponse:
    lead = await service.mark_no_response(
        actor, lead_id, lead_repo, follow_up_repo, remark=remark
    )
    return LeadStatusResponse(
        lead_id=lead.id, status=lead.status, assigned_to=lead.assigned_to
    )


@router.post("/{lead_id}/allocate-operations", response_model=LeadStatusResponse)
@limiter.limit(WRITE_RATE_LIMIT)
async def allocate_to_operations(
    request: Request,
    lead_id: UUID,
    actor: Actor = Depends(get_actor),
    service: LeadStatusService = Depends(get_lead_status_service),
    lead_repo: LeadRepository = Depends(get_lead_repo),
    user_repo: UserRepository = Depends(get_user_repo),
    follow_up_repo: FollowUpRepository = Depends(get_follow_up_repo),
    notification_repo: NotificationRepository = Depends(get_notification_repo),
) -> LeadStatusResponse:
    lead = await service.allocate_to_operations(
        actor, lead_id, lead_repo, user_repo, follow_up_repo, notification_repo
    )
    return LeadStatusResponse(
        lead_id=lead.id, status=lead.status, assigned_to=lead.assigned_to
    )


@router.post("/{lead_id}/calls", response_model=CallLogResponse, status_code=201)
@limiter.limit(WRITE_RATE_LIMIT)
async def log_call(
    request: Request,
    lead_id: UUID,
    request_body: CallLogCreate,
    actor: Actor = Depends(get_actor),
    service: LeadIntakeService = Depends(get_lead_intake_service),
    lead_repo: LeadRepository = Depends(get_lead_repo),
    call_log_repo: CallLogRepository = Depends(get_call_log_repo),
) -> CallLogResponse:
    call_log, call_count = await service.log_call(
        actor, lead_id, request_body, lead_repo, call_log_repo
    )
    return CallLogResponse(
        call_log_id=call_log.id,
        lead_id=lead_id,
        call_duration=call_log.call_duration,
        call_count=call_count,
    )


# --- Follow-ups and confirmation ---


@router.post(
    "/{lead_id}/follow-ups", response_model=FollowUpRecordResponse, status_code=201
)
@limiter.limit(WRITE_RATE_LIMIT)
async def record_follow_up(
    request: Request,
    lead_id: UUID,
    request_body: FollowUpCreate,
    actor: Actor = Depends(get_actor),
    recorder: FollowUpRecorder = Depends(get_follow_up_recorder),
    lead_repo: LeadRepository = Depends(get_lead_repo),
    follow_up_repo: FollowUpRepository = Depends(get_follow_up_repo),
    confirmation_repo: ConfirmationRepository = Depends(get_confirmation_repo),
    itinerary_repo: ItineraryRepository = Depends(get_itinerary_repo),
    reminder_repo: ReminderRepository = Depends(get_reminder_repo),
    notification_repo: NotificationRepository = Depends(get_notification_repo),
) -> FollowUpRecordResponse:
    """Record one follow-up action and apply its status change."""
    return await recorder.record(
        actor,
        lead_id,
        request_body,
        lead_repo,
        follow_up_repo,
        confirmation_repo,
        itinerary_repo,
        reminder_repo,
        notification_repo,
    )


@router.get("/{lead_id}/follow-ups", response_model=List[FollowUpOut])
async def follow_up_history(
    lead_id: UUID,
    actor: Actor = Depends(get_actor),
    recorder: FollowUpRecorder = Depends(get_follow_up_recorder),
    lead_repo: LeadRepository = Depends(get_lead_repo),
    follow_up_repo: FollowUpRepository = Depends(get_follow_up_repo),
) -> List[FollowUpOut]:
    follow_ups = await recorder.history(actor, lead_id, lead_repo, follow_up_repo)
    return [FollowUpOut.model_validate(f) for f in follow_ups]


@router.post(
    "/{lead_id}/confirm", response_model=FollowUpRecordResponse, status_code=201
)
@limiter.limit(WRITE_RATE_LIMIT)
async def confirm_lead(
    request: Request,
    lead_id: UUID,
    request_body: ConfirmationCreate,
    actor: Actor = Depends(get_actor),
    recorder: FollowUpRecorder = Depends(get_follow_up_recorder),
    lead_repo: LeadRepository = Depends(get_lead_repo),
    follow_up_repo: FollowUpRepository = Depends(get_follow_up_repo),
    confirmation_repo: ConfirmationRepository = Depends(get_confirmation_repo),
    itinerary_repo: ItineraryRepository = Depends(get_itinerary_repo),
    reminder_repo: ReminderRepository = Depends(get_reminder_repo),
    notification_repo: NotificationRepository = Depends(get_notification_repo),
) -> FollowUpRecordResponse:
    """Confirm a booking with payment details."""
    return await recorder.confirm_lead(
        actor,
        lead_id,
        request_body,
        lead_repo,
        follow_up_repo,
        confirmation_repo,
        itinerary_repo,
        reminder_repo,
        notification_repo,
    )


# --- Reminders and feedback ---


@router.post("/{lead_id}/reminders", response_model=ReminderOut, status_code=201)
@limiter.limit(WRITE_RATE_LIMIT)
async def add_reminder(
    request: Request,
    lead_id: UUID,
    request_body: ReminderCreate,
    actor: Actor = Depends(get_actor),
    scheduler: ReminderScheduler = Depends(get_reminder_scheduler),
    lead_repo: LeadRepository = Depends(get_lead_repo),
    reminder_repo: ReminderRepository = Depends(get_reminder_repo),
) -> ReminderOut:
    """Add a travel reminder to a confirmed lead.

    Unlike a confirmation, a calendar failure here fails the request.
    """
    reminder = await scheduler.add_manual_reminder(
        actor, lead_id, request_body, lead_repo, reminder_repo
    )
    return ReminderOut.model_validate(reminder)


@router.post("/{lead_id}/feedback-request", response_model=FeedbackRequestResponse)
@limiter.limit(WRITE_RATE_LIMIT)
async def request_feedback(
    request: Request,
    lead_id: UUID,
    actor: Actor = Depends(get_actor),
    scheduler: ReminderScheduler = Depends(get_reminder_scheduler),
    lead_repo: LeadRepository = Depends(get_lead_repo),
) -> FeedbackRequestResponse:
    requested_at = await scheduler.request_feedback(actor, lead_id, lead_repo)
    return FeedbackRequestResponse(
        lead_id=lead_id, feedback_requested_at=requested_at
    )
