from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request

from travel_crm.core.rate_limit import WRITE_RATE_LIMIT, limiter
from travel_crm.repositories.notification_repository import NotificationRepository
from travel_crm.repositories.user_repository import UserRepository
from travel_crm.schemas.common import Actor
from travel_crm.schemas.notification import (
    ChatMessageCreate,
    MarkReadResponse,
    NotificationOut,
)
from travel_crm.services.notification_dispatcher import NotificationDispatcher
from travel_crm.api.deps import (
    get_actor,
    get_notification_dispatcher,
    get_notification_repo,
    get_user_repo,
)

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=List[NotificationOut])
async def list_notifications(
    unread_only: bool = Query(False),
    actor: Actor = Depends(get_actor),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
    notification_repo: NotificationRepository = Depends(get_notification_repo),
) -> List[NotificationOut]:
    """The actor's own notifications, newest first."""
    notifications = await dispatcher.list_for(
        actor, notification_repo, unread_only=unread_only
    )
    return [NotificationOut.model_validate(n) for n in notifications]


@router.post("/read", response_model=MarkReadResponse)
async def mark_all_read(
    actor: Actor = Depends(get_actor),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
    notification_repo: NotificationRepository = Depends(get_notification_repo),
) -> MarkReadResponse:
    updated = await dispatcher.mark_read(actor, notification_repo)
    return MarkReadResponse(updated=updated)


@router.post("/{notification_id}/read", response_model=MarkReadResponse)
async def mark_read(
    notification_id: UUID,
    actor: Actor = Depends(get_actor),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
    notification_repo: NotificationRepository = Depends(get_notification_repo),
) -> MarkReadResponse:
    updated = await dispatcher.mark_read(
        actor, notification_repo, notification_id=notification_id
    )
    return MarkReadResponse(updated=updated)


@router.post("/messages", response_model=NotificationOut, status_code=201)
@limiter.limit(WRITE_RATE_LIMIT)
async def send_message(
    request: Request,
    request_body: ChatMessageCreate,
    actor: Actor = Depends(get_actor),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
    user_repo: UserRepository = Depends(get_user_repo),
    notification_repo: NotificationRepository = Depends(get_notification_repo),
) -> NotificationOut:
    notification = await dispatcher.send_message(
        actor, request_body, user_repo, notification_repo
    )
    return NotificationOut.model_validate(notification)
