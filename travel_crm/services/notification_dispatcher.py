"""In-app notification rows and device pushes for workflow events.

Notification rows are written in their own commit after the triggering
action has been saved.  A failed insert raises :class:`StoreError` to the
caller but never undoes the triggering action.  Push delivery is
fire-and-forget: failures are logged and swallowed.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional
from uuid import UUID

from travel_crm.core.config import settings
from travel_crm.core.exceptions import ExternalServiceError, UserNotFoundError
from travel_crm.core.scheduling import default_reminder_time, local_datetime
from travel_crm.models.follow_up import FollowUp
from travel_crm.models.lead import Lead
from travel_crm.models.notification import Notification
from travel_crm.repositories.notification_repository import NotificationRepository
from travel_crm.repositories.user_repository import UserRepository
from travel_crm.schemas.common import (
    Actor,
    FollowUpType,
    NotificationType,
    PushType,
)
from travel_crm.schemas.notification import ChatMessageCreate
from travel_crm.services.push_client import PushClient

logger = logging.getLogger(__name__)

_ACTION_LABELS = {
    FollowUpType.itinerary_sent.value: "Itinerary sent",
    FollowUpType.itinerary_updated.value: "Itinerary updated",
    FollowUpType.follow_up.value: "Follow-up",
    FollowUpType.almost_confirmed.value: "Almost confirmed",
    FollowUpType.confirmed_advance_paid.value: "Confirmed (advance paid)",
    FollowUpType.dead.value: "Marked dead",
}


class NotificationDispatcher:
    def __init__(self, push_client: Optional[PushClient] = None) -> None:
        self._push_client = push_client or PushClient()

    async def _store(
        self,
        notification_repo: NotificationRepository,
        *,
        user_id: UUID,
        type: NotificationType,
        title: str,
        message: str,
        lead_id: Optional[UUID] = None,
    ) -> Notification:
        notification = await notification_repo.create(
            user_id=user_id,
            type=type.value,
            title=title,
            message=message,
            lead_id=lead_id,
        )
        await notification_repo.commit()
        logger.info("Notification %s sent to user %s", type.value, user_id)
        return notification

    async def _push(
        self,
        user_id: UUID,
        push_type: PushType,
        lead_id: UUID,
        title: str,
        body: str,
        send_at: Optional[datetime] = None,
    ) -> None:
        if send_at is not None and send_at <= datetime.now(send_at.tzinfo):
            logger.info(
                "Skipping %s push for lead %s: %s is in the past",
                push_type.value,
                lead_id,
                send_at.isoformat(),
            )
            return
        try:
            await self._push_client.send(
                user_id, push_type, lead_id, title, body, send_at
            )
        except ExternalServiceError:
            logger.warning(
                "Push %s for lead %s failed", push_type.value, lead_id, exc_info=True
            )

    # ------------------------------------------------------------------
    # Workflow events
    # ------------------------------------------------------------------

    async def lead_assigned(
        self,
        lead: Lead,
        agent_id: UUID,
        notification_repo: NotificationRepository,
        previous_agent_name: Optional[str] = None,
    ) -> Notification:
        """Tell the (new) owning agent about a lead."""
        if previous_agent_name:
            title = "New Lead Reassigned"
            message = (
                f"{lead.client_name} from {lead.place} has been reassigned to you "
                f"from {previous_agent_name}."
            )
        else:
            title = "New Lead Assigned"
            message = (
                f"{lead.client_name} from {lead.place} has been assigned to you. "
                f"{lead.no_of_pax} Pax, Budget: ₹{lead.expected_budget}"
            )
        notification = await self._store(
            notification_repo,
            user_id=agent_id,
            type=NotificationType.lead_assigned,
            title=title,
            message=message,
            lead_id=lead.id,
        )
        await self._push(agent_id, PushType.lead_assignment, lead.id, title, message)
        return notification

    async def follow_up_recorded(
        self,
        lead: Lead,
        follow_up: FollowUp,
        actor: Actor,
        notification_repo: NotificationRepository,
    ) -> Notification:
        """Report an agent action to whoever assigned the lead.

        Falls back to the acting agent for self-service leads.  A
        confirmation is reported as ``trip_confirmed`` and schedules the
        pre-trip push; other actions schedule a push for the next
        follow-up time when one was given.
        """
        target = lead.assigned_by or actor.user_id
        label = _ACTION_LABELS.get(follow_up.action_type, follow_up.action_type)
        confirmed = follow_up.action_type == FollowUpType.confirmed_advance_paid.value

        notification = await self._store(
            notification_repo,
            user_id=target,
            type=(
                NotificationType.trip_confirmed
                if confirmed
                else NotificationType.follow_up
            ),
            title=f"{label}: {lead.client_name}",
            message=f"{lead.client_name} from {lead.place}: {follow_up.remark}",
            lead_id=lead.id,
        )

        owner = lead.assigned_to or actor.user_id
        if confirmed and lead.travel_date is not None:
            send_at = local_datetime(
                lead.travel_date
                - timedelta(days=settings.TRIP_NOTIFICATION_DAYS_BEFORE),
                default_reminder_time(),
            )
            await self._push(
                owner,
                PushType.trip_confirmed,
                lead.id,
                f"Upcoming trip: {lead.client_name}",
                f"{lead.client_name} travels to {lead.place} on "
                f"{lead.travel_date.isoformat()}",
                send_at,
            )
        elif follow_up.next_follow_up_date is not None:
            send_at = local_datetime(
                follow_up.next_follow_up_date,
                follow_up.next_follow_up_time or default_reminder_time(),
            )
            await self._push(
                owner,
                PushType.follow_up,
                lead.id,
                f"Follow up with {lead.client_name}",
                follow_up.remark,
                send_at,
            )
        return notification

    async def allocated_to_operations(
        self,
        lead: Lead,
        admin_id: UUID,
        actor_name: str,
        notification_repo: NotificationRepository,
    ) -> Notification:
        return await self._store(
            notification_repo,
            user_id=admin_id,
            type=NotificationType.allocation,
            title="Lead Allocated to Operations",
            message=(
                f"{lead.client_name} from {lead.place} has been allocated to "
                f"operations by {actor_name}"
            ),
            lead_id=lead.id,
        )

    async def chat_message(
        self,
        sender_name: str,
        recipient_id: UUID,
        message: str,
        notification_repo: NotificationRepository,
    ) -> Notification:
        return await self._store(
            notification_repo,
            user_id=recipient_id,
            type=NotificationType.message,
            title=f"Message from {sender_name}",
            message=message,
        )

    async def send_message(
        self,
        actor: Actor,
        data: ChatMessageCreate,
        user_repo: UserRepository,
        notification_repo: NotificationRepository,
    ) -> Notification:
        """Deliver a chat message from *actor* to another user's inbox."""
        recipient = await user_repo.get_by_id(data.recipient_id)
        if recipient is None:
            raise UserNotFoundError(f"User {data.recipient_id} not found")
        sender = await user_repo.get_by_id(actor.user_id)
        sender_name = sender.full_name if sender else str(actor.user_id)
        return await self.chat_message(
            sender_name, recipient.id, data.message, notification_repo
        )

    # ------------------------------------------------------------------
    # Inbox
    # ------------------------------------------------------------------

    async def list_for(
        self,
        actor: Actor,
        notification_repo: NotificationRepository,
        unread_only: bool = False,
    ) -> List[Notification]:
        return await notification_repo.list_for_user(
            actor.user_id, unread_only=unread_only
        )

    async def mark_read(
        self,
        actor: Actor,
        notification_repo: NotificationRepository,
        notification_id: Optional[UUID] = None,
    ) -> int:
        """Mark the actor's notifications read; only ``is_read`` ever changes."""
        changed = await notification_repo.mark_read(actor.user_id, notification_id)
        await notification_repo.commit()
        return changed
