from datetime import datetime, timezone

from sqlalchemy import event

from travel_crm.core.constants import LEAD_STATUSES
from travel_crm.core.exceptions import InvalidLeadDataError, StoreError
from travel_crm.models.follow_up import FollowUp
from travel_crm.models.lead import Lead
from travel_crm.models.target import Target
from travel_crm.models.user import User


# Auto updated_at
@event.listens_for(Lead, "before_update")
@event.listens_for(User, "before_update")
@event.listens_for(Target, "before_update")
def update_timestamp(mapper, connection, target):
    target.updated_at = datetime.now(timezone.utc)


# Lead invariants mirrored from the CHECK constraints so that violations
# surface as domain errors before the database round-trip.
@event.listens_for(Lead, "before_insert")
@event.listens_for(Lead, "before_update")
def validate_lead_invariants(mapper, connection, target):
    if (target.travel_date is None) == (target.travel_month is None):
        raise InvalidLeadDataError(
            "Exactly one of travel_date or travel_month must be set"
        )
    if target.no_of_pax is not None and target.no_of_pax <= 0:
        raise InvalidLeadDataError("no_of_pax must be greater than zero")
    if target.status is not None and target.status not in LEAD_STATUSES:
        raise InvalidLeadDataError(f"Unknown lead status: {target.status}")


# Follow-up history is append-only
@event.listens_for(FollowUp, "before_update")
@event.listens_for(FollowUp, "before_delete")
def block_follow_up_mutation(mapper, connection, target):
    raise StoreError("Follow-up history is append-only")
