class TravelCrmError(Exception):
    """Base class for all travel CRM domain exceptions.

    Every custom exception in this module inherits from here so that a
    single ``except TravelCrmError`` clause can catch any domain
    error.
    """

    def __init__(self, detail: str = "An error occurred"):
        self.detail = detail
        super().__init__(detail)


class LeadNotFoundError(TravelCrmError):
    """Raised when a requested lead does not exist."""

    def __init__(self, detail: str = "Lead not found"):
        super().__init__(detail)


class UserNotFoundError(TravelCrmError):
    """Raised when a requested user does not exist."""

    def __init__(self, detail: str = "User not found"):
        super().__init__(detail)


class InvalidLeadDataError(TravelCrmError):
    """Raised when submitted data breaks a business rule.

    Schema-level checks happen in the pydantic models; this covers the
    rules that need the stored lead to evaluate.
    """

    def __init__(self, detail: str = "Invalid lead data"):
        super().__init__(detail)


class InvalidStatusTransitionError(TravelCrmError):
    """Raised when an action is not legal for the lead's current status."""

    def __init__(self, detail: str = "Invalid status transition"):
        super().__init__(detail)


class InvalidAssigneeError(TravelCrmError):
    """Raised when a lead is assigned to someone who is not an active sales agent."""

    def __init__(self, detail: str = "Assignee is not an active sales agent"):
        super().__init__(detail)


class NoAgentsAvailableError(TravelCrmError):
    """Raised when auto-assignment finds no active sales agent."""

    def __init__(self, detail: str = "No active sales agents available"):
        super().__init__(detail)


class LeadAccessDeniedError(TravelCrmError):
    """Raised when the actor neither owns the lead nor is an admin."""

    def __init__(self, detail: str = "Lead is owned by another agent"):
        super().__init__(detail)


class StoreError(TravelCrmError):
    """Raised when the database rejects or fails a write."""

    def __init__(self, detail: str = "Storage operation failed"):
        super().__init__(detail)


class ExternalServiceError(TravelCrmError):
    """Raised when an external collaborator (calendar, push, rates) fails."""

    def __init__(self, detail: str = "External service unavailable"):
        super().__init__(detail)


class CalendarServiceError(ExternalServiceError):
    """Raised when the calendar collaborator cannot create an event."""

    def __init__(self, detail: str = "Calendar service unavailable"):
        super().__init__(detail)


class ExchangeRateServiceError(ExternalServiceError):
    """Raised when the exchange-rate lookup fails."""

    def __init__(self, detail: str = "Exchange rate service unavailable"):
        super().__init__(detail)
