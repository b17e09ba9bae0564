"""
Domain Errors

Typed failures returned to callers of the reservation and inquiry engine.
They are business outcomes, never retried, and surfaced verbatim to the
end actor. ``TransientStorageError`` is the only infrastructure failure and
is raised once the bounded retry of an atomic unit is exhausted.
"""


class DomainError(Exception):
    """Base class for every failure raised by domain services."""

    code = "domain_error"

    def __init__(self, message: str = "", **context):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or (self.__class__.__doc__ or "").strip()
        self.context = context

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, **self.context}


class NotFound(DomainError):
    """Referenced object does not exist."""

    code = "not_found"

    def __init__(self, entity: str, entity_id):
        super().__init__(f"{entity} {entity_id} not found", entity=entity, id=entity_id)
        self.entity = entity
        self.entity_id = entity_id


class DuplicateInquiry(DomainError):
    """You already have an active inquiry for this property."""

    code = "duplicate_inquiry"


class CommissionLocked(DomainError):
    """Cannot reassign inquiry - commission is locked after deposit payment."""

    code = "commission_locked"


class ScheduleConflict(DomainError):
    """Schedule conflict detected. Please choose a different time slot (30-minute buffer required)."""

    code = "schedule_conflict"


class ValidationFailure(DomainError):
    """Command payload is not valid."""

    code = "validation_failure"


class PropertyUnavailable(DomainError):
    """Property is already committed to another inquiry."""

    code = "property_unavailable"


class InvalidTransition(DomainError):
    """Requested status change is not allowed from the current status."""

    code = "invalid_transition"


class TransientStorageError(DomainError):
    """Storage failed repeatedly; no changes were saved."""

    code = "transient_storage_error"

    def __init__(self, attempts: int, cause: Exception):
        super().__init__(
            f"Operation failed after {attempts} attempts: {cause}",
            attempts=attempts,
        )
        self.attempts = attempts
        self.cause = cause
