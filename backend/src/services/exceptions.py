"""
Custom exceptions for service layer.

Provides specific exception types for business logic errors
that can be translated to appropriate HTTP responses.
"""

from typing import Dict, Optional


class ServiceError(Exception):
    """Base exception for service layer errors."""
    pass


class NotFoundError(ServiceError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: any):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} {identifier} not found")


class ValidationError(ServiceError):
    """
    Raised when input validation fails.

    Collects every offending field so a form can report them all at once.
    `field` is kept for the single-field case.
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        errors: Optional[Dict[str, str]] = None
    ):
        self.message = message
        self.field = field
        self.errors = dict(errors or {})
        if field and field not in self.errors:
            self.errors[field] = message
        super().__init__(message)

    @classmethod
    def from_errors(cls, errors: Dict[str, str]) -> "ValidationError":
        """Build a ValidationError listing all invalid fields."""
        message = "; ".join(f"{field}: {msg}" for field, msg in errors.items())
        return cls(message, errors=errors)


class ConflictError(ServiceError):
    """Raised when an operation conflicts with existing state."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class CapacityExceededError(ConflictError):
    """Raised when a non-forced sign-up targets a full event."""

    def __init__(self, event_guid: str, max_capacity: int):
        self.event_guid = event_guid
        self.max_capacity = max_capacity
        super().__init__(
            f"Event {event_guid} has reached its maximum capacity ({max_capacity})"
        )


class DuplicateSignUpError(ConflictError):
    """Raised when a user is already signed up for an event."""

    def __init__(self, event_guid: str, user_uid: str):
        self.event_guid = event_guid
        self.user_uid = user_uid
        super().__init__(f"User {user_uid} is already signed up for event {event_guid}")


class NoSignUpError(ServiceError):
    """Raised when cancelling a sign-up that does not exist."""

    def __init__(self, event_guid: str, user_uid: str):
        self.event_guid = event_guid
        self.user_uid = user_uid
        self.message = f"No sign-up found for user {user_uid} on event {event_guid}"
        super().__init__(self.message)


class StoreUnavailableError(ServiceError):
    """
    Raised when the database cannot complete a write or read.

    Not retried by the service layer. `committed` reports how many records
    were durably written before the failure for chunked writes.
    """

    def __init__(self, message: str, committed: int = 0):
        self.message = message
        self.committed = committed
        super().__init__(message)
