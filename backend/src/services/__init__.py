"""
Service layer for business logic.

This module exports all service classes for use in API endpoints.
"""

from backend.src.services.exceptions import (
    ServiceError,
    NotFoundError,
    ConflictError,
    ValidationError,
    CapacityExceededError,
    DuplicateSignUpError,
    NoSignUpError,
    StoreUnavailableError,
)
from backend.src.services.recurrence import (
    RecurrencePattern,
    DayRestriction,
    IntervalRestriction,
    ShiftWindow,
    ShiftPolicy,
    expand_recurrence,
)
from backend.src.services.batch import BatchOutcome, BatchResult
from backend.src.services.event_service import EventService, EventTemplate
from backend.src.services.user_service import UserService
from backend.src.services.sign_up_service import SignUpService

__all__ = [
    "ServiceError",
    "NotFoundError",
    "ConflictError",
    "ValidationError",
    "CapacityExceededError",
    "DuplicateSignUpError",
    "NoSignUpError",
    "StoreUnavailableError",
    # Recurrence
    "RecurrencePattern",
    "DayRestriction",
    "IntervalRestriction",
    "ShiftWindow",
    "ShiftPolicy",
    "expand_recurrence",
    # Events and rosters
    "BatchOutcome",
    "BatchResult",
    "EventService",
    "EventTemplate",
    "UserService",
    "SignUpService",
]
