"""
Pydantic schemas for API request/response validation.

This module exports all schema classes for use in API endpoints.
"""

from backend.src.schemas.event import (
    SupervisorSchema,
    EventCreate,
    DayRestrictionSchema,
    IntervalRestrictionSchema,
    RecurringEventsCreate,
    EventUpdate,
    AssignSupervisorRequest,
    EventResponse,
    RecurringEventsResponse,
)
from backend.src.schemas.sign_up import (
    ForcedSignUpRequest,
    SignUpResponse,
    CancelSignUpResponse,
    SignUpCountsResponse,
)
from backend.src.schemas.batch import (
    BatchRequest,
    BatchAssignSupervisorRequest,
    BatchResultResponse,
)
from backend.src.schemas.user import SupervisorCandidateResponse

__all__ = [
    # Events
    "SupervisorSchema",
    "EventCreate",
    "DayRestrictionSchema",
    "IntervalRestrictionSchema",
    "RecurringEventsCreate",
    "EventUpdate",
    "AssignSupervisorRequest",
    "EventResponse",
    "RecurringEventsResponse",
    # Sign-ups
    "ForcedSignUpRequest",
    "SignUpResponse",
    "CancelSignUpResponse",
    "SignUpCountsResponse",
    # Batch
    "BatchRequest",
    "BatchAssignSupervisorRequest",
    "BatchResultResponse",
    # Users
    "SupervisorCandidateResponse",
]
