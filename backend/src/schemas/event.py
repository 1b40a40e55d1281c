"""
Pydantic schemas for event API request/response validation.

Provides data validation and serialization for:
- Single event creation and recurring shift generation requests
- Event update and supervisor assignment requests
- Event API responses

Design:
- Request schemas only enforce shapes and types; business rules (non-empty
  title, end after start, capacity >= 0) are checked by EventService so a
  form gets every offending field back at once
- GUIDs are exposed via guid property, never internal IDs
- Datetimes are UTC and serialized with an explicit "Z"
"""

from datetime import date, datetime, time, timezone
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_serializer

from backend.src.services.recurrence import (
    DayRestriction,
    IntervalRestriction,
    RecurrencePattern,
)


def _utc_iso(v: Optional[datetime]) -> Optional[str]:
    if v is None:
        return None
    if v.tzinfo is not None:
        v = v.astimezone(timezone.utc).replace(tzinfo=None)
    return v.isoformat() + "Z"


# ============================================================================
# Shared
# ============================================================================


class SupervisorSchema(BaseModel):
    """
    Supervisor record attached to an event.

    At least one of id or name must be given.
    """

    id: Optional[str] = Field(default=None, max_length=128)
    name: Optional[str] = Field(default=None, max_length=255)
    emoji: Optional[str] = Field(default=None, max_length=16)

    model_config = {
        "from_attributes": True,
        "json_schema_extra": {
            "example": {"id": "uid-coord-7", "name": "Rita", "emoji": "🦉"}
        },
    }


# ============================================================================
# Request Schemas
# ============================================================================


class EventCreate(BaseModel):
    """
    Schema for creating a single event.

    Fields are optional at the schema level so that missing values are
    reported together with invalid ones.
    """

    title: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = Field(default="")
    type: Optional[str] = Field(default=None, description="Event type (shift, open_event, ...)")
    start_time: Optional[datetime] = Field(default=None)
    end_time: Optional[datetime] = Field(default=None)
    max_capacity: Optional[int] = Field(default=None, description="0 for unlimited")
    supervisor: Optional[SupervisorSchema] = Field(default=None)

    model_config = {
        "json_schema_extra": {
            "example": {
                "title": "General assembly",
                "type": "general_meeting",
                "start_time": "2024-06-12T18:00:00Z",
                "end_time": "2024-06-12T20:00:00Z",
                "max_capacity": 0,
            }
        }
    }


class DayRestrictionSchema(BaseModel):
    """Exclude one day."""

    kind: Literal["day"] = "day"
    day: date

    def to_rule(self) -> DayRestriction:
        return DayRestriction(self.day)


class IntervalRestrictionSchema(BaseModel):
    """Exclude every day from start to end, both inclusive."""

    kind: Literal["interval"] = "interval"
    start: date
    end: date

    def to_rule(self) -> IntervalRestriction:
        return IntervalRestriction(self.start, self.end)


RestrictionSchema = Annotated[
    Union[DayRestrictionSchema, IntervalRestrictionSchema],
    Field(discriminator="kind"),
]


class RecurringEventsCreate(BaseModel):
    """
    Schema for generating recurring shifts.

    Each accepted day gets one event per shift window. When start_clock and
    end_clock are given they define the single daily window; otherwise the
    configured shift windows are used.
    """

    title: str = Field(default="Shift", max_length=255)
    description: Optional[str] = Field(default="")
    type: str = Field(default="shift")
    max_capacity: int = Field(default=1)

    start_date: date = Field(..., description="First day (inclusive)")
    end_date: date = Field(..., description="Last day (inclusive)")
    pattern: RecurrencePattern = Field(default=RecurrencePattern.WEEKDAYS)
    restrictions: List[RestrictionSchema] = Field(default_factory=list)

    start_clock: Optional[time] = Field(default=None, description="Daily start (local time)")
    end_clock: Optional[time] = Field(default=None, description="Daily end (local time)")

    model_config = {
        "json_schema_extra": {
            "example": {
                "description": "Evening line",
                "start_date": "2024-06-03",
                "end_date": "2024-06-30",
                "pattern": "weekdays",
                "restrictions": [
                    {"kind": "day", "day": "2024-06-13"},
                    {"kind": "interval", "start": "2024-06-24", "end": "2024-06-26"},
                ],
            }
        }
    }


class EventUpdate(BaseModel):
    """
    Schema for updating an event.

    Only the fields present in the request are changed. Status changes go
    through the publish/unpublish endpoints.
    """

    title: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = Field(default=None)
    type: Optional[str] = Field(default=None)
    start_time: Optional[datetime] = Field(default=None)
    end_time: Optional[datetime] = Field(default=None)
    max_capacity: Optional[int] = Field(default=None)
    supervisor: Optional[SupervisorSchema] = Field(default=None)


class AssignSupervisorRequest(BaseModel):
    """Set the supervisor of an event; null clears it."""

    supervisor: Optional[SupervisorSchema] = Field(default=None)


# ============================================================================
# Response Schemas
# ============================================================================


class EventResponse(BaseModel):
    """Schema for event API responses."""

    guid: str = Field(..., description="Event GUID (evt_xxx)")
    title: str
    description: str
    type: str
    start_time: datetime
    end_time: datetime
    max_capacity: int
    status: str
    coordinator_uid: Optional[str] = None
    supervisor: Optional[SupervisorSchema] = None
    published_at: Optional[datetime] = None

    # Roster summary, present when the caller asked for it
    sign_up_count: Optional[int] = None
    remaining_capacity: Optional[int] = None

    created_at: datetime
    updated_at: datetime

    @field_serializer("start_time", "end_time", "published_at", "created_at", "updated_at")
    def serialize_datetime_utc(self, v: Optional[datetime]) -> Optional[str]:
        """Serialize datetime as ISO 8601 with explicit UTC timezone."""
        return _utc_iso(v)

    model_config = {
        "from_attributes": True,
        "json_schema_extra": {
            "example": {
                "guid": "evt_01hgw2bbg0000000000000001",
                "title": "Shift",
                "description": "Evening line",
                "type": "shift",
                "start_time": "2024-06-03T19:00:00Z",
                "end_time": "2024-06-03T21:30:00Z",
                "max_capacity": 1,
                "status": "published",
                "supervisor": {"id": "uid-coord-7", "name": "Rita", "emoji": "🦉"},
                "published_at": "2024-05-20T10:00:00Z",
                "sign_up_count": 1,
                "remaining_capacity": 0,
                "created_at": "2024-05-19T09:00:00Z",
                "updated_at": "2024-05-20T10:00:00Z",
            }
        },
    }


class RecurringEventsResponse(BaseModel):
    """Result of a recurring generation."""

    created: int = Field(..., description="Number of draft events created")
