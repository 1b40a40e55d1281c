"""
Event model for scheduled shifts, meetings and activities.

Events are the schedulable units volunteers sign up for. Shifts are
generated in bulk from recurrence rules; other types are usually created
one at a time.

Design Rationale:
- Every event starts as a draft and is only visible to volunteers/visitors
  once published
- max_capacity of 0 means unlimited
- published_at records the most recent publish and survives unpublish
- Deleting an event deletes its sign-ups (no orphaned roster rows)
- Instants are stored as naive UTC datetimes
"""

import enum
from datetime import datetime

from sqlalchemy import (
    Column, Integer, String, DateTime, Text, CheckConstraint, Index
)
from sqlalchemy.orm import relationship

from backend.src.models import Base
from backend.src.models.mixins import GuidMixin
from backend.src.models.types import JSONBType


class EventType(enum.Enum):
    """Kinds of event the helpline schedules."""
    SHIFT = "shift"
    TEAMBUILDING = "teambuilding"
    OPEN_EVENT = "open_event"
    COORDINATION_MEETING = "coordination_meeting"
    GENERAL_MEETING = "general_meeting"


class EventStatus(enum.Enum):
    """Event lifecycle status."""
    DRAFT = "draft"
    PUBLISHED = "published"


class Event(Base, GuidMixin):
    """
    Scheduled event model.

    Attributes:
        id: Primary key (internal, never exposed)
        uuid: UUIDv7 for external identification (inherited from GuidMixin)
        guid: GUID string property (evt_xxx, inherited from GuidMixin)
        title: Event title (non-empty)
        description: Free text, may be empty
        type: EventType value
        start_time: Start instant (UTC)
        end_time: End instant (UTC), after start_time
        max_capacity: Maximum sign-ups, 0 for unlimited
        status: draft or published
        coordinator_uid: Identity-provider uid of the creating coordinator
        supervisor: Optional {"id", "name", "emoji"} record
        published_at: Time of the most recent publish
        created_at: Creation timestamp
        updated_at: Last update timestamp

    Relationships:
        sign_ups: Roster entries (one-to-many, CASCADE on delete)

    Constraints:
        - max_capacity >= 0
        - end_time > start_time
        - status in (draft, published)

    Indexes:
        - uuid (unique, for GUID lookups)
        - start_time (for ordered listing)
        - status, type (for role-filtered listing)
    """

    __tablename__ = "events"

    GUID_PREFIX = "evt"

    id = Column(Integer, primary_key=True, autoincrement=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    type = Column(String(50), nullable=False)

    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False)

    max_capacity = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default=EventStatus.DRAFT.value)

    coordinator_uid = Column(String(128), nullable=True, index=True)
    supervisor = Column(JSONBType, nullable=True)

    published_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False
    )

    sign_ups = relationship(
        "SignUp",
        back_populates="event",
        lazy="dynamic",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint("max_capacity >= 0", name="ck_events_max_capacity_non_negative"),
        CheckConstraint("end_time > start_time", name="ck_events_end_after_start"),
        CheckConstraint("status IN ('draft', 'published')", name="ck_events_status"),
        Index("ix_events_status_type", "status", "type"),
    )

    @property
    def is_published(self) -> bool:
        """Check whether the event is visible to volunteers."""
        return self.status == EventStatus.PUBLISHED.value

    @property
    def is_unlimited(self) -> bool:
        """Check whether the event accepts any number of sign-ups."""
        return self.max_capacity == 0

    def __repr__(self) -> str:
        return (
            f"<Event("
            f"id={self.id}, "
            f"title='{self.title}', "
            f"type='{self.type}', "
            f"status='{self.status}'"
            f")>"
        )

    def __str__(self) -> str:
        return f"{self.title} ({self.start_time:%Y-%m-%d %H:%M})"
