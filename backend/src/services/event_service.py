"""
Event service for managing scheduled helpline events.

Provides business logic for creating, generating, updating, publishing and
deleting events, single and in batches, plus the role-filtered read path.

Design:
- Events are created as drafts; publish/unpublish toggle visibility
- Recurring shifts are written in chunks, one transaction per chunk
- Batch operations handle every event in its own transaction and report
  a per-GUID outcome instead of failing as a whole
- Deleting an event deletes its sign-ups in the same transaction
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from itertools import islice
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.src.config.settings import AppSettings, get_settings
from backend.src.models import Event, EventStatus, EventType, SignUp, UserRole
from backend.src.services.batch import BatchResult
from backend.src.services.exceptions import (
    NotFoundError,
    ServiceError,
    ValidationError,
)
from backend.src.services.guid import GuidService
from backend.src.services.recurrence import (
    RecurrencePattern,
    RestrictionRule,
    ShiftPolicy,
    ShiftWindow,
    expand_recurrence,
)
from backend.src.services.store import commit_or_raise
from backend.src.utils.logging_config import get_logger


logger = get_logger("services")


# Event types a visitor may see once published
VISITOR_EVENT_TYPES = (EventType.OPEN_EVENT.value, EventType.GENERAL_MEETING.value)

# Fields a caller may change through update()
UPDATABLE_FIELDS = {
    "title",
    "description",
    "type",
    "start_time",
    "end_time",
    "max_capacity",
    "coordinator_uid",
    "supervisor",
}


@dataclass
class EventTemplate:
    """
    Shared properties of the events generated by a recurring schedule.

    When start_clock and end_clock are both set, every accepted day gets one
    event in that window; otherwise the ShiftPolicy windows are used.
    """

    title: str = "Shift"
    description: str = ""
    type: Union[EventType, str] = EventType.SHIFT
    max_capacity: int = 1
    start_clock: Optional[time] = None
    end_clock: Optional[time] = None


class EventService:
    """
    Service for managing scheduled events.

    Usage:
        >>> service = EventService(db_session)
        >>> created = service.generate_recurring(
        ...     EventTemplate(description="Evening line"),
        ...     start=date(2024, 6, 3),
        ...     end=date(2024, 6, 9),
        ...     pattern=RecurrencePattern.WEEKDAYS,
        ... )
    """

    def __init__(self, db: Session, settings: Optional[AppSettings] = None):
        """
        Initialize event service.

        Args:
            db: SQLAlchemy database session
            settings: Application settings (defaults to environment settings)
        """
        self.db = db
        self.settings = settings or get_settings()

    # =========================================================================
    # Read Operations
    # =========================================================================

    def get_by_guid(self, guid: str, for_update: bool = False) -> Event:
        """
        Get an event by GUID.

        Args:
            guid: Event GUID (evt_xxx format)
            for_update: Lock the row until the current transaction ends

        Returns:
            Event instance

        Raises:
            NotFoundError: If event not found
        """
        if not GuidService.validate_guid(guid, "evt"):
            raise NotFoundError("Event", guid)

        try:
            uuid_value = GuidService.parse_guid(guid, "evt")
        except ValueError:
            raise NotFoundError("Event", guid)

        query = self.db.query(Event).filter(Event.uuid == uuid_value)
        if for_update:
            query = query.with_for_update()

        event = query.first()
        if not event:
            raise NotFoundError("Event", guid)

        return event

    def list_all(self) -> List[Event]:
        """List every event ordered by start time."""
        return self.db.query(Event).order_by(Event.start_time.asc(), Event.id.asc()).all()

    def list_for_role(self, role: Union[UserRole, str]) -> List[Event]:
        """
        List the events a role is allowed to see.

        - visitor: published open events and general meetings
        - volunteer: published events of any type
        - coordinator/admin: every event regardless of status
        - anything else: nothing

        Args:
            role: Role claim of the acting user

        Returns:
            Events ordered by start time
        """
        role_value = role.value if isinstance(role, UserRole) else str(role).lower()

        query = self.db.query(Event)
        if role_value == UserRole.VISITOR.value:
            query = query.filter(
                Event.status == EventStatus.PUBLISHED.value,
                Event.type.in_(VISITOR_EVENT_TYPES),
            )
        elif role_value == UserRole.VOLUNTEER.value:
            query = query.filter(Event.status == EventStatus.PUBLISHED.value)
        elif role_value not in (UserRole.COORDINATOR.value, UserRole.ADMIN.value):
            logger.warning(f"Unknown role '{role}' requested events, returning none")
            return []

        events = query.order_by(Event.start_time.asc(), Event.id.asc()).all()
        logger.debug(f"Fetched {len(events)} events for role: {role_value}")
        return events

    @staticmethod
    def is_visible_to(event: Event, role: Union[UserRole, str]) -> bool:
        """Apply the list_for_role visibility rule to a single event."""
        role_value = role.value if isinstance(role, UserRole) else str(role).lower()
        if role_value in (UserRole.COORDINATOR.value, UserRole.ADMIN.value):
            return True
        if not event.is_published:
            return False
        if role_value == UserRole.VOLUNTEER.value:
            return True
        if role_value == UserRole.VISITOR.value:
            return event.type in VISITOR_EVENT_TYPES
        return False

    def build_event_response(self, event: Event, sign_up_count: Optional[int] = None) -> dict:
        """
        Build the API representation of an event.

        Args:
            event: Event instance
            sign_up_count: Current roster size, if known

        Returns:
            Dictionary matching EventResponse
        """
        remaining = None
        if sign_up_count is not None and not event.is_unlimited:
            remaining = max(event.max_capacity - sign_up_count, 0)

        return {
            "guid": event.guid,
            "title": event.title,
            "description": event.description or "",
            "type": event.type,
            "start_time": event.start_time,
            "end_time": event.end_time,
            "max_capacity": event.max_capacity,
            "status": event.status,
            "coordinator_uid": event.coordinator_uid,
            "supervisor": event.supervisor,
            "published_at": event.published_at,
            "created_at": event.created_at,
            "updated_at": event.updated_at,
            "sign_up_count": sign_up_count,
            "remaining_capacity": remaining,
        }

    # =========================================================================
    # Create Operations
    # =========================================================================

    def create(
        self,
        title: Optional[str],
        type: Union[EventType, str, None],
        start_time: Optional[datetime],
        end_time: Optional[datetime],
        max_capacity: Optional[int],
        description: Optional[str] = "",
        coordinator_uid: Optional[str] = None,
        supervisor: Optional[Dict[str, Any]] = None,
    ) -> Event:
        """
        Create a single draft event.

        Args:
            title: Event title (required, non-empty)
            type: EventType or its value (required)
            start_time: Start instant (required)
            end_time: End instant (required, after start_time)
            max_capacity: Maximum sign-ups, 0 for unlimited (required, >= 0)
            description: Optional description
            coordinator_uid: uid of the creating coordinator
            supervisor: Optional {"id", "name", "emoji"} record

        Returns:
            Created Event instance

        Raises:
            ValidationError: Listing every missing or invalid field
        """
        errors = _validate_event_fields(
            title=title,
            type=type,
            start_time=start_time,
            end_time=end_time,
            max_capacity=max_capacity,
        )
        try:
            supervisor = _normalize_supervisor(supervisor)
        except ValidationError as e:
            errors.update(e.errors)
        if errors:
            raise ValidationError.from_errors(errors)

        event = Event(
            title=title.strip(),
            description=description or "",
            type=_type_value(type),
            start_time=_to_utc_naive(start_time),
            end_time=_to_utc_naive(end_time),
            max_capacity=max_capacity,
            status=EventStatus.DRAFT.value,
            coordinator_uid=coordinator_uid,
            supervisor=supervisor,
        )

        self.db.add(event)
        commit_or_raise(self.db, "create event")
        self.db.refresh(event)

        logger.info(f"Created event: {event.guid} - {event.title}")
        return event

    def generate_recurring(
        self,
        template: EventTemplate,
        start: date,
        end: date,
        pattern: RecurrencePattern = RecurrencePattern.WEEKDAYS,
        restrictions: Optional[Iterable[RestrictionRule]] = None,
        coordinator_uid: Optional[str] = None,
        policy: Optional[ShiftPolicy] = None,
    ) -> int:
        """
        Generate draft events for every slot of a recurring schedule.

        Days come from expand_recurrence(); each day is split into the
        template's clock window or, without one, the ShiftPolicy windows.
        Events are written in chunks of batch_write_limit, one transaction
        per chunk. Chunks committed before a failure stay committed.

        Args:
            template: Shared event properties
            start: First day of the schedule (inclusive)
            end: Last day of the schedule (inclusive)
            pattern: Weekday pattern
            restrictions: Days or intervals to skip
            coordinator_uid: uid of the coordinator generating the schedule
            policy: Shift layout (defaults to settings)

        Returns:
            Number of events created

        Raises:
            ValidationError: If the template is invalid, or the date range is
                longer than max_recurrence_days or leaves the datetime range
            StoreUnavailableError: If a chunk fails; `committed` holds the
                number of events written by earlier chunks
        """
        errors = _validate_event_fields(
            title=template.title,
            type=template.type,
            max_capacity=template.max_capacity,
        )
        if (template.start_clock is None) != (template.end_clock is None):
            errors["end_clock" if template.start_clock else "start_clock"] = (
                "start_clock and end_clock must be given together"
            )
        max_days = self.settings.max_recurrence_days
        if end >= start and (end - start).days + 1 > max_days:
            errors["end_date"] = f"Schedule may span at most {max_days} days"
        if errors:
            raise ValidationError.from_errors(errors)

        policy = policy or ShiftPolicy.from_settings(self.settings)
        if template.start_clock is not None:
            policy = ShiftPolicy(
                windows=(ShiftWindow(template.start_clock, template.end_clock),),
                timezone=policy.timezone,
            )

        days = expand_recurrence(start, end, pattern, restrictions)
        if days:
            # Only the outermost days can leave the datetime range
            try:
                policy.slots_for([days[0], days[-1]])
            except OverflowError:
                raise ValidationError.from_errors(
                    {"end_date": "Schedule falls outside the supported date range"}
                )

        slots = policy.iter_slots(days)
        limit = self.settings.batch_write_limit
        created = 0
        while True:
            chunk = [
                Event(
                    title=template.title.strip(),
                    description=template.description or "",
                    type=_type_value(template.type),
                    start_time=slot_start,
                    end_time=slot_end,
                    max_capacity=template.max_capacity,
                    status=EventStatus.DRAFT.value,
                    coordinator_uid=coordinator_uid,
                )
                for slot_start, slot_end in islice(slots, limit)
            ]
            if not chunk:
                break
            self.db.add_all(chunk)
            commit_or_raise(
                self.db,
                f"write events {created + 1}-{created + len(chunk)}",
                committed=created,
            )
            created += len(chunk)

        logger.info(
            f"Generated {created} recurring events "
            f"({len(days)} days, {pattern.value}, {start} to {end})"
        )
        return created

    # =========================================================================
    # Update Operations
    # =========================================================================

    def update(self, guid: str, **updates: Any) -> Event:
        """
        Update an event's attributes.

        Any of title/type/start_time/end_time/max_capacity in the patch is
        validated with the same rules as create(), against the merged
        result. Status changes go through publish()/unpublish().

        Args:
            guid: Event GUID
            **updates: Fields to change (see UPDATABLE_FIELDS)

        Returns:
            Updated Event instance

        Raises:
            NotFoundError: If event not found
            ValidationError: If a field is unknown or invalid
        """
        event = self.get_by_guid(guid)

        unknown = sorted(set(updates) - UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError.from_errors(
                {name: "field cannot be updated" for name in unknown}
            )

        start_time = updates.get("start_time", event.start_time)
        end_time = updates.get("end_time", event.end_time)

        errors = {}
        if "title" in updates:
            errors.update(_validate_event_fields(title=updates["title"]))
        if "type" in updates:
            errors.update(_validate_event_fields(type=updates["type"]))
        if "max_capacity" in updates:
            errors.update(_validate_event_fields(max_capacity=updates["max_capacity"]))
        if "start_time" in updates or "end_time" in updates:
            errors.update(_validate_event_fields(start_time=start_time, end_time=end_time))
        if "supervisor" in updates:
            try:
                updates["supervisor"] = _normalize_supervisor(updates["supervisor"])
            except ValidationError as e:
                errors.update(e.errors)
        if errors:
            raise ValidationError.from_errors(errors)

        for name, value in updates.items():
            if name == "title":
                value = value.strip()
            elif name == "type":
                value = _type_value(value)
            elif name in ("start_time", "end_time"):
                value = _to_utc_naive(value)
            elif name == "description":
                value = value or ""
            setattr(event, name, value)

        event.updated_at = datetime.utcnow()
        commit_or_raise(self.db, "update event")
        self.db.refresh(event)

        logger.info(f"Updated event: {guid} ({', '.join(sorted(updates)) or 'no fields'})")
        return event

    def publish(self, guid: str) -> Event:
        """
        Publish an event and stamp published_at.

        Raises:
            NotFoundError: If event not found
        """
        event = self.get_by_guid(guid)
        now = datetime.utcnow()
        event.status = EventStatus.PUBLISHED.value
        event.published_at = now
        event.updated_at = now
        commit_or_raise(self.db, "publish event")
        self.db.refresh(event)

        logger.info(f"Published event: {guid}")
        return event

    def unpublish(self, guid: str) -> Event:
        """
        Return an event to draft.

        published_at is kept and keeps recording the most recent publish.

        Raises:
            NotFoundError: If event not found
        """
        event = self.get_by_guid(guid)
        event.status = EventStatus.DRAFT.value
        event.updated_at = datetime.utcnow()
        commit_or_raise(self.db, "unpublish event")
        self.db.refresh(event)

        logger.info(f"Unpublished event: {guid}")
        return event

    def assign_supervisor(self, guid: str, supervisor: Optional[Dict[str, Any]]) -> Event:
        """
        Set or clear the supervisor of an event.

        Args:
            guid: Event GUID
            supervisor: {"id", "name", "emoji"} record, or None to clear

        Raises:
            NotFoundError: If event not found
            ValidationError: If the record has neither id nor name
        """
        supervisor = _normalize_supervisor(supervisor)
        event = self.get_by_guid(guid)
        event.supervisor = supervisor
        event.updated_at = datetime.utcnow()
        commit_or_raise(self.db, "assign supervisor")
        self.db.refresh(event)

        if supervisor:
            logger.info(
                f"Assigned supervisor {supervisor.get('id') or supervisor.get('name')} to event: {guid}"
            )
        else:
            logger.info(f"Cleared supervisor of event: {guid}")
        return event

    # =========================================================================
    # Delete Operations
    # =========================================================================

    def delete(self, guid: str) -> None:
        """
        Permanently delete an event together with its sign-ups.

        Raises:
            NotFoundError: If event not found
        """
        event = self.get_by_guid(guid)

        removed = (
            self.db.query(SignUp)
            .filter(SignUp.event_id == event.id)
            .delete(synchronize_session=False)
        )
        self.db.delete(event)
        commit_or_raise(self.db, "delete event")

        logger.info(f"Deleted event: {guid} ({removed} sign-ups removed)")

    def reset_sign_ups(self, guid: str) -> int:
        """
        Remove every sign-up of an event in one transaction.

        Returns:
            Number of sign-ups removed

        Raises:
            NotFoundError: If event not found
        """
        event = self.get_by_guid(guid, for_update=True)

        removed = (
            self.db.query(SignUp)
            .filter(SignUp.event_id == event.id)
            .delete(synchronize_session=False)
        )
        commit_or_raise(self.db, "reset sign-ups")

        logger.info(f"Reset sign-ups of event: {guid} ({removed} removed)")
        return removed

    # =========================================================================
    # Batch Operations
    # =========================================================================

    def batch_publish(self, guids: Iterable[str]) -> BatchResult:
        """Publish each event independently."""
        return self._run_batch("publish", guids, self.publish)

    def batch_unpublish(self, guids: Iterable[str]) -> BatchResult:
        """Return each event to draft independently."""
        return self._run_batch("unpublish", guids, self.unpublish)

    def batch_delete(self, guids: Iterable[str]) -> BatchResult:
        """Delete each event (and its sign-ups) independently."""
        return self._run_batch("delete", guids, self.delete)

    def batch_reset_sign_ups(self, guids: Iterable[str]) -> BatchResult:
        """
        Clear the roster of each event.

        Each event is reset atomically; events are independent of each
        other, so a failure leaves other rosters reset.
        """
        return self._run_batch("reset_sign_ups", guids, self.reset_sign_ups)

    def batch_assign_supervisor(
        self,
        guids: Iterable[str],
        supervisor: Optional[Dict[str, Any]],
    ) -> BatchResult:
        """
        Assign the same supervisor to each event.

        Raises:
            ValidationError: If the supervisor record is invalid (nothing is written)
        """
        supervisor = _normalize_supervisor(supervisor)
        return self._run_batch(
            "assign_supervisor",
            guids,
            lambda guid: self.assign_supervisor(guid, supervisor),
        )

    def _run_batch(
        self,
        action: str,
        guids: Iterable[str],
        operation: Callable[[str], Any],
    ) -> BatchResult:
        result = BatchResult(action=action)

        # Each GUID is processed once, in first-seen order
        for guid in dict.fromkeys(guids):
            try:
                operation(guid)
            except (ServiceError, SQLAlchemyError) as e:
                self.db.rollback()
                result.record_failure(guid, e)
                logger.warning(f"Batch {action} failed for {guid}: {e}")
            else:
                result.record_success(guid)

        logger.info(
            f"Batch {action}: {len(result.succeeded)} succeeded, {len(result.failed)} failed"
        )
        return result


# =============================================================================
# Validation helpers
# =============================================================================

_MISSING = object()


def _validate_event_fields(
    title: Any = _MISSING,
    type: Any = _MISSING,
    start_time: Any = _MISSING,
    end_time: Any = _MISSING,
    max_capacity: Any = _MISSING,
) -> Dict[str, str]:
    """
    Validate the event fields that were passed; returns {field: message}.
    """
    errors = {}

    if title is not _MISSING:
        if not isinstance(title, str) or not title.strip():
            errors["title"] = "title is required and cannot be empty"

    if type is not _MISSING:
        if type is None or type == "":
            errors["type"] = "type is required"
        else:
            try:
                _type_value(type)
            except ValueError:
                valid = ", ".join(t.value for t in EventType)
                errors["type"] = f"type must be one of: {valid}"

    if start_time is not _MISSING and not isinstance(start_time, datetime):
        errors["start_time"] = "start_time is required and must be a datetime"

    if end_time is not _MISSING and not isinstance(end_time, datetime):
        errors["end_time"] = "end_time is required and must be a datetime"

    if (
        start_time is not _MISSING and end_time is not _MISSING
        and "start_time" not in errors and "end_time" not in errors
        and _to_utc_naive(end_time) <= _to_utc_naive(start_time)
    ):
        errors["end_time"] = "end_time must be after start_time"

    if max_capacity is not _MISSING:
        if max_capacity is None:
            errors["max_capacity"] = "max_capacity is required (0 for unlimited)"
        elif isinstance(max_capacity, bool) or not isinstance(max_capacity, int):
            errors["max_capacity"] = "max_capacity must be an integer"
        elif max_capacity < 0:
            errors["max_capacity"] = "max_capacity must be >= 0 (0 for unlimited)"

    return errors


def _type_value(value: Union[EventType, str]) -> str:
    if isinstance(value, EventType):
        return value.value
    return EventType(str(value).lower()).value


def _normalize_supervisor(supervisor: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """
    Normalize a supervisor record to {"id", "name", "emoji"}.

    None clears the supervisor. Empty strings count as absent.

    Raises:
        ValidationError: If the record has neither id nor name
    """
    if supervisor is None:
        return None

    record = {
        key: (supervisor.get(key) or None)
        for key in ("id", "name", "emoji")
    }
    if not record["id"] and not record["name"]:
        raise ValidationError(
            "supervisor needs at least an id or a name",
            field="supervisor",
        )
    return record


def _to_utc_naive(value: datetime) -> datetime:
    """Store instants as naive UTC; naive input is taken to be UTC already."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
