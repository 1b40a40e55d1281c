"""
Sign-up service for event rosters.

Enforces the roster invariants:
- a non-forced sign-up never pushes an event past max_capacity
- a user appears at most once on an event's roster, forced or not

The event row is locked for the count-check-insert sequence so concurrent
sign-ups for the same event are serialized. The unique constraint on
(event_id, user_uid) catches any duplicate that still slips through.
"""

from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.src.models import Event, SignUp
from backend.src.services.event_service import EventService
from backend.src.services.exceptions import (
    CapacityExceededError,
    DuplicateSignUpError,
    NoSignUpError,
)
from backend.src.services.guid import GuidService
from backend.src.services.store import commit_or_raise
from backend.src.services.user_service import UserService
from backend.src.utils.logging_config import get_logger


logger = get_logger("services")


class SignUpService:
    """
    Service for signing users up to events and querying rosters.

    Usage:
        >>> service = SignUpService(db_session)
        >>> sign_up = service.sign_up("evt_01hgw2bbg...", "firebase-uid-123")
        >>> service.cancel("evt_01hgw2bbg...", "firebase-uid-123")
        1
    """

    def __init__(self, db: Session):
        self.db = db
        self.events = EventService(db)
        self.users = UserService(db)

    def sign_up(self, event_guid: str, user_uid: str, forced: bool = False) -> SignUp:
        """
        Add a user to an event's roster.

        Checks run in order: event exists, capacity (skipped when forced or
        when the event is unlimited), duplicate. A user already on a full
        event's roster who retries therefore gets CapacityExceededError,
        not DuplicateSignUpError; keep this order.

        Args:
            event_guid: Event GUID
            user_uid: Identity-provider uid of the user
            forced: Coordinator override of the capacity check

        Returns:
            Created SignUp instance

        Raises:
            NotFoundError: If event not found
            CapacityExceededError: If the event is full and forced is False
            DuplicateSignUpError: If the user is already on the roster
        """
        event = self.events.get_by_guid(event_guid, for_update=True)

        if not forced and not event.is_unlimited:
            current = self.count_for_event(event)
            if current >= event.max_capacity:
                self.db.rollback()
                logger.warning(
                    f"Sign-up rejected, event full: {event_guid} "
                    f"({current}/{event.max_capacity}) user={user_uid}"
                )
                raise CapacityExceededError(event_guid, event.max_capacity)

        existing = (
            self.db.query(SignUp.id)
            .filter(SignUp.event_id == event.id, SignUp.user_uid == user_uid)
            .first()
        )
        if existing:
            self.db.rollback()
            logger.warning(f"Sign-up rejected, duplicate: {event_guid} user={user_uid}")
            raise DuplicateSignUpError(event_guid, user_uid)

        sign_up = SignUp(event_id=event.id, user_uid=user_uid)
        self.db.add(sign_up)
        try:
            commit_or_raise(self.db, "record sign-up")
        except IntegrityError:
            self.db.rollback()
            logger.warning(f"Sign-up rejected by constraint: {event_guid} user={user_uid}")
            raise DuplicateSignUpError(event_guid, user_uid)
        self.db.refresh(sign_up)

        logger.info(
            f"Signed up user {user_uid} for event {event_guid}"
            + (" (forced)" if forced else "")
        )
        return sign_up

    def sign_up_by_id_number(
        self,
        event_guid: str,
        id_number: str,
        forced: bool = True,
    ) -> SignUp:
        """
        Sign up the user holding an id number, as a coordinator does.

        Raises:
            ValidationError: If the id number is malformed
            NotFoundError: If no user has that id number, or event not found
        """
        user = self.users.get_by_id_number(id_number)
        return self.sign_up(event_guid, user.uid, forced=forced)

    def cancel(self, event_guid: str, user_uid: str) -> int:
        """
        Remove a user from an event's roster.

        Every matching row is removed in one transaction.

        Returns:
            Number of sign-ups removed (at least 1)

        Raises:
            NotFoundError: If event not found
            NoSignUpError: If the user is not on the roster
        """
        event = self.events.get_by_guid(event_guid)

        removed = (
            self.db.query(SignUp)
            .filter(SignUp.event_id == event.id, SignUp.user_uid == user_uid)
            .delete(synchronize_session=False)
        )
        if not removed:
            self.db.rollback()
            raise NoSignUpError(event_guid, user_uid)

        commit_or_raise(self.db, "cancel sign-up")
        logger.info(f"Cancelled sign-up of user {user_uid} for event {event_guid}")
        return removed

    # =========================================================================
    # Roster queries
    # =========================================================================

    def list_for_event(self, event_guid: str) -> List[SignUp]:
        """
        List an event's roster in sign-up order.

        Raises:
            NotFoundError: If event not found
        """
        event = self.events.get_by_guid(event_guid)
        return (
            self.db.query(SignUp)
            .filter(SignUp.event_id == event.id)
            .order_by(SignUp.signed_up_at.asc(), SignUp.id.asc())
            .all()
        )

    def list_for_user(self, user_uid: str) -> List[SignUp]:
        """List a user's sign-ups, soonest event first."""
        return (
            self.db.query(SignUp)
            .join(Event, SignUp.event_id == Event.id)
            .filter(SignUp.user_uid == user_uid)
            .order_by(Event.start_time.asc(), SignUp.id.asc())
            .all()
        )

    def list_all(self) -> List[SignUp]:
        return self.db.query(SignUp).order_by(SignUp.id.asc()).all()

    def count_for_event(self, event: Event) -> int:
        return (
            self.db.query(func.count(SignUp.id))
            .filter(SignUp.event_id == event.id)
            .scalar()
        ) or 0

    def count_by_event(self) -> Dict[str, int]:
        """
        Roster size per event GUID.

        Events without sign-ups are omitted.
        """
        rows = (
            self.db.query(Event.uuid, func.count(SignUp.id))
            .join(SignUp, SignUp.event_id == Event.id)
            .group_by(Event.id, Event.uuid)
            .all()
        )
        return {
            GuidService.encode_uuid(event_uuid, Event.GUID_PREFIX): count
            for event_uuid, count in rows
        }

    def remaining_capacity(self, event: Event) -> Optional[int]:
        """Free places on an event, or None when it is unlimited."""
        if event.is_unlimited:
            return None
        return max(event.max_capacity - self.count_for_event(event), 0)
