"""
User service for read-only lookups of helpline members.

User records are owned by the identity provider and the admin screens.
The scheduling core only needs to find a member by uid or by the id number
a coordinator types in, and to list who can supervise a shift.
"""

import re
from typing import List

from sqlalchemy.orm import Session

from backend.src.models import User, UserRole
from backend.src.services.exceptions import NotFoundError, ValidationError
from backend.src.utils.logging_config import get_logger


logger = get_logger("services")

# Member numbers are 3 to 10 digits
ID_NUMBER_PATTERN = re.compile(r"^\d{3,10}$")

SUPERVISOR_ROLES = (UserRole.COORDINATOR.value, UserRole.ADMIN.value)


class UserService:
    """
    Service for looking up users.

    Usage:
        >>> service = UserService(db_session)
        >>> user = service.get_by_id_number("1042")
        >>> print(user.uid)
    """

    def __init__(self, db: Session):
        """
        Initialize user service.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    def get_by_uid(self, uid: str) -> User:
        """
        Get a user by identity-provider uid.

        Raises:
            NotFoundError: If user not found
        """
        user = self.db.query(User).filter(User.uid == uid).first()
        if not user:
            raise NotFoundError("User", uid)
        return user

    def get_by_id_number(self, id_number: str) -> User:
        """
        Get a user by member id number.

        Args:
            id_number: 3-10 digit member number (surrounding whitespace ignored)

        Returns:
            User instance

        Raises:
            ValidationError: If the id number is malformed
            NotFoundError: If no user holds the id number
        """
        id_number = (id_number or "").strip()
        if not ID_NUMBER_PATTERN.match(id_number):
            raise ValidationError("id_number must be 3 to 10 digits", field="id_number")

        user = self.db.query(User).filter(User.id_number == id_number).first()
        if not user:
            logger.debug(f"No user with id number {id_number}")
            raise NotFoundError("User with id number", id_number)
        return user

    def list_supervisors(self) -> List[User]:
        """List supervisor candidates (coordinators and admins) by name."""
        return (
            self.db.query(User)
            .filter(User.role.in_(SUPERVISOR_ROLES))
            .order_by(User.name.asc(), User.id_number.asc())
            .all()
        )
