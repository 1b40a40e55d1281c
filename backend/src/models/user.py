"""
User model mirroring the identity provider's user records.

Users are created and managed outside the scheduling core (admin screens,
identity provider). The core only reads them: to resolve a volunteer from
the id number a coordinator types in, and to list supervisor candidates.
"""

import enum

from sqlalchemy import Column, Integer, String

from backend.src.models import Base
from backend.src.models.mixins import GuidMixin


class UserRole(enum.Enum):
    """
    Role claim issued by the identity provider.

    - ADMIN / COORDINATOR: see every event and manage schedules
    - VOLUNTEER: sees published events of any type
    - VISITOR: sees published open events and general meetings only
    """
    ADMIN = "admin"
    COORDINATOR = "coordinator"
    VOLUNTEER = "volunteer"
    VISITOR = "visitor"


class User(Base, GuidMixin):
    """
    Helpline member.

    Attributes:
        id: Primary key (internal, never exposed)
        guid: GUID string property (usr_xxx)
        uid: Identity-provider key (unique)
        id_number: Human-facing member number (3-10 digits, unique)
        name: Display name
        role: UserRole value
    """

    __tablename__ = "users"

    GUID_PREFIX = "usr"

    id = Column(Integer, primary_key=True, autoincrement=True)
    uid = Column(String(128), nullable=False, unique=True, index=True)
    id_number = Column(String(10), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=True)
    role = Column(String(20), nullable=False, default=UserRole.VOLUNTEER.value)

    @property
    def is_privileged(self) -> bool:
        """Check whether the user manages schedules (coordinator or admin)."""
        return self.role in (UserRole.ADMIN.value, UserRole.COORDINATOR.value)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, id_number='{self.id_number}', role='{self.role}')>"
