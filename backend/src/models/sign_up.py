"""
SignUp model linking a user to an event roster.

Design Rationale:
- One row per (event, user); the unique constraint backs the service-level
  duplicate check
- Users are identified by the identity provider's uid, not a local FK,
  since user records are owned by the identity provider
"""

from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from backend.src.models import Base
from backend.src.models.mixins import GuidMixin


class SignUp(Base, GuidMixin):
    """
    Event roster entry.

    Attributes:
        id: Primary key (internal, never exposed)
        uuid: UUIDv7 for external identification (inherited from GuidMixin)
        guid: GUID string property (sgn_xxx, inherited from GuidMixin)
        event_id: FK to Event
        user_uid: Identity-provider uid of the volunteer
        signed_up_at: When the sign-up was recorded

    Relationships:
        event: Parent Event (many-to-one, CASCADE on delete)
    """

    __tablename__ = "event_sign_ups"

    GUID_PREFIX = "sgn"

    id = Column(Integer, primary_key=True, autoincrement=True)

    event_id = Column(
        Integer,
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    user_uid = Column(String(128), nullable=False, index=True)
    signed_up_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    event = relationship("Event", back_populates="sign_ups")

    __table_args__ = (
        UniqueConstraint("event_id", "user_uid", name="uq_event_sign_ups_event_user"),
    )

    def __repr__(self) -> str:
        return f"<SignUp(id={self.id}, event_id={self.event_id}, user_uid='{self.user_uid}')>"
