"""
SQLAlchemy models for the crisis line scheduling backend.

This module provides the declarative base class and imports all models
to ensure they are registered with SQLAlchemy's metadata.
"""

from sqlalchemy.orm import declarative_base

# All models inherit from this Base class
Base = declarative_base()


# Import all models here so they are registered with Base.metadata
# This is required for Alembic autogenerate to detect models
from backend.src.models.event import Event, EventType, EventStatus
from backend.src.models.sign_up import SignUp
from backend.src.models.user import User, UserRole

__all__ = [
    "Base",
    "Event",
    "EventType",
    "EventStatus",
    "SignUp",
    "User",
    "UserRole",
]
