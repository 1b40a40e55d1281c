"""
Custom SQLAlchemy types for cross-database compatibility.

Lets tests run on SQLite while production uses PostgreSQL.
"""

from sqlalchemy import TypeDecorator, JSON
from sqlalchemy.dialects.postgresql import JSONB


class JSONBType(TypeDecorator):
    """
    Platform-independent JSON document column.

    PostgreSQL stores the value as JSONB; SQLite falls back to JSON text.
    Used for small embedded records such as an event's supervisor.
    """

    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            return dialect.type_descriptor(JSONB())
        return dialect.type_descriptor(JSON())
