"""
GUID mixin for SQLAlchemy models.

Provides UUID-based Global Unique Identifiers for user-facing entities.
Uses UUIDv7 (time-ordered) with Crockford's Base32 encoding for URL-safe,
human-readable identifiers.

GUID Format: {prefix}_{base32_uuid}
Examples:
    - evt_01j0a2bbg0000000000000000 (Event)
    - sgn_01j0a2bbg0000000000000001 (SignUp)
    - usr_01j0a2bbg0000000000000002 (User)
"""

import uuid as uuid_module
from typing import ClassVar

import base32_crockford
from sqlalchemy import Column, TypeDecorator, LargeBinary
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from uuid_extensions import uuid7


class UUIDType(TypeDecorator):
    """
    Platform-independent UUID type.

    Uses PostgreSQL's native UUID type when available,
    otherwise stores as 16-byte LargeBinary for SQLite.

    Always presents as a Python UUID object.
    """

    impl = LargeBinary
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            return dialect.type_descriptor(PG_UUID(as_uuid=True))
        else:
            return dialect.type_descriptor(LargeBinary(16))

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        if dialect.name == 'postgresql':
            return value if isinstance(value, uuid_module.UUID) else uuid_module.UUID(bytes=value)
        if isinstance(value, uuid_module.UUID):
            return value.bytes
        elif isinstance(value, bytes):
            return value
        else:
            return uuid_module.UUID(str(value)).bytes

    def process_result_value(self, value, dialect):
        if value is None:
            return value
        if isinstance(value, uuid_module.UUID):
            return value
        elif isinstance(value, bytes):
            return uuid_module.UUID(bytes=value)
        else:
            return uuid_module.UUID(str(value))


class GuidMixin:
    """
    Mixin providing GUID (Global Unique Identifier) support for entities.

    Adds:
    - uuid: Binary UUID column (UUIDv7, time-ordered)
    - guid: Property returning prefixed Base32 string

    Usage:
        class MyEntity(Base, GuidMixin):
            GUID_PREFIX = "mye"

        entity = MyEntity()
        print(entity.guid)  # mye_01j0a2bbg...
    """

    # Subclasses must define their 3-character prefix
    GUID_PREFIX: ClassVar[str]

    uuid = Column(
        UUIDType(),
        nullable=False,
        unique=True,
        index=True,
        default=uuid7,
    )

    @property
    def guid(self) -> str:
        """
        Get the full GUID with prefix.

        Returns:
            GUID in format {prefix}_{base32_uuid}, or None before the
            UUID is assigned on flush
        """
        if self.uuid is None:
            return None

        # Handle both UUID objects and bytes (SQLite compatibility)
        if isinstance(self.uuid, bytes):
            uuid_bytes = self.uuid
        else:
            uuid_bytes = self.uuid.bytes

        encoded = base32_crockford.encode(int.from_bytes(uuid_bytes, "big"))
        encoded = encoded.zfill(26)
        return f"{self.GUID_PREFIX}_{encoded.lower()}"
