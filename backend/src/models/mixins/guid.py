"""
GUID mixin for SQLAlchemy models.

Every record that leaves the API (organisations, users, staff, clients,
notifications, ...) is identified by a GUID instead of its integer key.
GUIDs wrap a time-ordered UUIDv7 in Crockford Base32 behind a short
entity prefix.

GUID Format: {prefix}_{base32_uuid}
Examples:
    - org_01hgw2bbg0000000000000000 (Organisation)
    - stf_01hgw2bbg0000000000000001 (StaffMember)
    - ntf_01hgw2bbg0000000000000002 (Notification)
"""

import uuid as uuid_module
from typing import ClassVar, Optional

import base32_crockford
from sqlalchemy import Column, TypeDecorator, LargeBinary
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from uuid_extensions import uuid7


class UUIDType(TypeDecorator):
    """
    UUID column that works on both PostgreSQL and SQLite.

    PostgreSQL gets its native UUID type; SQLite (tests) stores the
    16 raw bytes. Values are always returned as ``uuid.UUID``.
    """

    impl = LargeBinary
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(PG_UUID(as_uuid=True))
        return dialect.type_descriptor(LargeBinary(16))

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        if not isinstance(value, uuid_module.UUID):
            value = (
                uuid_module.UUID(bytes=value)
                if isinstance(value, bytes)
                else uuid_module.UUID(str(value))
            )
        if dialect.name == "postgresql":
            return value
        return value.bytes

    def process_result_value(self, value, dialect):
        if value is None or isinstance(value, uuid_module.UUID):
            return value
        if isinstance(value, bytes):
            return uuid_module.UUID(bytes=value)
        return uuid_module.UUID(str(value))


class GuidMixin:
    """
    Mixin adding a ``uuid`` column and a prefixed ``guid`` property.

    Usage:
        class Policy(Base, GuidMixin):
            GUID_PREFIX = "pol"

        policy.guid                 # pol_01hgw2bbg...
        Policy.parse_guid(guid)     # UUID(...)
    """

    # Subclasses define their 3-character prefix
    GUID_PREFIX: ClassVar[str]

    uuid = Column(
        UUIDType(),
        nullable=False,
        unique=True,
        index=True,
        default=uuid7,
    )

    @property
    def guid(self) -> Optional[str]:
        """GUID string for this record, or None before the first flush."""
        if self.uuid is None:
            return None
        raw = self.uuid if isinstance(self.uuid, bytes) else self.uuid.bytes
        encoded = base32_crockford.encode(int.from_bytes(raw, "big")).zfill(26)
        return f"{self.GUID_PREFIX}_{encoded.lower()}"

    @classmethod
    def parse_guid(cls, guid: str) -> uuid_module.UUID:
        """
        Decode a GUID string back into its UUID.

        Raises:
            ValueError: If the GUID is empty, carries another entity's
                prefix, or is not valid Crockford Base32.
        """
        if not guid:
            raise ValueError("GUID cannot be empty")

        prefix, _, encoded = guid.partition("_")
        if prefix.lower() != cls.GUID_PREFIX:
            raise ValueError(
                f"Invalid prefix for {cls.__name__}. "
                f"Expected '{cls.GUID_PREFIX}', got '{prefix}'"
            )
        if len(encoded) != 26:
            raise ValueError(
                f"Invalid GUID length. Expected 26 characters after prefix, "
                f"got {len(encoded)}"
            )

        try:
            value = base32_crockford.decode(encoded.upper())
            return uuid_module.UUID(bytes=value.to_bytes(16, "big"))
        except (ValueError, OverflowError) as e:
            raise ValueError(f"Invalid GUID encoding: {e}")
