"""
Notification model for in-app compliance alerts.

A notification is one alert delivered to exactly one user within one
organisation. Compliance checks create them for every manager-tier user
when a record needs attention (expiring PVG, overdue policy review, ...).

Lifecycle:
    Created by the compliance checks through NotificationService, at most
    once per (organisation, user, title, entity_type, entity_id) within a
    trailing 24-hour window. is_read/read_at are set when the user reads
    it. Never deleted by the application.
"""

import enum

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from backend.src.models import Base
from backend.src.models.mixins import GuidMixin
from backend.src.utils.clock import utc_now


class NotificationEntityType(enum.Enum):
    """
    Kind of record a notification points at.

    Part of the deduplication key, so values must never be renamed.
    """
    STAFF_MEMBER = "staff_member"
    PERSONAL_PLAN = "personal_plan"
    SERVICE_USER = "service_user"
    POLICY = "policy"
    EQUIPMENT_CHECK = "equipment_check"
    INCIDENT = "incident"


class Notification(Base, GuidMixin):
    """
    Alert sent to a user.

    Attributes:
        organisation_id: Owning organisation (tenant isolation)
        user_id: Recipient user
        title: Short title; embeds the entity's name and doubles as a
               deduplication key
        message: Detail text (dates, serial numbers, ...)
        entity_type: NotificationEntityType value
        entity_id: GUID of the concerned record
        link: In-app path to navigate to
        is_read / read_at: Read tracking
        created_at: Creation timestamp (naive UTC)
    """

    __tablename__ = "notifications"

    GUID_PREFIX = "ntf"

    id = Column(Integer, primary_key=True, autoincrement=True)

    organisation_id = Column(
        Integer, ForeignKey("organisations.id"), nullable=False, index=True
    )
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    message = Column(String(1000), nullable=False)
    entity_type = Column(String(30), nullable=False)
    entity_id = Column(String(64), nullable=False)
    link = Column(String(500), nullable=True)

    is_read = Column(Boolean, default=False, nullable=False)
    read_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utc_now, nullable=False, index=True)

    user = relationship("User", back_populates="notifications")
    organisation = relationship("Organisation")

    __table_args__ = (
        # Bell badge and unread list
        Index(
            "ix_notifications_org_user_read",
            "organisation_id",
            "user_id",
            "is_read",
        ),
        # Deduplication probe
        Index(
            "ix_notifications_dedup",
            "organisation_id",
            "user_id",
            "title",
            "entity_type",
            "entity_id",
            "created_at",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<Notification("
            f"id={self.id}, "
            f"user_id={self.user_id}, "
            f"title='{self.title}', "
            f"read={self.is_read}"
            f")>"
        )
