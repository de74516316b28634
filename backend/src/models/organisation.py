"""
Organisation model for multi-tenancy support.

Organisations are the tenancy boundary: every staff member, client,
policy, incident and notification belongs to exactly one organisation,
and every query in the service layer is filtered by ``organisation_id``.

Design Rationale:
- is_active controls whether members can log in and whether scheduled
  compliance checks run for the organisation
- Soft-delete only via is_active=false (no hard delete)
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship

from backend.src.models import Base
from backend.src.models.mixins import GuidMixin
from backend.src.utils.clock import utc_now


class Organisation(Base, GuidMixin):
    """
    Care provider organisation (tenant).

    Attributes:
        id: Primary key (internal, never exposed)
        guid: GUID string property (org_xxx, inherited from GuidMixin)
        name: Display name (unique)
        is_active: Whether the organisation is live
        created_at: Creation timestamp

    Relationships:
        users: Login accounts belonging to the organisation (one-to-many)
    """

    __tablename__ = "organisations"

    GUID_PREFIX = "org"

    id = Column(Integer, primary_key=True, autoincrement=True)

    name = Column(String(255), unique=True, nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    created_at = Column(DateTime, default=utc_now, nullable=False)

    users = relationship(
        "User",
        back_populates="organisation",
        lazy="dynamic",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return (
            f"<Organisation("
            f"id={self.id}, "
            f"name='{self.name}', "
            f"active={self.is_active}"
            f")>"
        )

    def __str__(self) -> str:
        return self.name
