"""
Incident model for reported care incidents (falls, medication errors, ...).
"""

import enum

from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey

from backend.src.models import Base
from backend.src.models.mixins import GuidMixin
from backend.src.utils.clock import utc_now


class IncidentStatus(enum.Enum):
    """Incident workflow status."""
    OPEN = "open"
    UNDER_INVESTIGATION = "under_investigation"
    CLOSED = "closed"


class Incident(Base, GuidMixin):
    """
    Reported incident.

    Attributes:
        incident_type: Category shown in alert titles (e.g. "Fall")
        incident_date: When the incident happened (naive UTC)
        status: IncidentStatus value; anything but closed counts as open
    """

    __tablename__ = "incidents"

    GUID_PREFIX = "inc"

    id = Column(Integer, primary_key=True, autoincrement=True)
    organisation_id = Column(
        Integer, ForeignKey("organisations.id"), nullable=False, index=True
    )
    service_user_id = Column(
        Integer, ForeignKey("service_users.id"), nullable=True, index=True
    )

    incident_type = Column(String(100), nullable=False)
    incident_date = Column(DateTime, nullable=False, index=True)
    description = Column(Text, nullable=True)
    status = Column(
        String(30), default=IncidentStatus.OPEN.value, nullable=False, index=True
    )

    created_at = Column(DateTime, default=utc_now, nullable=False)

    def __repr__(self) -> str:
        return f"<Incident(id={self.id}, type='{self.incident_type}', status={self.status})>"
