"""
Equipment check model (hoists, slings, bed rails, ...).

Each row is a piece of equipment with the date its next safety check is
due. Checks have no status: every row in the organisation is evaluated.
"""

from sqlalchemy import Column, Integer, String, DateTime, Date, ForeignKey

from backend.src.models import Base
from backend.src.models.mixins import GuidMixin
from backend.src.utils.clock import utc_now


class EquipmentCheck(Base, GuidMixin):
    """Scheduled safety check for a piece of equipment."""

    __tablename__ = "equipment_checks"

    GUID_PREFIX = "eqc"

    id = Column(Integer, primary_key=True, autoincrement=True)
    organisation_id = Column(
        Integer, ForeignKey("organisations.id"), nullable=False, index=True
    )

    equipment_name = Column(String(255), nullable=False)
    serial_number = Column(String(100), nullable=True)
    last_check_date = Column(Date, nullable=True)
    next_check_date = Column(Date, nullable=True, index=True)

    created_at = Column(DateTime, default=utc_now, nullable=False)
