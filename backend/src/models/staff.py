"""
Staff workforce models.

A StaffMember is an employee record (not necessarily a login user). Each
staff member carries dated compliance records that expire and must be
renewed:

- StaffPvgRecord: Protecting Vulnerable Groups background check
- StaffRegistration: professional registration (SSSC, NMC, ...)
- StaffTrainingRecord: completed training, mandatory or optional

Expiry dates are nullable; records without a date are never considered
due by the compliance checks.
"""

import enum

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Date, ForeignKey
from sqlalchemy.orm import relationship

from backend.src.models import Base
from backend.src.models.mixins import GuidMixin
from backend.src.utils.clock import utc_now


class StaffStatus(enum.Enum):
    """Employment status."""
    ACTIVE = "active"
    INACTIVE = "inactive"
    LEFT = "left"


class RegistrationType(enum.Enum):
    """Professional register a staff member is registered with."""
    SSSC = "SSSC"
    NMC = "NMC"
    HCPC = "HCPC"
    OTHER = "OTHER"


class StaffMember(Base, GuidMixin):
    """
    Employee of a care organisation.

    Attributes:
        organisation_id: Owning organisation
        first_name / last_name: Name used in alert titles
        status: Employment status (StaffStatus value)
    """

    __tablename__ = "staff_members"

    GUID_PREFIX = "stf"

    id = Column(Integer, primary_key=True, autoincrement=True)
    organisation_id = Column(
        Integer, ForeignKey("organisations.id"), nullable=False, index=True
    )

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    status = Column(
        String(20), default=StaffStatus.ACTIVE.value, nullable=False, index=True
    )

    created_at = Column(DateTime, default=utc_now, nullable=False)

    pvg_records = relationship(
        "StaffPvgRecord", back_populates="staff_member", cascade="all, delete-orphan"
    )
    registrations = relationship(
        "StaffRegistration", back_populates="staff_member", cascade="all, delete-orphan"
    )
    training_records = relationship(
        "StaffTrainingRecord", back_populates="staff_member", cascade="all, delete-orphan"
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<StaffMember(id={self.id}, name='{self.full_name}', status={self.status})>"


class StaffPvgRecord(Base, GuidMixin):
    """PVG scheme membership for a staff member."""

    __tablename__ = "staff_pvg_records"

    GUID_PREFIX = "pvg"

    id = Column(Integer, primary_key=True, autoincrement=True)
    staff_member_id = Column(
        Integer, ForeignKey("staff_members.id"), nullable=False, index=True
    )

    certificate_number = Column(String(50), nullable=True)
    issue_date = Column(Date, nullable=True)
    renewal_date = Column(Date, nullable=True, index=True)

    staff_member = relationship("StaffMember", back_populates="pvg_records")


class StaffRegistration(Base, GuidMixin):
    """Professional registration held by a staff member."""

    __tablename__ = "staff_registrations"

    GUID_PREFIX = "reg"

    id = Column(Integer, primary_key=True, autoincrement=True)
    staff_member_id = Column(
        Integer, ForeignKey("staff_members.id"), nullable=False, index=True
    )

    registration_type = Column(String(20), nullable=False)
    registration_number = Column(String(50), nullable=True)
    expiry_date = Column(Date, nullable=True, index=True)

    staff_member = relationship("StaffMember", back_populates="registrations")


class StaffTrainingRecord(Base, GuidMixin):
    """Completed training course for a staff member."""

    __tablename__ = "staff_training_records"

    GUID_PREFIX = "trn"

    id = Column(Integer, primary_key=True, autoincrement=True)
    staff_member_id = Column(
        Integer, ForeignKey("staff_members.id"), nullable=False, index=True
    )

    training_type = Column(String(100), nullable=False)
    is_mandatory = Column(Boolean, default=False, nullable=False)
    completed_date = Column(Date, nullable=True)
    expiry_date = Column(Date, nullable=True, index=True)

    staff_member = relationship("StaffMember", back_populates="training_records")
