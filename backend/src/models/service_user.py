"""
Service user (client) models.

Service users are the people receiving care. Two of their records are
reviewed on a schedule:

- PersonalPlan: the care plan, with a next review date
- ServiceUserReview: a completed review meeting; the newest one must be
  less than twelve months old
"""

import enum

from sqlalchemy import Column, Integer, String, DateTime, Date, Text, ForeignKey
from sqlalchemy.orm import relationship

from backend.src.models import Base
from backend.src.models.mixins import GuidMixin
from backend.src.utils.clock import utc_now


class ServiceUserStatus(enum.Enum):
    """Client lifecycle status."""
    ACTIVE = "active"
    INACTIVE = "inactive"
    DISCHARGED = "discharged"
    DECEASED = "deceased"


class PersonalPlanStatus(enum.Enum):
    """Personal plan lifecycle status."""
    DRAFT = "draft"
    ACTIVE = "active"
    ARCHIVED = "archived"


class ServiceUser(Base, GuidMixin):
    """Client receiving care from an organisation."""

    __tablename__ = "service_users"

    GUID_PREFIX = "svu"

    id = Column(Integer, primary_key=True, autoincrement=True)
    organisation_id = Column(
        Integer, ForeignKey("organisations.id"), nullable=False, index=True
    )

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    status = Column(
        String(20), default=ServiceUserStatus.ACTIVE.value, nullable=False, index=True
    )

    created_at = Column(DateTime, default=utc_now, nullable=False)

    personal_plans = relationship(
        "PersonalPlan", back_populates="service_user", cascade="all, delete-orphan"
    )
    reviews = relationship(
        "ServiceUserReview", back_populates="service_user", cascade="all, delete-orphan"
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<ServiceUser(id={self.id}, name='{self.full_name}', status={self.status})>"


class PersonalPlan(Base, GuidMixin):
    """Care plan for a service user."""

    __tablename__ = "personal_plans"

    GUID_PREFIX = "pln"

    id = Column(Integer, primary_key=True, autoincrement=True)
    service_user_id = Column(
        Integer, ForeignKey("service_users.id"), nullable=False, index=True
    )

    status = Column(
        String(20), default=PersonalPlanStatus.DRAFT.value, nullable=False, index=True
    )
    next_review_date = Column(Date, nullable=True, index=True)

    created_at = Column(DateTime, default=utc_now, nullable=False)

    service_user = relationship("ServiceUser", back_populates="personal_plans")


class ServiceUserReview(Base, GuidMixin):
    """Completed review meeting for a service user."""

    __tablename__ = "service_user_reviews"

    GUID_PREFIX = "rev"

    id = Column(Integer, primary_key=True, autoincrement=True)
    service_user_id = Column(
        Integer, ForeignKey("service_users.id"), nullable=False, index=True
    )

    review_date = Column(Date, nullable=False, index=True)
    outcome = Column(Text, nullable=True)

    service_user = relationship("ServiceUser", back_populates="reviews")
