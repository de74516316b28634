"""
Policy model for organisation policies subject to periodic review.
"""

import enum

from sqlalchemy import Column, Integer, String, DateTime, Date, ForeignKey

from backend.src.models import Base
from backend.src.models.mixins import GuidMixin
from backend.src.utils.clock import utc_now


class PolicyStatus(enum.Enum):
    """Policy lifecycle status."""
    DRAFT = "draft"
    ACTIVE = "active"
    ARCHIVED = "archived"


class Policy(Base, GuidMixin):
    """
    Written organisational policy.

    Attributes:
        policy_name: Name shown in alert titles
        status: PolicyStatus value; only active policies are reviewed
        next_review_date: Date the policy must next be reviewed by
    """

    __tablename__ = "policies"

    GUID_PREFIX = "pol"

    id = Column(Integer, primary_key=True, autoincrement=True)
    organisation_id = Column(
        Integer, ForeignKey("organisations.id"), nullable=False, index=True
    )

    policy_name = Column(String(255), nullable=False)
    version = Column(String(20), nullable=True)
    status = Column(
        String(20), default=PolicyStatus.DRAFT.value, nullable=False, index=True
    )
    next_review_date = Column(Date, nullable=True, index=True)

    created_at = Column(DateTime, default=utc_now, nullable=False)

    def __repr__(self) -> str:
        return f"<Policy(id={self.id}, name='{self.policy_name}', status={self.status})>"
