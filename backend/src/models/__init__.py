"""
SQLAlchemy models for the CareLedger backend.

This module provides the declarative base class and imports all models
so they are registered with SQLAlchemy's metadata (Alembic autogenerate
and ``Base.metadata.create_all`` in tests rely on it).
"""

from sqlalchemy.orm import declarative_base

# All models inherit from this Base class
Base = declarative_base()


# Tenancy and access
from backend.src.models.organisation import Organisation
from backend.src.models.user import User, UserRole, MANAGER_TIER_ROLES

# Workforce compliance records
from backend.src.models.staff import (
    StaffMember,
    StaffStatus,
    StaffPvgRecord,
    StaffRegistration,
    RegistrationType,
    StaffTrainingRecord,
)

# Client (service user) care records
from backend.src.models.service_user import (
    ServiceUser,
    ServiceUserStatus,
    PersonalPlan,
    PersonalPlanStatus,
    ServiceUserReview,
)

# Organisation-wide compliance records
from backend.src.models.policy import Policy, PolicyStatus
from backend.src.models.equipment_check import EquipmentCheck
from backend.src.models.incident import Incident, IncidentStatus

# Alerts
from backend.src.models.notification import Notification, NotificationEntityType


__all__ = [
    "Base",
    "Organisation",
    "User",
    "UserRole",
    "MANAGER_TIER_ROLES",
    "StaffMember",
    "StaffStatus",
    "StaffPvgRecord",
    "StaffRegistration",
    "RegistrationType",
    "StaffTrainingRecord",
    "ServiceUser",
    "ServiceUserStatus",
    "PersonalPlan",
    "PersonalPlanStatus",
    "ServiceUserReview",
    "Policy",
    "PolicyStatus",
    "EquipmentCheck",
    "Incident",
    "IncidentStatus",
    "Notification",
    "NotificationEntityType",
]
