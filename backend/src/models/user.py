"""
User model for organisation members who log in to the application.

Users are provisioned by organisation administrators; the login flow
itself lives outside this backend and only hands us a session carrying
the user's GUID.

Design Rationale:
- role drives both access control and who receives compliance alerts
- Email is globally unique across ALL organisations
- is_active is the functional toggle for login capability and alerting
"""

import enum
from typing import Optional

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship

from backend.src.models import Base
from backend.src.models.mixins import GuidMixin
from backend.src.utils.clock import utc_now


class UserRole(enum.Enum):
    """
    Application roles, lowest privilege first.

    The declaration order is the role hierarchy used by ``has_role``.
    """
    READ_ONLY = "read_only"
    CARER = "carer"
    SENIOR_CARER = "senior_carer"
    OFFICE_STAFF = "office_staff"
    MANAGER = "manager"
    ORG_ADMIN = "org_admin"
    SUPER_ADMIN = "super_admin"


# Roles that receive organisation-wide compliance alerts
MANAGER_TIER_ROLES = (
    UserRole.MANAGER,
    UserRole.ORG_ADMIN,
    UserRole.SUPER_ADMIN,
)


class User(Base, GuidMixin):
    """
    Organisation member with a login.

    Attributes:
        id: Primary key (internal, never exposed)
        guid: GUID string property (usr_xxx, inherited from GuidMixin)
        organisation_id: Owning organisation (FK to organisations)
        email: Login email (globally unique)
        first_name: Given name
        last_name: Family name
        role: Application role (see UserRole)
        is_active: Account active status (controls login and alerting)
        created_at: Creation timestamp

    Relationships:
        organisation: Organisation this user belongs to (many-to-one)
        notifications: Alerts delivered to this user (one-to-many)
    """

    __tablename__ = "users"

    GUID_PREFIX = "usr"

    id = Column(Integer, primary_key=True, autoincrement=True)

    organisation_id = Column(
        Integer,
        ForeignKey("organisations.id", name="fk_users_organisation_id"),
        nullable=False,
        index=True,
    )

    email = Column(String(255), unique=True, nullable=False, index=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)

    role = Column(
        Enum(UserRole, name="user_role", create_constraint=True),
        default=UserRole.CARER,
        nullable=False,
        index=True,
    )
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    created_at = Column(DateTime, default=utc_now, nullable=False)

    organisation = relationship(
        "Organisation",
        back_populates="users",
        lazy="joined",
    )
    notifications = relationship(
        "Notification",
        back_populates="user",
        lazy="dynamic",
    )

    @property
    def full_name(self) -> Optional[str]:
        """Combined first and last name, or whichever part is set."""
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) if parts else None

    @property
    def is_manager_tier(self) -> bool:
        """Whether this user receives compliance alerts."""
        return self.role in MANAGER_TIER_ROLES

    def has_role(self, minimum: UserRole) -> bool:
        """
        Check the user's role against a minimum role in the hierarchy.

        Example:
            >>> User(role=UserRole.MANAGER).has_role(UserRole.SENIOR_CARER)
            True
        """
        order = list(UserRole)
        return order.index(self.role) >= order.index(minimum)

    def __repr__(self) -> str:
        return (
            f"<User("
            f"id={self.id}, "
            f"email='{self.email}', "
            f"role={self.role.value if self.role else None}, "
            f"active={self.is_active}"
            f")>"
        )

    def __str__(self) -> str:
        return self.full_name or self.email
