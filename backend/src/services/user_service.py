"""
User service for looking up organisation members.

Provides the read side the rest of the backend needs: resolving users by
GUID, and working out who receives organisation-wide alerts.

Design:
- Users are provisioned outside this backend (admin screens, seed scripts)
- Only active users are ever alerted
- The manager-tier audience is recomputed on every call, never cached
"""

from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from backend.src.models import User, UserRole, MANAGER_TIER_ROLES
from backend.src.services.exceptions import NotFoundError
from backend.src.utils.logging_config import get_logger


logger = get_logger("services")


class UserService:
    """
    Service for querying users.

    Usage:
        >>> service = UserService(db_session)
        >>> managers = service.list_manager_tier(organisation_id=1)
        >>> [m.email for m in managers]
        ['manager@example.org', 'admin@example.org']
    """

    def __init__(self, db: Session):
        """
        Initialize user service.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    def get_by_guid(self, guid: str) -> User:
        """
        Get a user by GUID.

        Args:
            guid: User GUID (usr_xxx format)

        Returns:
            User instance

        Raises:
            NotFoundError: If the GUID is malformed or no user matches
        """
        try:
            uuid_value = User.parse_guid(guid)
        except ValueError:
            raise NotFoundError("User", guid)

        user = self.db.query(User).filter(User.uuid == uuid_value).first()
        if not user:
            raise NotFoundError("User", guid)
        return user

    def list_by_organisation(
        self,
        organisation_id: int,
        active_only: bool = False,
        roles: Optional[Iterable[UserRole]] = None,
    ) -> List[User]:
        """
        List users in an organisation.

        Args:
            organisation_id: Organisation ID to filter by
            active_only: If True, only return active users
            roles: Restrict to these roles (optional)

        Returns:
            List of User instances ordered by id
        """
        query = self.db.query(User).filter(User.organisation_id == organisation_id)

        if active_only:
            query = query.filter(User.is_active == True)  # noqa: E712

        if roles is not None:
            query = query.filter(User.role.in_(list(roles)))

        return query.order_by(User.id.asc()).all()

    def list_manager_tier(self, organisation_id: int) -> List[User]:
        """
        Resolve the audience for organisation-wide compliance alerts.

        Returns active users holding the manager, org admin or super admin
        role in the organisation.
        """
        recipients = self.list_by_organisation(
            organisation_id, active_only=True, roles=MANAGER_TIER_ROLES
        )
        logger.debug(
            "Resolved manager-tier recipients",
            extra={
                "organisation_id": organisation_id,
                "recipient_count": len(recipients),
            },
        )
        return recipients
