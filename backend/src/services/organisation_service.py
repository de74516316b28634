"""
Organisation service for tenant lookups.
"""

from typing import List

from sqlalchemy.orm import Session

from backend.src.models import Organisation
from backend.src.services.exceptions import NotFoundError


class OrganisationService:
    """Read-only access to organisations (tenants)."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_guid(self, guid: str) -> Organisation:
        """
        Get an organisation by GUID.

        Raises:
            NotFoundError: If the GUID is malformed or no organisation matches
        """
        try:
            uuid_value = Organisation.parse_guid(guid)
        except ValueError:
            raise NotFoundError("Organisation", guid)

        organisation = (
            self.db.query(Organisation)
            .filter(Organisation.uuid == uuid_value)
            .first()
        )
        if not organisation:
            raise NotFoundError("Organisation", guid)
        return organisation

    def list_active(self) -> List[Organisation]:
        """Return every active organisation, oldest first."""
        return (
            self.db.query(Organisation)
            .filter(Organisation.is_active == True)  # noqa: E712
            .order_by(Organisation.id.asc())
            .all()
        )
