"""
Tenant context dependencies for multi-tenancy support.

Provides:
- TenantContext: Dataclass containing tenant identification info
- get_tenant_context: FastAPI dependency to extract tenant context from requests
- require_manager: FastAPI dependency restricting a route to manager-tier users

The tenant context is derived from the signed session cookie. The login
flow lives outside this backend and stores the user's GUID under the
"user_guid" session key.

All tenant-scoped service operations should use the organisation_id from
TenantContext to filter data appropriately.
"""

from dataclasses import dataclass

from fastapi import Request, HTTPException, status, Depends
from sqlalchemy.orm import Session

from backend.src.db.database import get_db
from backend.src.models import UserRole
from backend.src.models.user import MANAGER_TIER_ROLES
from backend.src.services.exceptions import NotFoundError
from backend.src.services.user_service import UserService
from backend.src.utils.logging_config import get_logger


logger = get_logger("api")


@dataclass
class TenantContext:
    """
    Represents the current tenant context for a request.

    Attributes:
        organisation_id: Internal organisation ID for database queries
        organisation_guid: Organisation's external GUID (org_xxx)
        user_id: Internal user ID
        user_guid: User's external GUID (usr_xxx)
        user_email: User's email address
        role: User's application role

    Usage:
        @router.get("/unread")
        async def get_unread(ctx: TenantContext = Depends(get_tenant_context)):
            return service.get_unread(ctx.user_id, ctx.organisation_id)
    """

    organisation_id: int
    organisation_guid: str
    user_id: int
    user_guid: str
    user_email: str
    role: UserRole = UserRole.READ_ONLY

    def __post_init__(self):
        """Validate required fields."""
        if not self.organisation_id or not self.organisation_guid:
            raise ValueError("organisation_id and organisation_guid are required")

    @property
    def is_manager_tier(self) -> bool:
        return self.role in MANAGER_TIER_ROLES


def _session_expired() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Session expired or invalid",
    )


async def get_tenant_context(
    request: Request,
    db: Session = Depends(get_db)
) -> TenantContext:
    """
    FastAPI dependency to extract tenant context from the session.

    Raises:
        HTTPException 401: If there is no session or it names an unknown user
        HTTPException 403: If the user or organisation is inactive
    """
    session = request.session if "session" in request.scope else {}
    user_guid = session.get("user_guid")
    if not user_guid:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )

    try:
        user = UserService(db).get_by_guid(user_guid)
    except NotFoundError:
        raise _session_expired()

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is deactivated"
        )

    organisation = user.organisation
    if not organisation or not organisation.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Organisation is inactive"
        )

    return TenantContext(
        organisation_id=organisation.id,
        organisation_guid=organisation.guid,
        user_id=user.id,
        user_guid=user.guid,
        user_email=user.email,
        role=user.role,
    )


def require_manager(ctx: TenantContext = Depends(get_tenant_context)) -> TenantContext:
    """
    Dependency that requires a manager-tier role.

    Raises:
        HTTPException 403: If the user is below manager tier
    """
    if not ctx.is_manager_tier:
        logger.warning(
            "Manager-only route refused",
            extra={"user_guid": ctx.user_guid, "role": ctx.role.value},
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Manager privileges required"
        )
    return ctx
