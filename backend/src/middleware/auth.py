"""
Authentication dependencies for API routes.

Provides:
- require_auth: FastAPI dependency that requires authentication
- require_manager: Require a manager-tier role

These are thin wrappers around the tenant context for clearer API semantics.
The actual session validation is in tenant.py.
"""

from fastapi import Depends

from backend.src.middleware.tenant import (
    TenantContext,
    get_tenant_context,
    require_manager as _require_manager
)


async def require_auth(
    ctx: TenantContext = Depends(get_tenant_context)
) -> TenantContext:
    """
    FastAPI dependency that requires authentication.

    Returns the TenantContext which contains organisation_id and user_id
    for data filtering.

    Raises:
        HTTPException 401: If not authenticated
        HTTPException 403: If user or organisation is inactive
    """
    return ctx


require_manager = _require_manager


__all__ = [
    "require_auth",
    "require_manager",
    "TenantContext",
]
