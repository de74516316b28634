"""
Middleware components for the CareLedger backend.

This module provides:
- TenantContext: Dataclass representing the current tenant context
- get_tenant_context: FastAPI dependency for extracting tenant context from requests
- require_auth: FastAPI dependency for requiring authentication
- require_manager: FastAPI dependency for requiring a manager-tier role
"""

from backend.src.middleware.tenant import TenantContext, get_tenant_context, require_manager
from backend.src.middleware.auth import require_auth

__all__ = [
    "TenantContext",
    "get_tenant_context",
    "require_auth",
    "require_manager",
]
