"""
Pydantic schemas for API request/response validation.

This module exports all schema classes for use in API endpoints.
"""

from backend.src.schemas.notifications import (
    NotificationResponse,
    UnreadCountResponse,
    MarkReadResponse,
    MarkAllReadResponse,
)
from backend.src.schemas.compliance import (
    CheckOutcomeResponse,
    ComplianceRunResponse,
    OrganisationRunResponse,
    CronRunResponse,
)

__all__ = [
    "NotificationResponse",
    "UnreadCountResponse",
    "MarkReadResponse",
    "MarkAllReadResponse",
    "CheckOutcomeResponse",
    "ComplianceRunResponse",
    "OrganisationRunResponse",
    "CronRunResponse",
]
