"""
Service layer for business logic.

This module exports all service classes for use in API endpoints and
the compliance runner.
"""

from backend.src.services.exceptions import (
    ServiceError,
    NotFoundError,
    ValidationError,
)
from backend.src.services.organisation_service import OrganisationService
from backend.src.services.user_service import UserService
from backend.src.services.notification_service import NotificationService, RuleViolation
from backend.src.services.compliance_rules import (
    COMPLIANCE_RULES,
    ComplianceRule,
    ComplianceRuleService,
)
from backend.src.services.compliance_runner import (
    CheckOutcome,
    ComplianceCheckRunner,
    ComplianceRunSummary,
    OrganisationRunResult,
)

__all__ = [
    "ServiceError",
    "NotFoundError",
    "ValidationError",
    "OrganisationService",
    "UserService",
    "NotificationService",
    "RuleViolation",
    # Compliance checks
    "COMPLIANCE_RULES",
    "ComplianceRule",
    "ComplianceRuleService",
    "CheckOutcome",
    "ComplianceCheckRunner",
    "ComplianceRunSummary",
    "OrganisationRunResult",
]
