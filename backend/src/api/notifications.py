"""
Notifications API endpoints for the in-app notification bell.

Provides endpoints for:
- Notification listing (recent, unread, unread count)
- Read tracking (single, all)
- On-demand compliance check for the caller's organisation
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from backend.src.db.database import SessionFactory, get_db, get_session_factory
from backend.src.middleware.auth import require_auth, require_manager, TenantContext
from backend.src.schemas.compliance import CheckOutcomeResponse, ComplianceRunResponse
from backend.src.schemas.notifications import (
    NotificationResponse,
    UnreadCountResponse,
    MarkReadResponse,
    MarkAllReadResponse,
)
from backend.src.services.compliance_runner import ComplianceCheckRunner
from backend.src.services.exceptions import ValidationError
from backend.src.services.notification_service import (
    DEFAULT_LIST_LIMIT,
    MAX_LIST_LIMIT,
    NotificationService,
)
from backend.src.utils.logging_config import get_logger
from backend.src.utils.rate_limit import limiter


logger = get_logger("api")

router = APIRouter(
    prefix="/notifications",
    tags=["Notifications"],
)


# ============================================================================
# Dependencies
# ============================================================================


def get_notification_service(db: Session = Depends(get_db)) -> NotificationService:
    """Create NotificationService instance with database session."""
    return NotificationService(db=db)


def get_compliance_runner(
    session_factory: SessionFactory = Depends(get_session_factory),
) -> ComplianceCheckRunner:
    """Create ComplianceCheckRunner bound to the application's session factory."""
    return ComplianceCheckRunner(session_factory)


# ============================================================================
# Notification Endpoints
# ============================================================================


@router.get(
    "",
    response_model=List[NotificationResponse],
    summary="List recent notifications",
)
@limiter.limit("30/minute")
async def list_notifications(
    request: Request,
    limit: int = Query(default=DEFAULT_LIST_LIMIT, ge=1, le=MAX_LIST_LIMIT),
    ctx: TenantContext = Depends(require_auth),
    service: NotificationService = Depends(get_notification_service),
):
    """
    Returns the authenticated user's most recent notifications, read or not.
    """
    try:
        notifications = service.list_notifications(
            user_id=ctx.user_id,
            organisation_id=ctx.organisation_id,
            limit=limit,
        )
    except ValidationError as err:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=err.message,
        ) from err
    return [NotificationResponse.model_validate(n) for n in notifications]


@router.get(
    "/unread",
    response_model=List[NotificationResponse],
    summary="List unread notifications",
)
@limiter.limit("30/minute")
async def list_unread_notifications(
    request: Request,
    ctx: TenantContext = Depends(require_auth),
    service: NotificationService = Depends(get_notification_service),
):
    """
    Returns every unread notification for the authenticated user, newest first.
    """
    notifications = service.get_unread(
        user_id=ctx.user_id, organisation_id=ctx.organisation_id
    )
    return [NotificationResponse.model_validate(n) for n in notifications]


@router.get(
    "/unread-count",
    response_model=UnreadCountResponse,
    summary="Get unread notification count",
)
@limiter.limit("60/minute")
async def get_unread_count(
    request: Request,
    ctx: TenantContext = Depends(require_auth),
    service: NotificationService = Depends(get_notification_service),
):
    """
    Returns the count of unread notifications for the notification bell badge.
    """
    count = service.get_unread_count(
        user_id=ctx.user_id, organisation_id=ctx.organisation_id
    )
    return UnreadCountResponse(unread_count=count)


@router.post(
    "/mark-all-read",
    response_model=MarkAllReadResponse,
    summary="Mark all notifications as read",
)
@limiter.limit("10/minute")
async def mark_all_notifications_read(
    request: Request,
    ctx: TenantContext = Depends(require_auth),
    service: NotificationService = Depends(get_notification_service),
):
    """
    Mark all unread notifications as read for the authenticated user.

    Idempotent: calling when all notifications are already read returns 0.
    """
    updated_count = service.mark_all_as_read(
        user_id=ctx.user_id, organisation_id=ctx.organisation_id
    )
    return MarkAllReadResponse(updated_count=updated_count)


@router.post(
    "/{guid}/read",
    response_model=MarkReadResponse,
    summary="Mark notification as read",
)
@limiter.limit("30/minute")
async def mark_notification_read(
    request: Request,
    guid: str,
    ctx: TenantContext = Depends(require_auth),
    service: NotificationService = Depends(get_notification_service),
):
    """
    Mark a single notification as read.

    Unknown notifications and notifications owned by other users are
    silently ignored, so this always succeeds.
    """
    service.mark_as_read(guid=guid, user_id=ctx.user_id)
    return MarkReadResponse()


# ============================================================================
# Compliance Check Endpoint
# ============================================================================


@router.post(
    "/compliance-check",
    response_model=ComplianceRunResponse,
    summary="Run compliance checks",
    description="Run every compliance rule for the caller's organisation and "
                "alert its managers. Repeating the call within a day does not "
                "duplicate alerts.",
)
@limiter.limit("5/minute")
async def run_compliance_check(
    request: Request,
    ctx: TenantContext = Depends(require_manager),
    runner: ComplianceCheckRunner = Depends(get_compliance_runner),
):
    """
    Run all compliance rules for the authenticated manager's organisation.
    """
    summary = await runner.run_all_checks(ctx.organisation_id)
    logger.info(
        "Manual compliance check",
        extra={
            "organisation_guid": ctx.organisation_guid,
            "user_guid": ctx.user_guid,
            "total_created": summary.total_created,
        },
    )
    return ComplianceRunResponse(
        organisation_guid=ctx.organisation_guid,
        outcomes=[CheckOutcomeResponse.model_validate(o) for o in summary.outcomes],
        total_created=summary.total_created,
        failed=summary.failed,
    )
